from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.database import get_session
from app.dependencies.roles import require_vendor
from app.models.vendor import Vendor
from app.schemas.product_schemas import ProductCreate, ProductUpdate
from app.services.product_service import (
    create_product,
    delete_product,
    product_to_dict,
    update_product,
)

router = APIRouter()


@router.post("")
def add_product(
    payload: ProductCreate,
    session: Session = Depends(get_session),
    vendor: Vendor = Depends(require_vendor)
):
    product = create_product(session, vendor, payload)
    return {"message": "Product created successfully", "data": {"product": product_to_dict(product)}}


@router.patch("/{product_id}")
def edit_product(
    product_id: int,
    payload: ProductUpdate,
    session: Session = Depends(get_session),
    vendor: Vendor = Depends(require_vendor)
):
    product = update_product(session, vendor, product_id, payload)
    return {"message": "Product updated successfully", "data": {"product": product_to_dict(product)}}


@router.delete("/{product_id}")
def remove_product(
    product_id: int,
    session: Session = Depends(get_session),
    vendor: Vendor = Depends(require_vendor)
):
    product = delete_product(session, vendor, product_id)
    return {"message": "Product deleted successfully", "data": {"product": product_to_dict(product)}}
