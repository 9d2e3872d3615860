import logging
from datetime import datetime

from sqlmodel import Session, select

from app.constants.order_status import AccountStatus
from app.errors import BadRequestError, NotFoundError
from app.models.category import Category
from app.models.product import Product
from app.models.vendor import Vendor
from app.schemas.product_schemas import ProductCreate, ProductUpdate

logger = logging.getLogger(__name__)


def _approved_category(session: Session, category_id: int):
    return session.exec(
        select(Category)
        .where(Category.id == category_id)
        .where(Category.status == AccountStatus.APPROVED)
        .where(Category.is_deleted == False)  # noqa: E712
    ).first()


def get_own_product(session: Session, vendor: Vendor, product_id: int) -> Product:
    product = session.exec(
        select(Product)
        .where(Product.id == product_id)
        .where(Product.vendor_id == vendor.id)
        .where(Product.is_deleted == False)  # noqa: E712
    ).first()

    if not product:
        raise NotFoundError("Product not found")
    return product


def create_product(session: Session, vendor: Vendor, data: ProductCreate) -> Product:
    if not _approved_category(session, data.category_id):
        raise BadRequestError("Failed to create product")

    product = Product(
        name=data.name,
        description=data.description,
        price=data.price,
        stock=data.stock,
        category_id=data.category_id,
        vendor_id=vendor.id,
    )

    session.add(product)
    session.commit()
    session.refresh(product)

    logger.info(f"Vendor {vendor.id} created product {product.id}")
    return product


def update_product(session: Session, vendor: Vendor, product_id: int, data: ProductUpdate) -> Product:
    product = get_own_product(session, vendor, product_id)
    changes = data.model_dump(exclude_unset=True, exclude={"kind"})

    if "category_id" in changes and not _approved_category(session, changes["category_id"]):
        raise BadRequestError("Failed to update product")

    for key, value in changes.items():
        setattr(product, key, value)

    product.updated_at = datetime.utcnow()
    session.add(product)
    session.commit()
    session.refresh(product)

    logger.info(f"Vendor {vendor.id} updated product {product.id}: {sorted(changes)}")
    return product


def delete_product(session: Session, vendor: Vendor, product_id: int) -> Product:
    """Soft delete; existing order lines keep pointing at the row."""
    product = get_own_product(session, vendor, product_id)

    product.is_deleted = True
    product.updated_at = datetime.utcnow()
    session.add(product)
    session.commit()
    session.refresh(product)

    logger.info(f"Vendor {vendor.id} deleted product {product.id}")
    return product


def product_to_dict(product: Product) -> dict:
    return {
        "id": product.id,
        "name": product.name,
        "description": product.description,
        "price": product.price,
        "stock": product.stock,
        "in_stock": product.in_stock,
        "category_id": product.category_id,
        "vendor_id": product.vendor_id,
        "is_deleted": product.is_deleted,
        "created_at": product.created_at,
        "updated_at": product.updated_at,
    }
