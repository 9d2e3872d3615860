from decimal import Decimal

import pytest
from pydantic import ValidationError

from app.constants.order_status import AccountStatus
from app.errors import BadRequestError, NotFoundError
from app.schemas.orders_schemas import OrderItemIn
from app.schemas.product_schemas import ProductCreate, ProductUpdate
from app.services.order_service import create_order
from app.services.product_service import create_product, delete_product, update_product


def test_create_product(session, catalog):
    product = create_product(session, catalog.vendor_b, ProductCreate(
        name="Stapler", price=Decimal("12.50"), stock=8, category_id=catalog.category.id,
    ))

    assert product.vendor_id == catalog.vendor_b.id
    assert product.price == Decimal("12.50")
    assert product.in_stock is True


def test_create_product_needs_approved_category(session, catalog, make_category):
    pending = make_category(name="Pending", status=AccountStatus.PENDING)

    with pytest.raises(BadRequestError):
        create_product(session, catalog.vendor_b, ProductCreate(
            name="Stapler", price=Decimal("12.50"), category_id=pending.id,
        ))


def test_update_is_partial(session, catalog):
    product = update_product(session, catalog.vendor_a, catalog.pen.id, ProductUpdate(price=Decimal("11.00")))

    assert product.price == Decimal("11.00")
    assert product.name == "Pen"
    assert product.stock == 5


def test_update_other_vendors_product(session, catalog):
    with pytest.raises(NotFoundError):
        update_product(session, catalog.vendor_b, catalog.pen.id, ProductUpdate(stock=1))


def test_soft_delete_stops_ordering(session, catalog):
    product = delete_product(session, catalog.vendor_a, catalog.pad.id)
    assert product.is_deleted is True

    with pytest.raises(BadRequestError):
        create_order(session, catalog.user.id, [OrderItemIn(product_id=catalog.pad.id, quantity=1)])

    with pytest.raises(NotFoundError):
        delete_product(session, catalog.vendor_a, catalog.pad.id)


def test_order_snapshots_price_before_update(session, catalog):
    order = create_order(session, catalog.user.id, [OrderItemIn(product_id=catalog.pen.id, quantity=1)])

    update_product(session, catalog.vendor_a, catalog.pen.id, ProductUpdate(price=Decimal("99.00")))

    session.refresh(order)
    assert order.total_price == Decimal("10.00")
    assert order.items[0].price == Decimal("10.00")


def test_product_inputs_are_tagged():
    with pytest.raises(ValidationError):
        ProductCreate(kind="product.update", name="X", price=Decimal("1"), category_id=1)

    assert ProductUpdate(name="X").kind == "product.update"


def test_empty_update_is_rejected():
    with pytest.raises(ValidationError):
        ProductUpdate()


def test_negative_stock_is_rejected():
    with pytest.raises(ValidationError):
        ProductUpdate(stock=-1)
