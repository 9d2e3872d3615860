import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("PAYSTACK_SECRET_KEY", "sk_test_123")
os.environ.setdefault("ENV", "test")
os.environ["DATABASE_URL_OVERRIDE"] = "sqlite://"

from decimal import Decimal  # noqa: E402
from types import SimpleNamespace  # noqa: E402
from unittest.mock import MagicMock  # noqa: E402

import pytest  # noqa: E402
from sqlmodel import Session  # noqa: E402

from app.constants.order_status import AccountStatus, Role  # noqa: E402
from app.database import build_engine, create_db_and_tables  # noqa: E402
from app.models.auth import Auth  # noqa: E402
from app.models.category import Category  # noqa: E402
from app.models.product import Product  # noqa: E402
from app.models.user import Admin, User  # noqa: E402
from app.models.vendor import Vendor  # noqa: E402
from app.services.paystack_client import PaystackClient  # noqa: E402
from app.services.settlement_service import SettlementConfig, SettlementEngine  # noqa: E402

WEBHOOK_SECRET = "whsec_test"


@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    create_db_and_tables(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


def _add(session, obj):
    session.add(obj)
    session.commit()
    session.refresh(obj)
    return obj


def _auth(session, email, role, verified=True, status=AccountStatus.APPROVED):
    return _add(session, Auth(
        email=email,
        password="not-a-real-hash",
        role=role,
        status=status,
        is_verified=verified,
    ))


@pytest.fixture
def make_user(session):
    def _make(email="buyer@example.com", name="Buyer"):
        auth = _auth(session, email, Role.USER)
        return _add(session, User(auth_id=auth.id, name=name, city="Cape Town"))
    return _make


@pytest.fixture
def make_vendor(session):
    def _make(email="vendor@example.com", name="Vendor", verified=True, status=AccountStatus.APPROVED,
              recipient_code=None):
        auth = _auth(session, email, Role.VENDOR, verified=verified, status=status)
        return _add(session, Vendor(
            auth_id=auth.id,
            name=name,
            bank_name="Test Bank",
            account_number="0123456789",
            account_name=name,
            paystack_recipient_code=recipient_code,
        ))
    return _make


@pytest.fixture
def make_admin(session):
    def _make(email="admin@example.com"):
        auth = _auth(session, email, Role.ADMIN)
        return _add(session, Admin(auth_id=auth.id, name="Admin"))
    return _make


@pytest.fixture
def make_category(session):
    def _make(name="Books", status=AccountStatus.APPROVED, is_deleted=False):
        return _add(session, Category(name=name, status=status, is_deleted=is_deleted))
    return _make


@pytest.fixture
def make_product(session):
    def _make(vendor, category, name="Item", price="10.00", stock=5, is_deleted=False):
        return _add(session, Product(
            name=name,
            price=Decimal(price),
            stock=stock,
            vendor_id=vendor.id,
            category_id=category.id,
            is_deleted=is_deleted,
        ))
    return _make


@pytest.fixture
def catalog(make_user, make_vendor, make_category, make_product):
    """
    Two vendors in one approved category.

    vendor_a sells ``pen`` (10.00, stock 5) and ``pad`` (5.00, stock 3);
    vendor_b sells ``ink`` (7.00, stock 4).
    """
    category = make_category()
    vendor_a = make_vendor(email="a@example.com", name="Vendor A", recipient_code="RCP_a")
    vendor_b = make_vendor(email="b@example.com", name="Vendor B")
    return SimpleNamespace(
        category=category,
        user=make_user(),
        vendor_a=vendor_a,
        vendor_b=vendor_b,
        pen=make_product(vendor_a, category, name="Pen", price="10.00", stock=5),
        pad=make_product(vendor_a, category, name="Pad", price="5.00", stock=3),
        ink=make_product(vendor_b, category, name="Ink", price="7.00", stock=4),
    )


@pytest.fixture
def gateway():
    return MagicMock(spec=PaystackClient)


@pytest.fixture
def settlement(gateway):
    return SettlementEngine(
        gateway=gateway,
        config=SettlementConfig(
            platform_fee_percentage=Decimal("10"),
            currency="ZAR",
            webhook_secret=WEBHOOK_SECRET,
            bank_country="south africa",
        ),
    )
