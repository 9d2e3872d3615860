import json
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from sqlmodel import select

from app.constants.order_status import OrderStatus, PaymentStatus
from app.database import get_session
from app.main import app
from app.models.order import Order
from app.services.paystack_client import PaymentGatewayTimeout
from app.services.settlement_service import get_settlement_engine, sign_payload
from app.utils.token import TokenType, create_access_token


@pytest.fixture
def client(session, settlement):
    def override_session():
        yield session

    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_settlement_engine] = lambda: settlement
    yield TestClient(app)
    app.dependency_overrides.clear()


def bearer(email, token_type=TokenType.ACCESS):
    return {"Authorization": f"Bearer {create_access_token(email, token_type)}"}


BUYER = bearer("buyer@example.com")
VENDOR_A = bearer("a@example.com")


def place(client, catalog, *pairs):
    return client.post(
        "/user/orders",
        json={"products": [{"product_id": p.id, "quantity": q} for p, q in pairs]},
        headers=BUYER,
    )


def test_health_check(client):
    response = client.get("/health/check")

    assert response.status_code == 200
    assert response.json()["data"]["database"] == "ok"


def test_place_order(client, catalog):
    response = place(client, catalog, (catalog.pen, 2), (catalog.pad, 1))

    assert response.status_code == 200
    order = response.json()["data"]["order"]
    assert order["total_price"] == 25
    assert order["status"] == "PENDING"
    assert len(order["items"]) == 2


def test_place_multi_vendor_order_is_bad_request(client, catalog):
    response = place(client, catalog, (catalog.pen, 1), (catalog.ink, 1))

    assert response.status_code == 400
    assert response.json() == {"message": "Failed to create order", "error": "bad_request"}


def test_place_order_rejects_zero_quantity(client, catalog):
    response = place(client, catalog, (catalog.pen, 0))

    assert response.status_code == 422


def test_orders_need_a_token(client, catalog):
    response = client.post("/user/orders", json={"products": [{"product_id": catalog.pen.id, "quantity": 1}]})

    assert response.status_code == 401


def test_verify_token_is_not_an_access_token(client, catalog):
    response = client.post(
        "/user/orders",
        json={"products": [{"product_id": catalog.pen.id, "quantity": 1}]},
        headers=bearer("buyer@example.com", TokenType.VERIFY),
    )

    assert response.status_code == 401


def test_vendor_cannot_use_user_routes(client, catalog):
    response = client.post(
        "/user/orders",
        json={"products": [{"product_id": catalog.pen.id, "quantity": 1}]},
        headers=VENDOR_A,
    )

    assert response.status_code == 403


def test_user_cancel_and_forbidden_approve(client, catalog):
    order_id = place(client, catalog, (catalog.pen, 2)).json()["data"]["order"]["id"]

    forbidden = client.patch(f"/user/orders/{order_id}/status", json={"status": "APPROVED"}, headers=BUYER)
    assert forbidden.status_code == 403

    cancelled = client.patch(f"/user/orders/{order_id}/status", json={"status": "CANCELLED"}, headers=BUYER)
    assert cancelled.status_code == 200
    assert cancelled.json()["data"]["order"]["status"] == "CANCELLED"


def test_vendor_rejects_order(client, catalog):
    order_id = place(client, catalog, (catalog.pen, 2)).json()["data"]["order"]["id"]

    response = client.patch(f"/vendor/orders/{order_id}/status", json={"status": "REJECTED"}, headers=VENDOR_A)

    assert response.status_code == 200
    assert response.json()["data"]["order"]["user"]["id"] == catalog.user.id


def test_other_vendor_gets_not_found(client, catalog):
    order_id = place(client, catalog, (catalog.pen, 2)).json()["data"]["order"]["id"]

    response = client.patch(
        f"/vendor/orders/{order_id}/status", json={"status": "REJECTED"}, headers=bearer("b@example.com"),
    )

    assert response.status_code == 404


def test_admin_timeline(client, catalog, make_admin):
    make_admin()
    order_id = place(client, catalog, (catalog.pen, 1)).json()["data"]["order"]["id"]
    admin = bearer("admin@example.com")

    client.patch(f"/admin/orders/{order_id}/status", json={"status": "PROCESSING"}, headers=admin)
    response = client.get(f"/admin/orders/{order_id}/timeline", headers=admin)

    assert response.status_code == 200
    events = [e["event_type"] for e in response.json()["data"]["events"]]
    assert events == ["order_created", "status_changed"]


def test_initialize_payment(client, catalog, gateway):
    order_id = place(client, catalog, (catalog.pen, 1)).json()["data"]["order"]["id"]
    gateway.initialize_transaction.return_value = {"reference": "ref_1", "authorization_url": "https://pay/1"}

    response = client.post(
        "/payment/paystack/initialize",
        json={"order_id": order_id, "callback_url": "https://shop/paid"},
        headers=BUYER,
    )

    assert response.status_code == 200
    assert response.json()["data"] == {"authorization_url": "https://pay/1", "reference": "ref_1"}
    assert gateway.initialize_transaction.call_args.kwargs["email"] == "buyer@example.com"


def test_gateway_timeout_is_service_unavailable(client, catalog, gateway):
    gateway.verify_transaction.side_effect = PaymentGatewayTimeout("slow")

    response = client.get("/payment/paystack/verify/ref_1", headers=BUYER)

    assert response.status_code == 503
    assert response.json()["error"] == "upstream"


def test_webhook_rejects_bad_signature(client):
    response = client.post(
        "/payment/paystack/webhook",
        content=b'{"event": "charge.success", "data": {"reference": "ref_1"}}',
        headers={"x-paystack-signature": "bad"},
    )

    assert response.status_code == 403


def test_webhook_settles_order(client, session, catalog, gateway):
    order_id = place(client, catalog, (catalog.pen, 2)).json()["data"]["order"]["id"]
    order = session.get(Order, order_id)
    order.paystack_reference = "ref_1"
    session.add(order)
    session.commit()

    gateway.verify_transaction.return_value = {"status": "success", "reference": "ref_1", "amount": 2000}
    body = json.dumps({"event": "charge.success", "data": {"reference": "ref_1"}}).encode()

    response = client.post(
        "/payment/paystack/webhook",
        content=body,
        headers={"x-paystack-signature": sign_payload(body, "whsec_test")},
    )

    assert response.status_code == 200
    session.expire_all()
    order = session.exec(select(Order).where(Order.id == order_id)).one()
    assert order.payment_status == PaymentStatus.PAID
    assert order.status == OrderStatus.APPROVED


def test_webhook_acknowledges_unprocessable_events(client, gateway):
    gateway.verify_transaction.return_value = {"status": "success", "reference": "ghost"}
    body = json.dumps({"event": "charge.success", "data": {"reference": "ghost"}}).encode()

    response = client.post(
        "/payment/paystack/webhook",
        content=body,
        headers={"x-paystack-signature": sign_payload(body, "whsec_test")},
    )

    assert response.status_code == 200


def test_sign_up_route(client):
    with patch("app.services.auth_service.send_otp_email", return_value=True):
        response = client.post("/auth/sign-up", json={"email": "fresh@example.com", "password": "long-enough"})

    assert response.status_code == 200
    assert response.json()["data"]["token"]


def test_verify_otp_route(client, session):
    with patch("app.services.auth_service.send_otp_email", return_value=True) as send:
        token = client.post(
            "/auth/sign-up", json={"email": "fresh@example.com", "password": "long-enough"},
        ).json()["data"]["token"]
    code = send.call_args.args[1]

    response = client.post(
        "/auth/verify-otp", json={"code": code}, headers={"Authorization": f"Bearer {token}"},
    )

    assert response.status_code == 200
    assert response.json()["data"]["user"]["is_verified"] is True


def test_create_profile_route(client, make_category):
    with patch("app.services.auth_service.send_otp_email", return_value=True) as send:
        token = client.post(
            "/auth/sign-up", json={"email": "fresh@example.com", "password": "long-enough"},
        ).json()["data"]["token"]
        code = send.call_args.args[1]
        access = client.post(
            "/auth/verify-otp", json={"code": code}, headers={"Authorization": f"Bearer {token}"},
        ).json()["data"]["token"]

    headers = {"Authorization": f"Bearer {access}"}
    response = client.post("/profile", json={"role": "VENDOR", "name": "Fresh Goods"}, headers=headers)
    assert response.status_code == 200

    category = make_category()
    product = client.post(
        "/vendor/products",
        json={"name": "Jam", "price": "4.50", "stock": 10, "category_id": category.id},
        headers=headers,
    )
    assert product.status_code == 200
    assert product.json()["data"]["product"]["stock"] == 10


def test_admin_cannot_reopen_cancelled_order(client, catalog, make_admin):
    make_admin()
    order_id = place(client, catalog, (catalog.pen, 1)).json()["data"]["order"]["id"]
    admin = bearer("admin@example.com")

    client.patch(f"/admin/orders/{order_id}/status", json={"status": "CANCELLED"}, headers=admin)
    response = client.patch(f"/admin/orders/{order_id}/status", json={"status": "PENDING"}, headers=admin)

    assert response.status_code == 400
