from unittest.mock import MagicMock, patch

import pytest
import requests

from app.services.paystack_client import PaymentGatewayError, PaymentGatewayTimeout, PaystackClient


def response(status_code=200, body=None):
    mock = MagicMock()
    mock.status_code = status_code
    mock.json.return_value = body if body is not None else {}
    mock.text = str(body)
    return mock


@pytest.fixture
def http():
    return requests.Session()


@pytest.fixture
def client(http):
    return PaystackClient(secret_key="sk_test_123", base_url="https://api.paystack.test/", timeout=5, http=http)


def test_sets_bearer_auth(client, http):
    assert http.headers["Authorization"] == "Bearer sk_test_123"
    assert http.headers["Content-Type"] == "application/json"


def test_initialize_transaction_posts_and_returns_data(client, http):
    data = {"authorization_url": "https://checkout/abc", "reference": "ref_1"}

    with patch.object(http, "request", return_value=response(body={"status": True, "data": data})) as request:
        result = client.initialize_transaction(
            amount=2500,
            email="buyer@example.com",
            currency="ZAR",
            reference="ref_1",
            callback_url="https://shop/paid",
        )

    assert result == data
    args, kwargs = request.call_args
    assert args == ("POST", "https://api.paystack.test/transaction/initialize")
    assert kwargs["timeout"] == 5
    assert kwargs["json"]["amount"] == 2500
    assert kwargs["json"]["metadata"] == {}


def test_status_false_raises(client, http):
    body = {"status": False, "message": "Invalid key"}

    with patch.object(http, "request", return_value=response(200, body)):
        with pytest.raises(PaymentGatewayError, match="Invalid key") as exc:
            client.verify_transaction("ref_1")

    assert exc.value.retryable is False


def test_http_error_raises(client, http):
    with patch.object(http, "request", return_value=response(400, {"status": True})):
        with pytest.raises(PaymentGatewayError):
            client.refund(transaction="ref_1", amount=100, currency="ZAR")


def test_non_json_error_body(client, http):
    bad = response(502)
    bad.json.side_effect = ValueError("no json")

    with patch.object(http, "request", return_value=bad):
        with pytest.raises(PaymentGatewayError):
            client.verify_transaction("ref_1")


@pytest.mark.parametrize("error", [requests.Timeout("slow"), requests.ConnectionError("down")])
def test_unreachable_is_retryable_timeout(client, http, error):
    with patch.object(http, "request", side_effect=error):
        with pytest.raises(PaymentGatewayTimeout) as exc:
            client.initiate_transfer(amount=100, recipient="RCP_1", currency="ZAR", reason="x", reference="t_1")

    assert exc.value.retryable is True


def test_list_banks_passes_country(client, http):
    banks = [{"name": "Test Bank", "code": "632005"}]

    with patch.object(http, "request", return_value=response(body={"status": True, "data": banks})) as request:
        assert client.list_banks("south africa") == banks

    args, kwargs = request.call_args
    assert args == ("GET", "https://api.paystack.test/bank")
    assert kwargs["params"] == {"country": "south africa"}


def test_create_transfer_recipient_payload(client, http):
    with patch.object(http, "request", return_value=response(body={"status": True, "data": {"recipient_code": "RCP_1"}})) as request:
        client.create_transfer_recipient(
            name="Vendor A", account_number="0123456789", bank_code="632005", currency="ZAR",
        )

    assert request.call_args.kwargs["json"] == {
        "type": "nuban",
        "name": "Vendor A",
        "account_number": "0123456789",
        "bank_code": "632005",
        "currency": "ZAR",
    }
