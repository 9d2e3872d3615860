import logging
from typing import Any, Dict, Optional

import requests

from app.config import settings

logger = logging.getLogger(__name__)


class PaymentGatewayError(Exception):
    """Paystack call failed or came back with ``status: false``."""

    retryable = False


class PaymentGatewayTimeout(PaymentGatewayError):
    """No answer in time. Says nothing about whether the money moved."""

    retryable = True


class PaystackClient:
    def __init__(
        self,
        secret_key: str,
        base_url: str = "https://api.paystack.co",
        timeout: float = 15.0,
        http: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.http = http or requests.Session()
        self.http.headers.update({
            "Authorization": f"Bearer {secret_key}",
            "Content-Type": "application/json",
        })

    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.base_url}{path}"

        try:
            response = self.http.request(method, url, timeout=self.timeout, **kwargs)
        except (requests.Timeout, requests.ConnectionError) as e:
            logger.warning(f"Paystack {method} {path} timed out: {e}")
            raise PaymentGatewayTimeout(f"Paystack {path} unreachable") from e
        except requests.RequestException as e:
            raise PaymentGatewayError(f"Paystack {path} failed: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.status_code >= 400 or not body.get("status"):
            logger.error(
                f"Paystack {method} {path} failed ({response.status_code}): "
                f"{body.get('message') or response.text}"
            )
            raise PaymentGatewayError(body.get("message") or f"Paystack {path} failed")

        return body.get("data")

    def initialize_transaction(
        self,
        *,
        amount: int,
        email: str,
        currency: str,
        reference: str,
        callback_url: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        return self._request("POST", "/transaction/initialize", json={
            "amount": amount,
            "email": email,
            "currency": currency,
            "reference": reference,
            "callback_url": callback_url,
            "metadata": metadata or {},
        })

    def verify_transaction(self, reference: str) -> Dict[str, Any]:
        return self._request("GET", f"/transaction/verify/{reference}")

    def create_transfer_recipient(
        self,
        *,
        name: str,
        account_number: str,
        bank_code: str,
        currency: str,
        recipient_type: str = "nuban",
    ) -> Dict[str, Any]:
        return self._request("POST", "/transferrecipient", json={
            "type": recipient_type,
            "name": name,
            "account_number": account_number,
            "bank_code": bank_code,
            "currency": currency,
        })

    def initiate_transfer(
        self,
        *,
        amount: int,
        recipient: str,
        currency: str,
        reason: str,
        reference: str,
    ) -> Dict[str, Any]:
        return self._request("POST", "/transfer", json={
            "source": "balance",
            "amount": amount,
            "recipient": recipient,
            "currency": currency,
            "reason": reason,
            "reference": reference,
        })

    def refund(self, *, transaction: str, amount: int, currency: str) -> Dict[str, Any]:
        return self._request("POST", "/refund", json={
            "transaction": transaction,
            "amount": amount,
            "currency": currency,
        })

    def list_banks(self, country: str):
        return self._request("GET", "/bank", params={"country": country})


def get_paystack_client() -> PaystackClient:
    return PaystackClient(
        secret_key=settings.paystack_secret_key,
        base_url=settings.paystack_base_url,
        timeout=settings.paystack_timeout_seconds,
    )
