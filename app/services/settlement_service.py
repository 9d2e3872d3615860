"""
Payment settlement against Paystack.

Flow: ``initialize_payment`` hands the customer a checkout URL; the charge is
confirmed either by the customer polling ``verify_payment`` or by the
``charge.success`` webhook (both land in ``verify_payment``). A confirmed
charge is split per vendor into platform fee and vendor share, one Payment
row each. Later an admin may refund a Payment or pay the vendor share out
with a transfer, whose outcome only ever arrives through the webhook.

Gateway deliveries are at-least-once, so every write here is keyed so that
a repeat is harmless: Payment rows by their unique reference, order and
transfer status changes by conditional UPDATEs.
"""
import hashlib
import hmac
import json
import logging
import time
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.config import Settings, settings
from app.constants.order_status import (
    OrderStatus,
    PaymentStatus,
    PaymentType,
    TransferStatus,
)
from app.errors import BadRequestError, ForbiddenError, NotFoundError, UpstreamError
from app.models.order import Order
from app.models.payment import Payment
from app.models.vendor import Vendor
from app.services.fees import split_by_vendor, to_minor_units, to_money
from app.services.order_event_service import OrderEventType, log_order_event
from app.services.paystack_client import (
    PaymentGatewayError,
    PaystackClient,
    get_paystack_client,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SettlementConfig:
    platform_fee_percentage: Decimal
    currency: str
    webhook_secret: str
    bank_country: str = "south africa"
    recipient_type: str = "nuban"

    @classmethod
    def from_settings(cls, config: Settings) -> "SettlementConfig":
        return cls(
            platform_fee_percentage=Decimal(str(config.platform_fee_percentage)),
            currency=config.currency,
            webhook_secret=config.paystack_secret_key,
            bank_country=config.bank_country,
            recipient_type=config.transfer_recipient_type,
        )


def _now_ms() -> int:
    return int(time.time() * 1000)


def _upstream(message: str, error: PaymentGatewayError) -> UpstreamError:
    return UpstreamError(message, retryable=error.retryable)


def sign_payload(raw_body: bytes, secret: str) -> str:
    return hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha512).hexdigest()


def charge_reference(payment: Payment) -> str:
    """Gateway transaction reference a per-vendor Payment was settled from."""
    return payment.paystack_reference.rsplit("_", 1)[0]


class SettlementEngine:
    def __init__(self, gateway: PaystackClient, config: SettlementConfig):
        self.gateway = gateway
        self.config = config

    # ------------------------------------------------------------------
    # charge
    # ------------------------------------------------------------------

    def initialize_payment(
        self,
        session: Session,
        *,
        order_id: int,
        user_id: int,
        email: str,
        callback_url: str,
    ) -> Dict[str, str]:
        order = session.exec(
            select(Order)
            .where(Order.id == order_id)
            .where(Order.user_id == user_id)
            .where(Order.payment_status == PaymentStatus.PENDING)
        ).first()

        if not order:
            raise NotFoundError("Order not found")

        try:
            data = self.gateway.initialize_transaction(
                amount=to_minor_units(order.total_price),
                email=email,
                currency=self.config.currency,
                reference=f"order_{order.id}_{_now_ms()}",
                callback_url=callback_url,
                metadata={"orderId": order.id, "userId": order.user_id},
            )
        except PaymentGatewayError as e:
            raise _upstream("Failed to initialize transaction", e) from e

        # a retry replaces the reference; the old one is simply abandoned
        order.paystack_reference = data["reference"]
        order.updated_at = datetime.utcnow()
        session.add(order)
        log_order_event(
            session,
            order.id,
            OrderEventType.PAYMENT_INITIALIZED,
            "Payment initialized",
            created_by=f"user:{user_id}",
            meta={"reference": data["reference"]},
        )
        session.commit()

        logger.info(f"Payment initialized for order {order.id}: {data['reference']}")
        return {
            "authorization_url": data["authorization_url"],
            "reference": data["reference"],
        }

    def verify_payment(self, session: Session, reference: str) -> Dict[str, Any]:
        try:
            data = self.gateway.verify_transaction(reference)
        except PaymentGatewayError as e:
            raise _upstream("Payment verification failed", e) from e

        if not data or data.get("status") != "success":
            logger.warning(f"Transaction {reference} not successful: {data and data.get('status')}")
            raise UpstreamError("Payment verification failed")

        order = session.exec(
            select(Order).where(Order.paystack_reference == reference)
        ).first()

        if not order:
            raise NotFoundError("Order not found")

        paid = data.get("amount")
        if paid is not None and int(paid) != to_minor_units(order.total_price):
            logger.error(
                f"Amount mismatch for order {order.id}: paid {paid}, "
                f"expected {to_minor_units(order.total_price)}"
            )
            raise BadRequestError("Payment amount mismatch")

        self._settle(session, order, reference)
        session.refresh(order)
        return {"success": True, "order": order}

    def _settle(self, session: Session, order: Order, reference: str):
        shares = split_by_vendor(
            ((item.product.vendor_id, item.price, item.quantity) for item in order.items),
            self.config.platform_fee_percentage,
        )

        try:
            created = []
            for share in shares:
                payment_reference = f"{reference}_{share.vendor_id}"
                existing = session.exec(
                    select(Payment).where(Payment.paystack_reference == payment_reference)
                ).first()
                if existing:
                    continue

                session.add(
                    Payment(
                        order_id=order.id,
                        vendor_id=share.vendor_id,
                        amount=share.amount,
                        platform_fee=share.platform_fee,
                        vendor_amount=share.vendor_amount,
                        status=PaymentStatus.PAID,
                        type=PaymentType.CHARGE,
                        paystack_reference=payment_reference,
                    )
                )
                created.append(share)

            session.flush()

            now = datetime.utcnow()
            marked_paid = session.exec(
                update(Order)
                .execution_options(synchronize_session=False)
                .where(Order.id == order.id)
                .where(Order.payment_status == PaymentStatus.PENDING)
                .values(payment_status=PaymentStatus.PAID, updated_at=now)
            ).rowcount == 1

            if marked_paid:
                # a cancelled or rejected order keeps its status; stock is already back
                approved = session.exec(
                    update(Order)
                    .execution_options(synchronize_session=False)
                    .where(Order.id == order.id)
                    .where(Order.status == OrderStatus.PENDING)
                    .values(status=OrderStatus.APPROVED, updated_at=now)
                ).rowcount == 1
                if not approved:
                    logger.warning(f"Order {order.id} paid while {order.status.value}; refund required")

            if created:
                log_order_event(
                    session,
                    order.id,
                    OrderEventType.PAYMENT_VERIFIED,
                    "Payment received",
                    meta={
                        "reference": reference,
                        "vendors": [
                            {
                                "vendor_id": s.vendor_id,
                                "amount": str(s.amount),
                                "platform_fee": str(s.platform_fee),
                                "vendor_amount": str(s.vendor_amount),
                            }
                            for s in created
                        ],
                    },
                )

            session.commit()
        except IntegrityError:
            # a concurrent delivery of the same event won the insert
            session.rollback()
            logger.info(f"Order {order.id} already settled for {reference}")
            return

        if created:
            logger.info(f"Order {order.id} settled: {len(created)} vendor payment(s) for {reference}")
        else:
            logger.info(f"Duplicate verification for {reference} ignored")

    # ------------------------------------------------------------------
    # webhook
    # ------------------------------------------------------------------

    def verify_signature(self, raw_body: bytes, signature: Optional[str]):
        if not signature:
            logger.warning("Paystack webhook without signature")
            raise ForbiddenError("Invalid signature")

        expected = sign_payload(raw_body, self.config.webhook_secret)
        if not hmac.compare_digest(expected, signature):
            logger.warning("Paystack webhook with invalid signature")
            raise ForbiddenError("Invalid signature")

    def handle_webhook(self, session: Session, raw_body: bytes, signature: Optional[str]) -> Optional[str]:
        """
        Verify and apply one webhook delivery.

        Raises ``ForbiddenError`` on a bad signature. Anything that goes
        wrong after that is logged and swallowed so the gateway does not
        keep redelivering. Returns the event name.
        """
        self.verify_signature(raw_body, signature)

        event_name = None
        try:
            event = json.loads(raw_body)
            event_name = event.get("event")
            reference = (event.get("data") or {}).get("reference")

            if event_name == "charge.success":
                self.verify_payment(session, reference)
            elif event_name == "transfer.success":
                self._settle_transfer(session, reference, TransferStatus.COMPLETED)
            elif event_name == "transfer.failed":
                self._settle_transfer(session, reference, TransferStatus.FAILED)
            else:
                logger.info(f"Ignoring Paystack event {event_name}")
        except Exception:
            session.rollback()
            logger.exception(f"Paystack webhook {event_name} failed")

        return event_name

    def _settle_transfer(self, session: Session, transfer_reference: str, status: TransferStatus):
        payment = session.exec(
            select(Payment).where(Payment.paystack_transfer_reference == transfer_reference)
        ).first()

        if not payment:
            logger.warning(f"No payment for transfer {transfer_reference}")
            return

        updated = session.exec(
            update(Payment)
            .execution_options(synchronize_session=False)
            .where(Payment.id == payment.id)
            .where(Payment.transfer_status == TransferStatus.PROCESSING)
            .values(transfer_status=status, updated_at=datetime.utcnow())
        ).rowcount == 1

        if not updated:
            session.rollback()
            logger.info(f"Transfer {transfer_reference} already settled")
            return

        log_order_event(
            session,
            payment.order_id,
            OrderEventType.TRANSFER_SETTLED,
            f"Vendor transfer {status.value.lower()}",
            meta={"payment_id": payment.id, "reference": transfer_reference},
        )
        session.commit()
        logger.info(f"Transfer {transfer_reference} for payment {payment.id}: {status.value}")

    # ------------------------------------------------------------------
    # refund
    # ------------------------------------------------------------------

    def process_refund(self, session: Session, payment_id: int, amount: Optional[Decimal] = None) -> Dict[str, Any]:
        payment = session.exec(
            select(Payment)
            .where(Payment.id == payment_id)
            .where(Payment.status == PaymentStatus.PAID)
        ).first()

        if not payment:
            raise BadRequestError("Payment not found")

        refund_amount = to_money(amount) if amount is not None else to_money(payment.amount)
        if refund_amount <= 0 or refund_amount > to_money(payment.amount):
            raise BadRequestError("Invalid refund amount")

        # claim the refund before calling out so two requests cannot both refund
        claimed = session.exec(
            update(Payment)
            .execution_options(synchronize_session=False)
            .where(Payment.id == payment.id)
            .where(Payment.status == PaymentStatus.PAID)
            .values(status=PaymentStatus.REFUNDING, updated_at=datetime.utcnow())
        ).rowcount == 1

        if not claimed:
            session.rollback()
            raise BadRequestError("Payment not found")
        session.commit()

        try:
            data = self.gateway.refund(
                transaction=charge_reference(payment),
                amount=to_minor_units(refund_amount),
                currency=self.config.currency,
            )
        except PaymentGatewayError as e:
            if not e.retryable:
                # definitely not refunded: release the claim
                session.exec(
                    update(Payment)
                    .execution_options(synchronize_session=False)
                    .where(Payment.id == payment.id)
                    .where(Payment.status == PaymentStatus.REFUNDING)
                    .values(status=PaymentStatus.PAID, updated_at=datetime.utcnow())
                )
                session.commit()
            raise _upstream("Failed to process refund", e) from e

        refund_reference = (data or {}).get("reference") or (data or {}).get("id")
        now = datetime.utcnow()

        try:
            session.exec(
                update(Payment)
                .execution_options(synchronize_session=False)
                .where(Payment.id == payment.id)
                .where(Payment.status == PaymentStatus.REFUNDING)
                .values(status=PaymentStatus.REFUNDED, type=PaymentType.REFUND, updated_at=now)
            )
            session.exec(
                update(Order)
                .execution_options(synchronize_session=False)
                .where(Order.id == payment.order_id)
                .values(
                    payment_status=PaymentStatus.REFUNDED,
                    status=OrderStatus.RETURNED,
                    updated_at=now,
                )
            )
            log_order_event(
                session,
                payment.order_id,
                OrderEventType.PAYMENT_REFUNDED,
                "Payment refunded",
                meta={
                    "payment_id": payment.id,
                    "amount": str(refund_amount),
                    "refund_reference": refund_reference,
                },
            )
            session.commit()
        except Exception:
            session.rollback()
            raise

        logger.info(f"Refunded {refund_amount} on payment {payment.id} ({refund_reference})")
        return {"success": True, "refund_reference": refund_reference}

    # ------------------------------------------------------------------
    # payouts
    # ------------------------------------------------------------------

    def create_transfer_recipient(self, session: Session, vendor: Vendor, bank_code: str) -> Dict[str, str]:
        if not vendor.account_number or not vendor.account_name:
            raise BadRequestError("Bank account details are required")

        try:
            data = self.gateway.create_transfer_recipient(
                name=vendor.account_name,
                account_number=vendor.account_number,
                bank_code=bank_code,
                currency=self.config.currency,
                recipient_type=self.config.recipient_type,
            )
        except PaymentGatewayError as e:
            raise _upstream("Failed to create transfer recipient", e) from e

        vendor.paystack_recipient_code = data["recipient_code"]
        vendor.updated_at = datetime.utcnow()
        session.add(vendor)
        session.commit()
        session.refresh(vendor)

        logger.info(f"Transfer recipient {vendor.paystack_recipient_code} registered for vendor {vendor.id}")
        return {"recipient_code": vendor.paystack_recipient_code}

    def initiate_transfer(self, session: Session, payment_id: int) -> Dict[str, str]:
        payment = session.exec(
            select(Payment)
            .where(Payment.id == payment_id)
            .where(Payment.status == PaymentStatus.PAID)
        ).first()

        if not payment:
            raise NotFoundError("Payment not found")

        vendor = session.get(Vendor, payment.vendor_id)
        if not vendor or not vendor.paystack_recipient_code:
            raise BadRequestError("Vendor has no recipient code")

        reference = f"transfer_{payment.id}_{_now_ms()}"

        # claim the payout before calling out so two requests cannot both pay
        claimed = session.exec(
            update(Payment)
            .execution_options(synchronize_session=False)
            .where(Payment.id == payment.id)
            .where(Payment.paystack_transfer_reference.is_(None))
            .values(
                paystack_transfer_reference=reference,
                transfer_status=TransferStatus.PROCESSING,
                updated_at=datetime.utcnow(),
            )
        ).rowcount == 1

        if not claimed:
            session.rollback()
            raise BadRequestError("Transfer already initiated")

        log_order_event(
            session,
            payment.order_id,
            OrderEventType.TRANSFER_INITIATED,
            "Vendor transfer initiated",
            meta={"payment_id": payment.id, "reference": reference},
        )
        session.commit()

        try:
            self.gateway.initiate_transfer(
                amount=to_minor_units(payment.vendor_amount),
                recipient=vendor.paystack_recipient_code,
                currency=self.config.currency,
                reason=f"Payment for order {payment.order_id}",
                reference=reference,
            )
        except PaymentGatewayError as e:
            if not e.retryable:
                # definitely not sent: release the claim
                session.exec(
                    update(Payment)
                    .execution_options(synchronize_session=False)
                    .where(Payment.id == payment.id)
                    .where(Payment.paystack_transfer_reference == reference)
                    .values(paystack_transfer_reference=None, transfer_status=None)
                )
                session.commit()
            raise _upstream("Failed to initiate transfer", e) from e

        logger.info(f"Transfer {reference} initiated for payment {payment.id}")
        return {"transfer_reference": reference}

    def get_banks(self):
        try:
            return self.gateway.list_banks(self.config.bank_country)
        except PaymentGatewayError as e:
            raise _upstream("Failed to fetch banks", e) from e


def get_settlement_engine() -> SettlementEngine:
    return SettlementEngine(
        gateway=get_paystack_client(),
        config=SettlementConfig.from_settings(settings),
    )
