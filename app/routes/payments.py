from typing import Optional

from fastapi import APIRouter, Depends, Header, Request
from sqlmodel import Session

from app.database import get_session
from app.dependencies.roles import get_active_auth, require_admin, require_user, require_vendor
from app.models.auth import Auth
from app.models.user import Admin, User
from app.models.vendor import Vendor
from app.schemas.payment_schemas import InitializePaymentRequest, RefundRequest
from app.services.order_service import order_to_dict
from app.services.settlement_service import SettlementEngine, get_settlement_engine

router = APIRouter()


async def raw_body(request: Request) -> bytes:
    return await request.body()


@router.post("/initialize")
def initialize_payment(
    payload: InitializePaymentRequest,
    session: Session = Depends(get_session),
    user: User = Depends(require_user),
    engine: SettlementEngine = Depends(get_settlement_engine)
):
    data = engine.initialize_payment(
        session,
        order_id=payload.order_id,
        user_id=user.id,
        email=user.auth.email,
        callback_url=payload.callback_url,
    )
    return {"message": "Payment initialized", "data": data}


@router.get("/verify/{reference}")
def verify_payment(
    reference: str,
    session: Session = Depends(get_session),
    _: Auth = Depends(get_active_auth),
    engine: SettlementEngine = Depends(get_settlement_engine)
):
    result = engine.verify_payment(session, reference)
    return {
        "message": "Payment verified",
        "data": {"success": result["success"], "order": order_to_dict(result["order"])},
    }


@router.post("/webhook")
def paystack_webhook(
    body: bytes = Depends(raw_body),
    x_paystack_signature: Optional[str] = Header(None),
    session: Session = Depends(get_session),
    engine: SettlementEngine = Depends(get_settlement_engine)
):
    # anything past the signature check is acknowledged, even if it failed
    engine.handle_webhook(session, body, x_paystack_signature)
    return {"message": "Webhook received", "data": {}}


@router.get("/banks")
def list_banks(
    _: Vendor = Depends(require_vendor),
    engine: SettlementEngine = Depends(get_settlement_engine)
):
    return {"message": "Banks fetched", "data": {"banks": engine.get_banks()}}


@router.post("/refund")
def refund_payment(
    payload: RefundRequest,
    session: Session = Depends(get_session),
    _: Admin = Depends(require_admin),
    engine: SettlementEngine = Depends(get_settlement_engine)
):
    data = engine.process_refund(session, payload.payment_id, payload.amount)
    return {"message": "Refund processed", "data": data}


@router.post("/transfer/{payment_id}")
def transfer_to_vendor(
    payment_id: int,
    session: Session = Depends(get_session),
    _: Admin = Depends(require_admin),
    engine: SettlementEngine = Depends(get_settlement_engine)
):
    data = engine.initiate_transfer(session, payment_id)
    return {"message": "Transfer initiated", "data": data}
