from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.database import get_session
from app.dependencies.roles import require_vendor
from app.models.vendor import Vendor
from app.schemas.bank_schemas import BankAccountUpdate
from app.services.bank_service import bank_account_to_dict, get_supported_banks, update_bank_account
from app.services.settlement_service import SettlementEngine, get_settlement_engine

router = APIRouter()


@router.get("")
def get_bank_account(vendor: Vendor = Depends(require_vendor)):
    return {"message": "Bank account fetched", "data": {"bank": bank_account_to_dict(vendor)}}


@router.put("")
def put_bank_account(
    payload: BankAccountUpdate,
    session: Session = Depends(get_session),
    vendor: Vendor = Depends(require_vendor),
    engine: SettlementEngine = Depends(get_settlement_engine)
):
    vendor = update_bank_account(session, engine, vendor, payload)
    return {"message": "Bank account updated successfully", "data": {"bank": bank_account_to_dict(vendor)}}


@router.get("/supported")
def supported_banks(
    _: Vendor = Depends(require_vendor),
    engine: SettlementEngine = Depends(get_settlement_engine)
):
    return {"message": "Banks fetched", "data": {"banks": get_supported_banks(engine)}}
