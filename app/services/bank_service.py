import logging
from datetime import datetime

from sqlmodel import Session

from app.models.vendor import Vendor
from app.schemas.bank_schemas import BankAccountUpdate
from app.services.settlement_service import SettlementEngine

logger = logging.getLogger(__name__)


def update_bank_account(session: Session, engine: SettlementEngine, vendor: Vendor, data: BankAccountUpdate) -> Vendor:
    """
    Save the vendor's payout account, then register it with the gateway.

    The details stay saved when registration fails so the vendor can simply
    retry; the recipient code is only replaced on success.
    """
    vendor.bank_name = data.bank_name
    vendor.account_number = data.account_number
    vendor.account_name = data.account_name
    vendor.updated_at = datetime.utcnow()
    session.add(vendor)
    session.commit()
    session.refresh(vendor)

    logger.info(f"Bank account updated for vendor {vendor.id}")

    engine.create_transfer_recipient(session, vendor, data.bank_code)
    return vendor


def bank_account_to_dict(vendor: Vendor) -> dict:
    return {
        "bank_name": vendor.bank_name,
        "account_number": vendor.account_number,
        "account_name": vendor.account_name,
        "paystack_recipient_code": vendor.paystack_recipient_code,
    }


def get_supported_banks(engine: SettlementEngine):
    return engine.get_banks()
