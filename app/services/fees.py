from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Tuple, Union

CENT = Decimal("0.01")

Number = Union[Decimal, int, float, str]


def to_money(value: Number) -> Decimal:
    # str() first so floats like 0.1 do not drag binary noise in
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def to_minor_units(amount: Number) -> int:
    """Gateway amounts are integers in the minor currency unit (x100)."""
    return int((to_money(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class VendorShare:
    vendor_id: int
    amount: Decimal
    platform_fee: Decimal
    vendor_amount: Decimal


def platform_fee_for(amount: Number, fee_percentage: Number) -> Decimal:
    return to_money(to_money(amount) * Decimal(str(fee_percentage)) / Decimal(100))


def split_share(vendor_id: int, amount: Number, fee_percentage: Number) -> VendorShare:
    amount = to_money(amount)
    fee = platform_fee_for(amount, fee_percentage)
    # vendor gets the remainder so fee + vendor_amount == amount exactly
    return VendorShare(
        vendor_id=vendor_id,
        amount=amount,
        platform_fee=fee,
        vendor_amount=amount - fee,
    )


def group_by_vendor(lines: Iterable[Tuple[int, Number, int]]) -> Dict[int, Decimal]:
    """
    Sum ``price * quantity`` per vendor.

    ``lines`` yields ``(vendor_id, unit_price, quantity)``. Insertion order of
    the first line per vendor is kept.
    """
    totals: Dict[int, Decimal] = {}
    for vendor_id, price, quantity in lines:
        totals[vendor_id] = totals.get(vendor_id, Decimal("0")) + to_money(price) * quantity
    return totals


def split_by_vendor(lines: Iterable[Tuple[int, Number, int]], fee_percentage: Number) -> List[VendorShare]:
    return [
        split_share(vendor_id, amount, fee_percentage)
        for vendor_id, amount in group_by_vendor(lines).items()
    ]
