"""Scholarship arithmetic for fee structures."""

from decimal import Decimal
from enum import StrEnum
from typing import Union

from school_fees.shared.utils.money import ZERO, to_decimal


class ScholarshipType(StrEnum):
    """How a scholarship reduces the monthly fee."""

    NONE = "none"
    PERCENTAGE = "percentage"
    FIXED = "fixed"


def compute_actual_fee(
    monthly_fee: Union[Decimal, float, int, str],
    scholarship_type: ScholarshipType | str | None,
    scholarship: Union[Decimal, float, int, str, None],
) -> Decimal:
    """
    Fee payable after the scholarship.

    Percentage scholarships are not clamped here; callers validate the range.
    Unknown scholarship types leave the fee untouched.

    Examples:
        >>> compute_actual_fee(1000, "percentage", 20)
        Decimal('800')
        >>> compute_actual_fee(1000, "fixed", 1500)
        Decimal('0.00')
    """
    fee = to_decimal(monthly_fee)
    amount = to_decimal(scholarship or 0)

    if scholarship_type == ScholarshipType.PERCENTAGE:
        return fee - fee * amount / Decimal(100)
    if scholarship_type == ScholarshipType.FIXED:
        return max(ZERO, fee - amount)
    return fee
