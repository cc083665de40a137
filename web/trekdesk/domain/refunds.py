"""Cancellation refund policy.

Refund tiers by whole days left before the batch starts:

    more than 7 days   90 %
    3 to 7 days        50 %
    under 3 days        0 %
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, List, Union

from ..core.exceptions import ValidationError

Amount = Union[Decimal, int, float, str]

REFUND_TYPES = ("auto", "full", "custom")

_SECONDS_PER_DAY = 24 * 60 * 60


@dataclass(frozen=True)
class RefundTier:
    min_days: int
    percentage: int
    label: str


# Ordered from the most generous tier down; the first match wins.
REFUND_TIERS: List[RefundTier] = [
    RefundTier(min_days=8, percentage=90, label="10% Cancellation Charge"),
    RefundTier(min_days=3, percentage=50, label="50% Cancellation Charge"),
]
NO_REFUND = RefundTier(min_days=0, percentage=0, label="No Refund")


def _to_decimal(value: Amount) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def _round_amount(value: Decimal) -> Decimal:
    return value.quantize(Decimal("1"), rounding=ROUND_HALF_UP)


def days_until(start: datetime, now: datetime) -> int:
    """Whole days left before *start*, rounded up (negative once started)."""
    return math.ceil((start - now).total_seconds() / _SECONDS_PER_DAY)


def refund_tier(start: datetime, now: datetime) -> RefundTier:
    days = days_until(start, now)
    for tier in REFUND_TIERS:
        if days >= tier.min_days:
            return tier
    return NO_REFUND


def refund_percentage(start: datetime, now: datetime) -> int:
    return refund_tier(start, now).percentage


def describe_refund_tier(start: datetime, now: datetime) -> dict:
    tier = refund_tier(start, now)
    return {
        "days_until_start": days_until(start, now),
        "percentage": tier.percentage,
        "label": tier.label,
    }


def calculate_refund(
    total_price: Amount,
    batch_start_date: datetime,
    now: datetime,
    refund_type: str = "auto",
    custom_amount: Optional[Amount] = None,
) -> Decimal:
    """Return the amount to refund for a cancellation.

    ``full`` refunds everything, ``custom`` refunds an administrator-chosen
    amount (never more than was paid), anything else applies the tiers.
    """
    total = _to_decimal(total_price)

    if refund_type == "full":
        return total

    if refund_type == "custom":
        if custom_amount is None:
            raise ValidationError("Custom refund amount is required", field="customRefundAmount")
        custom = _to_decimal(custom_amount)
        if custom < 0 or custom > total:
            raise ValidationError(
                "Custom refund amount must be between 0 and the amount paid",
                field="customRefundAmount",
            )
        return custom

    percentage = refund_percentage(batch_start_date, now)
    if percentage == 0:
        return Decimal("0")
    return _round_amount(total * percentage / 100)


def split_refund_per_participant(
    total_price: Amount,
    participant_count: int,
    cancelled_count: int,
    batch_start_date: datetime,
    now: datetime,
    refund_type: str = "auto",
    custom_amount: Optional[Amount] = None,
) -> Decimal:
    """Refund owed to each of *cancelled_count* participants.

    Each participant accounts for an equal share of the booking price; a
    custom amount is spread evenly across the cancelled participants.
    """
    if participant_count <= 0 or cancelled_count <= 0:
        return Decimal("0")

    share = _to_decimal(total_price) / participant_count
    if refund_type == "custom":
        if custom_amount is None:
            raise ValidationError("Custom refund amount is required", field="customRefundAmount")
        cancelled_value = share * cancelled_count
        custom = _to_decimal(custom_amount)
        if custom < 0 or custom > cancelled_value:
            raise ValidationError(
                "Custom refund amount must be between 0 and the cancelled share",
                field="customRefundAmount",
            )
        return (custom / cancelled_count).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

    if refund_type == "full":
        return share.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return calculate_refund(share, batch_start_date, now, refund_type)
