"""
Tiered monthly-rate accrual shared by carrying and late-lifting charges.

Pure functions with deterministic behavior. No I/O.

A tier schedule is an ordered sequence of ``RateTier``.  Days are consumed
sequentially: the first tier absorbs up to its ``threshold_days``, the
next tier the following ``threshold_days``, and so on.  The final tier is
unbounded (``threshold_days=None``) and absorbs everything left.

Each tier accrues ``principal * rate_percent_per_month * days / (100 * 30)``.
The 30-day month is a fixed normalisation constant, never the calendar
length of a month.

Amounts returned here are NOT rounded; callers round once at their output
boundary so tier sums never carry intermediate rounding.

Usage:
    from commodity_engines.tiers import RateTier, accrue_tiered

    tiers = (RateTier(30, Decimal("1.25")), RateTier(None, Decimal("1.35")))
    accrue_tiered(Decimal("1000000"), 45, tiers)  # Decimal("19250")
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Sequence

from commodity_kernel.domain.values import (
    DAYS_PER_MONTH,
    HUNDRED,
    ZERO,
    to_non_negative_days,
    to_non_negative_decimal,
)
from commodity_kernel.exceptions import InvalidArgumentError

_MONTHLY_DIVISOR = HUNDRED * DAYS_PER_MONTH


@dataclass(frozen=True)
class RateTier:
    """
    One band of a tier schedule.

    Attributes:
        threshold_days: Days this tier absorbs; None for the unbounded tail.
        rate_percent_per_month: Monthly rate in percent (1.25 means 1.25%).
    """

    threshold_days: int | None
    rate_percent_per_month: Decimal

    def __post_init__(self) -> None:
        if self.threshold_days is not None:
            to_non_negative_days("threshold_days", self.threshold_days)
        object.__setattr__(
            self,
            "rate_percent_per_month",
            to_non_negative_decimal("rate_percent_per_month", self.rate_percent_per_month),
        )

    @property
    def is_unbounded(self) -> bool:
        return self.threshold_days is None


@dataclass(frozen=True)
class TierAccrual:
    """Days and unrounded amount accrued in a single tier."""

    tier_index: int
    days: int
    rate_percent_per_month: Decimal
    amount: Decimal


def validate_schedule(tiers: Sequence[RateTier]) -> None:
    """
    Check schedule shape.

    Raises:
        InvalidArgumentError: if empty, if the last tier is bounded, or if
            any earlier tier is unbounded.
    """
    if not tiers:
        raise InvalidArgumentError("tiers", tiers, "at least one tier is required")
    if not tiers[-1].is_unbounded:
        raise InvalidArgumentError("tiers", tiers, "final tier must be unbounded")
    for index, tier in enumerate(tiers[:-1]):
        if tier.is_unbounded:
            raise InvalidArgumentError(
                "tiers", tiers, f"tier {index + 1} is unbounded but not last"
            )


def tier_breakdown(
    principal: Decimal,
    days: int,
    tiers: Sequence[RateTier],
) -> tuple[TierAccrual, ...]:
    """
    Consume ``days`` across ``tiers`` in order.

    Postconditions:
        - Sum of ``TierAccrual.days`` equals ``days``.
        - Only tiers that absorbed at least one day are returned.
    """
    principal = to_non_negative_decimal("principal", principal)
    remaining = to_non_negative_days("days", days)
    validate_schedule(tiers)

    accruals: list[TierAccrual] = []
    for index, tier in enumerate(tiers):
        if remaining == 0:
            break
        if tier.is_unbounded:
            tier_days = remaining
        else:
            tier_days = min(remaining, tier.threshold_days)
        if tier_days == 0:
            continue
        amount = principal * tier.rate_percent_per_month * tier_days / _MONTHLY_DIVISOR
        accruals.append(
            TierAccrual(
                tier_index=index + 1,
                days=tier_days,
                rate_percent_per_month=tier.rate_percent_per_month,
                amount=amount,
            )
        )
        remaining -= tier_days

    return tuple(accruals)


def accrue_tiered(
    principal: Decimal,
    days: int,
    tiers: Sequence[RateTier],
) -> Decimal:
    """Total unrounded accrual of ``principal`` over ``days`` across ``tiers``."""
    return sum((a.amount for a in tier_breakdown(principal, days, tiers)), ZERO)
