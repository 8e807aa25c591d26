"""
Module: commodity_engines.storage
Responsibility:
    Compute tiered carrying charges (goods held in storage past the free
    lifting period) and tiered late-lifting charges (buyer delaying pickup
    past the free lifting period).

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import commodity_kernel and sibling engine modules.

Invariants enforced:
    - Purity: "today" is an explicit ``as_of_date`` or an injected ``Clock``.
    - Carrying charges use two tiers (tier 2 unbounded); late-lifting
      charges use three tiers (tier 3 unbounded).  Both accrue through
      ``tiers.accrue_tiered`` with the fixed 30-day month.
    - Results are rounded once to 2 dp (ROUND_HALF_UP) after the tier sum.

Failure modes:
    - InvalidArgumentError for negative contract values, negative day
      counts, or malformed dates.

Usage:
    from commodity_engines.storage import carrying_charge, late_lifting_charge

    carrying_charge(
        contract_value=Decimal("1000000"),
        lifting_date=date(2024, 1, 1),
        free_lifting_days=21,
        tier1_days=30,
        tier1_rate=Decimal("1.25"),
        tier2_rate=Decimal("1.35"),
        as_of_date=date(2024, 3, 6),
    )
"""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from commodity_kernel.domain.clock import Clock, resolve_as_of
from commodity_kernel.domain.terms import TradeTermConfiguration
from commodity_kernel.domain.values import (
    DateLike,
    NumberLike,
    ZERO,
    coerce_date,
    round_currency,
    to_non_negative_days,
    to_non_negative_decimal,
)
from commodity_kernel.logging_config import get_logger
from commodity_engines.tiers import RateTier, TierAccrual, accrue_tiered, tier_breakdown
from commodity_engines.tracer import traced_engine

logger = get_logger("engines.storage")


def carrying_charge_tiers(
    tier1_days: int,
    tier1_rate: NumberLike,
    tier2_rate: NumberLike,
) -> tuple[RateTier, ...]:
    """Two-tier carrying schedule; tier 2 is unbounded."""
    return (
        RateTier(to_non_negative_days("tier1_days", tier1_days), tier1_rate),
        RateTier(None, tier2_rate),
    )


def late_lifting_tiers(term: TradeTermConfiguration) -> tuple[RateTier, ...]:
    """Three-tier late-lifting schedule from a trade-term regime."""
    return (
        RateTier(term.late_lifting_tier1_days, term.late_lifting_tier1_percent),
        RateTier(term.late_lifting_tier2_days, term.late_lifting_tier2_percent),
        RateTier(None, term.late_lifting_tier3_percent),
    )


def days_past_free_period(
    start_date: DateLike,
    free_days: int,
    as_of_date: DateLike | None = None,
    clock: Clock | None = None,
) -> int:
    """Whole days elapsed after ``start_date + free_days``; never negative."""
    start = coerce_date("start_date", start_date)
    free = to_non_negative_days("free_days", free_days)
    today = resolve_as_of(as_of_date, clock)
    free_period_end = start + timedelta(days=free)
    return max(0, (today - free_period_end).days)


@traced_engine("storage", "1.0", fingerprint_fields=(
    "contract_value", "lifting_date", "free_lifting_days",
    "tier1_days", "tier1_rate", "tier2_rate", "as_of_date",
))
def carrying_charge(
    contract_value: NumberLike,
    lifting_date: DateLike,
    free_lifting_days: int,
    tier1_days: int,
    tier1_rate: NumberLike,
    tier2_rate: NumberLike,
    as_of_date: DateLike | None = None,
    clock: Clock | None = None,
) -> Decimal:
    """
    Carrying charge for goods still in storage past the free period.

    Preconditions:
        - ``contract_value`` and all day counts are non-negative.
    Postconditions:
        - Returns 0.00 when no storage day has accrued.
        - Result is rounded to 2 dp.
    """
    value = to_non_negative_decimal("contract_value", contract_value)
    tiers = carrying_charge_tiers(tier1_days, tier1_rate, tier2_rate)
    days_in_storage = days_past_free_period(lifting_date, free_lifting_days, as_of_date, clock)

    if days_in_storage == 0:
        return round_currency(ZERO)

    charge = round_currency(accrue_tiered(value, days_in_storage, tiers))
    logger.info("carrying_charge_calculated", extra={
        "contract_value": str(value),
        "days_in_storage": days_in_storage,
        "tier1_days": tier1_days,
        "charge": str(charge),
    })
    return charge


def carrying_charge_for_days(
    term: TradeTermConfiguration,
    contract_value: NumberLike,
    days_in_storage: int,
) -> Decimal:
    """Carrying charge for a known storage period under ``term``'s tiers."""
    value = to_non_negative_decimal("contract_value", contract_value)
    days = to_non_negative_days("days_in_storage", days_in_storage)
    tiers = carrying_charge_tiers(
        term.carrying_charge_tier1_days,
        term.carrying_charge_tier1_percent,
        term.carrying_charge_tier2_percent,
    )
    return round_currency(accrue_tiered(value, days, tiers))


@traced_engine("storage", "1.0", fingerprint_fields=(
    "term", "contract_value", "days_since_release",
))
def late_lifting_charge(
    term: TradeTermConfiguration,
    contract_value: NumberLike,
    days_since_release: int,
) -> Decimal:
    """
    Late-lifting charge after ``term.free_lifting_period_days``.

    ``days_since_release`` counts from the day goods were made available
    for lifting; the free period is deducted before tiers apply.
    """
    value = to_non_negative_decimal("contract_value", contract_value)
    elapsed = to_non_negative_days("days_since_release", days_since_release)
    days_late = max(0, elapsed - term.free_lifting_period_days)

    if days_late == 0:
        return round_currency(ZERO)

    charge = round_currency(accrue_tiered(value, days_late, late_lifting_tiers(term)))
    logger.info("late_lifting_charge_calculated", extra={
        "contract_value": str(value),
        "days_late": days_late,
        "free_lifting_period_days": term.free_lifting_period_days,
        "charge": str(charge),
    })
    return charge


def late_lifting_charge_for_dates(
    term: TradeTermConfiguration,
    contract_value: NumberLike,
    release_date: DateLike,
    as_of_date: DateLike | None = None,
    clock: Clock | None = None,
) -> Decimal:
    """Late-lifting charge for goods released on ``release_date``."""
    released = coerce_date("release_date", release_date)
    today = resolve_as_of(as_of_date, clock)
    return late_lifting_charge(term, contract_value, max(0, (today - released).days))


def late_lifting_breakdown(
    term: TradeTermConfiguration,
    contract_value: NumberLike,
    days_since_release: int,
) -> tuple[TierAccrual, ...]:
    """Per-tier late-lifting accruals (unrounded), for display and audit."""
    value = to_non_negative_decimal("contract_value", contract_value)
    elapsed = to_non_negative_days("days_since_release", days_since_release)
    days_late = max(0, elapsed - term.free_lifting_period_days)
    return tier_breakdown(value, days_late, late_lifting_tiers(term))

