"""
Pure domain layer.

Immutable value objects and deterministic helpers with NO dependencies on:
- Database or network
- Configuration files
- The wall clock (except ``SystemClock``)
"""

from commodity_kernel.domain.clock import (
    Clock,
    DeterministicClock,
    SystemClock,
    resolve_as_of,
)
from commodity_kernel.domain.terms import (
    BuyerType,
    CompoundingFrequency,
    PaymentTerms,
    TradeTermConfiguration,
    select_active_term,
)
from commodity_kernel.domain.values import (
    coerce_date,
    round_currency,
    to_decimal,
    to_non_negative_days,
    to_non_negative_decimal,
)

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "resolve_as_of",
    "BuyerType",
    "CompoundingFrequency",
    "PaymentTerms",
    "TradeTermConfiguration",
    "select_active_term",
    "coerce_date",
    "round_currency",
    "to_decimal",
    "to_non_negative_days",
    "to_non_negative_decimal",
]
