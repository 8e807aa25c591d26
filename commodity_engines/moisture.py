"""
Module: commodity_engines.moisture
Responsibility:
    Convert bale moisture readings into a single price adjustment against
    the moisture band of a trade-term regime, and apply that adjustment to
    an invoice amount.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import commodity_kernel.

Invariants enforced:
    - The band ``lower <= average <= upper`` is inclusive: averages equal
      to either limit produce no adjustment.
    - ``adjustment_amount`` is 0 iff ``adjustment_type`` is NONE.
    - No currency rounding inside ``moisture_adjustment``; callers round
      when composing the invoice amount.

Failure modes:
    - InvalidArgumentError for negative or non-finite readings, weights,
      rates or invoice amounts.
    - Too few samples is NOT an error: ``validate_sample_count`` returns a
      ``SampleValidation`` the caller branches on.

Usage:
    from commodity_engines.moisture import average_moisture, moisture_adjustment

    avg = average_moisture(samples)
    result = moisture_adjustment(avg, Decimal("100"), Decimal("5000"), term)
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Sequence

from commodity_kernel.domain.terms import TradeTermConfiguration
from commodity_kernel.domain.values import (
    ZERO,
    NumberLike,
    to_non_negative_decimal,
)
from commodity_kernel.exceptions import InvalidArgumentError
from commodity_kernel.logging_config import get_logger
from commodity_engines.tracer import traced_engine

logger = get_logger("engines.moisture")


class AdjustmentType(str, Enum):
    """Direction of a moisture price adjustment."""

    DISCOUNT = "discount"  # wetter than band: buyer pays less
    PREMIUM = "premium"  # drier than band: seller is paid more
    NONE = "none"


@dataclass(frozen=True)
class MoistureSample:
    """A single bale moisture reading in percent."""

    moisture_percent: Decimal
    bale_id: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "moisture_percent",
            to_non_negative_decimal("moisture_percent", self.moisture_percent),
        )


@dataclass(frozen=True)
class SampleValidation:
    """Outcome of a minimum-sample-count check."""

    is_valid: bool
    message: str | None = None


@dataclass(frozen=True)
class MoistureAdjustmentResult:
    """Computed moisture adjustment; amount is unrounded."""

    adjustment_amount: Decimal
    adjustment_type: AdjustmentType

    @classmethod
    def none(cls) -> MoistureAdjustmentResult:
        return cls(adjustment_amount=ZERO, adjustment_type=AdjustmentType.NONE)


@dataclass(frozen=True)
class MoistureAssessment:
    """Sample validation, average and adjustment for one delivery."""

    validation: SampleValidation
    average_moisture: Decimal
    adjustment: MoistureAdjustmentResult | None

    @property
    def is_billable(self) -> bool:
        return self.validation.is_valid and self.adjustment is not None


def average_moisture(samples: Sequence[MoistureSample]) -> Decimal:
    """Arithmetic mean of ``moisture_percent``; ``0`` for an empty set."""
    if not samples:
        return ZERO
    total = sum((s.moisture_percent for s in samples), ZERO)
    return total / len(samples)


def validate_sample_count(
    samples: Sequence[MoistureSample],
    minimum_count: int,
) -> SampleValidation:
    """Check that at least ``minimum_count`` samples were taken."""
    if not samples:
        return SampleValidation(is_valid=False, message="No moisture samples provided")
    if len(samples) < minimum_count:
        return SampleValidation(
            is_valid=False,
            message=(
                f"Minimum {minimum_count} samples required, "
                f"but only {len(samples)} provided"
            ),
        )
    return SampleValidation(is_valid=True)


def moisture_adjustment(
    average_moisture_percent: NumberLike,
    net_delivery_weight: NumberLike,
    sale_rate_per_quintal: NumberLike,
    terms: TradeTermConfiguration,
) -> MoistureAdjustmentResult:
    """
    Price adjustment for an average moisture reading.

    Above ``moisture_upper_limit`` the excess points are discounted; below
    ``moisture_lower_limit`` the shortfall points earn a premium; both at
    ``points * net_delivery_weight * sale_rate_per_quintal``.
    """
    average = to_non_negative_decimal("average_moisture_percent", average_moisture_percent)
    weight = to_non_negative_decimal("net_delivery_weight", net_delivery_weight)
    rate = to_non_negative_decimal("sale_rate_per_quintal", sale_rate_per_quintal)

    if average > terms.moisture_upper_limit:
        points = average - terms.moisture_upper_limit
        result = MoistureAdjustmentResult(points * weight * rate, AdjustmentType.DISCOUNT)
    elif average < terms.moisture_lower_limit:
        points = terms.moisture_lower_limit - average
        result = MoistureAdjustmentResult(points * weight * rate, AdjustmentType.PREMIUM)
    else:
        result = MoistureAdjustmentResult.none()

    logger.debug("moisture_adjustment_calculated", extra={
        "average_moisture": str(average),
        "lower_limit": str(terms.moisture_lower_limit),
        "upper_limit": str(terms.moisture_upper_limit),
        "adjustment_type": result.adjustment_type.value,
        "adjustment_amount": str(result.adjustment_amount),
    })
    return result


def net_invoice_excl_gst(
    base_amount: NumberLike,
    adjustment_amount: NumberLike,
    adjustment_type: AdjustmentType | str,
) -> Decimal:
    """Apply a moisture adjustment to the pre-GST invoice amount."""
    base = to_non_negative_decimal("base_amount", base_amount)
    adjustment = to_non_negative_decimal("adjustment_amount", adjustment_amount)
    try:
        kind = AdjustmentType(adjustment_type)
    except ValueError as e:
        raise InvalidArgumentError(
            "adjustment_type", adjustment_type, "must be discount, premium or none"
        ) from e

    if kind is AdjustmentType.DISCOUNT:
        return base - adjustment
    if kind is AdjustmentType.PREMIUM:
        return base + adjustment
    return base


@traced_engine("moisture", "1.0", fingerprint_fields=(
    "samples", "net_delivery_weight", "sale_rate_per_quintal", "minimum_count",
))
def assess_moisture(
    samples: Sequence[MoistureSample],
    net_delivery_weight: NumberLike,
    sale_rate_per_quintal: NumberLike,
    terms: TradeTermConfiguration,
    minimum_count: int | None = None,
) -> MoistureAssessment:
    """
    Validate, average and price a delivery's moisture samples.

    ``minimum_count`` defaults to the regime's ``moisture_sample_count``.
    The adjustment is None when validation fails so that an under-sampled
    delivery can never be billed by accident.
    """
    required = terms.moisture_sample_count if minimum_count is None else minimum_count
    validation = validate_sample_count(samples, required)
    average = average_moisture(samples)

    if not validation.is_valid:
        logger.info("moisture_assessment_insufficient_samples", extra={
            "sample_count": len(samples),
            "minimum_count": required,
        })
        return MoistureAssessment(validation=validation, average_moisture=average, adjustment=None)

    adjustment = moisture_adjustment(average, net_delivery_weight, sale_rate_per_quintal, terms)
    return MoistureAssessment(validation=validation, average_moisture=average, adjustment=adjustment)
