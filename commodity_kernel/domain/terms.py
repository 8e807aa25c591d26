"""
Terms -- Trade-term regimes and payment terms as frozen value objects.

Responsibility:
    Defines ``TradeTermConfiguration`` (the versioned CCI term bundle:
    moisture band, carrying and late-lifting tiers, EMD rules, commercial
    rates) and ``PaymentTerms`` (normal-trade credit terms), plus selection
    of the regime effective on a given date.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Instances are produced by the settings layer (``commodity_config``) or
    by callers directly; engines treat them as immutable snapshots.

Invariants enforced:
    - ``moisture_upper_limit >= moisture_lower_limit``.
    - Tier-2 day thresholds >= tier-1 day thresholds.
    - All percentages, limits and day counts are non-negative.
    - ``effective_to >= effective_from`` when both are set.

Failure modes:
    - InvalidTermConfigurationError on any invariant violation in a
      ``TradeTermConfiguration``.
    - InvalidArgumentError on invalid ``PaymentTerms`` (they arrive with
      transactional input, not from settings).
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, fields
from datetime import date
from decimal import Decimal
from enum import Enum
from types import MappingProxyType

from commodity_kernel.exceptions import (
    InvalidArgumentError,
    InvalidTermConfigurationError,
)
from commodity_kernel.domain.values import (
    ZERO,
    coerce_date,
    to_non_negative_days,
    to_non_negative_decimal,
)


class BuyerType(str, Enum):
    """Buyer categories with distinct EMD percentages."""

    KVIC = "kvic"
    PRIVATE_MILL = "private_mill"
    TRADER = "trader"


class CompoundingFrequency(str, Enum):
    """Declared compounding frequency of late-payment interest."""

    DAILY = "daily"
    MONTHLY = "monthly"
    ANNUALLY = "annually"


_DECIMAL_FIELDS = (
    "moisture_lower_limit",
    "moisture_upper_limit",
    "carrying_charge_tier1_percent",
    "carrying_charge_tier2_percent",
    "late_lifting_tier1_percent",
    "late_lifting_tier2_percent",
    "late_lifting_tier3_percent",
    "emd_interest_percent",
    "emd_late_interest_percent",
    "candy_factor",
    "gst_rate",
    "cash_discount_percentage",
    "interest_lc_bg_percent",
    "penal_interest_lc_bg_percent",
    "additional_deposit_percent",
    "deposit_interest_percent",
    "lockin_charge_min",
    "lockin_charge_max",
)

_DAY_FIELDS = (
    "carrying_charge_tier1_days",
    "free_lifting_period_days",
    "late_lifting_tier1_days",
    "late_lifting_tier2_days",
    "emd_payment_days",
    "lifting_period_days",
    "contract_period_days",
    "moisture_sample_count",
    "email_reminder_days",
)


@dataclass(frozen=True)
class TradeTermConfiguration:
    """
    A versioned, time-bounded CCI trade-term regime.

    Contract:
        Frozen dataclass.  Numeric fields are coerced to ``Decimal`` (rates,
        limits, factors) or validated as whole days on construction.
    Guarantees:
        - Every invariant listed in the module docstring holds for any
          constructed instance.
        - ``emd_by_buyer_type`` is a read-only mapping keyed by ``BuyerType``.
    Non-goals:
        - Does not know which regime is active; see ``select_active_term``.
    """

    moisture_lower_limit: Decimal
    moisture_upper_limit: Decimal
    carrying_charge_tier1_days: int
    carrying_charge_tier1_percent: Decimal
    carrying_charge_tier2_percent: Decimal
    free_lifting_period_days: int
    late_lifting_tier1_days: int
    late_lifting_tier1_percent: Decimal
    late_lifting_tier2_days: int
    late_lifting_tier2_percent: Decimal
    late_lifting_tier3_percent: Decimal
    emd_payment_days: int
    emd_interest_percent: Decimal
    emd_late_interest_percent: Decimal

    term_id: str | None = None
    name: str = ""
    version: int = 1
    effective_from: date | None = None
    effective_to: date | None = None
    is_active: bool = True
    carrying_charge_tier2_days: int | None = None
    candy_factor: Decimal = Decimal("0.2812")
    gst_rate: Decimal = Decimal("5")
    emd_by_buyer_type: Mapping[BuyerType, Decimal] = field(default_factory=dict)
    emd_block_do_if_not_full: bool = True
    cash_discount_percentage: Decimal = ZERO
    interest_lc_bg_percent: Decimal = ZERO
    penal_interest_lc_bg_percent: Decimal = ZERO
    additional_deposit_percent: Decimal = ZERO
    deposit_interest_percent: Decimal = ZERO
    lifting_period_days: int = 0
    contract_period_days: int = 0
    lockin_charge_min: Decimal = ZERO
    lockin_charge_max: Decimal = ZERO
    moisture_sample_count: int = 10
    email_reminder_days: int = 0

    def __post_init__(self) -> None:
        for name in _DECIMAL_FIELDS:
            object.__setattr__(self, name, _config_decimal(name, getattr(self, name)))
        for name in _DAY_FIELDS:
            _config_days(name, getattr(self, name))
        if self.carrying_charge_tier2_days is not None:
            _config_days("carrying_charge_tier2_days", self.carrying_charge_tier2_days)
            if self.carrying_charge_tier2_days < self.carrying_charge_tier1_days:
                raise InvalidTermConfigurationError(
                    "carrying_charge_tier2_days",
                    "must be >= carrying_charge_tier1_days",
                )

        if self.moisture_upper_limit < self.moisture_lower_limit:
            raise InvalidTermConfigurationError(
                "moisture_upper_limit", "must be >= moisture_lower_limit"
            )
        if self.late_lifting_tier2_days < self.late_lifting_tier1_days:
            raise InvalidTermConfigurationError(
                "late_lifting_tier2_days", "must be >= late_lifting_tier1_days"
            )
        if self.lockin_charge_max < self.lockin_charge_min:
            raise InvalidTermConfigurationError(
                "lockin_charge_max", "must be >= lockin_charge_min"
            )

        for name in ("effective_from", "effective_to"):
            value = getattr(self, name)
            if value is not None:
                object.__setattr__(self, name, _config_date(name, value))
        if (
            self.effective_from is not None
            and self.effective_to is not None
            and self.effective_to < self.effective_from
        ):
            raise InvalidTermConfigurationError(
                "effective_to", "must be on or after effective_from"
            )

        emd: dict[BuyerType, Decimal] = {}
        for key, pct in dict(self.emd_by_buyer_type).items():
            try:
                buyer = BuyerType(key)
            except ValueError as e:
                raise InvalidTermConfigurationError(
                    "emd_by_buyer_type", f"unknown buyer type {key!r}"
                ) from e
            emd[buyer] = _config_decimal(f"emd_by_buyer_type.{buyer.value}", pct)
        object.__setattr__(self, "emd_by_buyer_type", MappingProxyType(emd))

    def is_effective_on(self, as_of_date: date) -> bool:
        """True if ``as_of_date`` falls inside the effective window."""
        if self.effective_from is None or as_of_date < self.effective_from:
            return False
        return self.effective_to is None or as_of_date <= self.effective_to

    @property
    def version_label(self) -> str:
        """Human-readable version string for audit trails."""
        effective = self.effective_from.isoformat() if self.effective_from else "n/a"
        return f"{self.name} (v{self.version}) - Effective: {effective}"

    def as_dict(self) -> dict[str, object]:
        """Plain-dict view (used for checksums and trace fingerprints)."""
        result: dict[str, object] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name == "emd_by_buyer_type":
                value = {k.value: str(v) for k, v in value.items()}
            elif isinstance(value, (Decimal, date)):
                value = str(value)
            result[f.name] = value
        return result


@dataclass(frozen=True)
class PaymentTerms:
    """
    Credit terms for a normal-trade invoice.

    ``charge_interest`` distinguishes parties that agreed to be charged
    interest from those where interest is computed only as a warning.
    """

    payment_days: int
    grace_period_days: int
    interest_rate_per_annum: Decimal
    compounding_frequency: CompoundingFrequency = CompoundingFrequency.MONTHLY
    late_fee_flat: Decimal | None = None
    charge_interest: bool = True

    def __post_init__(self) -> None:
        to_non_negative_days("payment_days", self.payment_days)
        to_non_negative_days("grace_period_days", self.grace_period_days)
        object.__setattr__(
            self,
            "interest_rate_per_annum",
            to_non_negative_decimal("interest_rate_per_annum", self.interest_rate_per_annum),
        )
        if self.late_fee_flat is not None:
            object.__setattr__(
                self,
                "late_fee_flat",
                to_non_negative_decimal("late_fee_flat", self.late_fee_flat),
            )
        try:
            frequency = CompoundingFrequency(self.compounding_frequency)
        except ValueError as e:
            raise InvalidArgumentError(
                "compounding_frequency", self.compounding_frequency,
                "must be daily, monthly or annually",
            ) from e
        object.__setattr__(self, "compounding_frequency", frequency)


def select_active_term(
    terms: Iterable[TradeTermConfiguration],
    as_of_date: date,
) -> TradeTermConfiguration | None:
    """
    Return the regime effective on ``as_of_date``.

    When several windows contain the date the one with the latest
    ``effective_from`` wins.  Terms without ``effective_from`` are never
    selected.
    """
    applicable = [t for t in terms if t.is_effective_on(as_of_date)]
    if not applicable:
        return None
    return max(applicable, key=lambda t: t.effective_from)


def _config_decimal(name: str, value: object) -> Decimal:
    try:
        return to_non_negative_decimal(name, value)
    except InvalidArgumentError as e:
        raise InvalidTermConfigurationError(name, e.reason) from e


def _config_days(name: str, value: object) -> int:
    try:
        return to_non_negative_days(name, value)
    except InvalidArgumentError as e:
        raise InvalidTermConfigurationError(name, e.reason) from e


def _config_date(name: str, value: object) -> date:
    try:
        return coerce_date(name, value)
    except InvalidArgumentError as e:
        raise InvalidTermConfigurationError(name, e.reason) from e
