"""
Module: commodity_engines
Responsibility:
    Package entrypoint that re-exports all public symbols from the pure
    calculation engine sub-modules.  This is the canonical import surface
    for invoice, contract and settlement workflows.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import commodity_kernel (and sibling engine modules).
    MUST NOT import commodity_config.

Invariants enforced:
    - Purity: engines NEVER call ``datetime.now()`` or ``date.today()``.
      Dates are explicit parameters or come from an injected ``Clock``.
    - Decimal-only arithmetic: all monetary amounts are ``Decimal``.
    - Determinism: identical inputs always produce identical outputs.

Failure modes:
    - InvalidArgumentError propagated from individual engines on invalid input.

Usage:
    from commodity_engines import moisture_adjustment, carrying_charge
    from commodity_engines import payment_interest, should_block_party
"""

from commodity_kernel.logging_config import get_logger

logger = get_logger("engines")

from commodity_engines.cci import (
    cash_discount,
    emd_amount,
    emd_interest_benefit,
    emd_interest_for_term,
    emd_late_interest,
    emd_percent,
    gst_amount,
    is_emd_due,
    lc_bg_interest,
    lockin_charge,
    net_invoice_amount,
    quintals_to_candy,
    should_send_email_reminder,
    total_invoice_amount,
)
from commodity_engines.interest import (
    DEFAULT_BLOCKING_RULES,
    AgingBucketTotal,
    BatchFailure,
    BatchInterestResult,
    BlockDecision,
    BlockingRule,
    BlockSeverity,
    EntityType,
    InterestCalculation,
    InterestStatus,
    InvoiceInterestInput,
    PartySummary,
    TradeType,
    aging_buckets,
    batch_payment_interest,
    classify_status,
    emd_interest,
    party_summary,
    payment_interest,
    should_block_party,
)
from commodity_engines.moisture import (
    AdjustmentType,
    MoistureAdjustmentResult,
    MoistureAssessment,
    MoistureSample,
    SampleValidation,
    assess_moisture,
    average_moisture,
    moisture_adjustment,
    net_invoice_excl_gst,
    validate_sample_count,
)
from commodity_engines.notices import (
    InterestDebitNote,
    interest_debit_note,
    interest_reminder,
)
from commodity_engines.storage import (
    carrying_charge,
    carrying_charge_for_days,
    carrying_charge_tiers,
    late_lifting_breakdown,
    late_lifting_charge,
    late_lifting_charge_for_dates,
    late_lifting_tiers,
)
from commodity_engines.tiers import (
    RateTier,
    TierAccrual,
    accrue_tiered,
    tier_breakdown,
)

__all__ = [
    # Moisture
    "AdjustmentType",
    "MoistureAdjustmentResult",
    "MoistureAssessment",
    "MoistureSample",
    "SampleValidation",
    "assess_moisture",
    "average_moisture",
    "moisture_adjustment",
    "net_invoice_excl_gst",
    "validate_sample_count",
    # Tiers
    "RateTier",
    "TierAccrual",
    "accrue_tiered",
    "tier_breakdown",
    # Storage
    "carrying_charge",
    "carrying_charge_for_days",
    "carrying_charge_tiers",
    "late_lifting_breakdown",
    "late_lifting_charge",
    "late_lifting_charge_for_dates",
    "late_lifting_tiers",
    # Interest & aging
    "DEFAULT_BLOCKING_RULES",
    "AgingBucketTotal",
    "BatchFailure",
    "BatchInterestResult",
    "BlockDecision",
    "BlockingRule",
    "BlockSeverity",
    "EntityType",
    "InterestCalculation",
    "InterestStatus",
    "InvoiceInterestInput",
    "PartySummary",
    "TradeType",
    "aging_buckets",
    "batch_payment_interest",
    "classify_status",
    "emd_interest",
    "party_summary",
    "payment_interest",
    "should_block_party",
    # CCI commercial
    "cash_discount",
    "emd_amount",
    "emd_interest_benefit",
    "emd_interest_for_term",
    "emd_late_interest",
    "emd_percent",
    "gst_amount",
    "is_emd_due",
    "lc_bg_interest",
    "lockin_charge",
    "net_invoice_amount",
    "quintals_to_candy",
    "should_send_email_reminder",
    "total_invoice_amount",
    # Notices
    "InterestDebitNote",
    "interest_debit_note",
    "interest_reminder",
]

logger.debug("engines_package_loaded", extra={
    "modules": ["tiers", "moisture", "storage", "interest", "cci", "notices"],
})
