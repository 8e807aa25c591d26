"""
Module: commodity_engines.interest
Responsibility:
    Late-payment interest for normal-trade invoices, EMD late-payment
    interest for CCI contracts, aging status classification, party-level
    summaries, and the decision whether a counterparty should be blocked
    from new trades.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import commodity_kernel and sibling engine modules.

Invariants enforced:
    - Purity: the settlement date is an explicit argument or comes from an
      injected ``Clock``; the engine never reads the wall clock itself.
    - Status thresholds apply to total days overdue (0 / grace / 30), not
      to days beyond grace.
    - Interest is zero on or before the last grace day.
    - Currency figures are rounded once, to 2 dp ROUND_HALF_UP, when the
      ``InterestCalculation`` is built.
    - Blocking is an ordered rule list evaluated first-match-wins.

Failure modes:
    - InvalidArgumentError for negative amounts, rates or day counts and
      malformed dates, and for payment terms that are not ``PaymentTerms``.
      ``batch_payment_interest`` records such failures per invoice instead
      of raising.

Audit relevance:
    ``InterestCalculation`` is a complete snapshot (due date, settlement
    date, days overdue, rate, amounts, status) that callers persist onto
    ledger records and debit notes.

Usage:
    from commodity_engines.interest import payment_interest, should_block_party

    calc = payment_interest(
        invoice_amount=Decimal("100000"),
        invoice_date=date(2024, 1, 1),
        terms=PaymentTerms(15, 5, Decimal("18")),
        actual_payment_date=date(2024, 2, 10),
    )
    decision = should_block_party([calc])
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from enum import Enum
from typing import Sequence

from commodity_kernel.domain.clock import Clock, resolve_as_of
from commodity_kernel.domain.terms import CompoundingFrequency, PaymentTerms
from commodity_kernel.domain.values import (
    DAYS_PER_YEAR,
    HUNDRED,
    ZERO,
    DateLike,
    NumberLike,
    coerce_date,
    round_currency,
    to_non_negative_days,
    to_non_negative_decimal,
)
from commodity_kernel.exceptions import CommodityEngineError, InvalidArgumentError
from commodity_kernel.logging_config import LogContext, get_logger
from commodity_engines.tracer import traced_engine

logger = get_logger("engines.interest")

SEVERELY_OVERDUE_AFTER_DAYS = 30
BLOCKING_OVERDUE_COUNT = 3
HIGH_INTEREST_THRESHOLD = Decimal("50000")


class InterestStatus(str, Enum):
    """Aging bucket of a payable by total days overdue."""

    ON_TIME = "on_time"
    WITHIN_GRACE = "within_grace"
    OVERDUE = "overdue"
    SEVERELY_OVERDUE = "severely_overdue"


class EntityType(str, Enum):
    INVOICE = "invoice"
    PAYMENT = "payment"
    CONTRACT = "contract"


class TradeType(str, Enum):
    """EMD interest and carrying charges exist only for CCI trades."""

    NORMAL = "normal"
    CCI = "cci"


class BlockSeverity(str, Enum):
    WARNING = "warning"
    CRITICAL = "critical"


@dataclass(frozen=True)
class InterestCalculation:
    """
    Snapshot of one overdue-interest computation.

    Contract:
        Frozen dataclass; never persisted by the engine.
    Guarantees:
        - ``interest_amount``, ``late_fee_amount`` and ``total_amount`` are
          rounded to 2 dp.
        - ``total_amount`` is the rounded principal alone when interest
          is not opted in, otherwise principal + interest + late fee.
    """

    entity_id: str | None
    entity_type: EntityType
    trade_type: TradeType
    principal_amount: Decimal
    due_date: date
    actual_date: date
    grace_period_days: int
    interest_rate: Decimal
    late_fee_rate: Decimal | None
    days_overdue: int
    interest_amount: Decimal
    late_fee_amount: Decimal
    total_amount: Decimal
    status: InterestStatus
    is_interest_applicable: bool
    interest_opted_in: bool

    @property
    def is_overdue(self) -> bool:
        return self.status in (InterestStatus.OVERDUE, InterestStatus.SEVERELY_OVERDUE)


@dataclass(frozen=True)
class PartySummary:
    """Aggregate of a counterparty's interest calculations."""

    item_count: int
    total_principal: Decimal
    total_interest: Decimal
    total_late_fees: Decimal
    total_due: Decimal
    potential_interest: Decimal
    overdue_count: int
    severely_overdue_count: int
    interest_charged_count: int
    interest_warning_count: int


@dataclass(frozen=True)
class AgingBucketTotal:
    """Count and amounts of calculations sharing one status."""

    status: InterestStatus
    count: int
    principal: Decimal
    total_due: Decimal


@dataclass(frozen=True)
class BlockDecision:
    should_block: bool
    reason: str
    severity: BlockSeverity
    rule: str | None = None


@dataclass(frozen=True)
class BlockingRule:
    """
    One entry of the blocking policy.

    Rules are evaluated in list order and the first whose ``applies``
    returns True decides.  Reordering the list changes policy.
    """

    name: str
    applies: Callable[[PartySummary], bool]
    should_block: bool
    severity: BlockSeverity
    reason: Callable[[PartySummary], str]

    def decide(self, summary: PartySummary) -> BlockDecision:
        return BlockDecision(
            should_block=self.should_block,
            reason=self.reason(summary),
            severity=self.severity,
            rule=self.name,
        )


@dataclass(frozen=True)
class InvoiceInterestInput:
    """One invoice for ``batch_payment_interest``; validated when computed."""

    invoice_id: str
    amount: NumberLike
    invoice_date: DateLike
    payment_terms: PaymentTerms
    paid_date: DateLike | None = None


@dataclass(frozen=True)
class BatchFailure:
    invoice_id: str
    code: str
    message: str


@dataclass(frozen=True)
class BatchInterestResult:
    """Per-invoice outcomes of a batch; order follows the input."""

    calculations: tuple[InterestCalculation, ...]
    failures: tuple[BatchFailure, ...]

    @property
    def all_succeeded(self) -> bool:
        return not self.failures


def format_rupees(amount: Decimal) -> str:
    return f"₹{amount:,.2f}"


DEFAULT_BLOCKING_RULES: tuple[BlockingRule, ...] = (
    BlockingRule(
        name="severely_overdue",
        applies=lambda s: s.severely_overdue_count > 0,
        should_block=True,
        severity=BlockSeverity.CRITICAL,
        reason=lambda s: (
            f"{s.severely_overdue_count} payment(s) severely overdue "
            f"(>{SEVERELY_OVERDUE_AFTER_DAYS} days). "
            f"Total outstanding: {format_rupees(s.total_due)}"
        ),
    ),
    BlockingRule(
        name="repeated_overdue",
        applies=lambda s: s.overdue_count >= BLOCKING_OVERDUE_COUNT,
        should_block=True,
        severity=BlockSeverity.CRITICAL,
        reason=lambda s: (
            f"{s.overdue_count} payments overdue. "
            "Please clear dues before new trades."
        ),
    ),
    BlockingRule(
        name="high_interest",
        applies=lambda s: s.potential_interest > HIGH_INTEREST_THRESHOLD,
        should_block=False,
        severity=BlockSeverity.WARNING,
        reason=lambda s: (
            f"High potential interest charges ({format_rupees(s.potential_interest)}). "
            f"{s.interest_warning_count} payment(s) delayed. "
            "Please settle soon to avoid future interest."
            if s.interest_warning_count > 0
            else f"High interest charges ({format_rupees(s.potential_interest)}). "
            "Please settle soon."
        ),
    ),
)

_NO_BLOCK = BlockDecision(should_block=False, reason="", severity=BlockSeverity.WARNING)


def classify_status(days_overdue: int, grace_period_days: int) -> InterestStatus:
    """Aging bucket for a total days-overdue figure."""
    if days_overdue == 0:
        return InterestStatus.ON_TIME
    if days_overdue <= grace_period_days:
        return InterestStatus.WITHIN_GRACE
    if days_overdue <= SEVERELY_OVERDUE_AFTER_DAYS:
        return InterestStatus.OVERDUE
    return InterestStatus.SEVERELY_OVERDUE


def simple_interest(principal: Decimal, annual_rate_percent: Decimal, days: int) -> Decimal:
    """``P * R * days / (100 * 365)``, unrounded."""
    return principal * annual_rate_percent * days / (HUNDRED * DAYS_PER_YEAR)


def daily_compound_interest(
    principal: Decimal,
    annual_rate_percent: Decimal,
    days: int,
) -> Decimal:
    """``P * ((1 + R/100/365)^days - 1)``, unrounded."""
    daily_rate = annual_rate_percent / HUNDRED / DAYS_PER_YEAR
    return principal * ((1 + daily_rate) ** days - 1)


@traced_engine("interest", "1.0", fingerprint_fields=(
    "invoice_amount", "invoice_date", "terms", "actual_payment_date",
))
def payment_interest(
    invoice_amount: NumberLike,
    invoice_date: DateLike,
    terms: PaymentTerms,
    actual_payment_date: DateLike | None = None,
    clock: Clock | None = None,
    entity_id: str | None = None,
) -> InterestCalculation:
    """
    Late-payment interest on a normal-trade invoice.

    Only the ``daily`` frequency compounds.  ``monthly`` and ``annually``
    accrue simple interest, matching historically issued amounts.
    """
    if not isinstance(terms, PaymentTerms):
        raise InvalidArgumentError("terms", terms, "must be PaymentTerms")
    principal = to_non_negative_decimal("invoice_amount", invoice_amount)
    issued = coerce_date("invoice_date", invoice_date)
    due_date = issued + timedelta(days=terms.payment_days)
    actual_date = resolve_as_of(actual_payment_date, clock)

    days_overdue = max(0, (actual_date - due_date).days)
    is_applicable = days_overdue > terms.grace_period_days

    interest = ZERO
    if is_applicable:
        beyond_grace = days_overdue - terms.grace_period_days
        if terms.compounding_frequency is CompoundingFrequency.DAILY:
            interest = daily_compound_interest(principal, terms.interest_rate_per_annum, beyond_grace)
        else:
            interest = simple_interest(principal, terms.interest_rate_per_annum, beyond_grace)

    late_fee = terms.late_fee_flat if (is_applicable and terms.late_fee_flat) else ZERO

    if terms.charge_interest:
        total = round_currency(principal + interest + late_fee)
    else:
        total = round_currency(principal)

    calculation = InterestCalculation(
        entity_id=entity_id,
        entity_type=EntityType.INVOICE,
        trade_type=TradeType.NORMAL,
        principal_amount=principal,
        due_date=due_date,
        actual_date=actual_date,
        grace_period_days=terms.grace_period_days,
        interest_rate=terms.interest_rate_per_annum,
        late_fee_rate=terms.late_fee_flat,
        days_overdue=days_overdue,
        interest_amount=round_currency(interest),
        late_fee_amount=round_currency(late_fee),
        total_amount=total,
        status=classify_status(days_overdue, terms.grace_period_days),
        is_interest_applicable=is_applicable,
        interest_opted_in=terms.charge_interest,
    )

    logger.debug("payment_interest_calculated", extra={
        "entity_id": entity_id,
        "due_date": due_date.isoformat(),
        "actual_date": actual_date.isoformat(),
        "days_overdue": days_overdue,
        "compounding_frequency": terms.compounding_frequency.value,
        "interest_amount": str(calculation.interest_amount),
        "status": calculation.status.value,
    })
    return calculation


@traced_engine("interest", "1.0", fingerprint_fields=(
    "emd_amount", "contract_date", "emd_payment_days",
    "interest_rate_percent", "actual_payment_date",
))
def emd_interest(
    emd_amount: NumberLike,
    contract_date: DateLike,
    emd_payment_days: int,
    interest_rate_percent: NumberLike,
    actual_payment_date: DateLike | None = None,
    clock: Clock | None = None,
    entity_id: str | None = None,
) -> InterestCalculation:
    """
    Late-payment interest on a CCI earnest money deposit.

    No grace period and always simple interest; status is one of
    ``on_time``, ``overdue`` or ``severely_overdue``.
    """
    principal = to_non_negative_decimal("emd_amount", emd_amount)
    signed = coerce_date("contract_date", contract_date)
    days_allowed = to_non_negative_days("emd_payment_days", emd_payment_days)
    rate = to_non_negative_decimal("interest_rate_percent", interest_rate_percent)
    due_date = signed + timedelta(days=days_allowed)
    actual_date = resolve_as_of(actual_payment_date, clock)

    days_late = max(0, (actual_date - due_date).days)
    interest = simple_interest(principal, rate, days_late) if days_late > 0 else ZERO

    calculation = InterestCalculation(
        entity_id=entity_id,
        entity_type=EntityType.CONTRACT,
        trade_type=TradeType.CCI,
        principal_amount=principal,
        due_date=due_date,
        actual_date=actual_date,
        grace_period_days=0,
        interest_rate=rate,
        late_fee_rate=None,
        days_overdue=days_late,
        interest_amount=round_currency(interest),
        late_fee_amount=round_currency(ZERO),
        total_amount=round_currency(principal + interest),
        status=classify_status(days_late, 0),
        is_interest_applicable=days_late > 0,
        interest_opted_in=True,
    )

    logger.debug("emd_interest_calculated", extra={
        "entity_id": entity_id,
        "due_date": due_date.isoformat(),
        "days_late": days_late,
        "interest_amount": str(calculation.interest_amount),
        "status": calculation.status.value,
    })
    return calculation


def party_summary(calculations: Sequence[InterestCalculation]) -> PartySummary:
    """Order-independent totals and counts across a party's calculations."""
    total_principal = ZERO
    total_interest = ZERO
    total_late_fees = ZERO
    total_due = ZERO
    potential_interest = ZERO
    overdue = severe = charged = warned = 0

    for calc in calculations:
        total_principal += calc.principal_amount
        total_due += calc.total_amount
        if calc.interest_opted_in:
            total_interest += calc.interest_amount
            total_late_fees += calc.late_fee_amount
        if calc.is_interest_applicable:
            potential_interest += calc.interest_amount
            if calc.interest_opted_in:
                charged += 1
            else:
                warned += 1
        if calc.status is InterestStatus.OVERDUE:
            overdue += 1
        elif calc.status is InterestStatus.SEVERELY_OVERDUE:
            severe += 1

    return PartySummary(
        item_count=len(calculations),
        total_principal=total_principal,
        total_interest=total_interest,
        total_late_fees=total_late_fees,
        total_due=total_due,
        potential_interest=potential_interest,
        overdue_count=overdue,
        severely_overdue_count=severe,
        interest_charged_count=charged,
        interest_warning_count=warned,
    )


def aging_buckets(
    calculations: Sequence[InterestCalculation],
) -> dict[InterestStatus, AgingBucketTotal]:
    """Totals per status; every status is present, empty ones with zeros."""
    result: dict[InterestStatus, AgingBucketTotal] = {}
    for status in InterestStatus:
        members = [c for c in calculations if c.status is status]
        result[status] = AgingBucketTotal(
            status=status,
            count=len(members),
            principal=sum((c.principal_amount for c in members), ZERO),
            total_due=sum((c.total_amount for c in members), ZERO),
        )
    return result


@traced_engine("interest", "1.0")
def should_block_party(
    calculations: Sequence[InterestCalculation],
    rules: Sequence[BlockingRule] = DEFAULT_BLOCKING_RULES,
) -> BlockDecision:
    """Apply the blocking policy; first matching rule wins."""
    summary = party_summary(calculations)
    for rule in rules:
        if rule.applies(summary):
            decision = rule.decide(summary)
            logger.info("party_block_rule_matched", extra={
                "rule": rule.name,
                "should_block": decision.should_block,
                "severity": decision.severity.value,
                "overdue_count": summary.overdue_count,
                "severely_overdue_count": summary.severely_overdue_count,
            })
            return decision
    return _NO_BLOCK


def batch_payment_interest(
    invoices: Sequence[InvoiceInterestInput],
    clock: Clock | None = None,
) -> BatchInterestResult:
    """
    ``payment_interest`` over many invoices.

    Each calculation carries its invoice id.  An invalid invoice is
    recorded in ``failures`` and does not stop the rest of the batch.
    """
    t0 = time.monotonic()
    calculations: list[InterestCalculation] = []
    failures: list[BatchFailure] = []

    for invoice in invoices:
        with LogContext.bind(invoice_id=invoice.invoice_id):
            try:
                calculations.append(
                    payment_interest(
                        invoice.amount,
                        invoice.invoice_date,
                        invoice.payment_terms,
                        actual_payment_date=invoice.paid_date,
                        clock=clock,
                        entity_id=invoice.invoice_id,
                    )
                )
            except CommodityEngineError as e:
                logger.warning("batch_interest_item_failed", extra={
                    "error_code": e.code,
                    "error": str(e),
                })
                failures.append(BatchFailure(invoice.invoice_id, e.code, str(e)))

    logger.info("batch_interest_completed", extra={
        "invoice_count": len(invoices),
        "succeeded": len(calculations),
        "failed": len(failures),
        "duration_ms": round((time.monotonic() - t0) * 1000, 2),
    })
    return BatchInterestResult(calculations=tuple(calculations), failures=tuple(failures))
