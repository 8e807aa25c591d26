"""
Tests for late-payment interest, aging and party blocking.

Covers:
- Status thresholds on total days overdue (grace boundary, 30-day boundary)
- Simple interest for monthly/annually, compounding only for daily
- Late fees and the charge_interest opt-in
- EMD interest with no grace period
- Party summaries, aging buckets and the ordered blocking policy
- Batch computation with per-invoice failures
"""

from datetime import date
from decimal import Decimal

import pytest

from commodity_engines.interest import (
    DEFAULT_BLOCKING_RULES,
    BlockSeverity,
    EntityType,
    InterestStatus,
    InvoiceInterestInput,
    TradeType,
    aging_buckets,
    batch_payment_interest,
    classify_status,
    daily_compound_interest,
    emd_interest,
    party_summary,
    payment_interest,
    should_block_party,
    simple_interest,
)
from commodity_kernel.domain.clock import DeterministicClock
from commodity_kernel.domain.terms import CompoundingFrequency, PaymentTerms
from commodity_kernel.domain.values import round_currency
from commodity_kernel.exceptions import InvalidArgumentError

PRINCIPAL = Decimal("100000")
INVOICED = date(2024, 1, 1)  # net 15 -> due 2024-01-16


def _paid(terms, paid_on, amount=PRINCIPAL, **kwargs):
    return payment_interest(amount, INVOICED, terms, actual_payment_date=paid_on, **kwargs)


class TestClassifyStatus:

    @pytest.mark.parametrize("days,expected", [
        (0, InterestStatus.ON_TIME),
        (1, InterestStatus.WITHIN_GRACE),
        (5, InterestStatus.WITHIN_GRACE),
        (6, InterestStatus.OVERDUE),
        (30, InterestStatus.OVERDUE),
        (31, InterestStatus.SEVERELY_OVERDUE),
    ])
    def test_thresholds(self, days, expected):
        assert classify_status(days, 5) is expected

    def test_zero_grace_skips_within_grace(self):
        assert classify_status(1, 0) is InterestStatus.OVERDUE

    def test_grace_longer_than_thirty_days(self):
        assert classify_status(35, 40) is InterestStatus.WITHIN_GRACE


class TestPaymentInterest:

    def test_overdue_simple_interest(self, monthly_terms):
        calc = _paid(monthly_terms, date(2024, 2, 10), entity_id="INV-1")

        assert calc.due_date == date(2024, 1, 16)
        assert calc.days_overdue == 25
        assert calc.status is InterestStatus.OVERDUE
        assert calc.interest_amount == Decimal("986.30")
        assert calc.total_amount == Decimal("100986.30")
        assert calc.is_interest_applicable
        assert calc.is_overdue
        assert calc.entity_id == "INV-1"
        assert calc.entity_type is EntityType.INVOICE
        assert calc.trade_type is TradeType.NORMAL

    def test_paid_before_due(self, monthly_terms):
        calc = _paid(monthly_terms, date(2024, 1, 10))

        assert calc.days_overdue == 0
        assert calc.status is InterestStatus.ON_TIME
        assert calc.interest_amount == Decimal("0.00")
        assert calc.total_amount == PRINCIPAL

    def test_last_grace_day_no_interest(self, monthly_terms):
        calc = _paid(monthly_terms, date(2024, 1, 21))

        assert calc.days_overdue == 5
        assert calc.status is InterestStatus.WITHIN_GRACE
        assert not calc.is_interest_applicable
        assert calc.interest_amount == Decimal("0.00")

    def test_first_day_after_grace(self, monthly_terms):
        calc = _paid(monthly_terms, date(2024, 1, 22))

        assert calc.status is InterestStatus.OVERDUE
        assert calc.interest_amount == Decimal("49.32")

    def test_severely_overdue(self, monthly_terms):
        calc = _paid(monthly_terms, date(2024, 2, 16))

        assert calc.days_overdue == 31
        assert calc.status is InterestStatus.SEVERELY_OVERDUE
        assert calc.interest_amount == Decimal("1282.19")

    def test_annually_is_simple_too(self, monthly_terms):
        annual = PaymentTerms(15, 5, Decimal("18"), compounding_frequency="annually")

        assert _paid(annual, date(2024, 2, 10)).interest_amount == _paid(
            monthly_terms, date(2024, 2, 10)
        ).interest_amount

    def test_daily_compounds(self):
        daily = PaymentTerms(30, 7, Decimal("12"), compounding_frequency=CompoundingFrequency.DAILY)
        calc = payment_interest(PRINCIPAL, INVOICED, daily, actual_payment_date=date(2024, 3, 1))

        assert calc.days_overdue == 30
        expected = round_currency(daily_compound_interest(PRINCIPAL, Decimal("12"), 23))
        assert calc.interest_amount == expected
        assert calc.interest_amount > round_currency(simple_interest(PRINCIPAL, Decimal("12"), 23))

    def test_late_fee_added_once_interest_applies(self):
        terms = PaymentTerms(15, 5, Decimal("18"), late_fee_flat=Decimal("500"))

        calc = _paid(terms, date(2024, 2, 10))

        assert calc.late_fee_amount == Decimal("500.00")
        assert calc.total_amount == Decimal("101486.30")

    def test_no_late_fee_within_grace(self):
        terms = PaymentTerms(15, 5, Decimal("18"), late_fee_flat=Decimal("500"))

        assert _paid(terms, date(2024, 1, 20)).late_fee_amount == Decimal("0.00")

    def test_not_opted_in_keeps_principal_total(self):
        terms = PaymentTerms(15, 5, Decimal("18"), charge_interest=False)

        calc = _paid(terms, date(2024, 2, 10))

        assert calc.interest_amount == Decimal("986.30")
        assert calc.total_amount == PRINCIPAL
        assert not calc.interest_opted_in

    def test_not_opted_in_total_still_rounded(self):
        terms = PaymentTerms(15, 5, Decimal("18"), charge_interest=False)

        calc = _paid(terms, date(2024, 2, 10), amount=Decimal("100.005"))

        assert calc.total_amount == Decimal("100.01")
        assert str(calc.total_amount) == "100.01"

    @pytest.mark.parametrize("bad_terms", [None, {"payment_days": 15, "grace_period_days": 5}])
    def test_terms_must_be_payment_terms(self, bad_terms):
        with pytest.raises(InvalidArgumentError) as exc:
            _paid(bad_terms, date(2024, 2, 10))

        assert exc.value.argument == "terms"

    def test_uses_clock_when_unpaid(self, monthly_terms):
        clock = DeterministicClock.on(date(2024, 2, 10))

        assert _paid(monthly_terms, None, clock=clock).days_overdue == 25

    def test_negative_amount(self, monthly_terms):
        with pytest.raises(InvalidArgumentError) as exc:
            _paid(monthly_terms, date(2024, 2, 10), amount=Decimal("-1"))

        assert exc.value.code == "INVALID_ARGUMENT"


class TestEmdInterest:

    def test_late_emd(self):
        calc = emd_interest(
            PRINCIPAL, date(2024, 1, 1), 5, Decimal("10"),
            actual_payment_date=date(2024, 1, 16), entity_id="C-7",
        )

        assert calc.due_date == date(2024, 1, 6)
        assert calc.days_overdue == 10
        assert calc.interest_amount == Decimal("273.97")
        assert calc.total_amount == Decimal("100273.97")
        assert calc.status is InterestStatus.OVERDUE
        assert calc.entity_type is EntityType.CONTRACT
        assert calc.trade_type is TradeType.CCI
        assert calc.grace_period_days == 0

    def test_on_due_date(self):
        calc = emd_interest(PRINCIPAL, date(2024, 1, 1), 5, Decimal("10"), date(2024, 1, 6))

        assert calc.status is InterestStatus.ON_TIME
        assert calc.total_amount == Decimal("100000.00")

    def test_one_day_late_is_overdue(self):
        calc = emd_interest(PRINCIPAL, date(2024, 1, 1), 5, Decimal("10"), date(2024, 1, 7))

        assert calc.status is InterestStatus.OVERDUE
        assert calc.is_interest_applicable


def _overdue(amount=PRINCIPAL, paid_on=date(2024, 2, 10), **terms_kwargs):
    terms = PaymentTerms(15, 5, Decimal("18"), **terms_kwargs)
    return payment_interest(amount, INVOICED, terms, actual_payment_date=paid_on)


class TestPartySummary:

    def test_totals(self):
        charged = _overdue()
        warned = _overdue(charge_interest=False)
        on_time = _overdue(paid_on=date(2024, 1, 10))

        summary = party_summary([charged, warned, on_time])

        assert summary.item_count == 3
        assert summary.total_principal == Decimal("300000")
        assert summary.total_interest == Decimal("986.30")
        assert summary.potential_interest == Decimal("1972.60")
        assert summary.total_due == Decimal("300986.30")
        assert summary.overdue_count == 2
        assert summary.interest_charged_count == 1
        assert summary.interest_warning_count == 1

    def test_empty(self):
        summary = party_summary([])

        assert summary.item_count == 0
        assert summary.total_due == Decimal("0")

    def test_aging_buckets_cover_every_status(self):
        buckets = aging_buckets([_overdue(), _overdue(paid_on=date(2024, 2, 16))])

        assert set(buckets) == set(InterestStatus)
        assert buckets[InterestStatus.OVERDUE].count == 1
        assert buckets[InterestStatus.SEVERELY_OVERDUE].total_due == Decimal("101282.19")
        assert buckets[InterestStatus.ON_TIME].count == 0


class TestShouldBlockParty:

    def test_nothing_overdue(self):
        decision = should_block_party([_overdue(paid_on=date(2024, 1, 10))])

        assert not decision.should_block
        assert decision.reason == ""
        assert decision.severity is BlockSeverity.WARNING
        assert decision.rule is None

    def test_empty_party(self):
        assert not should_block_party([]).should_block

    def test_three_overdue_blocks(self):
        decision = should_block_party([_overdue(), _overdue(), _overdue()])

        assert decision.should_block
        assert decision.severity is BlockSeverity.CRITICAL
        assert decision.rule == "repeated_overdue"
        assert decision.reason == "3 payments overdue. Please clear dues before new trades."

    def test_two_overdue_do_not_block(self):
        assert not should_block_party([_overdue(), _overdue()]).should_block

    def test_severely_overdue_blocks(self):
        decision = should_block_party([_overdue(paid_on=date(2024, 2, 16))])

        assert decision.should_block
        assert decision.rule == "severely_overdue"
        assert decision.reason == (
            "1 payment(s) severely overdue (>30 days). Total outstanding: ₹101,282.19"
        )

    def test_severe_rule_takes_priority(self):
        calcs = [_overdue(), _overdue(), _overdue(), _overdue(paid_on=date(2024, 2, 16))]

        assert should_block_party(calcs).rule == "severely_overdue"

    def test_high_interest_warns_without_blocking(self):
        decision = should_block_party([_overdue(amount=Decimal("10000000"))])

        assert not decision.should_block
        assert decision.severity is BlockSeverity.WARNING
        assert decision.rule == "high_interest"
        assert decision.reason == "High interest charges (₹98,630.14). Please settle soon."

    def test_high_potential_interest_not_opted_in(self):
        decision = should_block_party([_overdue(amount=Decimal("10000000"), charge_interest=False)])

        assert decision.rule == "high_interest"
        assert decision.reason == (
            "High potential interest charges (₹98,630.14). 1 payment(s) delayed. "
            "Please settle soon to avoid future interest."
        )

    def test_overdue_beats_high_interest(self):
        big = _overdue(amount=Decimal("10000000"))

        decision = should_block_party([big, _overdue(), _overdue()])

        assert decision.should_block
        assert decision.rule == "repeated_overdue"

    def test_rule_order_is_policy(self):
        reordered = tuple(reversed(DEFAULT_BLOCKING_RULES))
        big = _overdue(amount=Decimal("10000000"))

        decision = should_block_party([big, _overdue(), _overdue()], rules=reordered)

        assert decision.rule == "high_interest"
        assert not decision.should_block


class TestBatchPaymentInterest:

    def test_failures_do_not_stop_batch(self, monthly_terms):
        invoices = [
            InvoiceInterestInput("INV-1", PRINCIPAL, INVOICED, monthly_terms, date(2024, 2, 10)),
            InvoiceInterestInput("INV-2", Decimal("-5"), INVOICED, monthly_terms, date(2024, 2, 10)),
            InvoiceInterestInput("INV-3", PRINCIPAL, "not-a-date", monthly_terms),
            InvoiceInterestInput("INV-4", PRINCIPAL, INVOICED, monthly_terms, date(2024, 1, 10)),
        ]

        result = batch_payment_interest(invoices)

        assert [c.entity_id for c in result.calculations] == ["INV-1", "INV-4"]
        assert [f.invoice_id for f in result.failures] == ["INV-2", "INV-3"]
        assert all(f.code == "INVALID_ARGUMENT" for f in result.failures)
        assert not result.all_succeeded

    def test_clock_applies_to_unpaid(self, monthly_terms):
        clock = DeterministicClock.on(date(2024, 2, 10))
        invoices = [InvoiceInterestInput("INV-1", PRINCIPAL, INVOICED, monthly_terms)]

        result = batch_payment_interest(invoices, clock=clock)

        assert result.all_succeeded
        assert result.calculations[0].interest_amount == Decimal("986.30")

    def test_malformed_terms_recorded_as_failure(self, monthly_terms):
        invoices = [
            InvoiceInterestInput("INV-1", PRINCIPAL, INVOICED, monthly_terms, date(2024, 2, 10)),
            InvoiceInterestInput("INV-2", PRINCIPAL, INVOICED, None, date(2024, 2, 10)),
            InvoiceInterestInput("INV-3", PRINCIPAL, INVOICED, monthly_terms, date(2024, 2, 10)),
        ]

        result = batch_payment_interest(invoices)

        assert [c.entity_id for c in result.calculations] == ["INV-1", "INV-3"]
        assert len(result.failures) == 1
        assert result.failures[0].invoice_id == "INV-2"
        assert result.failures[0].code == "INVALID_ARGUMENT"

    def test_failure_log_carries_invoice_context(self, captured_logs, monthly_terms):
        invoices = [
            InvoiceInterestInput("INV-9", Decimal("-1"), INVOICED, monthly_terms, date(2024, 2, 10)),
        ]

        batch_payment_interest(invoices)

        failed = [r for r in captured_logs() if r["message"] == "batch_interest_item_failed"]
        assert len(failed) == 1
        assert failed[0]["invoice_id"] == "INV-9"
        assert failed[0]["error_code"] == "INVALID_ARGUMENT"
        completed = [r for r in captured_logs() if r["message"] == "batch_interest_completed"]
        assert "invoice_id" not in completed[0]
