"""
Tests for trade-term configuration loading.

Covers:
- The shipped CCI term set parses and satisfies every term invariant
- Active-regime selection by date, with the COMMODITY_CONFIG_TRACE entry
- Named payment-term profiles
- Failure modes for missing fields, broken invariants and unknown dates
"""

from datetime import date
from decimal import Decimal

import pytest

from commodity_config import (
    DEFAULT_CONFIG_PATH,
    compute_checksum,
    get_active_term,
    get_payment_terms,
    load_term_set,
)
from commodity_config.loader import parse_term
from commodity_kernel.domain.terms import BuyerType, CompoundingFrequency
from commodity_kernel.exceptions import (
    InvalidTermConfigurationError,
    PaymentTermsNotFoundError,
    TermNotFoundError,
)

MINIMAL_TERM = """
terms:
  - term_id: only
    name: Only regime
    effective_from: 2024-01-01
    moisture_lower_limit: "7"
    moisture_upper_limit: "{upper}"
    carrying_charge_tier1_days: 30
    carrying_charge_tier1_percent: "1.25"
    carrying_charge_tier2_percent: "1.35"
    free_lifting_period_days: 21
    late_lifting_tier1_days: 30
    late_lifting_tier1_percent: "0.5"
    late_lifting_tier2_days: 60
    late_lifting_tier2_percent: "0.75"
    late_lifting_tier3_percent: "1.0"
    emd_payment_days: 5
    emd_interest_percent: "5"
    emd_late_interest_percent: "10"
    email_subject_template: "ignored by the engines"
"""


def _write(tmp_path, text):
    path = tmp_path / "terms.yaml"
    path.write_text(text, encoding="utf-8")
    return path


class TestShippedTermSet:

    def setup_method(self):
        self.term_set = load_term_set(DEFAULT_CONFIG_PATH)

    def test_regimes_loaded(self):
        assert {t.term_id for t in self.term_set.terms} == {"cci-2024-25", "cci-2023-24"}

    def test_values_exact_decimals(self):
        current = next(t for t in self.term_set.terms if t.term_id == "cci-2024-25")

        assert current.carrying_charge_tier2_percent == Decimal("1.35")
        assert current.emd_by_buyer_type[BuyerType.PRIVATE_MILL] == Decimal("12.5")
        assert current.effective_from == date(2024, 4, 1)

    def test_payment_profiles(self):
        assert set(self.term_set.payment_terms) == {
            "net_15_monthly", "net_30_daily", "net_30_informational",
        }

    def test_checksum_stable(self):
        again = load_term_set(DEFAULT_CONFIG_PATH)

        assert again.checksum == self.term_set.checksum
        assert len(self.term_set.checksum) == 64


class TestGetActiveTerm:

    def test_current_regime(self):
        term = get_active_term(date(2024, 6, 1))

        assert term.term_id == "cci-2024-25"
        assert term.version_label == "Standard CCI 2024-25 (v2) - Effective: 2024-04-01"

    def test_historical_regime(self):
        term = get_active_term("2024-03-31")

        assert term.term_id == "cci-2023-24"
        assert term.emd_payment_days == 3

    def test_before_any_regime(self):
        with pytest.raises(TermNotFoundError) as exc:
            get_active_term(date(2020, 1, 1))

        assert exc.value.as_of_date == "2020-01-01"
        assert exc.value.code == "TERM_NOT_FOUND"

    def test_emits_config_trace(self, captured_logs):
        get_active_term(date(2024, 6, 1))

        traces = [r for r in captured_logs() if r.get("trace_type") == "COMMODITY_CONFIG_TRACE"]
        assert len(traces) == 1
        assert traces[0]["term_id"] == "cci-2024-25"
        assert traces[0]["effective_to"] is None
        assert traces[0]["checksum"] == load_term_set(DEFAULT_CONFIG_PATH).checksum

    def test_custom_path(self, tmp_path):
        path = _write(tmp_path, MINIMAL_TERM.format(upper="9"))

        assert get_active_term(date(2024, 6, 1), config_path=path).term_id == "only"


class TestGetPaymentTerms:

    def test_daily_profile(self):
        terms = get_payment_terms("net_30_daily")

        assert terms.compounding_frequency is CompoundingFrequency.DAILY
        assert terms.late_fee_flat == Decimal("500")

    def test_informational_profile(self):
        assert get_payment_terms("net_30_informational").charge_interest is False

    def test_unknown_profile(self):
        with pytest.raises(PaymentTermsNotFoundError) as exc:
            get_payment_terms("net_90")

        assert exc.value.name == "net_90"


class TestLoaderFailures:

    def test_invariant_violation(self, tmp_path):
        path = _write(tmp_path, MINIMAL_TERM.format(upper="6"))

        with pytest.raises(InvalidTermConfigurationError):
            load_term_set(path)

    def test_missing_required_field(self):
        with pytest.raises(KeyError, match="moisture_lower_limit"):
            parse_term({"name": "broken"})

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_term_set(tmp_path / "absent.yaml")

    def test_empty_file(self, tmp_path):
        term_set = load_term_set(_write(tmp_path, ""))

        assert term_set.terms == ()
        assert dict(term_set.payment_terms) == {}


class TestComputeChecksum:

    def test_key_order_irrelevant(self):
        assert compute_checksum({"a": 1, "b": 2}) == compute_checksum({"b": 2, "a": 1})

    def test_value_change_detected(self):
        assert compute_checksum({"a": 1}) != compute_checksum({"a": 2})
