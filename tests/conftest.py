"""
Pytest fixtures for the commodity engine test suite.

Provides:
- Trade-term regimes mirroring the shipped CCI 2024-25 and 2023-24 sets
- Standard payment terms
- Deterministic clocks
- In-memory structured log capture
"""

import json
import logging
from datetime import date
from decimal import Decimal
from io import StringIO

import pytest

from commodity_kernel.domain.clock import DeterministicClock
from commodity_kernel.domain.terms import (
    BuyerType,
    CompoundingFrequency,
    PaymentTerms,
    TradeTermConfiguration,
)
from commodity_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)


def make_term(**overrides) -> TradeTermConfiguration:
    """CCI 2024-25 regime with optional field overrides."""
    values = dict(
        term_id="cci-2024-25",
        name="Standard CCI 2024-25",
        version=2,
        effective_from=date(2024, 4, 1),
        moisture_lower_limit=Decimal("7"),
        moisture_upper_limit=Decimal("9"),
        carrying_charge_tier1_days=30,
        carrying_charge_tier1_percent=Decimal("1.25"),
        carrying_charge_tier2_days=60,
        carrying_charge_tier2_percent=Decimal("1.35"),
        free_lifting_period_days=21,
        late_lifting_tier1_days=30,
        late_lifting_tier1_percent=Decimal("0.5"),
        late_lifting_tier2_days=60,
        late_lifting_tier2_percent=Decimal("0.75"),
        late_lifting_tier3_percent=Decimal("1.0"),
        emd_payment_days=5,
        emd_interest_percent=Decimal("5"),
        emd_late_interest_percent=Decimal("10"),
        emd_by_buyer_type={
            BuyerType.KVIC: Decimal("10"),
            BuyerType.PRIVATE_MILL: Decimal("12.5"),
            BuyerType.TRADER: Decimal("17.5"),
        },
        candy_factor=Decimal("0.2812"),
        gst_rate=Decimal("5"),
        cash_discount_percentage=Decimal("5"),
        interest_lc_bg_percent=Decimal("10"),
        penal_interest_lc_bg_percent=Decimal("11"),
        lockin_charge_min=Decimal("350"),
        lockin_charge_max=Decimal("700"),
        moisture_sample_count=10,
        email_reminder_days=5,
    )
    values.update(overrides)
    return TradeTermConfiguration(**values)


@pytest.fixture
def standard_term() -> TradeTermConfiguration:
    return make_term()


@pytest.fixture
def historical_term() -> TradeTermConfiguration:
    return make_term(
        term_id="cci-2023-24",
        name="Standard CCI 2023-24 (Historical)",
        version=1,
        effective_from=date(2023, 4, 1),
        effective_to=date(2024, 3, 31),
        emd_payment_days=3,
        carrying_charge_tier2_percent=Decimal("1.5"),
        late_lifting_tier1_days=15,
        late_lifting_tier2_days=30,
    )


@pytest.fixture
def monthly_terms() -> PaymentTerms:
    """Net 15, 5 grace days, 18% p.a. simple interest."""
    return PaymentTerms(
        payment_days=15,
        grace_period_days=5,
        interest_rate_per_annum=Decimal("18"),
        compounding_frequency=CompoundingFrequency.MONTHLY,
    )


@pytest.fixture
def deterministic_clock() -> DeterministicClock:
    return DeterministicClock.on(date(2024, 6, 1))


@pytest.fixture
def captured_logs():
    """Configure structured logging into a buffer; yields a parser."""
    reset_logging()
    LogContext.clear()
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    configure_logging(level=logging.DEBUG, handler=handler)

    def records() -> list[dict]:
        return [json.loads(line) for line in stream.getvalue().splitlines() if line]

    yield records
    LogContext.clear()
    reset_logging()


@pytest.fixture
def term_factory():
    """Build a regime from the 2024-25 baseline with overrides."""
    return make_term
