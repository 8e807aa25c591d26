"""
CCI commercial calculations driven by a trade-term regime.

Pure functions with deterministic behavior. No I/O.

Covers the per-contract figures a CCI sale needs besides moisture and
storage: EMD amount by buyer type, EMD interest (benefit for timely
payment and penalty for late payment), cash discount, LC/BG interest,
quintal-to-candy conversion, net and GST-inclusive invoice values, lock-in
charges, and the EMD due / reminder date checks.

EMD, cash discount and carrying figures are computed on amounts EXCLUDING
GST; GST is never charged on EMD.

Usage:
    from commodity_engines.cci import emd_amount, total_invoice_amount

    emd = emd_amount(term, Decimal("500000"), BuyerType.TRADER)
    gross = total_invoice_amount(term, net_invoice_amount(term, 100, 60000))
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from commodity_kernel.domain.clock import Clock, resolve_as_of
from commodity_kernel.domain.terms import BuyerType, TradeTermConfiguration
from commodity_kernel.domain.values import (
    DAYS_PER_YEAR,
    HUNDRED,
    DateLike,
    NumberLike,
    coerce_date,
    round_currency,
    to_non_negative_days,
    to_non_negative_decimal,
)
from commodity_kernel.exceptions import InvalidArgumentError
from commodity_kernel.logging_config import LogContext, get_logger
from commodity_engines.interest import InterestCalculation, emd_interest

logger = get_logger("engines.cci")


def _annual_accrual(amount: Decimal, annual_percent: Decimal, days: int) -> Decimal:
    return round_currency(amount * annual_percent / HUNDRED * days / DAYS_PER_YEAR)


# ============================================================================
# EMD
# ============================================================================


def emd_percent(term: TradeTermConfiguration, buyer_type: BuyerType | str) -> Decimal:
    """EMD percentage configured for ``buyer_type``."""
    try:
        buyer = BuyerType(buyer_type)
    except ValueError as e:
        raise InvalidArgumentError("buyer_type", buyer_type, "unknown buyer type") from e
    if buyer not in term.emd_by_buyer_type:
        raise InvalidArgumentError(
            "buyer_type", buyer.value, f"no EMD percentage configured in {term.name!r}"
        )
    return term.emd_by_buyer_type[buyer]


def emd_amount(
    term: TradeTermConfiguration,
    invoice_amount_excl_gst: NumberLike,
    buyer_type: BuyerType | str,
) -> Decimal:
    """EMD due on a pre-GST invoice amount."""
    amount = to_non_negative_decimal("invoice_amount_excl_gst", invoice_amount_excl_gst)
    return round_currency(amount * emd_percent(term, buyer_type) / HUNDRED)


def emd_interest_benefit(
    term: TradeTermConfiguration,
    emd_amount_paid: NumberLike,
    days_held: int,
) -> Decimal:
    """Interest credited on EMD held for ``days_held`` (timely payment)."""
    amount = to_non_negative_decimal("emd_amount_paid", emd_amount_paid)
    days = to_non_negative_days("days_held", days_held)
    return _annual_accrual(amount, term.emd_interest_percent, days)


def emd_late_interest(
    term: TradeTermConfiguration,
    emd_amount_due: NumberLike,
    days_late: int,
) -> Decimal:
    """Penalty interest on EMD paid ``days_late`` days after it was due."""
    amount = to_non_negative_decimal("emd_amount_due", emd_amount_due)
    days = to_non_negative_days("days_late", days_late)
    return _annual_accrual(amount, term.emd_late_interest_percent, days)


def emd_interest_for_term(
    term: TradeTermConfiguration,
    emd_amount_due: NumberLike,
    contract_date: DateLike,
    actual_payment_date: DateLike | None = None,
    clock: Clock | None = None,
    entity_id: str | None = None,
) -> InterestCalculation:
    """``interest.emd_interest`` using the regime's EMD days and late rate."""
    with LogContext.bind(contract_id=entity_id):
        return emd_interest(
            emd_amount_due,
            contract_date,
            term.emd_payment_days,
            term.emd_late_interest_percent,
            actual_payment_date=actual_payment_date,
            clock=clock,
            entity_id=entity_id,
        )


def is_emd_due(
    term: TradeTermConfiguration,
    contract_date: DateLike,
    as_of_date: DateLike | None = None,
    clock: Clock | None = None,
) -> bool:
    """True once ``emd_payment_days`` have passed since the contract date."""
    return _days_since(contract_date, as_of_date, clock) >= term.emd_payment_days


def should_send_email_reminder(
    term: TradeTermConfiguration,
    contract_date: DateLike,
    as_of_date: DateLike | None = None,
    clock: Clock | None = None,
) -> bool:
    """True once ``email_reminder_days`` have passed since the contract date."""
    return _days_since(contract_date, as_of_date, clock) >= term.email_reminder_days


def _days_since(start: DateLike, as_of_date: DateLike | None, clock: Clock | None) -> int:
    begin: date = coerce_date("contract_date", start)
    return (resolve_as_of(as_of_date, clock) - begin).days


# ============================================================================
# Discounts and interest
# ============================================================================


def cash_discount(
    term: TradeTermConfiguration,
    amount_paid_excl_gst: NumberLike,
    days: int,
) -> Decimal:
    """Annualised cash discount on an early pre-GST payment."""
    amount = to_non_negative_decimal("amount_paid_excl_gst", amount_paid_excl_gst)
    return _annual_accrual(amount, term.cash_discount_percentage, to_non_negative_days("days", days))


def lc_bg_interest(
    term: TradeTermConfiguration,
    amount: NumberLike,
    days: int,
    penal: bool = False,
) -> Decimal:
    """Interest on a letter of credit / bank guarantee, at the penal rate if asked."""
    principal = to_non_negative_decimal("amount", amount)
    rate = term.penal_interest_lc_bg_percent if penal else term.interest_lc_bg_percent
    return _annual_accrual(principal, rate, to_non_negative_days("days", days))


# ============================================================================
# Invoice composition
# ============================================================================


def quintals_to_candy(term: TradeTermConfiguration, quintals: NumberLike) -> Decimal:
    """Weight in candy for ``quintals`` (unrounded)."""
    return to_non_negative_decimal("quintals", quintals) * term.candy_factor


def net_invoice_amount(
    term: TradeTermConfiguration,
    weight_quintals: NumberLike,
    rate_per_candy: NumberLike,
) -> Decimal:
    """Pre-GST invoice value from weight in quintals and a per-candy rate."""
    rate = to_non_negative_decimal("rate_per_candy", rate_per_candy)
    return round_currency(quintals_to_candy(term, weight_quintals) * rate)


def gst_amount(term: TradeTermConfiguration, net_invoice: NumberLike) -> Decimal:
    amount = to_non_negative_decimal("net_invoice", net_invoice)
    return round_currency(amount * term.gst_rate / HUNDRED)


def total_invoice_amount(term: TradeTermConfiguration, net_invoice: NumberLike) -> Decimal:
    """Net invoice plus GST."""
    amount = to_non_negative_decimal("net_invoice", net_invoice)
    return round_currency(amount + amount * term.gst_rate / HUNDRED)


def lockin_charge(
    term: TradeTermConfiguration,
    number_of_bales: int,
    use_max_charge: bool = False,
) -> Decimal:
    """Per-bale lock-in period charge, at the minimum rate unless asked."""
    bales = to_non_negative_days("number_of_bales", number_of_bales)
    per_bale = term.lockin_charge_max if use_max_charge else term.lockin_charge_min
    charge = round_currency(per_bale * bales)
    logger.debug("lockin_charge_calculated", extra={
        "bales": bales,
        "per_bale": str(per_bale),
        "charge": str(charge),
    })
    return charge
