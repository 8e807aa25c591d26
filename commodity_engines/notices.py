"""
Overdue-interest reminders and debit notes.

Pure functions with deterministic behavior. No I/O.

A reminder is produced for any calculation where interest applies.  When
the party opted in to interest the reminder is an overdue notice with the
charges; otherwise it is an informational delay reminder showing what the
interest would have been.  A debit note is issued only when interest
applies AND the party opted in.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from commodity_kernel.domain.clock import Clock, SystemClock
from commodity_kernel.domain.values import round_currency
from commodity_engines.interest import InterestCalculation, format_rupees


@dataclass(frozen=True)
class InterestDebitNote:
    note_number: str
    date: date
    amount: Decimal
    description: str


def interest_reminder(calculation: InterestCalculation) -> str:
    """Reminder text for an overdue calculation; empty if no interest applies."""
    if not calculation.is_interest_applicable:
        return ""

    ref = calculation.entity_id or "(unnumbered)"
    header = f"Invoice {ref} is {calculation.days_overdue} days overdue.\n\n"

    if calculation.interest_opted_in:
        return (
            "PAYMENT OVERDUE NOTICE\n\n"
            + header
            + f"Principal Amount: {format_rupees(calculation.principal_amount)}\n"
            f"Interest ({calculation.interest_rate}% p.a.): {format_rupees(calculation.interest_amount)}\n"
            f"Late Fee: {format_rupees(calculation.late_fee_amount)}\n"
            f"Total Due: {format_rupees(calculation.total_amount)}\n\n"
            "Interest charges will be applied. Please make payment immediately."
        )

    return (
        "PAYMENT DELAY REMINDER\n\n"
        + header
        + f"Amount Due: {format_rupees(calculation.principal_amount)}\n"
        f"Days Overdue: {calculation.days_overdue} days\n\n"
        "Informational Interest Calculation:\n"
        f"If interest were charged at {calculation.interest_rate}% p.a., "
        f"it would be: {format_rupees(calculation.interest_amount)}\n\n"
        "Please make payment soon to maintain good standing."
    )


def interest_debit_note(
    calculation: InterestCalculation,
    clock: Clock | None = None,
) -> InterestDebitNote | None:
    """
    Debit note for charged interest and late fee.

    The note number and date come from ``clock`` (default ``SystemClock``).
    Returns None when interest does not apply or was not opted in.
    """
    if not (calculation.interest_opted_in and calculation.is_interest_applicable):
        return None

    now = (clock or SystemClock()).now()
    epoch_ms = int(now.timestamp() * 1000)
    return InterestDebitNote(
        note_number=f"DN-INT-{epoch_ms}",
        date=now.date(),
        amount=round_currency(calculation.interest_amount + calculation.late_fee_amount),
        description=(
            f"Interest charges for {calculation.days_overdue} days overdue on "
            f"{calculation.entity_type.value} {calculation.entity_id or '(unnumbered)'}. "
            f"Principal: {format_rupees(calculation.principal_amount)}, "
            f"Interest Rate: {calculation.interest_rate}% p.a., "
            f"Interest: {format_rupees(calculation.interest_amount)}, "
            f"Late Fee: {format_rupees(calculation.late_fee_amount)}"
        ),
    )
