"""Validation of payments captured by collectors.

Payment data is typed by people in the field, so nothing here raises for bad
input. Every check returns a ``ValidationResult``: errors block the payment,
warnings are shown to the collector and never block it.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any

from microloan.config import DEFAULT_PAYMENT_LIMITS, PaymentLimitsConfig
from microloan.engine.amounts import parse_amount
from microloan.models.enums import LoanStatus, PaymentMethod
from microloan.models.payment import PaymentRequest, ValidationResult
from microloan.models.snapshot import ConsolidatedSnapshot

logger = logging.getLogger(__name__)

CLOSED_STATUSES = (LoanStatus.CLOSED, LoanStatus.CANCELLED)


def validate_payment_amount(
    amount: Any,
    snapshot: ConsolidatedSnapshot | None = None,
    limits: PaymentLimitsConfig = DEFAULT_PAYMENT_LIMITS,
) -> ValidationResult:
    """Check the amount is a whole number of pesos within the allowed range."""
    try:
        value = parse_amount(amount)
    except ValueError:
        return ValidationResult(False, "Amount must be a valid number")

    if value != value.to_integral_value():
        return ValidationResult(False, "Amount must be a whole number of pesos")
    if value < limits.min_amount:
        return ValidationResult(False, f"Minimum payment is ${limits.min_amount:,}")
    if value > limits.max_amount:
        return ValidationResult(False, f"Maximum payment is ${limits.max_amount:,}")

    warnings = []
    if snapshot is not None:
        if value > snapshot.remaining_balance:
            warnings.append(
                f"Payment exceeds the remaining balance (${snapshot.remaining_balance:,}); "
                "the difference will be recorded as excess"
            )
        if snapshot.schedule:
            average = snapshot.total_due / len(snapshot.schedule)
            if value < average * limits.small_payment_ratio:
                warnings.append(f"Payment is very small compared to the average installment (${average:,.0f})")

    return ValidationResult(True, "Valid amount", warnings=warnings)


def validate_payment_date(
    payment_date: date | datetime | str | None,
    today: date,
    limits: PaymentLimitsConfig = DEFAULT_PAYMENT_LIMITS,
) -> ValidationResult:
    """Reject future dates and dates older than the allowed window.

    A missing date means the payment is recorded today.
    """
    if payment_date is None:
        day = today
    elif isinstance(payment_date, datetime):
        day = payment_date.date()
    elif isinstance(payment_date, date):
        day = payment_date
    else:
        try:
            day = date.fromisoformat(str(payment_date).strip()[:10])
        except ValueError:
            return ValidationResult(False, "Invalid payment date")

    offset = (day - today).days
    if offset > limits.max_days_future:
        return ValidationResult(False, "Payments cannot be dated in the future")
    if offset < -limits.max_days_past:
        return ValidationResult(False, f"Payments older than {limits.max_days_past} days are not allowed")

    warnings = []
    if offset < -limits.old_payment_warning_days:
        warnings.append(f"Payment is dated {abs(offset)} days ago")
    return ValidationResult(True, "Valid date", warnings=warnings)


def validate_payment_method(method: str | PaymentMethod | None) -> ValidationResult:
    if not method:
        return ValidationResult(False, "A payment method is required")
    try:
        PaymentMethod(method)
    except ValueError:
        valid = ", ".join(m.value for m in PaymentMethod)
        return ValidationResult(False, f"Invalid payment method. Valid methods: {valid}")
    return ValidationResult(True, "Valid payment method")


def validate_payment_notes(
    notes: str | None,
    limits: PaymentLimitsConfig = DEFAULT_PAYMENT_LIMITS,
) -> ValidationResult:
    if not notes:
        return ValidationResult(True, "Valid notes")
    if len(notes) > limits.max_notes_length:
        return ValidationResult(False, f"Notes cannot exceed {limits.max_notes_length} characters")
    warnings = []
    if len(notes) > limits.max_notes_length * limits.notes_warning_ratio:
        warnings.append("Notes are close to the character limit")
    return ValidationResult(True, "Valid notes", warnings=warnings)


def validate_loan_status(
    loan_status: LoanStatus | None,
    snapshot: ConsolidatedSnapshot | None,
) -> ValidationResult:
    """Check the loan can still receive payments."""
    if snapshot is None:
        return ValidationResult(False, "Loan information is not available")

    if loan_status in CLOSED_STATUSES:
        return ValidationResult(False, f"Cannot record payments on a loan with status {loan_status.value}")
    if snapshot.remaining_balance <= 0:
        return ValidationResult(False, "Loan is already paid off")

    warnings = []
    if loan_status == LoanStatus.DEFAULTED:
        warnings.append("Loan is in default; penalties apply")
    if snapshot.days_in_arrears > 0:
        warnings.append(f"Loan is {snapshot.days_in_arrears} days in arrears")
    if snapshot.total_penalties > 0:
        warnings.append(f"Accrued penalties: ${snapshot.total_penalties:,}")
    return ValidationResult(True, "Loan can receive payments", warnings=warnings)


def validate_collector_permissions(
    collector_id: str | None,
    debtor_id: str | None,
    assigned_collector_id: str | None = None,
) -> ValidationResult:
    """Check the collector is allowed to record payments for the debtor.

    ``assigned_collector_id`` is the collector the debtor belongs to, when
    known.
    """
    if not collector_id:
        return ValidationResult(False, "Invalid collector id")
    if not debtor_id:
        return ValidationResult(False, "Invalid debtor id")
    if assigned_collector_id is not None and assigned_collector_id != collector_id:
        return ValidationResult(False, "Collector is not allowed to record payments for this debtor")
    return ValidationResult(True, "Valid permissions")


def validate_payment(
    request: PaymentRequest,
    snapshot: ConsolidatedSnapshot | None,
    today: date,
    loan_status: LoanStatus | None = None,
    assigned_collector_id: str | None = None,
    limits: PaymentLimitsConfig = DEFAULT_PAYMENT_LIMITS,
) -> ValidationResult:
    """Run every payment check and merge the results.

    Parameters
    ----------
    request : PaymentRequest
        Raw payment data.
    snapshot : ConsolidatedSnapshot | None
        Current state of the loan being paid.
    today : date
        Collector's local date.
    loan_status : LoanStatus | None
        Stored lifecycle status; defaults to the derived snapshot status.
    assigned_collector_id : str | None
        Collector the debtor is assigned to, when known.
    limits : PaymentLimitsConfig
        Amount, date and notes limits.

    Returns
    -------
    ValidationResult
        ``is_valid`` is False when any check produced an error.
    """
    if loan_status is None and snapshot is not None:
        loan_status = snapshot.status

    checks = [
        validate_payment_amount(request.amount, snapshot, limits),
        validate_payment_date(request.payment_date, today, limits),
        validate_payment_method(request.payment_method),
        validate_payment_notes(request.notes, limits),
        validate_loan_status(loan_status, snapshot),
        validate_collector_permissions(request.collector_id, request.debtor_id, assigned_collector_id),
    ]

    result = ValidationResult(True, "Valid payment")
    for check in checks:
        if check.is_valid:
            result.warnings.extend(check.warnings)
        else:
            result.is_valid = False
            result.errors.append(check.message)

    if not result.is_valid:
        result.message = "Payment has errors that must be corrected"
        logger.info("Rejected payment for loan %s: %s", request.loan_id, "; ".join(result.errors))
    elif result.warnings:
        result.message = "Valid payment with warnings"
    return result
