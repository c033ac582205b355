"""Payment application: how an incoming amount is absorbed by a loan.

Funds go to accrued penalties first, then to unpaid installments, overdue
ones before pending ones and earlier due dates first. Nothing here records
anything; the same functions serve to preview a payment before it is
committed.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from microloan.config import DEFAULT_PAYMENT_LIMITS, PaymentLimitsConfig
from microloan.engine.amounts import round_half_up
from microloan.models.enums import AllocationKind, InstallmentStatus, PaymentType
from microloan.models.loan import Installment
from microloan.models.payment import (
    Allocation,
    NextPayment,
    PaymentApplication,
    PaymentSimulation,
    PaymentSuggestion,
    PaymentSuggestions,
)
from microloan.models.snapshot import ConsolidatedSnapshot

logger = logging.getLogger(__name__)


def _previously_paid(snapshot: ConsolidatedSnapshot, installment: Installment) -> int:
    """Part of ``installment`` already covered by leftover credit.

    Credit left over after settlement only ever sits on the first unpaid
    installment in schedule order.
    """
    unpaid = snapshot.unpaid_installments
    if not unpaid or unpaid[0].number != installment.number:
        return 0
    return min(snapshot.unapplied_credit, installment.amount)


def _credit_due_now(snapshot: ConsolidatedSnapshot) -> int:
    """Credit sitting on an installment that ``amount_due_now`` counts in full."""
    unpaid = snapshot.unpaid_installments
    if not unpaid:
        return 0
    first = unpaid[0]
    due_today = (
        first.due_date == snapshot.reference_time.date() and snapshot.cutoff.due_today_collectible
    )
    if first.status != InstallmentStatus.OVERDUE and not due_today:
        return 0
    return _previously_paid(snapshot, first)


def next_payment(snapshot: ConsolidatedSnapshot) -> NextPayment | None:
    """Next installment to collect, or ``None`` once everything is paid."""
    unpaid = snapshot.unpaid_installments
    if not unpaid:
        return None
    installment = unpaid[0]
    pending = installment.amount - _previously_paid(snapshot, installment)
    return NextPayment(
        installment_number=installment.number,
        due_date=installment.due_date,
        installment_amount=installment.amount,
        installment_penalty=installment.penalty_amount,
        is_overdue=installment.status == InstallmentStatus.OVERDUE,
        recommended_amount=(snapshot.amount_due_now - _credit_due_now(snapshot)) or pending,
        total_penalties=snapshot.total_penalties,
        days_in_arrears=snapshot.days_in_arrears,
    )


def _classify(amount: int, remainder: int, upcoming: NextPayment | None) -> PaymentType:
    if remainder > 0:
        return PaymentType.EXCESS
    if upcoming is not None and amount < upcoming.recommended_amount:
        return PaymentType.PARTIAL
    return PaymentType.COMPLETE


def apply_payment(snapshot: ConsolidatedSnapshot, amount: int) -> PaymentApplication:
    """Distribute ``amount`` over the loan's outstanding obligations.

    Parameters
    ----------
    snapshot : ConsolidatedSnapshot
        Current state of the loan.
    amount : int
        Incoming payment in whole pesos.

    Returns
    -------
    PaymentApplication
        Allocations in the order they were filled, the amount applied, the
        leftover and the payment type: ``exceso`` when money is left after
        every obligation, ``parcial`` when below the recommended payment,
        ``completo`` otherwise.

    Raises
    ------
    ValueError
        If ``amount`` is negative.
    """
    if amount < 0:
        raise ValueError(f"Payment amount cannot be negative: {amount}")

    remaining = amount
    allocations: list[Allocation] = []

    if snapshot.total_penalties > 0 and remaining > 0:
        applied = min(remaining, snapshot.total_penalties)
        allocations.append(
            Allocation(
                kind=AllocationKind.PENALTY,
                applied_amount=applied,
                pending_amount=snapshot.total_penalties,
                description="Accrued penalties",
            )
        )
        remaining -= applied

    ordered = sorted(
        snapshot.unpaid_installments,
        key=lambda i: (i.status != InstallmentStatus.OVERDUE, i.due_date, i.number),
    )
    for installment in ordered:
        if remaining <= 0:
            break
        previously_paid = _previously_paid(snapshot, installment)
        pending = installment.amount - previously_paid
        applied = min(remaining, pending)
        if applied <= 0:
            continue
        allocations.append(
            Allocation(
                kind=AllocationKind.INSTALLMENT,
                applied_amount=applied,
                pending_amount=pending,
                description=f"Installment {installment.number}",
                installment_number=installment.number,
                due_date=installment.due_date,
                installment_amount=installment.amount,
                previously_paid=previously_paid,
            )
        )
        remaining -= applied

    payment_type = _classify(amount, remaining, next_payment(snapshot))
    if payment_type == PaymentType.EXCESS:
        logger.info("Payment of %d on loan %s leaves %d unapplied", amount, snapshot.loan_id, remaining)

    return PaymentApplication(
        amount=amount,
        allocations=tuple(allocations),
        total_applied=amount - remaining,
        remainder=remaining,
        payment_type=payment_type,
    )


def determine_payment_type(snapshot: ConsolidatedSnapshot, amount: int) -> PaymentType:
    """Classify ``amount`` against the loan without keeping the allocations."""
    return apply_payment(snapshot, amount).payment_type


def payment_suggestions(
    snapshot: ConsolidatedSnapshot,
    limits: PaymentLimitsConfig = DEFAULT_PAYMENT_LIMITS,
) -> PaymentSuggestions:
    """Amounts a collector can offer the debtor."""
    upcoming = next_payment(snapshot)
    if upcoming is None or not upcoming.recommended_amount:
        return PaymentSuggestions()

    recommended = upcoming.recommended_amount
    alternatives = []
    if snapshot.days_in_arrears > 0:
        alternatives.append(
            PaymentSuggestion(
                amount=snapshot.overdue_amount + snapshot.total_penalties - _credit_due_now(snapshot),
                description="Catch up on overdue installments",
                payment_type=PaymentType.COMPLETE,
            )
        )

    return PaymentSuggestions(
        recommended=PaymentSuggestion(
            amount=recommended,
            description="Recommended payment (installments due plus penalties)",
            payment_type=PaymentType.COMPLETE,
        ),
        minimum=PaymentSuggestion(
            amount=max(
                snapshot.total_penalties,
                round_half_up(recommended * Decimal(str(limits.minimum_payment_ratio))),
            ),
            description="Minimum acceptable payment",
            payment_type=PaymentType.PARTIAL,
        ),
        payoff=PaymentSuggestion(
            amount=snapshot.total_outstanding,
            description="Pay off the loan",
            payment_type=PaymentType.COMPLETE,
        ),
        alternatives=tuple(alternatives),
    )


def simulate_payment(
    snapshot: ConsolidatedSnapshot,
    amount: int,
    limits: PaymentLimitsConfig = DEFAULT_PAYMENT_LIMITS,
) -> PaymentSimulation:
    """Preview ``amount`` without recording it."""
    application = apply_payment(snapshot, amount)
    to_installments = sum(
        a.applied_amount for a in application.allocations if a.kind == AllocationKind.INSTALLMENT
    )
    return PaymentSimulation(
        amount=amount,
        payment_type=application.payment_type,
        application=application,
        new_balance=max(snapshot.remaining_balance - to_installments, 0),
        suggestions=payment_suggestions(snapshot, limits),
    )
