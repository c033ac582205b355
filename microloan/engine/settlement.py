"""Projection of a payment history onto a schedule."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from datetime import date

from microloan.models.enums import InstallmentStatus
from microloan.models.loan import Installment, Payment


@dataclass(frozen=True)
class Settlement:
    """Installments with status derived from payments at a given day."""

    schedule: tuple[Installment, ...]
    total_paid: int
    unapplied_credit: int


def _paid_dates(payments: Iterable[Payment]) -> list[tuple[int, date]]:
    """Running totals of payments in date order."""
    running = 0
    totals = []
    for payment in sorted(payments, key=lambda p: p.payment_date):
        running += payment.amount
        totals.append((running, payment.payment_date))
    return totals


def settle_installments(
    schedule: Sequence[Installment],
    payments: Iterable[Payment],
    today: date,
) -> Settlement:
    """Derive installment status from the total paid.

    The paid total is consumed in installment order. An installment becomes
    PAID only when the remaining balance covers all of it; the first one that
    cannot be covered stops the walk and the leftover is reported as
    ``unapplied_credit``. Unpaid installments due before ``today`` become
    OVERDUE with their age in days.

    Stored status fields on ``schedule`` are ignored and never modified.
    """
    payments = list(payments)
    total_paid = sum(p.amount for p in payments)
    running_totals = _paid_dates(payments)

    remaining = total_paid
    covered = 0
    settling = True
    derived: list[Installment] = []

    for installment in sorted(schedule, key=lambda i: i.number):
        current = replace(
            installment,
            status=InstallmentStatus.PENDING,
            penalty_amount=0,
            days_overdue=0,
            paid_date=None,
        )
        if settling and remaining > 0 and remaining >= installment.amount:
            remaining -= installment.amount
            covered += installment.amount
            current.status = InstallmentStatus.PAID
            current.paid_date = next(day for total, day in running_totals if total >= covered)
        else:
            settling = False

        if current.status == InstallmentStatus.PENDING and current.due_date < today:
            current.status = InstallmentStatus.OVERDUE
            current.days_overdue = (today - current.due_date).days

        derived.append(current)

    return Settlement(schedule=tuple(derived), total_paid=total_paid, unapplied_credit=remaining)
