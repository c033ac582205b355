"""Loan state consolidation.

The payment history is the only source of truth for what a debtor has paid.
``consolidate`` re-derives everything else (installment status, arrears,
penalties, amounts due) from it on every read, so the same loan, payments
and reference instant always yield the same snapshot.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import replace
from datetime import date, datetime, time, timedelta

from microloan.config import DEFAULT_TERMS, LoanTermsConfig
from microloan.engine.amounts import round_half_up
from microloan.engine.penalties import calculate_penalties
from microloan.engine.settlement import settle_installments
from microloan.exceptions import InvalidEntityStateError
from microloan.models.enums import InstallmentStatus, LoanStatus
from microloan.models.loan import Loan, Payment
from microloan.models.snapshot import ConsolidatedSnapshot, DailyCutoff

logger = logging.getLogger(__name__)


def _as_datetime(now: datetime | date) -> datetime:
    if isinstance(now, datetime):
        return now
    return datetime.combine(now, time.min)


def daily_cutoff(now: datetime | date, terms: LoanTermsConfig = DEFAULT_TERMS) -> DailyCutoff:
    """Collection window for the day of ``now``.

    Collections close at 23:59:59 and the amounts falling due on a day are
    not collectible until 00:01. The physical cash hand-over the next morning
    is reported for reference only.
    """
    now = _as_datetime(now)
    day = now.date()
    next_day = day + timedelta(days=1)
    closes_at = datetime.combine(day, terms.collections_close_at, tzinfo=now.tzinfo)
    return DailyCutoff(
        closes_at=closes_at,
        calculations_available_at=datetime.combine(
            next_day, terms.calculations_available_at, tzinfo=now.tzinfo
        ),
        physical_delivery_at=datetime.combine(next_day, terms.physical_delivery_at, tzinfo=now.tzinfo),
        closed=now >= closes_at,
        due_today_collectible=now.time() >= terms.calculations_available_at,
        seconds_until_close=max(0.0, (closes_at - now).total_seconds()),
    )


def consolidate(
    loan: Loan,
    payments: Iterable[Payment] | None,
    now: datetime | date,
    terms: LoanTermsConfig = DEFAULT_TERMS,
) -> ConsolidatedSnapshot:
    """Derive the current state of ``loan`` from ``payments`` at ``now``.

    Parameters
    ----------
    loan : Loan
        Loan with its schedule. Never modified.
    payments : Iterable[Payment] | None
        Payment history; ``None`` uses ``loan.payments``.
    now : datetime | date
        Reference instant in the collector's local time. A bare date is
        read as midnight, before the 00:01 cutoff.
    terms : LoanTermsConfig
        Penalty unit and cutoff times.

    Returns
    -------
    ConsolidatedSnapshot
        Snapshot carrying copies of the installments with derived status.
    """
    now = _as_datetime(now)
    today = now.date()
    payments = list(loan.payments if payments is None else payments)

    settlement = settle_installments(loan.schedule, payments, today)
    assessment = calculate_penalties(loan, now, schedule=settlement.schedule, terms=terms)
    schedule = tuple(
        replace(i, penalty_amount=assessment.per_installment.get(i.number, 0))
        for i in settlement.schedule
    )

    overdue = [i for i in schedule if i.status == InstallmentStatus.OVERDUE]
    pending = [i for i in schedule if i.status == InstallmentStatus.PENDING]
    paid = [i for i in schedule if i.status == InstallmentStatus.PAID]

    overdue_amount = sum(i.amount for i in overdue)
    due_today_amount = sum(i.amount for i in pending if i.due_date == today)
    days_in_arrears = max((i.days_overdue for i in overdue), default=0)

    cutoff = daily_cutoff(now, terms)
    amount_due_now = overdue_amount + assessment.total
    if cutoff.due_today_collectible:
        amount_due_now += due_today_amount

    total_paid = settlement.total_paid
    if total_paid >= loan.total_due:
        status = LoanStatus.PAID
    elif overdue:
        status = LoanStatus.IN_ARREARS
    else:
        status = LoanStatus.ACTIVE

    percent_complete = round_half_up(total_paid * 100, loan.total_due) if loan.total_due > 0 else 0

    snapshot = ConsolidatedSnapshot(
        loan_id=loan.loan_id,
        reference_time=now,
        status=status,
        schedule=schedule,
        total_due=loan.total_due,
        total_paid=total_paid,
        remaining_balance=max(loan.total_due - total_paid, 0),
        unapplied_credit=settlement.unapplied_credit,
        overdue_amount=overdue_amount,
        due_today_amount=due_today_amount,
        amount_due_now=amount_due_now,
        days_in_arrears=days_in_arrears,
        overdue_count=len(overdue),
        pending_count=len(pending),
        paid_count=len(paid),
        percent_complete=percent_complete,
        total_penalties=assessment.total,
        cutoff=cutoff,
        penalties=assessment.records,
        incidents_this_month=assessment.incidents_this_month,
    )
    logger.debug(
        "Consolidated loan %s: status=%s paid=%d/%d overdue=%d due_now=%d",
        loan.loan_id,
        status.value,
        total_paid,
        loan.total_due,
        len(overdue),
        amount_due_now,
        extra={"extra": {"loan_id": loan.loan_id, "status": status.value}},
    )
    return snapshot


def record_payment(
    loan: Loan,
    payment: Payment,
    now: datetime | date,
    terms: LoanTermsConfig = DEFAULT_TERMS,
) -> tuple[Loan, ConsolidatedSnapshot]:
    """Append ``payment`` to a copy of ``loan`` and consolidate the result.

    The original loan is left untouched; persisting the returned copy is the
    caller's job.

    Raises
    ------
    InvalidEntityStateError
        If the payment belongs to another loan.
    """
    if payment.loan_id != loan.loan_id:
        raise InvalidEntityStateError(
            f"Payment for loan {payment.loan_id} cannot be recorded on loan {loan.loan_id}"
        )
    updated = replace(
        loan,
        schedule=list(loan.schedule),
        payments=[*loan.payments, payment],
        version=loan.version + 1,
    )
    snapshot = consolidate(updated, updated.payments, now, terms=terms)
    updated.status = lifecycle_status(snapshot, terms)
    return updated, snapshot


def lifecycle_status(
    snapshot: ConsolidatedSnapshot, terms: LoanTermsConfig = DEFAULT_TERMS
) -> LoanStatus:
    """Status to store for a loan after consolidation."""
    if snapshot.remaining_balance <= 0:
        return LoanStatus.CLOSED
    if snapshot.days_in_arrears > terms.default_after_days:
        return LoanStatus.DEFAULTED
    if snapshot.days_in_arrears > 0:
        return LoanStatus.IN_ARREARS
    return LoanStatus.ACTIVE
