"""Late-payment penalties (multas por mora).

Weekly loans pay one penalty unit per installment that is at least one day
late. Daily loans are penalised per run of consecutive late calendar days:
a run of three or more days costs one unit, and three or more runs starting
in the current month cost one extra unit.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import date, datetime

from microloan.config import DEFAULT_TERMS, LoanTermsConfig
from microloan.engine.calendar import to_date
from microloan.engine.schedule import parse_frequency
from microloan.engine.settlement import settle_installments
from microloan.models.enums import Frequency, InstallmentStatus, PenaltyType
from microloan.models.loan import Installment, Loan
from microloan.models.snapshot import PenaltyAssessment, PenaltyRecord

logger = logging.getLogger(__name__)

MIN_RUN_DAYS = 3
MIN_MONTHLY_INCIDENTS = 3


def overdue_installments(schedule: Sequence[Installment], today: date) -> list[Installment]:
    """Unpaid installments due before ``today``, oldest first."""
    late = [i for i in schedule if i.status != InstallmentStatus.PAID and i.due_date < today]
    return sorted(late, key=lambda i: i.due_date)


def overdue_runs(installments: Sequence[Installment]) -> list[list[Installment]]:
    """Split date-ordered installments into runs of consecutive calendar days.

    A gap of more than one day, including a Sunday or holiday between two
    due dates, starts a new run.
    """
    runs: list[list[Installment]] = []
    for installment in installments:
        if runs and (installment.due_date - runs[-1][-1].due_date).days == 1:
            runs[-1].append(installment)
        else:
            runs.append([installment])
    return runs


def _weekly_penalties(late: list[Installment], today: date, unit: int) -> list[PenaltyRecord]:
    records = []
    for installment in late:
        days = (today - installment.due_date).days
        if days >= 1:
            records.append(
                PenaltyRecord(
                    penalty_type=PenaltyType.WEEKLY_ARREARS,
                    installments=(installment.number,),
                    amount=unit,
                    description=f"Late payment of weekly installment #{installment.number}",
                    days_overdue=days,
                    due_date=installment.due_date,
                )
            )
    return records


def _daily_penalties(
    late: list[Installment], today: date, unit: int
) -> tuple[list[PenaltyRecord], int]:
    records = []
    incidents = 0

    for index, run in enumerate(overdue_runs(late), start=1):
        first_due = run[0].due_date
        if len(run) >= MIN_RUN_DAYS:
            records.append(
                PenaltyRecord(
                    penalty_type=PenaltyType.DAILY_THREE_DAY_ARREARS,
                    installments=tuple(i.number for i in run),
                    amount=unit,
                    description=f"{len(run)} consecutive days in arrears (run {index})",
                    days_overdue=len(run),
                    due_date=first_due,
                )
            )
        if (first_due.year, first_due.month) == (today.year, today.month):
            incidents += 1

    if incidents >= MIN_MONTHLY_INCIDENTS:
        records.append(
            PenaltyRecord(
                penalty_type=PenaltyType.MONTHLY_THREE_INCIDENTS,
                installments=(),
                amount=unit,
                description=f"{incidents} arrears runs started this month",
                incidents=incidents,
            )
        )
    return records, incidents


def calculate_penalties(
    loan: Loan,
    now: datetime | date,
    schedule: Sequence[Installment] | None = None,
    terms: LoanTermsConfig = DEFAULT_TERMS,
) -> PenaltyAssessment:
    """Assess the penalties ``loan`` owes at ``now``.

    Parameters
    ----------
    loan : Loan
        Loan whose frequency selects the penalty rules.
    now : datetime | date
        Reference instant; only its calendar date is used.
    schedule : Sequence[Installment] | None
        Schedule already settled against the payments. When omitted the
        loan's own schedule is settled against ``loan.payments``.
    terms : LoanTermsConfig
        Provides the penalty unit.

    Returns
    -------
    PenaltyAssessment
        Total, itemised records, per-installment attribution and the number
        of arrears incidents in the current month.
    """
    today = to_date(now)
    if schedule is None:
        schedule = settle_installments(loan.schedule, loan.payments, today).schedule

    late = overdue_installments(schedule, today)
    unit = terms.penalty_unit

    if parse_frequency(loan.frequency) == Frequency.WEEKLY:
        records = _weekly_penalties(late, today, unit)
        incidents = 0
    else:
        records, incidents = _daily_penalties(late, today, unit)

    # Each penalty is charged to the first installment it names; the monthly
    # penalty belongs to the loan as a whole.
    per_installment: dict[int, int] = {}
    for record in records:
        if record.installments:
            number = record.installments[0]
            per_installment[number] = per_installment.get(number, 0) + record.amount

    total = sum(r.amount for r in records)
    if total:
        logger.debug(
            "Loan %s accrued %d in penalties (%d records, %d incidents)",
            loan.loan_id,
            total,
            len(records),
            incidents,
        )
    return PenaltyAssessment(
        total=total,
        records=tuple(records),
        per_installment=per_installment,
        incidents_this_month=incidents,
    )
