"""Portfolio-level statistics built from consolidated loans."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime
from typing import Any

from microloan.config import DEFAULT_TERMS, LoanTermsConfig
from microloan.engine.amounts import round_half_up
from microloan.engine.consolidation import consolidate, daily_cutoff
from microloan.models.enums import LoanStatus, PenaltyType
from microloan.models.loan import Loan
from microloan.models.snapshot import ConsolidatedSnapshot


def _consolidated(
    loans: Iterable[Loan], now: datetime | date, terms: LoanTermsConfig
) -> list[tuple[Loan, ConsolidatedSnapshot]]:
    return [(loan, consolidate(loan, None, now, terms=terms)) for loan in loans]


def portfolio_statistics(
    loans: Iterable[Loan],
    now: datetime | date,
    terms: LoanTermsConfig = DEFAULT_TERMS,
) -> dict[str, Any]:
    """Summarise a set of loans at ``now``.

    Parameters
    ----------
    loans : Iterable[Loan]
        Loans with their payment histories.
    now : datetime | date
        Reference instant.
    terms : LoanTermsConfig
        Loan terms used for consolidation.

    Returns
    -------
    dict[str, Any]
        Loan counts per derived status, amounts lent, receivable, collected,
        in arrears and due today, and collection efficiency as a whole
        percentage of the receivable amount.
    """
    pairs = _consolidated(loans, now, terms)
    snapshots = [s for _, s in pairs]

    total_receivable = sum(s.total_due for s in snapshots)
    total_collected = sum(s.total_paid for s in snapshots)

    return {
        "total_loans": len(pairs),
        "active_loans": sum(1 for s in snapshots if s.status == LoanStatus.ACTIVE),
        "loans_in_arrears": sum(1 for s in snapshots if s.status == LoanStatus.IN_ARREARS),
        "paid_loans": sum(1 for s in snapshots if s.status == LoanStatus.PAID),
        "total_lent": sum(loan.principal for loan, _ in pairs),
        "total_receivable": total_receivable,
        "total_collected": total_collected,
        "amount_in_arrears": sum(s.overdue_amount for s in snapshots),
        "amount_due_today": sum(s.due_today_amount for s in snapshots),
        "total_penalties": sum(s.total_penalties for s in snapshots),
        "collection_efficiency": (
            round_half_up(total_collected * 100, total_receivable) if total_receivable > 0 else 0
        ),
    }


def penalty_report(
    loans: Iterable[Loan],
    now: datetime | date,
    terms: LoanTermsConfig = DEFAULT_TERMS,
) -> dict[str, Any]:
    """Itemised penalties across a set of loans at ``now``."""
    pairs = _consolidated(loans, now, terms)
    report_date = now.date() if isinstance(now, datetime) else now

    by_type = {penalty_type: 0 for penalty_type in PenaltyType}
    detail = []
    loans_with_penalties = 0
    total = 0

    for loan, snapshot in pairs:
        if snapshot.total_penalties <= 0:
            continue
        loans_with_penalties += 1
        total += snapshot.total_penalties
        for record in snapshot.penalties:
            by_type[record.penalty_type] += record.amount
            detail.append(
                {
                    "loan_id": loan.loan_id,
                    "debtor_id": loan.debtor_id,
                    "collector_id": loan.collector_id,
                    "penalty_type": record.penalty_type,
                    "description": record.description,
                    "amount": record.amount,
                    "calculated_on": report_date,
                }
            )

    return {
        "report_date": report_date,
        "total_loans": len(pairs),
        "loans_with_penalties": loans_with_penalties,
        "total_penalties": total,
        "penalties_by_type": by_type,
        "detail": detail,
        "cutoff": daily_cutoff(now, terms),
        "percent_loans_with_penalties": (
            round_half_up(loans_with_penalties * 100, len(pairs)) if pairs else 0
        ),
        "average_penalty_per_loan": (
            round_half_up(total, loans_with_penalties) if loans_with_penalties else 0
        ),
    }
