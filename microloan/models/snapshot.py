"""Derived loan state.

These value objects are produced on demand from a loan and its payment
history and are never stored.
"""

from dataclasses import dataclass, field
from datetime import date, datetime

from microloan.models.enums import InstallmentStatus, LoanStatus, PenaltyType
from microloan.models.loan import Installment


@dataclass(frozen=True)
class PenaltyRecord:
    """A single late-payment penalty (multa por mora)."""

    penalty_type: PenaltyType
    installments: tuple[int, ...]
    amount: int
    description: str
    days_overdue: int = 0
    due_date: date | None = None
    incidents: int = 0


@dataclass(frozen=True)
class PenaltyAssessment:
    """Penalties accrued by a loan at a reference instant."""

    total: int
    records: tuple[PenaltyRecord, ...]
    per_installment: dict[int, int]
    incidents_this_month: int

    @property
    def has_penalties(self) -> bool:
        return self.total > 0


@dataclass(frozen=True)
class DailyCutoff:
    """Daily collection window around a reference instant."""

    closes_at: datetime
    calculations_available_at: datetime
    physical_delivery_at: datetime
    closed: bool
    due_today_collectible: bool
    seconds_until_close: float


@dataclass(frozen=True)
class ConsolidatedSnapshot:
    """State of a loan re-derived from its payments at ``reference_time``."""

    loan_id: str
    reference_time: datetime
    status: LoanStatus
    schedule: tuple[Installment, ...]
    total_due: int
    total_paid: int
    remaining_balance: int
    unapplied_credit: int
    overdue_amount: int
    due_today_amount: int
    amount_due_now: int
    days_in_arrears: int
    overdue_count: int
    pending_count: int
    paid_count: int
    percent_complete: int
    total_penalties: int
    cutoff: DailyCutoff
    penalties: tuple[PenaltyRecord, ...] = field(default_factory=tuple)
    incidents_this_month: int = 0

    @property
    def unpaid_installments(self) -> list[Installment]:
        """Installments not yet covered, in schedule order."""
        return [i for i in self.schedule if i.status != InstallmentStatus.PAID]

    @property
    def total_outstanding(self) -> int:
        """Everything still owed: remaining balance plus penalties."""
        return self.remaining_balance + self.total_penalties
