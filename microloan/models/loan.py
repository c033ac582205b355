"""Loan, installment and payment models."""

from dataclasses import dataclass, field
from datetime import date, datetime

from microloan.models.enums import Frequency, InstallmentStatus, LoanStatus, PaymentMethod


@dataclass
class Collector:
    """Field agent who visits debtors and records payments (cobrador)."""

    collector_id: str
    name: str
    email: str
    phone: str
    active: bool = True
    created_at: datetime | None = None


@dataclass
class Debtor:
    """Borrower (deudor) assigned to a single collector."""

    debtor_id: str
    name: str
    cedula: str  # Colombian national id number
    phone: str
    email: str | None
    collector_id: str | None
    created_at: datetime | None = None


@dataclass
class Installment:
    """One scheduled obligation (cuota).

    ``status``, ``penalty_amount``, ``days_overdue`` and ``paid_date`` are a
    projection of the payment history; consolidation recomputes them on every
    read.
    """

    number: int  # 1, 2, 3, ...
    due_date: date
    amount: int
    status: InstallmentStatus = InstallmentStatus.PENDING
    penalty_amount: int = 0
    days_overdue: int = 0
    paid_date: date | None = None


@dataclass(frozen=True)
class Payment:
    """Money received for a loan. Immutable once recorded."""

    amount: int
    payment_date: date
    method: PaymentMethod
    loan_id: str
    collector_id: str
    debtor_id: str | None = None
    notes: str | None = None
    payment_id: str | None = None


@dataclass
class Loan:
    """Microloan contract (prestamo)."""

    loan_id: str
    debtor_id: str
    principal: int  # Amount lent
    total_due: int  # Principal plus markup
    start_date: date | None  # Disbursement date
    frequency: Frequency
    collector_id: str | None = None
    status: LoanStatus = LoanStatus.ACTIVE
    schedule: list[Installment] = field(default_factory=list)
    payments: list[Payment] = field(default_factory=list)
    created_at: datetime | None = None
    version: int = 0  # Bumped on every recorded payment
