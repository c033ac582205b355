"""Payment capture, validation and allocation models."""

from dataclasses import dataclass, field
from datetime import date
from typing import Any

from microloan.models.enums import AllocationKind, PaymentType


@dataclass
class PaymentRequest:
    """Raw payment input as typed by a collector, before validation."""

    amount: Any  # int, Decimal or text such as "15.000"
    payment_method: str | None
    collector_id: str | None
    debtor_id: str | None
    payment_date: date | None = None
    notes: str | None = None
    loan_id: str | None = None


@dataclass
class ValidationResult:
    """Outcome of validating user-supplied payment data.

    Errors block the payment; warnings are informational only.
    """

    is_valid: bool
    message: str = ""
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class Allocation:
    """Portion of a payment applied to penalties or to one installment."""

    kind: AllocationKind
    applied_amount: int
    pending_amount: int
    description: str
    installment_number: int | None = None
    due_date: date | None = None
    installment_amount: int | None = None
    previously_paid: int = 0

    @property
    def settles(self) -> bool:
        """True when the allocation covers everything pending for its target."""
        return self.applied_amount == self.pending_amount


@dataclass(frozen=True)
class PaymentApplication:
    """How an incoming amount would be absorbed by a loan."""

    amount: int
    allocations: tuple[Allocation, ...]
    total_applied: int
    remainder: int
    payment_type: PaymentType


@dataclass(frozen=True)
class NextPayment:
    """Next installment due and the amount recommended to collect."""

    installment_number: int
    due_date: date
    installment_amount: int
    installment_penalty: int
    is_overdue: bool
    recommended_amount: int
    total_penalties: int
    days_in_arrears: int

    @property
    def includes_penalties(self) -> bool:
        return self.total_penalties > 0


@dataclass(frozen=True)
class PaymentSuggestion:
    amount: int
    description: str
    payment_type: PaymentType


@dataclass(frozen=True)
class PaymentSuggestions:
    recommended: PaymentSuggestion | None = None
    minimum: PaymentSuggestion | None = None
    payoff: PaymentSuggestion | None = None
    alternatives: tuple[PaymentSuggestion, ...] = ()


@dataclass(frozen=True)
class PaymentSimulation:
    """Preview of a payment that has not been recorded."""

    amount: int
    payment_type: PaymentType
    application: PaymentApplication
    new_balance: int
    suggestions: PaymentSuggestions
