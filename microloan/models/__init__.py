"""Domain models for microloan accounting."""

from microloan.models.enums import (
    AllocationKind,
    Frequency,
    InstallmentStatus,
    LoanStatus,
    PaymentMethod,
    PaymentType,
    PenaltyType,
)
from microloan.models.loan import Collector, Debtor, Installment, Loan, Payment
from microloan.models.payment import (
    Allocation,
    NextPayment,
    PaymentApplication,
    PaymentRequest,
    PaymentSimulation,
    PaymentSuggestion,
    PaymentSuggestions,
    ValidationResult,
)
from microloan.models.snapshot import (
    ConsolidatedSnapshot,
    DailyCutoff,
    PenaltyAssessment,
    PenaltyRecord,
)

__all__ = [
    "Allocation",
    "AllocationKind",
    "Collector",
    "ConsolidatedSnapshot",
    "DailyCutoff",
    "Debtor",
    "Frequency",
    "Installment",
    "InstallmentStatus",
    "Loan",
    "LoanStatus",
    "NextPayment",
    "Payment",
    "PaymentApplication",
    "PaymentMethod",
    "PaymentRequest",
    "PaymentSimulation",
    "PaymentSuggestion",
    "PaymentSuggestions",
    "PaymentType",
    "PenaltyAssessment",
    "PenaltyRecord",
    "PenaltyType",
    "ValidationResult",
]
