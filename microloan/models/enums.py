"""Enumeration types for microloan entities."""

from enum import Enum


class Frequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"


class InstallmentStatus(str, Enum):
    PENDING = "PENDING"
    OVERDUE = "OVERDUE"
    PAID = "PAID"


class LoanStatus(str, Enum):
    """Loan status as derived by consolidation or stored by the back office."""

    ACTIVE = "ACTIVO"
    IN_ARREARS = "MORA"
    PAID = "PAGADO"
    # Stored lifecycle values
    DEFAULTED = "VENCIDO"
    CLOSED = "FINALIZADO"
    CANCELLED = "ANULADO"


class PaymentMethod(str, Enum):
    CASH = "efectivo"
    TRANSFER = "transferencia"
    NEQUI = "nequi"
    DAVIPLATA = "daviplata"
    BANCOLOMBIA = "bancolombia"


class PaymentType(str, Enum):
    COMPLETE = "completo"
    PARTIAL = "parcial"
    EXCESS = "exceso"


class PenaltyType(str, Enum):
    WEEKLY_ARREARS = "MORA_SEMANAL"
    DAILY_THREE_DAY_ARREARS = "MORA_DIARIA_3_DIAS"
    MONTHLY_THREE_INCIDENTS = "MORA_MENSUAL_3_INCUMPLIMIENTOS"


class AllocationKind(str, Enum):
    PENALTY = "penalty"
    INSTALLMENT = "installment"
