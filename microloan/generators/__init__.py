"""Synthetic data generators for microloan portfolios."""

from microloan.generators.loan import LoanGenerator, PaymentBehavior
from microloan.generators.people import CollectorGenerator, DebtorGenerator

__all__ = [
    "CollectorGenerator",
    "DebtorGenerator",
    "LoanGenerator",
    "PaymentBehavior",
]
