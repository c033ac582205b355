"""In-memory stores for maintaining entity relationships."""

from microloan.store.loan_book import LoanBook

__all__ = ["LoanBook"]
