"""Scenarios for generating realistic microloan portfolios."""

from microloan.scenarios.loan_portfolio import LoanPortfolioScenario

__all__ = ["LoanPortfolioScenario"]
