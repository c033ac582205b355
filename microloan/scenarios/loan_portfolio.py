"""Loan portfolio scenario: a collection route with payment behaviour."""

from __future__ import annotations

import logging
import random
from datetime import date, datetime, time
from typing import Any

from microloan.config import DEFAULT_TERMS, LoanTermsConfig, ScenarioConfig
from microloan.engine.calendar import DEFAULT_CALENDAR, HolidayCalendar
from microloan.engine.consolidation import consolidate, lifecycle_status
from microloan.engine.portfolio import penalty_report, portfolio_statistics
from microloan.generators import CollectorGenerator, DebtorGenerator, LoanGenerator, PaymentBehavior
from microloan.models.enums import Frequency
from microloan.models.snapshot import ConsolidatedSnapshot
from microloan.store import LoanBook

logger = logging.getLogger(__name__)

# Portfolios are observed after the day's rounds
OBSERVATION_TIME = time(18, 0)


class LoanPortfolioScenario:
    """Generate a microloan portfolio and consolidate it.

    This scenario creates:
    - Collectors, each with a route of debtors
    - One daily or weekly loan per debtor, started within the last weeks
    - Payment histories: punctual payers, late payers and defaulters
    """

    def __init__(
        self,
        num_debtors: int = 50,
        num_collectors: int = 5,
        weekly_loan_rate: float = 0.30,
        on_time_rate: float = 0.70,
        late_rate: float = 0.20,
        default_rate: float = 0.10,
        reference_date: date | None = None,
        seed: int | None = None,
        *,
        config: ScenarioConfig | None = None,
        terms: LoanTermsConfig = DEFAULT_TERMS,
        calendar: HolidayCalendar | None = None,
    ) -> None:
        """Initialize loan portfolio scenario.

        Parameters
        ----------
        num_debtors : int
            Number of debtors, each with one loan.
        num_collectors : int
            Number of collectors sharing the debtors.
        weekly_loan_rate : float
            Share of weekly loans (0.0 to 1.0).
        on_time_rate : float
            Share of debtors who always pay on the due date.
        late_rate : float
            Share of debtors who pay late.
        default_rate : float
            Share of debtors who stop paying.
        reference_date : date | None
            Day the portfolio is observed at (defaults to today).
        seed : int | None
            Random seed for reproducibility.
        config : ScenarioConfig | None
            Optional scenario configuration. If provided, overrides
            num_debtors, num_collectors, weekly_loan_rate and reference_date.
        terms : LoanTermsConfig
            Loan terms used for schedules and consolidation.
        calendar : HolidayCalendar | None
            Holiday calendar (defaults to the shared one).
        """
        if config is not None:
            num_debtors = config.num_debtors
            num_collectors = config.num_collectors
            weekly_loan_rate = config.weekly_loan_rate
            reference_date = config.reference_date or reference_date
        self.config = config

        self.num_debtors = num_debtors
        self.num_collectors = max(1, num_collectors)
        self.weekly_loan_rate = weekly_loan_rate
        self.on_time_rate = on_time_rate
        self.late_rate = late_rate
        self.default_rate = default_rate
        self.reference_date = reference_date or date.today()
        self.seed = seed
        self.terms = terms
        self.calendar = calendar or DEFAULT_CALENDAR

        if seed is not None:
            random.seed(seed)

        self.store = LoanBook(terms=terms)
        self._collector_gen = CollectorGenerator(seed=seed)
        self._debtor_gen = DebtorGenerator(seed=seed)
        self._loan_gen = LoanGenerator(seed=seed, calendar=self.calendar, terms=terms)
        self._payment_behavior = PaymentBehavior(seed=seed)

    @property
    def observed_at(self) -> datetime:
        """Instant the portfolio is consolidated at."""
        return datetime.combine(self.reference_date, OBSERVATION_TIME)

    def generate(self) -> LoanBook:
        """Generate all data for the loan portfolio scenario.

        Returns
        -------
        LoanBook
            Book containing all generated data.
        """
        logger.info(
            "Starting loan portfolio scenario: %d debtors, %d collectors, observed %s",
            self.num_debtors,
            self.num_collectors,
            self.reference_date.isoformat(),
        )

        for collector in self._collector_gen.generate_batch(self.num_collectors):
            self.store.add_collector(collector)
        collector_ids = list(self.store.collectors)

        for debtor in self._debtor_gen.generate_batch(self.num_debtors, collector_ids):
            self.store.add_debtor(debtor)

            loan = self._loan_gen.generate(
                debtor_id=debtor.debtor_id,
                collector_id=debtor.collector_id,
                reference_date=self.reference_date,
                weekly_rate=self.weekly_loan_rate,
            )
            loan.payments = self._payment_behavior.generate_payments(
                loan,
                self.reference_date,
                on_time_rate=self.on_time_rate,
                late_rate=self.late_rate,
                default_rate=self.default_rate,
            )
            self.store.add_loan(loan)

        logger.info(
            "Generated %d loans (%d daily, %d weekly) with %d payments",
            len(self.store.loans),
            sum(1 for l in self.store.loans.values() if l.frequency == Frequency.DAILY),
            sum(1 for l in self.store.loans.values() if l.frequency == Frequency.WEEKLY),
            len(self.store.payments),
        )

        self._update_loan_statuses()
        return self.store

    def _update_loan_statuses(self) -> None:
        """Store the lifecycle status derived from each loan's payments."""
        for loan in self.store.loans.values():
            snapshot = consolidate(loan, loan.payments, self.observed_at, terms=self.terms)
            loan.status = lifecycle_status(snapshot, self.terms)

    def consolidate_all(self) -> list[ConsolidatedSnapshot]:
        """Consolidate every loan at the observation instant."""
        return [
            consolidate(loan, loan.payments, self.observed_at, terms=self.terms)
            for loan in self.store.loans.values()
        ]

    def export(self, sinks: list[Any]) -> None:
        """Export generated data to sinks.

        Parameters
        ----------
        sinks : list[Any]
            Sink instances (JsonFileSink, ConsoleSink).
        """
        snapshots = self.consolidate_all()
        for sink in sinks:
            sink.write_batch("collectors", list(self.store.collectors.values()))
            sink.write_batch("debtors", list(self.store.debtors.values()))
            sink.write_batch("loans", list(self.store.loans.values()))
            sink.write_batch("payments", self.store.payments)
            sink.write_batch("snapshots", snapshots)
            sink.write_batch("penalty_report", [penalty_report(self.store.loans.values(), self.observed_at, self.terms)])

        logger.info("Exported loan portfolio to %d sinks", len(sinks))

    def get_portfolio_summary(self) -> dict[str, Any]:
        """Get summary statistics for the loan portfolio.

        Returns
        -------
        dict[str, Any]
            Portfolio statistics plus the distribution of stored statuses.
        """
        loans = list(self.store.loans.values())
        if not loans:
            return {}

        status_counts: dict[str, int] = {}
        for loan in loans:
            status_counts[loan.status.value] = status_counts.get(loan.status.value, 0) + 1

        return {
            **portfolio_statistics(loans, self.observed_at, self.terms),
            "loan_status_distribution": status_counts,
            "daily_loans": sum(1 for l in loans if l.frequency == Frequency.DAILY),
            "weekly_loans": sum(1 for l in loans if l.frequency == Frequency.WEEKLY),
        }
