"""In-memory loan book with referential integrity."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import date, datetime

from microloan.config import LoanTermsConfig
from microloan.engine.consolidation import consolidate, record_payment
from microloan.exceptions import (
    ConcurrentModificationError,
    EntityNotFoundError,
    InvalidEntityStateError,
    ReferentialIntegrityError,
)
from microloan.models.enums import LoanStatus
from microloan.models.loan import Collector, Debtor, Loan, Payment
from microloan.models.snapshot import ConsolidatedSnapshot

logger = logging.getLogger(__name__)


@dataclass
class LoanBook:
    """In-memory store for collectors, debtors, loans and their payments.

    Writes to a loan are serialised with a per-loan lock, and ``add_payment``
    accepts the version the caller last read so that two collectors working
    from the same stale snapshot cannot both record against it.
    """

    collectors: dict[str, Collector] = field(default_factory=dict)
    debtors: dict[str, Debtor] = field(default_factory=dict)
    loans: dict[str, Loan] = field(default_factory=dict)
    payments: list[Payment] = field(default_factory=list)
    terms: LoanTermsConfig = field(default_factory=LoanTermsConfig)

    # Relationship indexes
    _collector_debtors: dict[str, list[str]] = field(default_factory=dict)
    _debtor_loans: dict[str, list[str]] = field(default_factory=dict)

    _locks: dict[str, threading.Lock] = field(default_factory=dict, repr=False)
    _locks_guard: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def add_collector(self, collector: Collector) -> None:
        """Add a collector to the book."""
        if collector.created_at is None:
            collector.created_at = datetime.now()
        self.collectors[collector.collector_id] = collector
        self._collector_debtors.setdefault(collector.collector_id, [])

    def add_debtor(self, debtor: Debtor) -> None:
        """Add a debtor, checking the assigned collector exists."""
        if debtor.collector_id and debtor.collector_id not in self.collectors:
            raise ReferentialIntegrityError(f"Collector {debtor.collector_id} not found")

        if debtor.created_at is None:
            debtor.created_at = datetime.now()
        self.debtors[debtor.debtor_id] = debtor
        self._debtor_loans.setdefault(debtor.debtor_id, [])
        if debtor.collector_id:
            self._collector_debtors[debtor.collector_id].append(debtor.debtor_id)

    def add_loan(self, loan: Loan) -> None:
        """Add a loan, checking its debtor and collector exist."""
        if loan.debtor_id not in self.debtors:
            raise ReferentialIntegrityError(f"Debtor {loan.debtor_id} not found")

        if loan.collector_id and loan.collector_id not in self.collectors:
            raise ReferentialIntegrityError(f"Collector {loan.collector_id} not found")

        if loan.loan_id in self.loans:
            raise InvalidEntityStateError(f"Loan {loan.loan_id} already exists")

        if loan.created_at is None:
            loan.created_at = datetime.now()
        self.loans[loan.loan_id] = loan
        self._debtor_loans[loan.debtor_id].append(loan.loan_id)
        self.payments.extend(loan.payments)

    def _lock_for(self, loan_id: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(loan_id, threading.Lock())

    def add_payment(
        self,
        payment: Payment,
        expected_version: int | None = None,
        now: datetime | date | None = None,
    ) -> ConsolidatedSnapshot:
        """Record ``payment`` and return the loan's new consolidated state.

        Parameters
        ----------
        payment : Payment
            Payment to append to its loan's history.
        expected_version : int | None
            Loan version the caller based its decision on. ``None`` skips
            the check.
        now : datetime | date | None
            Reference instant for consolidation; defaults to the current
            local time.

        Returns
        -------
        ConsolidatedSnapshot
            State of the loan including the new payment.

        Raises
        ------
        EntityNotFoundError
            If the loan does not exist.
        ReferentialIntegrityError
            If the collector does not exist.
        ConcurrentModificationError
            If the loan changed since ``expected_version``.
        InvalidEntityStateError
            If the loan is closed or cancelled.
        """
        if payment.loan_id not in self.loans:
            raise EntityNotFoundError(f"Loan {payment.loan_id} not found")
        if payment.collector_id not in self.collectors:
            raise ReferentialIntegrityError(f"Collector {payment.collector_id} not found")

        now = now or datetime.now()
        with self._lock_for(payment.loan_id):
            current = self.loans[payment.loan_id]
            if expected_version is not None and current.version != expected_version:
                raise ConcurrentModificationError(
                    f"Loan {current.loan_id} is at version {current.version}, "
                    f"expected {expected_version}"
                )
            if current.status in (LoanStatus.CLOSED, LoanStatus.CANCELLED):
                raise InvalidEntityStateError(
                    f"Loan {current.loan_id} is {current.status.value} and cannot receive payments"
                )

            updated, snapshot = record_payment(current, payment, now, terms=self.terms)
            self.loans[updated.loan_id] = updated
            self.payments.append(payment)

        logger.info(
            "Recorded payment of %d on loan %s (version %d, status %s)",
            payment.amount,
            updated.loan_id,
            updated.version,
            updated.status.value,
        extra={"extra": {"loan_id": updated.loan_id, "version": updated.version}},
        )
        return snapshot

    # Query methods
    def get_loan(self, loan_id: str) -> Loan:
        """Get a loan by id."""
        try:
            return self.loans[loan_id]
        except KeyError:
            raise EntityNotFoundError(f"Loan {loan_id} not found") from None

    def get_debtor_loans(self, debtor_id: str) -> list[Loan]:
        """Get all loans for a debtor."""
        loan_ids = self._debtor_loans.get(debtor_id, [])
        return [self.loans[lid] for lid in loan_ids]

    def get_collector_debtors(self, collector_id: str) -> list[Debtor]:
        """Get all debtors assigned to a collector."""
        debtor_ids = self._collector_debtors.get(collector_id, [])
        return [self.debtors[did] for did in debtor_ids]

    def get_loan_payments(self, loan_id: str) -> list[Payment]:
        """Get the payment history of a loan."""
        return list(self.get_loan(loan_id).payments)

    def consolidated(self, loan_id: str, now: datetime | date) -> ConsolidatedSnapshot:
        """Consolidate a stored loan at ``now``."""
        loan = self.get_loan(loan_id)
        return consolidate(loan, loan.payments, now, terms=self.terms)

    def summary(self) -> dict[str, int]:
        """Return summary counts of all entities."""
        return {
            "collectors": len(self.collectors),
            "debtors": len(self.debtors),
            "loans": len(self.loans),
            "payments": len(self.payments),
            "installments": sum(len(loan.schedule) for loan in self.loans.values()),
        }
