"""Tests for the in-memory loan book."""

import json
import logging
import threading
from datetime import date, datetime

import pytest

from microloan.config import LoanTermsConfig
from microloan.exceptions import (
    ConcurrentModificationError,
    EntityNotFoundError,
    InvalidEntityStateError,
    ReferentialIntegrityError,
)
from microloan.logging import JsonFormatter
from microloan.models import Collector, Debtor, Loan, LoanStatus
from microloan.store import LoanBook

NOW = datetime(2025, 3, 17, 10, 0)


@pytest.fixture
def book(sample_collector_id: str, sample_debtor_id: str, daily_loan: Loan) -> LoanBook:
    book = LoanBook()
    book.add_collector(Collector(sample_collector_id, "Cobrador Prueba", "cobrador@example.com", "3001234567"))
    book.add_debtor(
        Debtor(sample_debtor_id, "Juan Pérez", "12345678", "3007654321", None, sample_collector_id)
    )
    book.add_loan(daily_loan)
    return book


class TestReferentialIntegrity:
    """Tests for relationship checks."""

    def test_debtor_requires_collector(self) -> None:
        book = LoanBook()
        with pytest.raises(ReferentialIntegrityError):
            book.add_debtor(Debtor("d-1", "María García", "87654321", "3000000000", None, "missing"))

    def test_loan_requires_debtor(self, daily_loan: Loan) -> None:
        with pytest.raises(ReferentialIntegrityError):
            LoanBook().add_loan(daily_loan)

    def test_duplicate_loan(self, book: LoanBook, daily_loan: Loan) -> None:
        with pytest.raises(InvalidEntityStateError):
            book.add_loan(daily_loan)

    def test_unknown_loan(self, book: LoanBook) -> None:
        with pytest.raises(EntityNotFoundError):
            book.get_loan("missing")

    def test_relationship_queries(
        self, book: LoanBook, sample_collector_id: str, sample_debtor_id: str, daily_loan: Loan
    ) -> None:
        assert [d.debtor_id for d in book.get_collector_debtors(sample_collector_id)] == [sample_debtor_id]
        assert book.get_debtor_loans(sample_debtor_id) == [daily_loan]
        assert book.debtors[sample_debtor_id].created_at is not None

    def test_summary(self, book: LoanBook) -> None:
        assert book.summary() == {
            "collectors": 1,
            "debtors": 1,
            "loans": 1,
            "payments": 0,
            "installments": 24,
        }


class TestAddPayment:
    """Tests for recording payments."""

    def test_records_payment(self, book: LoanBook, make_payment, sample_loan_id: str) -> None:
        snapshot = book.add_payment(make_payment(5_000, date(2025, 3, 4)), expected_version=0, now=NOW)

        loan = book.get_loan(sample_loan_id)
        assert loan.version == 1
        assert len(book.get_loan_payments(sample_loan_id)) == 1
        assert book.payments[-1].amount == 5_000
        assert snapshot.paid_count == 1
        assert book.consolidated(sample_loan_id, NOW) == snapshot

    def test_stale_version_rejected(self, book: LoanBook, make_payment, sample_loan_id: str) -> None:
        book.add_payment(make_payment(5_000, date(2025, 3, 4)), expected_version=0, now=NOW)
        with pytest.raises(ConcurrentModificationError):
            book.add_payment(make_payment(5_000, date(2025, 3, 5)), expected_version=0, now=NOW)
        assert book.get_loan(sample_loan_id).version == 1

    def test_unknown_loan(self, book: LoanBook, make_payment) -> None:
        with pytest.raises(EntityNotFoundError):
            book.add_payment(make_payment(5_000, date(2025, 3, 4), loan_id="missing"), now=NOW)

    def test_unknown_collector(self, book: LoanBook, make_payment) -> None:
        book.collectors.clear()
        with pytest.raises(ReferentialIntegrityError):
            book.add_payment(make_payment(5_000, date(2025, 3, 4)), now=NOW)

    def test_closed_loan_rejects_payments(self, book: LoanBook, make_payment, sample_loan_id: str) -> None:
        book.add_payment(make_payment(120_000, date(2025, 3, 4)), now=NOW)
        assert book.get_loan(sample_loan_id).status == LoanStatus.CLOSED
        with pytest.raises(InvalidEntityStateError):
            book.add_payment(make_payment(5_000, date(2025, 3, 5)), now=NOW)

    def test_concurrent_writers_serialised(self, book: LoanBook, make_payment, sample_loan_id: str) -> None:
        """Two writers from the same version: exactly one wins."""
        outcomes: list[str] = []
        barrier = threading.Barrier(2)

        def writer(day: int) -> None:
            barrier.wait()
            try:
                book.add_payment(make_payment(5_000, date(2025, 3, day)), expected_version=0, now=NOW)
                outcomes.append("ok")
            except ConcurrentModificationError:
                outcomes.append("stale")

        threads = [threading.Thread(target=writer, args=(day,)) for day in (4, 5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sorted(outcomes) == ["ok", "stale"]
        assert book.get_loan(sample_loan_id).version == 1
        assert len(book.get_loan(sample_loan_id).payments) == 1


class TestLoanBookDefaults:
    """Tests for LoanBook construction and logging."""

    def test_default_terms(self) -> None:
        first, second = LoanBook(), LoanBook()

        assert first.terms == LoanTermsConfig()
        assert first.terms.penalty_unit == 20_000
        assert first.loans is not second.loans

    def test_payment_log_carries_loan_context(
        self, book: LoanBook, make_payment, sample_loan_id: str, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.INFO, logger="microloan.store"):
            book.add_payment(make_payment(5_000, date(2025, 3, 4)), now=NOW)

        (record,) = [r for r in caplog.records if r.name == "microloan.store.loan_book"]
        assert record.extra == {"loan_id": sample_loan_id, "version": 1}

        data = json.loads(JsonFormatter().format(record))
        assert data["loan_id"] == sample_loan_id
        assert data["version"] == 1
