"""Pytest configuration and fixtures."""

from datetime import date, datetime

import pytest

from microloan.engine.calendar import HolidayCalendar
from microloan.engine.schedule import create_loan
from microloan.models import Frequency, Loan, Payment, PaymentMethod


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def calendar() -> HolidayCalendar:
    """Calendar with its own cache."""
    return HolidayCalendar(cache={})


@pytest.fixture
def sample_loan_id() -> str:
    """Sample loan ID."""
    return "loan-test-001"


@pytest.fixture
def sample_collector_id() -> str:
    """Sample collector ID."""
    return "cobr-test-001"


@pytest.fixture
def sample_debtor_id() -> str:
    """Sample debtor ID."""
    return "deud-test-001"


@pytest.fixture
def daily_loan(
    calendar: HolidayCalendar,
    sample_loan_id: str,
    sample_debtor_id: str,
    sample_collector_id: str,
) -> Loan:
    """100,000 daily loan disbursed on Monday 2025-03-03.

    Installments of 5,000 fall due from 2025-03-04 to 2025-04-01; San José
    (2025-03-24) and the Sundays are skipped.
    """
    return create_loan(
        loan_id=sample_loan_id,
        debtor_id=sample_debtor_id,
        principal=100_000,
        start_date=date(2025, 3, 3),
        frequency=Frequency.DAILY,
        collector_id=sample_collector_id,
        created_at=datetime(2025, 3, 3, 9, 0),
        calendar=calendar,
    )


@pytest.fixture
def weekly_loan(
    calendar: HolidayCalendar,
    sample_debtor_id: str,
    sample_collector_id: str,
) -> Loan:
    """100,000 weekly loan disbursed on Monday 2025-03-03 (4 x 30,000)."""
    return create_loan(
        loan_id="loan-test-002",
        debtor_id=sample_debtor_id,
        principal=100_000,
        start_date=date(2025, 3, 3),
        frequency=Frequency.WEEKLY,
        collector_id=sample_collector_id,
        calendar=calendar,
    )


@pytest.fixture
def make_payment(sample_loan_id: str, sample_collector_id: str, sample_debtor_id: str):
    """Factory for payments on the sample loan."""

    def _make(amount: int, paid_on: date, loan_id: str = sample_loan_id) -> Payment:
        return Payment(
            amount=amount,
            payment_date=paid_on,
            method=PaymentMethod.CASH,
            loan_id=loan_id,
            collector_id=sample_collector_id,
            debtor_id=sample_debtor_id,
        )

    return _make


@pytest.fixture
def ten_paid(daily_loan: Loan, make_payment) -> list[Payment]:
    """Installments 1-10 of the daily loan, each paid on its due date."""
    return [make_payment(i.amount, i.due_date) for i in daily_loan.schedule[:10]]
