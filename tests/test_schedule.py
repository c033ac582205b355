"""Tests for schedule generation and loan quoting."""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from microloan.config import LoanTermsConfig
from microloan.engine.calendar import HolidayCalendar
from microloan.engine.schedule import (
    calculate_total_due,
    create_loan,
    generate_schedule,
    interest_rates,
    parse_frequency,
    quote_installment,
)
from microloan.exceptions import InvalidScheduleInput
from microloan.models import Frequency, InstallmentStatus, Loan, LoanStatus


class TestTotalDue:
    """Tests for the markup."""

    def test_twenty_percent_markup(self) -> None:
        assert calculate_total_due(100_000) == 120_000

    def test_rounded_to_whole_pesos(self) -> None:
        assert calculate_total_due(123_457) == 148_148

    def test_custom_markup(self) -> None:
        terms = LoanTermsConfig(markup_rate=Decimal("0.25"))
        assert calculate_total_due(100_000, terms) == 125_000

    @pytest.mark.parametrize("principal", [0, -1, None])
    def test_rejects_non_positive_principal(self, principal) -> None:
        with pytest.raises(InvalidScheduleInput):
            calculate_total_due(principal)


class TestQuote:
    """Tests for installment quotes."""

    def test_daily_quote(self) -> None:
        quote = quote_installment(100_000, "diario")
        assert quote.frequency == Frequency.DAILY
        assert quote.installments == 24
        assert quote.installment_amount == 5_000
        assert quote.total_due == 120_000

    def test_weekly_quote(self) -> None:
        quote = quote_installment(100_000, Frequency.WEEKLY)
        assert quote.installments == 4
        assert quote.installment_amount == 30_000

    def test_halves_round_up(self) -> None:
        """90 / 4 = 22.5 rounds to 23, not to the even 22."""
        assert quote_installment(75, "weekly").installment_amount == 23

    def test_interest_rates(self) -> None:
        rates = interest_rates(100_000, 120_000, 28)
        assert rates.total_interest == 20_000
        assert rates.daily_rate == Decimal("0.7143")
        assert rates.monthly_rate == Decimal("21.43")
        assert rates.annual_rate == Decimal("260.71")

    def test_interest_rates_rejects_zero_term(self) -> None:
        with pytest.raises(InvalidScheduleInput):
            interest_rates(100_000, 120_000, 0)


class TestParseFrequency:
    """Tests for frequency parsing."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("daily", Frequency.DAILY),
            ("diario", Frequency.DAILY),
            ("SEMANAL", Frequency.WEEKLY),
            (" weekly ", Frequency.WEEKLY),
            (Frequency.WEEKLY, Frequency.WEEKLY),
        ],
    )
    def test_valid(self, value, expected: Frequency) -> None:
        assert parse_frequency(value) == expected

    @pytest.mark.parametrize("value", ["monthly", "", None, 7])
    def test_invalid(self, value) -> None:
        with pytest.raises(InvalidScheduleInput):
            parse_frequency(value)


class TestDailySchedule:
    """Tests for daily schedules."""

    def test_twenty_four_installments(self, daily_loan: Loan) -> None:
        assert len(daily_loan.schedule) == 24
        assert [i.number for i in daily_loan.schedule] == list(range(1, 25))

    def test_due_dates(self, daily_loan: Loan) -> None:
        dues = [i.due_date for i in daily_loan.schedule]
        assert dues[0] == date(2025, 3, 4)
        assert dues[10] == date(2025, 3, 15)
        assert dues[11] == date(2025, 3, 17)
        assert dues[-1] == date(2025, 4, 1)

    def test_due_dates_strictly_increasing_business_days(
        self, daily_loan: Loan, calendar: HolidayCalendar
    ) -> None:
        dues = [i.due_date for i in daily_loan.schedule]
        assert all(a < b for a, b in zip(dues, dues[1:]))
        assert all(calendar.is_business_day(d) for d in dues)
        assert date(2025, 3, 24) not in dues

    def test_amounts_sum_close_to_total(self, calendar: HolidayCalendar) -> None:
        loan = create_loan("l-1", "d-1", 123_457, date(2025, 3, 3), "daily", calendar=calendar)
        total = sum(i.amount for i in loan.schedule)
        assert loan.total_due == 148_148
        assert abs(total - loan.total_due) <= len(loan.schedule)
        assert {i.amount for i in loan.schedule} == {6_173}

    def test_fresh_installments_pending(self, daily_loan: Loan) -> None:
        for installment in daily_loan.schedule:
            assert installment.status == InstallmentStatus.PENDING
            assert installment.penalty_amount == 0
            assert installment.paid_date is None

    def test_created_loan_is_active(self, daily_loan: Loan) -> None:
        assert daily_loan.status == LoanStatus.ACTIVE
        assert daily_loan.total_due == 120_000
        assert daily_loan.version == 0


class TestWeeklySchedule:
    """Tests for weekly schedules."""

    def test_four_installments(self, weekly_loan: Loan) -> None:
        assert len(weekly_loan.schedule) == 4
        assert {i.amount for i in weekly_loan.schedule} == {30_000}

    def test_holiday_pushed_to_next_business_day(self, weekly_loan: Loan) -> None:
        """The third week lands on San José (Monday 24) and moves to Tuesday."""
        assert [i.due_date for i in weekly_loan.schedule] == [
            date(2025, 3, 10),
            date(2025, 3, 17),
            date(2025, 3, 25),
            date(2025, 3, 31),
        ]

    def test_custom_interval(self, calendar: HolidayCalendar) -> None:
        terms = LoanTermsConfig(weekly_interval_days=14, weekly_installments=2)
        loan = create_loan("l-2", "d-1", 50_000, date(2025, 3, 3), "weekly", calendar=calendar, terms=terms)
        assert [i.due_date for i in loan.schedule] == [date(2025, 3, 17), date(2025, 3, 31)]
        assert [i.amount for i in loan.schedule] == [30_000, 30_000]


class TestScheduleErrors:
    """Tests for invalid schedule input."""

    def test_sunday_start(self, calendar: HolidayCalendar) -> None:
        with pytest.raises(InvalidScheduleInput, match="not a business day"):
            create_loan("l-1", "d-1", 100_000, date(2025, 3, 9), "daily", calendar=calendar)

    def test_holiday_start(self, calendar: HolidayCalendar) -> None:
        with pytest.raises(InvalidScheduleInput):
            create_loan("l-1", "d-1", 100_000, date(2025, 3, 24), "weekly", calendar=calendar)

    def test_missing_start(self, calendar: HolidayCalendar) -> None:
        loan = Loan("l-1", "d-1", 100_000, 120_000, None, Frequency.DAILY)
        with pytest.raises(InvalidScheduleInput):
            generate_schedule(loan, calendar=calendar)

    def test_non_positive_total(self, calendar: HolidayCalendar) -> None:
        loan = Loan("l-1", "d-1", 100_000, 0, date(2025, 3, 3), Frequency.DAILY)
        with pytest.raises(InvalidScheduleInput):
            generate_schedule(loan, calendar=calendar)

    def test_unknown_frequency(self, calendar: HolidayCalendar) -> None:
        loan = Loan("l-1", "d-1", 100_000, 120_000, date(2025, 3, 3), "monthly")
        with pytest.raises(InvalidScheduleInput):
            generate_schedule(loan, calendar=calendar)

    def test_start_date_as_string(self, calendar: HolidayCalendar) -> None:
        loan = create_loan("l-1", "d-1", 100_000, "2025-03-03", "weekly", calendar=calendar)
        assert loan.start_date == date(2025, 3, 3)
        assert loan.schedule[0].due_date == loan.start_date + timedelta(days=7)
