"""Repayment schedule generation.

A loan is repaid in a fixed number of equal installments: 24 on consecutive
business days for daily loans, 4 one week apart for weekly loans. Due dates
always fall on business days.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal

from microloan.config import DEFAULT_TERMS, LoanTermsConfig
from microloan.engine.amounts import round_half_up
from microloan.engine.calendar import DEFAULT_CALENDAR, HolidayCalendar, to_date
from microloan.exceptions import InvalidScheduleInput
from microloan.models.enums import Frequency, InstallmentStatus, LoanStatus
from microloan.models.loan import Installment, Loan

logger = logging.getLogger(__name__)

# Spanish names used by the back office
FREQUENCY_ALIASES = {
    "diario": Frequency.DAILY,
    "semanal": Frequency.WEEKLY,
}


@dataclass(frozen=True)
class InstallmentQuote:
    """Installment amount and total due for a prospective loan."""

    principal: int
    frequency: Frequency
    installments: int
    installment_amount: int
    total_due: int


@dataclass(frozen=True)
class InterestRates:
    """Simple rates implied by the markup, in percent."""

    total_interest: int
    daily_rate: Decimal
    monthly_rate: Decimal
    annual_rate: Decimal


def parse_frequency(value: Frequency | str | None) -> Frequency:
    """Resolve a payment frequency, accepting the Spanish aliases.

    Raises
    ------
    InvalidScheduleInput
        If the value is not ``daily`` or ``weekly``.
    """
    if isinstance(value, Frequency):
        return value
    if isinstance(value, str):
        key = value.strip().lower()
        if key in FREQUENCY_ALIASES:
            return FREQUENCY_ALIASES[key]
        try:
            return Frequency(key)
        except ValueError:
            pass
    raise InvalidScheduleInput(f"Payment frequency must be 'daily' or 'weekly', got {value!r}")


def calculate_total_due(principal: int, terms: LoanTermsConfig = DEFAULT_TERMS) -> int:
    """Principal plus the fixed markup, rounded to whole pesos."""
    if principal is None or principal <= 0:
        raise InvalidScheduleInput("Principal must be greater than 0")
    return round_half_up(Decimal(principal) * (1 + terms.markup_rate))


def quote_installment(
    principal: int,
    frequency: Frequency | str,
    terms: LoanTermsConfig = DEFAULT_TERMS,
) -> InstallmentQuote:
    """Quote the installment a debtor would pay for ``principal``."""
    freq = parse_frequency(frequency)
    total_due = calculate_total_due(principal, terms)
    count = terms.installments_for(freq.value)
    return InstallmentQuote(
        principal=principal,
        frequency=freq,
        installments=count,
        installment_amount=round_half_up(total_due, count),
        total_due=total_due,
    )


def interest_rates(principal: int, total_due: int, term_days: int) -> InterestRates:
    """Simple daily, 30-day and 365-day rates implied by a loan's markup."""
    if principal <= 0 or term_days <= 0:
        raise InvalidScheduleInput("Principal and term must be greater than 0")
    interest = total_due - principal
    daily = Decimal(interest) / Decimal(principal) / Decimal(term_days)
    return InterestRates(
        total_interest=interest,
        daily_rate=(daily * 100).quantize(Decimal("0.0001")),
        monthly_rate=(daily * 30 * 100).quantize(Decimal("0.01")),
        annual_rate=(daily * 365 * 100).quantize(Decimal("0.01")),
    )


def generate_schedule(
    loan: Loan,
    calendar: HolidayCalendar | None = None,
    terms: LoanTermsConfig = DEFAULT_TERMS,
) -> list[Installment]:
    """Build the installment schedule for ``loan``.

    Parameters
    ----------
    loan : Loan
        Loan providing ``start_date``, ``total_due`` and ``frequency``.
    calendar : HolidayCalendar | None
        Business-day calendar (the shared default when omitted).
    terms : LoanTermsConfig
        Installment counts per frequency.

    Returns
    -------
    list[Installment]
        Fresh PENDING installments ordered by number.

    Raises
    ------
    InvalidScheduleInput
        If the start date is missing or not a business day, the total due is
        not positive, or the frequency is unknown.
    """
    calendar = calendar or DEFAULT_CALENDAR

    if loan.start_date is None:
        raise InvalidScheduleInput("Start date is required to build a schedule")
    if loan.total_due is None or loan.total_due <= 0:
        raise InvalidScheduleInput("Total due must be greater than 0")
    frequency = parse_frequency(loan.frequency)
    start = to_date(loan.start_date)
    if not calendar.is_business_day(start):
        raise InvalidScheduleInput(
            f"Start date {start.isoformat()} is not a business day (Monday to Saturday, no holidays)"
        )

    count = terms.installments_for(frequency.value)
    amount = round_half_up(loan.total_due, count)

    if frequency == Frequency.DAILY:
        due_dates = []
        current = start
        for _ in range(count):
            current = calendar.next_business_day(current)
            due_dates.append(current)
    else:
        due_dates = []
        for i in range(1, count + 1):
            due = start + timedelta(days=terms.weekly_interval_days * i)
            if not calendar.is_business_day(due):
                due = calendar.next_business_day(due)
            due_dates.append(due)

    schedule = [
        Installment(number=i, due_date=due, amount=amount, status=InstallmentStatus.PENDING)
        for i, due in enumerate(due_dates, start=1)
    ]
    logger.debug(
        "Generated %s schedule: %d x %d from %s to %s",
        frequency.value,
        count,
        amount,
        due_dates[0].isoformat(),
        due_dates[-1].isoformat(),
    )
    return schedule


def create_loan(
    loan_id: str,
    debtor_id: str,
    principal: int,
    start_date: date | str,
    frequency: Frequency | str,
    collector_id: str | None = None,
    created_at: datetime | None = None,
    calendar: HolidayCalendar | None = None,
    terms: LoanTermsConfig = DEFAULT_TERMS,
) -> Loan:
    """Create an ACTIVE loan with its total due and schedule filled in."""
    loan = Loan(
        loan_id=loan_id,
        debtor_id=debtor_id,
        principal=principal,
        total_due=calculate_total_due(principal, terms),
        start_date=to_date(start_date),
        frequency=parse_frequency(frequency),
        collector_id=collector_id,
        status=LoanStatus.ACTIVE,
        created_at=created_at,
    )
    loan.schedule = generate_schedule(loan, calendar=calendar, terms=terms)
    return loan
