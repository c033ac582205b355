"""Loan and payment history generators."""

from __future__ import annotations

import random
from datetime import date, datetime, time, timedelta

from microloan.config import DEFAULT_TERMS, LoanTermsConfig
from microloan.engine.calendar import DEFAULT_CALENDAR, HolidayCalendar
from microloan.engine.schedule import create_loan
from microloan.generators.base import BaseGenerator
from microloan.models.enums import Frequency, PaymentMethod
from microloan.models.loan import Loan, Payment


class LoanGenerator(BaseGenerator):
    """Generate synthetic microloans with their schedules."""

    # Principal is lent in multiples of 50,000 COP
    PRINCIPAL_STEP = 50_000
    PRINCIPAL_RANGE = (2, 40)  # 100,000 to 2,000,000

    # How far back a loan may have started
    MAX_AGE_DAYS = 45

    def __init__(
        self,
        seed: int | None = None,
        calendar: HolidayCalendar | None = None,
        terms: LoanTermsConfig = DEFAULT_TERMS,
    ) -> None:
        super().__init__(seed)
        self.calendar = calendar or DEFAULT_CALENDAR
        self.terms = terms

    def generate(
        self,
        debtor_id: str,
        collector_id: str | None,
        reference_date: date,
        frequency: Frequency | None = None,
        weekly_rate: float = 0.30,
    ) -> Loan:
        """Generate a loan that started on a business day before ``reference_date``.

        Parameters
        ----------
        debtor_id : str
            Borrower of the loan.
        collector_id : str | None
            Collector responsible for the loan.
        reference_date : date
            Date the portfolio is observed at.
        frequency : Frequency | None
            Payment frequency; drawn at random when omitted.
        weekly_rate : float
            Probability of a weekly loan when ``frequency`` is omitted.

        Returns
        -------
        Loan
            Active loan with its schedule and no payments.
        """
        if frequency is None:
            frequency = Frequency.WEEKLY if random.random() < weekly_rate else Frequency.DAILY

        principal = random.randint(*self.PRINCIPAL_RANGE) * self.PRINCIPAL_STEP
        start = reference_date - timedelta(days=random.randint(1, self.MAX_AGE_DAYS))
        if not self.calendar.is_business_day(start):
            start = self.calendar.next_business_day(start)

        return create_loan(
            loan_id=self.fake.uuid4(),
            debtor_id=debtor_id,
            principal=principal,
            start_date=start,
            frequency=frequency,
            collector_id=collector_id,
            created_at=datetime.combine(start, time(random.randint(8, 17), random.randint(0, 59))),
            calendar=self.calendar,
            terms=self.terms,
        )


class PaymentBehavior(BaseGenerator):
    """Simulate how debtors pay their installments."""

    METHODS = list(PaymentMethod)
    METHOD_WEIGHTS = [0.60, 0.10, 0.15, 0.10, 0.05]

    def generate_payments(
        self,
        loan: Loan,
        reference_date: date,
        on_time_rate: float = 0.70,
        late_rate: float = 0.20,
        default_rate: float = 0.10,
    ) -> list[Payment]:
        """Generate the payments a debtor made on ``loan`` up to ``reference_date``.

        Parameters
        ----------
        loan : Loan
            Loan with its schedule.
        reference_date : date
            No payment is dated after this day.
        on_time_rate : float
            Probability the debtor always pays on the due date.
        late_rate : float
            Probability the debtor pays late, occasionally or always.
        default_rate : float
            Probability the debtor pays a few installments and then stops.

        Returns
        -------
        list[Payment]
            Payments in date order, one per installment paid.
        """
        behavior = random.choices(
            ["good", "occasional_late", "chronic_late", "defaulter"],
            weights=[on_time_rate, late_rate * 0.7, late_rate * 0.3, default_rate],
            k=1,
        )[0]
        stop_after = random.randint(2, 6) if behavior == "defaulter" else None

        payments = []
        for installment in loan.schedule:
            if installment.due_date > reference_date:
                break
            if stop_after is not None and installment.number > stop_after:
                break

            if behavior == "good":
                delay = 0
            elif behavior == "occasional_late":
                delay = 0 if random.random() < 0.8 else random.randint(1, 5)
            else:
                delay = random.randint(1, 6)

            paid_on = installment.due_date + timedelta(days=delay)
            if paid_on > reference_date:
                continue
            payments.append(self._payment(loan, installment.amount, paid_on))

        return sorted(payments, key=lambda p: p.payment_date)

    def _payment(self, loan: Loan, amount: int, paid_on: date) -> Payment:
        method = random.choices(self.METHODS, weights=self.METHOD_WEIGHTS, k=1)[0]
        return Payment(
            amount=amount,
            payment_date=paid_on,
            method=method,
            loan_id=loan.loan_id,
            collector_id=loan.collector_id,
            debtor_id=loan.debtor_id,
            payment_id=self.fake.uuid4(),
        )
