"""Calculation engine for microloan accounting."""

from microloan.engine.calendar import (
    DEFAULT_CALENDAR,
    Holiday,
    HolidayCalendar,
    easter_sunday,
    holidays_for_year,
    is_business_day,
    next_business_day,
)
from microloan.engine.consolidation import consolidate, daily_cutoff, lifecycle_status, record_payment
from microloan.engine.payments import (
    apply_payment,
    determine_payment_type,
    next_payment,
    payment_suggestions,
    simulate_payment,
)
from microloan.engine.penalties import calculate_penalties
from microloan.engine.portfolio import penalty_report, portfolio_statistics
from microloan.engine.schedule import (
    calculate_total_due,
    create_loan,
    generate_schedule,
    interest_rates,
    quote_installment,
)
from microloan.engine.validation import validate_payment

__all__ = [
    "DEFAULT_CALENDAR",
    "Holiday",
    "HolidayCalendar",
    "apply_payment",
    "calculate_penalties",
    "calculate_total_due",
    "consolidate",
    "create_loan",
    "daily_cutoff",
    "determine_payment_type",
    "easter_sunday",
    "generate_schedule",
    "holidays_for_year",
    "interest_rates",
    "is_business_day",
    "lifecycle_status",
    "next_business_day",
    "next_payment",
    "payment_suggestions",
    "penalty_report",
    "portfolio_statistics",
    "quote_installment",
    "record_payment",
    "simulate_payment",
    "validate_payment",
]
