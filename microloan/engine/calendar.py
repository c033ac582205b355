"""Colombian business-day calendar.

Business days run Monday to Saturday, excluding statutory holidays. Holidays
are computed per year rather than maintained by hand:

- six holidays fixed to their calendar date;
- seven holidays observed on the following Monday when their date is not a
  Monday (Ley 51 de 1983, "Ley Emiliani"), plus Ascension, Corpus Christi and
  Sacred Heart, whose anchors are Easter + 39, + 60 and + 68 days and which
  move to Monday the same way;
- Holy Thursday and Good Friday, fixed relative to Easter and never moved.

Easter Sunday comes from the Meeus/Jones/Butcher algorithm, so only integer
arithmetic is needed.
"""

from __future__ import annotations

import logging
from collections.abc import MutableMapping
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from microloan.exceptions import InvalidScheduleInput

logger = logging.getLogger(__name__)

FIXED_HOLIDAYS = (
    (1, 1, "Año Nuevo"),
    (5, 1, "Día del Trabajo"),
    (7, 20, "Día de la Independencia"),
    (8, 7, "Batalla de Boyacá"),
    (12, 8, "Inmaculada Concepción"),
    (12, 25, "Navidad"),
)

MONDAY_HOLIDAYS = (
    (1, 6, "Reyes Magos"),
    (3, 19, "San José"),
    (6, 29, "San Pedro y San Pablo"),
    (8, 15, "Asunción de la Virgen"),
    (10, 12, "Día de la Raza"),
    (11, 1, "Todos los Santos"),
    (11, 11, "Independencia de Cartagena"),
)

# Offsets from Easter Sunday
EASTER_MONDAY_HOLIDAYS = (
    (39, "Ascensión del Señor"),
    (60, "Corpus Christi"),
    (68, "Sagrado Corazón"),
)
EASTER_FIXED_HOLIDAYS = (
    (-3, "Jueves Santo"),
    (-2, "Viernes Santo"),
)


@dataclass(frozen=True)
class Holiday:
    """A holiday as observed in a given year."""

    day: date
    name: str
    moved: bool = False


def easter_sunday(year: int) -> date:
    """Return Easter Sunday for ``year`` (Gregorian calendar)."""
    a = year % 19
    b = year // 100
    c = year % 100
    d = b // 4
    e = b % 4
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i = c // 4
    k = c % 4
    l = (32 + 2 * e + 2 * i - h - k) % 7
    m = (a + 11 * h + 22 * l) // 451
    month = (h + l - 7 * m + 114) // 31
    day = (h + l - 7 * m + 114) % 31 + 1
    return date(year, month, day)


def move_to_monday(day: date) -> date:
    """Return ``day`` if it is a Monday, otherwise the following Monday."""
    weekday = day.weekday()
    if weekday == 0:
        return day
    return day + timedelta(days=7 - weekday)


def to_date(value: date | datetime | str) -> date:
    """Coerce a date, datetime or ISO ``YYYY-MM-DD`` string to a date.

    Raises
    ------
    InvalidScheduleInput
        If the value cannot be interpreted as a calendar date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError as exc:
            raise InvalidScheduleInput(f"Invalid date: {value!r}") from exc
    raise InvalidScheduleInput(f"Invalid date: {value!r}")


def compute_holidays(year: int) -> tuple[Holiday, ...]:
    """Compute the observed holidays of ``year``, sorted by date.

    Two rules can land on the same Monday (e.g. San Pedro and Sagrado
    Corazón in 2025); such dates appear once with both names.
    """
    easter = easter_sunday(year)
    observed: list[Holiday] = []

    for month, day, name in FIXED_HOLIDAYS:
        observed.append(Holiday(date(year, month, day), name))

    for month, day, name in MONDAY_HOLIDAYS:
        anchor = date(year, month, day)
        moved = move_to_monday(anchor)
        observed.append(Holiday(moved, name, moved=moved != anchor))

    for offset, name in EASTER_FIXED_HOLIDAYS:
        observed.append(Holiday(easter + timedelta(days=offset), name))

    for offset, name in EASTER_MONDAY_HOLIDAYS:
        anchor = easter + timedelta(days=offset)
        moved = move_to_monday(anchor)
        observed.append(Holiday(moved, name, moved=moved != anchor))

    by_day: dict[date, Holiday] = {}
    for holiday in sorted(observed, key=lambda h: h.day):
        existing = by_day.get(holiday.day)
        if existing is None:
            by_day[holiday.day] = holiday
        else:
            by_day[holiday.day] = Holiday(
                holiday.day,
                f"{existing.name} / {holiday.name}",
                moved=existing.moved or holiday.moved,
            )
    return tuple(by_day.values())


class HolidayCalendar:
    """Business-day calendar with a per-year holiday cache.

    Parameters
    ----------
    cache : MutableMapping[int, tuple[Holiday, ...]] | None
        Storage for computed years. Pass a shared mapping to reuse results
        across calendars; defaults to a private dict. Entries are written
        once per year and only read afterwards, so concurrent readers at
        worst compute the same (identical) year twice.
    """

    def __init__(self, cache: MutableMapping[int, tuple[Holiday, ...]] | None = None) -> None:
        self._cache: MutableMapping[int, tuple[Holiday, ...]] = {} if cache is None else cache

    def named_holidays_for_year(self, year: int) -> tuple[Holiday, ...]:
        """Holidays of ``year`` with their names, sorted by date."""
        holidays = self._cache.get(year)
        if holidays is None:
            holidays = compute_holidays(year)
            holidays = self._cache.setdefault(year, holidays)
            logger.debug("Computed %d holidays for %d", len(holidays), year)
        return holidays

    def holidays_for_year(self, year: int) -> tuple[date, ...]:
        """Sorted, de-duplicated holiday dates of ``year``."""
        return tuple(h.day for h in self.named_holidays_for_year(year))

    def is_holiday(self, day: date | datetime | str) -> bool:
        day = to_date(day)
        return day in self.holidays_for_year(day.year)

    def is_business_day(self, day: date | datetime | str) -> bool:
        """True for Monday to Saturday unless the date is a holiday."""
        day = to_date(day)
        if day.weekday() == 6:
            return False
        return not self.is_holiday(day)

    def next_business_day(self, day: date | datetime | str) -> date:
        """First business day strictly after ``day``."""
        candidate = to_date(day) + timedelta(days=1)
        while not self.is_business_day(candidate):
            candidate += timedelta(days=1)
        return candidate

    def upcoming_holidays(self, reference: date | datetime | str, years: int = 3) -> list[date]:
        """Holidays of the reference year and the ``years - 1`` following ones."""
        start = to_date(reference).year
        result: list[date] = []
        for year in range(start, start + years):
            result.extend(self.holidays_for_year(year))
        return result

    def holiday_coverage(self, reference: date | datetime | str) -> dict[str, object]:
        """Report which years have holidays available.

        Holidays are computed, so every year is covered; the counts let an
        operator sanity-check the rules.
        """
        year = to_date(reference).year
        return {
            "current_year": {
                "year": year,
                "covered": True,
                "count": len(self.holidays_for_year(year)),
            },
            "next_year": {
                "year": year + 1,
                "covered": True,
                "count": len(self.holidays_for_year(year + 1)),
            },
            "requires_update": False,
        }

    def clear_cache(self) -> None:
        """Forget every computed year."""
        self._cache.clear()

    @property
    def cached_years(self) -> list[int]:
        """Years whose holidays are currently cached, ascending."""
        return sorted(self._cache)


DEFAULT_CALENDAR = HolidayCalendar()


def is_business_day(day: date | datetime | str, calendar: HolidayCalendar | None = None) -> bool:
    """Check ``day`` against ``calendar`` (the shared default when omitted)."""
    return (calendar or DEFAULT_CALENDAR).is_business_day(day)


def next_business_day(day: date | datetime | str, calendar: HolidayCalendar | None = None) -> date:
    """Next business day after ``day`` using ``calendar`` or the shared default."""
    return (calendar or DEFAULT_CALENDAR).next_business_day(day)


def holidays_for_year(year: int, calendar: HolidayCalendar | None = None) -> tuple[date, ...]:
    """Holiday dates of ``year`` using ``calendar`` or the shared default."""
    return (calendar or DEFAULT_CALENDAR).holidays_for_year(year)
