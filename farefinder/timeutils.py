"""Weekday ranges and date-range helpers used to pick travel windows."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from enum import IntEnum

DATE_FORMAT = "%Y-%m-%d"


class Weekday(IntEnum):
    """Days of the week, numbered from Sunday = 0."""

    SUNDAY = 0
    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6


def _weekday_of(day: date) -> Weekday:
    return Weekday((day.weekday() + 1) % 7)


def determine_range(current_day, now: datetime | None = None) -> tuple[Weekday, Weekday]:
    """Return the (start, end) weekdays to consider for ``current_day``.

    The final day's data is only available from 13:00, so before then the
    range is one day shorter.
    """
    now = now or datetime.now()
    one_pm = datetime.combine(now.date(), time(13, 0), tzinfo=now.tzinfo)
    try:
        day = Weekday(current_day)
    except ValueError:
        return Weekday.THURSDAY, Weekday.MONDAY
    start = Weekday((day + 1) % 7)
    span = 3 if now < one_pm else 4
    end = Weekday((start + span) % 7)
    return start, end


def should_include_day(day, start_day, end_day) -> bool:
    """Tell whether ``day`` lies in the wrapping range ``start_day``..``end_day``."""
    current = start_day
    while current != end_day:
        if current == day:
            return True
        current = (current + 1) % 7
    return day == end_day


_ROTATION_STARTS = {
    Weekday.SATURDAY,
    Weekday.SUNDAY,
    Weekday.MONDAY,
    Weekday.TUESDAY,
    Weekday.FRIDAY,
}


def get_days_order(now: datetime | None = None) -> tuple[list[Weekday], Weekday, Weekday]:
    """Return the week's display order together with the active start and end day."""
    now = now or datetime.now()
    current = _weekday_of(now)
    start_day, end_day = determine_range(current, now)
    first = current if current in _ROTATION_STARTS else Weekday.WEDNESDAY
    order = [Weekday((first + offset) % 7) for offset in range(7)]
    return order, start_day, end_day


def list_dates_between(start: str, end: str) -> list[str]:
    """List every date from ``start`` to ``end`` inclusive as YYYY-MM-DD strings."""
    try:
        start_date = datetime.strptime(start, DATE_FORMAT).date()
    except ValueError as err:
        raise ValueError(f"invalid start date: {err}") from err
    try:
        end_date = datetime.strptime(end, DATE_FORMAT).date()
    except ValueError as err:
        raise ValueError(f"invalid end date: {err}") from err

    count = (end_date - start_date).days + 1
    return [(start_date + timedelta(days=n)).strftime(DATE_FORMAT) for n in range(max(count, 0))]


def calculate_date_range(base_day: date, duration: int) -> tuple[str, str]:
    """Return start and end dates of a ``duration``-day span beginning on ``base_day``."""
    start = base_day.strftime(DATE_FORMAT)
    end = (base_day + timedelta(days=duration - 1)).strftime(DATE_FORMAT)
    return start, end


def get_next_weekday(base_day: date, weekday, include_current: bool) -> date:
    """Find the next ``weekday`` on or after ``base_day``.

    ``base_day`` itself is returned only if it matches and ``include_current`` is set.
    """
    days_ahead = int(weekday) - int(_weekday_of(base_day))
    if days_ahead < 0 or (not include_current and days_ahead == 0):
        days_ahead += 7
    return base_day + timedelta(days=days_ahead)


def calculate_weekend_range(
    week_offset: int, now: datetime | None = None
) -> tuple[str, str, str, str]:
    """Return departure and arrival windows for the weekend ``week_offset`` weeks ahead.

    Departures run Wednesday to Saturday; arrivals run from the following
    Sunday to Wednesday.
    """
    now = now or datetime.now()
    base_day = now + timedelta(days=7 * week_offset)
    wednesday = get_next_weekday(base_day, Weekday.WEDNESDAY, week_offset == 0)
    departure_start, departure_end = calculate_date_range(wednesday, 4)
    sunday = wednesday + timedelta(days=4)
    arrival_start, arrival_end = calculate_date_range(sunday, 4)
    return departure_start, departure_end, arrival_start, arrival_end