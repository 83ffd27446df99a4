"""Reservation date window: today through a number of calendar months ahead."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum

DEFAULT_WINDOW_MONTHS = 3


class DateRejection(str, Enum):
    IN_PAST = "in_past"
    TOO_FAR = "too_far"


REJECTION_MESSAGES: dict[DateRejection, str] = {
    DateRejection.IN_PAST: "Reservation date must be today or in the future",
    DateRejection.TOO_FAR: "Reservation date may not be more than three months in the future",
}


@dataclass(frozen=True)
class DateCheck:
    accepted: bool
    reason: DateRejection | None = None

    @property
    def message(self) -> str | None:
        return REJECTION_MESSAGES[self.reason] if self.reason else None


def _as_date(value: date | datetime) -> date:
    # datetime is a subclass of date, so test it first
    if isinstance(value, datetime):
        return value.date()
    return value


def today_for(now: date | datetime) -> date:
    """Return the reference moment truncated to midnight."""
    return _as_date(now)


def add_calendar_months(day: date, months: int) -> date:
    """
    Shift ``day`` by whole calendar months.

    A day of month the target month does not have rolls over into the
    following month, so Jan 31 + 3 months is "Apr 31", i.e. May 1.
    """
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    return date(year, month, 1) + timedelta(days=day.day - 1)


def booking_window(now: date | datetime, *, months: int = DEFAULT_WINDOW_MONTHS) -> tuple[date, date]:
    """Return the inclusive (first, last) reservation dates for ``now``."""
    today = today_for(now)
    return today, add_calendar_months(today, months)


def check_reservation_date(
    candidate: date | datetime,
    now: date | datetime,
    *,
    months: int = DEFAULT_WINDOW_MONTHS,
) -> DateCheck:
    """Accept ``candidate`` or reject it with the rule it breaks."""
    first, last = booking_window(now, months=months)
    day = _as_date(candidate)
    if day < first:
        return DateCheck(accepted=False, reason=DateRejection.IN_PAST)
    if day > last:
        return DateCheck(accepted=False, reason=DateRejection.TOO_FAR)
    return DateCheck(accepted=True)
