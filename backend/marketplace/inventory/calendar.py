"""Per-date availability calendar and stay-range validation.

A calendar is a plain mapping of calendar day to availability flag. Keying by
date means a property can never hold two entries for the same night.

Every date that enters this module goes through :func:`normalize_date`, the
one canonical normalization (UTC calendar day) shared by storage, browsing,
and validation.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Any

from marketplace.config import settings
from marketplace.errors import ValidationError

Calendar = dict[date, bool]


@dataclass(frozen=True)
class RangeCheck:
    """Outcome of validating a stay against a calendar."""

    ok: bool
    unavailable_dates: list[date] = field(default_factory=list)


def normalize_date(value: date | datetime | str) -> date:
    """Reduce a date-like value to its UTC calendar day.

    Aware datetimes are converted to UTC first; naive ones are taken to be
    UTC already. Strings are parsed as ISO-8601 (``2025-06-01`` or a full
    timestamp such as ``2025-06-01T22:30:00-05:00``).
    """
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValidationError("Date must not be empty")
        try:
            if len(text) == 10:
                return date.fromisoformat(text)
            value = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            raise ValidationError(f"Invalid date: {text!r}") from None

    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    raise ValidationError(f"Unsupported date value: {value!r}")


def _entry_fields(entry: Any) -> tuple[Any, bool]:
    if isinstance(entry, Mapping):
        if "date" not in entry or "available" not in entry:
            raise ValidationError("Inventory entries need both date and available")
        return entry["date"], bool(entry["available"])
    return entry.date, bool(entry.available)


def build_calendar(entries: Iterable[Any]) -> Calendar:
    """Build a calendar from entry objects or ``{"date", "available"}`` mappings.

    Both keys are required; a missing flag never opens a night.

    Raises ``ValidationError`` if an entry lacks a field or two entries fall
    on the same day.
    """
    calendar: Calendar = {}
    for entry in entries:
        raw_date, available = _entry_fields(entry)
        day = normalize_date(raw_date)
        if day in calendar:
            raise ValidationError(f"Duplicate inventory entry for {day.isoformat()}")
        calendar[day] = available
    return calendar


def is_available(calendar: Mapping[date, bool], day: date | datetime | str) -> bool:
    """True only if the day has an entry and that entry is flagged available.

    A day with no entry is *not* available.
    """
    return calendar.get(normalize_date(day), False) is True


def set_availability(
    calendar: Mapping[date, bool],
    day: date | datetime | str,
    available: bool,
) -> Calendar:
    """Return a copy of ``calendar`` with ``day`` set to ``available``."""
    updated = dict(calendar)
    updated[normalize_date(day)] = bool(available)
    return updated


def expand_range(check_in: date | datetime | str, check_out: date | datetime | str) -> list[date]:
    """List the nights of a stay: check-in inclusive, check-out exclusive.

    Returns an empty list when check-in is not before check-out.
    """
    start = normalize_date(check_in)
    end = normalize_date(check_out)
    nights = []
    current = start
    while current < end:
        nights.append(current)
        current += timedelta(days=1)
    return nights


def _check_stay_length(check_in: date | datetime | str, check_out: date | datetime | str) -> None:
    nights = (normalize_date(check_out) - normalize_date(check_in)).days
    if nights > settings.max_stay_nights:
        raise ValidationError(f"Stays are limited to {settings.max_stay_nights} nights")


def require_valid_range(check_in: date | datetime | str, check_out: date | datetime | str) -> list[date]:
    """Expand a stay, raising ``ValidationError`` if it covers no nights or too many.

    The length is checked before any night is expanded.
    """
    _check_stay_length(check_in, check_out)
    nights = expand_range(check_in, check_out)
    if not nights:
        raise ValidationError("check_out must be after check_in")
    return nights


def validate_range(
    calendar: Mapping[date, bool],
    check_in: date | datetime | str,
    check_out: date | datetime | str,
) -> RangeCheck:
    """Check every night of a stay, collecting all that are absent or unavailable.

    Raises ``ValidationError`` for stays longer than ``max_stay_nights``.
    """
    _check_stay_length(check_in, check_out)
    nights = expand_range(check_in, check_out)
    if not nights:
        return RangeCheck(ok=False)
    unavailable = [night for night in nights if not is_available(calendar, night)]
    return RangeCheck(ok=not unavailable, unavailable_dates=unavailable)


def utc_today() -> date:
    return datetime.now(timezone.utc).date()
