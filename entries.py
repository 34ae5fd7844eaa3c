from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Mapping, Optional

from timecalc import ParseError, compute_hours, parse_hhmm

DEFAULT_SITE_LOCATION = "Office"

# Sunday first, matching the day-of-week index used by the stored records.
DAY_NAMES = [
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
]

MONTH_NAMES = [
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
]


@dataclass(frozen=True)
class EntryFields:
    """Everything stored for an entry except what the store assigns."""

    date: date
    start_time: str
    end_time: str
    total_hours: float
    day: str
    month: str
    year: int
    site_location: str


@dataclass
class TimeEntry:
    id: int
    date: date
    start_time: str
    end_time: str
    total_hours: float
    day: str
    month: str
    year: int
    site_location: str
    created_at: str
    updated_at: str


def day_name(value: date) -> str:
    # date.weekday() is Monday=0; shift so Sunday=0.
    return DAY_NAMES[(value.weekday() + 1) % 7]


def month_name(month: int) -> str:
    if not 1 <= month <= 12:
        raise ParseError(f"Invalid month: {month!r}")
    return MONTH_NAMES[month - 1]


def resolve_month(value: str) -> str:
    """Accept a full month name (any case) or a number 1-12."""
    cleaned = str(value).strip()
    if cleaned.isdigit():
        return month_name(int(cleaned))
    for name in MONTH_NAMES:
        if name.lower() == cleaned.lower():
            return name
    raise ParseError(f"Invalid month: {value!r}")


def parse_entry_date(value: object) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ParseError("date is required")
    raw = value.strip()
    try:
        return datetime.strptime(raw, "%Y-%m-%d").date()
    except ValueError:
        pass
    # Full ISO timestamps as echoed back by clients, e.g. 2024-01-05T00:00:00.000Z
    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00")).date()
    except ValueError:
        raise ParseError(f"Invalid date: {value!r}") from None


def _required(raw: Mapping[str, object], key: str) -> str:
    value = raw.get(key)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ParseError(f"{key} is required")
    if not isinstance(value, str):
        raise ParseError(f"Invalid {key}: {value!r}")
    return value.strip()


def _site_location(value: Optional[object]) -> str:
    if value is None:
        return DEFAULT_SITE_LOCATION
    if not isinstance(value, str):
        raise ParseError(f"Invalid siteLocation: {value!r}")
    cleaned = value.strip()
    return cleaned or DEFAULT_SITE_LOCATION


def normalize(raw: Mapping[str, object]) -> EntryFields:
    """Build the stored field set from raw client input.

    `raw` uses the wire keys: date, startTime, endTime and optional siteLocation.
    """
    if not isinstance(raw, Mapping):
        raise ParseError("request body must be a JSON object")
    entry_date = parse_entry_date(raw.get("date"))
    start_time = parse_hhmm(_required(raw, "startTime")).strftime("%H:%M")
    end_time = parse_hhmm(_required(raw, "endTime")).strftime("%H:%M")
    total_hours = compute_hours(start_time, end_time)
    return EntryFields(
        date=entry_date,
        start_time=start_time,
        end_time=end_time,
        total_hours=total_hours,
        day=day_name(entry_date),
        month=month_name(entry_date.month),
        year=entry_date.year,
        site_location=_site_location(raw.get("siteLocation")),
    )
