from __future__ import annotations

import re
from datetime import datetime, time
from decimal import ROUND_HALF_UP, Decimal

MINUTES_PER_DAY = 24 * 60
TWO_PLACES = Decimal("0.01")
HHMM = re.compile(r"[0-9]{2}:[0-9]{2}")


class ParseError(ValueError):
    """Raised when client-supplied entry input cannot be parsed."""


def parse_hhmm(value: str) -> time:
    if not isinstance(value, str) or not HHMM.fullmatch(value.strip()):
        raise ParseError(f"Invalid time: {value!r}")
    try:
        return datetime.strptime(value.strip(), "%H:%M").time()
    except ValueError:
        raise ParseError(f"Invalid time: {value!r}") from None


def time_to_minutes(value: time) -> int:
    return value.hour * 60 + value.minute


def compute_hours(start: str, end: str) -> float:
    """Hours between two HH:MM wall-clock times, wrapping past midnight.

    Equal times give 0.0. The result is rounded half-up to 2 decimals.
    """
    diff = time_to_minutes(parse_hhmm(end)) - time_to_minutes(parse_hhmm(start))
    if diff < 0:
        diff += MINUTES_PER_DAY
    hours = (Decimal(diff) / 60).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    return float(hours)
