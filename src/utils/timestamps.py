"""ISO-8601 → epoch millisecond conversion for TheHive date fields."""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# Sentinel emits 7 fractional digits ("2025-01-30T14:32:15.1234567Z"), other
# sources 1-3; fromisoformat on 3.10 only accepts exactly 3 or 6.
_FRACTION = re.compile(r"\.(\d+)")


def _six_digit_fraction(match: re.Match) -> str:
    return "." + match.group(1)[:6].ljust(6, "0")


def to_epoch_millis(value: str | datetime) -> int:
    """Convert an ISO-8601 string or datetime to integer epoch milliseconds.

    Naive values are treated as UTC.
    """
    if isinstance(value, datetime):
        dt = value
    else:
        normalized = _FRACTION.sub(_six_digit_fraction, value.strip().replace("Z", "+00:00"))
        dt = datetime.fromisoformat(normalized)

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)

    return (dt - _EPOCH) // timedelta(milliseconds=1)
