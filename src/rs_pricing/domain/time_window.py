"""Daily wall-clock windows ("HH:MM" to "HH:MM", no date, no zone)."""

import re
from datetime import time

from src.rs_common.errors import InvalidInputError

_HHMM = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def parse_hhmm(value: str) -> time:
    """Parse a 24-hour "HH:MM" string. Raises InvalidInputError on anything else."""
    if not isinstance(value, str):
        raise InvalidInputError(f"time must be an 'HH:MM' string, got {value!r}")
    match = _HHMM.match(value.strip())
    if match is None:
        raise InvalidInputError(f"time must be 'HH:MM' (00:00-23:59), got {value!r}")
    return time(int(match.group(1)), int(match.group(2)))


def format_hhmm(value: time) -> str:
    return f"{value.hour:02d}:{value.minute:02d}"


def is_within(now: time, start: time, end: time) -> bool:
    """True if *now* falls in the repeating daily window [start, end).

    start < end:  start <= now < end
    start > end:  the window crosses midnight, now >= start or now < end
    start == end: empty window, never active
    """
    if start == end:
        return False
    if start < end:
        return start <= now < end
    return now >= start or now < end
