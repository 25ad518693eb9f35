# schedule_parser.py
# Turns meeting-time strings like "MW 10:00 AM - 11:30 AM" into days and minute-of-day ranges.

import re
from functools import lru_cache
from typing import List, NamedTuple, Optional, Tuple

__all__ = ["DAY_CODES", "ParsedSchedule", "parse_schedule", "parse_days", "parse_clock", "format_minutes"]

DAY_CODES = ("M", "T", "W", "Th", "F")

MINUTES_PER_DAY = 24 * 60

_SCHEDULE_RE = re.compile(
    r"^\s*(?P<days>[A-Za-z]+)\s+"
    r"(?P<start>\d{1,2}:\d{2}\s*[AaPp][Mm])\s*-\s*"
    r"(?P<end>\d{1,2}:\d{2}\s*[AaPp][Mm])\s*$"
)
_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})\s*([AaPp])[Mm]$")
_CLOCK_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*$")


class ParsedSchedule(NamedTuple):
    days: Tuple[str, ...]
    start_time: int  # minutes since midnight
    end_time: int


def parse_days(letters: str) -> Optional[Tuple[str, ...]]:
    # "TTh" -> ("T", "Th"); a T directly followed by h is Thursday, any other T is Tuesday.
    days: List[str] = []
    i = 0
    while i < len(letters):
        ch = letters[i].upper()
        if ch == "T" and i + 1 < len(letters) and letters[i + 1] in "hH":
            days.append("Th")
            i += 2
            continue
        if ch not in ("M", "T", "W", "F"):
            return None
        days.append(ch)
        i += 1
    return tuple(days) if days else None


def _to_minutes(text: str) -> Optional[int]:
    # 12-hour clock to minutes since midnight; 12 AM is 0:xx, 12 PM stays 12:xx.
    m = _TIME_RE.match(text.strip())
    if not m:
        return None
    hour, minute, half = int(m.group(1)), int(m.group(2)), m.group(3).upper()
    if not 1 <= hour <= 12 or minute > 59:
        return None
    hour %= 12
    if half == "P":
        hour += 12
    return hour * 60 + minute


@lru_cache(maxsize=4096)
def _parse_cached(text: str) -> Optional[ParsedSchedule]:
    m = _SCHEDULE_RE.match(text)
    if not m:
        return None

    days = parse_days(m.group("days"))
    start = _to_minutes(m.group("start"))
    end = _to_minutes(m.group("end"))
    if days is None or start is None or end is None or end <= start:
        return None
    return ParsedSchedule(days, start, end)


def parse_schedule(text) -> Optional[ParsedSchedule]:
    """Parse a meeting string into a :class:`ParsedSchedule`.

    Malformed input is an expected case and yields ``None`` rather than an
    exception. Results are memoized by the raw string since the same
    meeting strings repeat across many sections.
    """
    if not isinstance(text, str):
        return None
    return _parse_cached(text)


def parse_clock(value: str) -> int:
    # 24-hour "HH:MM" (as used for constraint windows) to minutes since midnight.
    m = _CLOCK_RE.match(value) if isinstance(value, str) else None
    if not m:
        raise ValueError(f"expected a HH:MM time, got {value!r}")
    hour, minute = int(m.group(1)), int(m.group(2))
    if hour > 23 or minute > 59:
        raise ValueError(f"time out of range: {value!r}")
    return hour * 60 + minute


def format_minutes(minutes: int) -> str:
    hour, minute = divmod(int(minutes), 60)
    half = "AM" if hour < 12 else "PM"
    return f"{hour % 12 or 12}:{minute:02d} {half}"
