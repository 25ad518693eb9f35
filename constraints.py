# constraints.py
# Time-window and enrollment policy applied to each section before the search commits to it.

from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping, Optional, Sequence

from conflicts import section_conflicts
from schedule_parser import MINUTES_PER_DAY, format_minutes, parse_clock
from sections import Section, SectionStatus

__all__ = [
    "Constraints",
    "REJECT_WINDOW",
    "REJECT_UNPARSEABLE",
    "REJECT_FULL",
    "REJECT_AT_RISK",
    "REJECT_CONFLICT",
    "rejection_reason",
    "is_admissible",
]

REJECT_UNPARSEABLE = "unparseable"
REJECT_WINDOW = "outside-window"
REJECT_FULL = "full"
REJECT_AT_RISK = "at-risk"
REJECT_CONFLICT = "conflict"

# camelCase keys as the scheduler UI sends them -> field names
_KEY_ALIASES = {
    "earliestStart": "earliest_start",
    "latestEnd": "latest_end",
    "allowFull": "allow_full",
    "allowAtRisk": "allow_at_risk",
    "maxFullPerSchedule": "max_full_per_schedule",
    "maxSchedules": "max_schedules",
    "preferredEnd": "preferred_end",
    "lateStart": "late_start",
}
_TIME_FIELDS = ("earliest_start", "latest_end", "preferred_end", "late_start")


@dataclass(frozen=True)
class Constraints:
    earliest_start: int = 7 * 60 + 30
    latest_end: int = 16 * 60 + 30
    allow_full: bool = False
    allow_at_risk: bool = True
    max_full_per_schedule: int = 1
    max_schedules: int = 20
    # Only feed ScheduleMeta; they never reject a section.
    preferred_end: Optional[int] = None
    late_start: int = 17 * 60

    def __post_init__(self):
        for name in _TIME_FIELDS:
            value = getattr(self, name)
            if value is None and name == "preferred_end":
                continue
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(f"{name} must be minutes since midnight (int), got {value!r}")
            if not 0 <= value < MINUTES_PER_DAY:
                raise ValueError(f"{name} out of range: {value}")
        if self.earliest_start >= self.latest_end:
            raise ValueError(
                f"earliest_start ({format_minutes(self.earliest_start)}) must be before "
                f"latest_end ({format_minutes(self.latest_end)})"
            )
        for name in ("max_full_per_schedule", "max_schedules"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(f"{name} must be an int, got {value!r}")
            if value < 0:
                raise ValueError(f"{name} must be >= 0, got {value}")
        # "false" from a form or JSON string is truthy; only real booleans are accepted.
        for name in ("allow_full", "allow_at_risk"):
            value = getattr(self, name)
            if not isinstance(value, bool):
                raise TypeError(f"{name} must be a bool, got {value!r}")

    @property
    def preferred_end_or_default(self) -> int:
        return self.latest_end if self.preferred_end is None else self.preferred_end

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], base: Optional["Constraints"] = None) -> "Constraints":
        """Build constraints from a loosely-keyed mapping.

        Accepts camelCase or snake_case keys and "HH:MM" strings or minute
        ints for the time fields. Keys not present fall back to ``base``
        (or the class defaults). Unknown keys are ignored.
        """
        if not isinstance(data, Mapping):
            raise TypeError(f"constraints must be a mapping, got {type(data).__name__}")
        merged: Dict[str, Any] = asdict(base) if base is not None else asdict(cls())
        for key, value in data.items():
            name = _KEY_ALIASES.get(key, key)
            if name not in merged:
                continue
            if name in _TIME_FIELDS and isinstance(value, str):
                value = parse_clock(value)
            merged[name] = value
        return cls(**merged)

    def to_public_dict(self) -> Dict[str, Any]:
        # Mirrors the shape the scheduler UI stores: times as "HH:MM".
        def clock(minutes):
            return None if minutes is None else f"{minutes // 60:02d}:{minutes % 60:02d}"

        return {
            "earliestStart": clock(self.earliest_start),
            "latestEnd": clock(self.latest_end),
            "allowFull": self.allow_full,
            "allowAtRisk": self.allow_at_risk,
            "maxFullPerSchedule": self.max_full_per_schedule,
            "maxSchedules": self.max_schedules,
            "preferredEnd": clock(self.preferred_end),
            "lateStart": clock(self.late_start),
        }


def rejection_reason(section: Section, chosen: Sequence[Section], constraints: Constraints) -> Optional[str]:
    # Returns why `section` cannot join `chosen`, or None if it can.
    parsed = section.parsed
    if parsed is None:
        # Window compliance cannot be verified for an unparseable string.
        return REJECT_UNPARSEABLE
    if parsed.start_time < constraints.earliest_start or parsed.end_time > constraints.latest_end:
        return REJECT_WINDOW

    status = section.status
    if status is SectionStatus.FULL:
        if not constraints.allow_full:
            return REJECT_FULL
        full_so_far = sum(1 for s in chosen if s.status is SectionStatus.FULL)
        if full_so_far >= constraints.max_full_per_schedule:
            return REJECT_FULL
    elif status is SectionStatus.AT_RISK and not constraints.allow_at_risk:
        return REJECT_AT_RISK

    if any(section_conflicts(section, other) for other in chosen):
        return REJECT_CONFLICT
    return None


def is_admissible(section: Section, chosen: Sequence[Section], constraints: Constraints) -> bool:
    return rejection_reason(section, chosen, constraints) is None
