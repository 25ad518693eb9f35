# sections.py
# Canonical section type handed to the engine, plus enrollment-status classification.

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from schedule_parser import ParsedSchedule, parse_schedule

__all__ = ["SectionStatus", "Section", "classify_enrollment"]


class SectionStatus(str, Enum):
    OK = "OK"
    FULL = "FULL"
    AT_RISK = "AT-RISK"


def classify_enrollment(current: int, total: int) -> SectionStatus:
    # FULL wins over AT_RISK; a section with 0/0 counts as full.
    if current >= total:
        return SectionStatus.FULL
    if current == 0 or (total >= 20 and current < 6) or (total >= 10 and current < 2):
        return SectionStatus.AT_RISK
    return SectionStatus.OK


@dataclass(frozen=True)
class Section:
    """One candidate meeting slot of a course.

    Only ``group_id``, ``raw_schedule`` and the enrollment counts matter to
    the search; the remaining fields ride along for whoever renders or
    persists the result.
    """

    group_id: int
    raw_schedule: str
    enrolled_current: int = 0
    enrolled_total: int = 0
    course_code: Optional[str] = None
    course_name: Optional[str] = None
    room: Optional[str] = None
    instructor: Optional[str] = None

    @property
    def status(self) -> SectionStatus:
        return classify_enrollment(self.enrolled_current, self.enrolled_total)

    @property
    def parsed(self) -> Optional[ParsedSchedule]:
        return parse_schedule(self.raw_schedule)

    @property
    def enrolled(self) -> str:
        return f"{self.enrolled_current}/{self.enrolled_total}"
