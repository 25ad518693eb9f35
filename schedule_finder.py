# schedule_finder.py
# Enumerates conflict-free section combinations (one per course) using a backtracking DFS.

import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from conflicts import section_conflicts
from constraints import Constraints, rejection_reason
from sections import Section, SectionStatus

__all__ = [
    "ScheduleMeta",
    "ScheduleCandidate",
    "SearchBudget",
    "SearchBudgetExceeded",
    "generate_schedules",
    "find_unresolvable_pairs",
    "section_conflicts",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScheduleMeta:
    ends_by_preferred: bool
    has_late: bool
    full_count: int
    latest_end: Optional[int] = None
    earliest_start: Optional[int] = None


@dataclass(frozen=True)
class ScheduleCandidate:
    selections: Tuple[Section, ...]  # one per course, in course order
    meta: ScheduleMeta


class SearchBudgetExceeded(Exception):
    """Raised when a :class:`SearchBudget` runs out before the search finishes.

    ``partial`` holds whatever schedules were found up to that point.
    """

    def __init__(self, message: str, partial: Sequence[ScheduleCandidate] = (), steps: int = 0):
        super().__init__(message)
        self.partial = list(partial)
        self.steps = steps


@dataclass
class SearchBudget:
    # Step and/or wall-clock cap a hosting service puts around one generation call.
    max_steps: Optional[int] = None
    max_seconds: Optional[float] = None
    steps: int = 0
    _deadline: Optional[float] = field(default=None, init=False, repr=False)

    def start(self) -> None:
        self.steps = 0
        self._deadline = None if self.max_seconds is None else time.monotonic() + self.max_seconds

    def exhausted(self) -> Optional[str]:
        if self.max_steps is not None and self.steps > self.max_steps:
            return f"step limit of {self.max_steps} exceeded"
        if self._deadline is not None and time.monotonic() > self._deadline:
            return f"time limit of {self.max_seconds}s exceeded"
        return None


def _check_courses(course_sections) -> None:
    if not isinstance(course_sections, (list, tuple)):
        raise TypeError(f"course_sections must be a list of section lists, got {type(course_sections).__name__}")
    for i, options in enumerate(course_sections):
        if not isinstance(options, (list, tuple)):
            raise TypeError(f"course #{i} must be a list of Section, got {type(options).__name__}")
        for j, sec in enumerate(options):
            if not isinstance(sec, Section):
                raise TypeError(f"course #{i} entry #{j} is not a Section: {sec!r}")


def _build_meta(selections: Sequence[Section], constraints: Constraints) -> ScheduleMeta:
    parsed = [s.parsed for s in selections if s.parsed is not None]
    latest_end = max((p.end_time for p in parsed), default=None)
    earliest_start = min((p.start_time for p in parsed), default=None)
    return ScheduleMeta(
        ends_by_preferred=latest_end is None or latest_end <= constraints.preferred_end_or_default,
        has_late=any(p.start_time >= constraints.late_start for p in parsed),
        full_count=sum(1 for s in selections if s.status is SectionStatus.FULL),
        latest_end=latest_end,
        earliest_start=earliest_start,
    )


def generate_schedules(
    course_sections: Sequence[Sequence[Section]],
    constraints: Constraints,
    budget: Optional[SearchBudget] = None,
) -> List[ScheduleCandidate]:
    """Return up to ``constraints.max_schedules`` valid schedules in discovery order.

    Courses are decided in the order given and each course's sections are
    tried in the order given, so the first result is the one built from the
    earliest admissible section of every course. No further ranking happens
    here; re-sorting is left to the consumer.

    An empty course list yields no schedules. Unsatisfiable input yields an
    empty list, never an error. Malformed arguments raise ``TypeError``.
    If ``budget`` is given and runs out, :class:`SearchBudgetExceeded` is raised.
    """
    if not isinstance(constraints, Constraints):
        raise TypeError(f"constraints must be a Constraints instance, got {type(constraints).__name__}")
    _check_courses(course_sections)

    cap = constraints.max_schedules
    if not course_sections or cap == 0:
        return []

    if budget is not None:
        budget.start()

    schedules: List[ScheduleCandidate] = []  # Final list of valid schedules.
    stack: List[Section] = []  # The current path (partial schedule) in the DFS traversal.
    n_courses = len(course_sections)

    def dfs(i: int) -> None:
        if i == n_courses:
            # Base case: a complete schedule, record it with its metadata.
            schedules.append(ScheduleCandidate(tuple(stack), _build_meta(stack, constraints)))
            return

        admitted = 0
        for sec in course_sections[i]:
            # Once the cap is hit the whole search stops, not just this branch.
            if len(schedules) >= cap:
                return
            if budget is not None:
                budget.steps += 1
                reason = budget.exhausted()
                if reason:
                    raise SearchBudgetExceeded(reason, schedules, budget.steps)

            # Prune this branch if the section breaks a constraint or clashes with the current path.
            if rejection_reason(sec, stack, constraints) is not None:
                continue
            admitted += 1
            stack.append(sec)
            try:
                dfs(i + 1)
            finally:
                stack.pop()

        if not admitted:
            logger.debug("Dead end at course #%d with %d sections chosen", i, len(stack))

    started = time.perf_counter()
    dfs(0)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(
        "Generated %d schedule(s) for %d course(s) in %.1fms (cap %d)",
        len(schedules),
        n_courses,
        elapsed_ms,
        cap,
    )
    return schedules


def find_unresolvable_pairs(
    course_sections: Sequence[Sequence[Section]],
    labels: Optional[Sequence[str]] = None,
) -> List[List[str]]:
    # Pairs of courses for which every section of one clashes with every section of the other.
    _check_courses(course_sections)
    if labels is None:
        labels = [f"course #{i}" for i in range(len(course_sections))]

    bad_pairs: List[List[str]] = []
    for i in range(len(course_sections)):
        for j in range(i + 1, len(course_sections)):
            a, b = course_sections[i], course_sections[j]
            if not a or not b:
                continue
            if not any(not section_conflicts(sa, sb) for sa in a for sb in b):
                bad_pairs.append([labels[i], labels[j]])
    return bad_pairs
