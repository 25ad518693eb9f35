# app.py
# Minimal Flask API that embeds the schedule engine for a scheduler frontend.

import logging
import time
from typing import Any, Dict, List, Tuple

from flask import Flask, jsonify, request

from config import load_config
from constraints import Constraints
from logging_setup import setup_logging
from schedule_finder import (
    ScheduleCandidate,
    SearchBudget,
    SearchBudgetExceeded,
    find_unresolvable_pairs,
    generate_schedules,
)
from sections import Section

app = Flask(__name__)
logger = logging.getLogger(__name__)

CONFIG = load_config()

SORT_KEYS = {"best", "earliest", "fewestFull"}
FILTERS = {"all", "endsByTime", "hasLate", "hasFull"}


class PayloadError(ValueError):
    pass


def _first(data: Dict[str, Any], *keys, default=None):
    # Frontends and imports disagree on naming (courseCode vs course_code); take whichever is present.
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _parse_enrolled(raw: Dict[str, Any]) -> Tuple[int, int]:
    enrolled = raw.get("enrolled")
    if isinstance(enrolled, str):
        try:
            current, total = (int(part.strip()) for part in enrolled.split("/", 1))
        except ValueError:
            raise PayloadError(f"enrolled must look like '15/30', got {enrolled!r}") from None
        return current, total

    if enrolled is not None:
        raise PayloadError(f"enrolled must be a string like '15/30', got {enrolled!r}")
    current = _first(raw, "enrolledCurrent", "enrolled_current")
    total = _first(raw, "enrolledTotal", "enrolled_total")
    if current is None or total is None:
        raise PayloadError("section needs enrolled ('15/30') or both enrolledCurrent and enrolledTotal")
    for value in (current, total):
        if not isinstance(value, int) or isinstance(value, bool):
            raise PayloadError(f"enrollment counts must be integers, got {value!r}")
    return current, total


def section_from_payload(raw: Dict[str, Any], course: Dict[str, Any]) -> Section:
    if not isinstance(raw, dict):
        raise PayloadError(f"section must be an object, got {raw!r}")
    group = _first(raw, "group", "groupId", "section_group")
    schedule = _first(raw, "schedule", "rawSchedule", "raw_schedule")
    if not isinstance(group, int) or isinstance(group, bool):
        raise PayloadError(f"section group must be an integer, got {group!r}")
    if not isinstance(schedule, str):
        raise PayloadError(f"section schedule must be a string, got {schedule!r}")

    current, total = _parse_enrolled(raw)
    return Section(
        group_id=group,
        raw_schedule=schedule,
        enrolled_current=current,
        enrolled_total=total,
        course_code=_first(raw, "courseCode", "course_code", default=_first(course, "courseCode", "course_code")),
        course_name=_first(raw, "courseName", "course_name", default=_first(course, "courseName", "course_name")),
        room=raw.get("room"),
        instructor=raw.get("instructor"),
    )


def courses_from_payload(courses: Any) -> Tuple[List[List[Section]], List[str]]:
    if not (isinstance(courses, list) and courses):
        raise PayloadError("courses must be a non-empty list")

    per_course: List[List[Section]] = []
    labels: List[str] = []
    for i, course in enumerate(courses):
        if not isinstance(course, dict) or not isinstance(course.get("sections"), list):
            raise PayloadError(f"course #{i} must be an object with a sections list")
        per_course.append([section_from_payload(s, course) for s in course["sections"]])
        labels.append(str(_first(course, "courseCode", "course_code", default=f"course #{i}")))
    return per_course, labels


def section_to_dict(sec: Section) -> Dict[str, Any]:
    return {
        "group": sec.group_id,
        "schedule": sec.raw_schedule,
        "enrolled": sec.enrolled,
        "status": sec.status.value,
        "courseCode": sec.course_code,
        "courseName": sec.course_name,
        "room": sec.room,
        "instructor": sec.instructor,
    }


def candidate_to_dict(candidate: ScheduleCandidate) -> Dict[str, Any]:
    meta = candidate.meta
    return {
        "selections": [section_to_dict(s) for s in candidate.selections],
        "meta": {
            "endsByPreferred": meta.ends_by_preferred,
            "hasLate": meta.has_late,
            "fullCount": meta.full_count,
            "latestEnd": meta.latest_end,
            "earliestStart": meta.earliest_start,
        },
    }


def apply_view(schedules: List[ScheduleCandidate], active_filter: str, sort_by: str) -> List[ScheduleCandidate]:
    # Presentation-side filtering and re-sorting; "best" keeps the engine's discovery order.
    if active_filter == "endsByTime":
        schedules = [s for s in schedules if s.meta.ends_by_preferred]
    elif active_filter == "hasLate":
        schedules = [s for s in schedules if s.meta.has_late]
    elif active_filter == "hasFull":
        schedules = [s for s in schedules if s.meta.full_count > 0]

    if sort_by == "earliest":
        schedules = sorted(schedules, key=lambda s: s.meta.latest_end)
    elif sort_by == "fewestFull":
        schedules = sorted(schedules, key=lambda s: s.meta.full_count)
    return list(schedules)


@app.get("/api/constraints/defaults")
def api_default_constraints():
    return jsonify(CONFIG.default_constraints().to_public_dict())


@app.post("/api/schedules")
def api_schedules():
    # Generates schedules from a JSON payload of courses, their candidate sections and constraints.
    body = request.get_json(silent=True) or {}
    if not isinstance(body, dict):
        return jsonify({"error": "request body must be a JSON object"}), 400

    sort_by = body.get("sort", "best")
    active_filter = body.get("filter", "all")
    if sort_by not in SORT_KEYS:
        return jsonify({"error": f"sort must be one of {sorted(SORT_KEYS)}"}), 400
    if active_filter not in FILTERS:
        return jsonify({"error": f"filter must be one of {sorted(FILTERS)}"}), 400

    try:
        per_course, labels = courses_from_payload(body.get("courses"))
        constraints = Constraints.from_mapping(body.get("constraints") or {}, base=CONFIG.default_constraints())
    except (TypeError, ValueError) as exc:
        logger.info("Rejected schedule request: %s", exc)
        return jsonify({"error": str(exc)}), 400

    budget = SearchBudget(max_steps=CONFIG.max_steps, max_seconds=CONFIG.max_seconds)
    started = time.perf_counter()
    try:
        schedules = generate_schedules(per_course, constraints, budget=budget)
    except SearchBudgetExceeded as exc:
        logger.warning("Schedule generation aborted after %d steps: %s", exc.steps, exc)
        return jsonify({"error": "Schedule generation timed out", "timedOut": True, "schedules": []})
    elapsed_ms = round((time.perf_counter() - started) * 1000)

    if schedules:
        view = apply_view(schedules, active_filter, sort_by)
        return jsonify({
            "schedules": [candidate_to_dict(s) for s in view],
            "count": len(view),
            "elapsedMs": elapsed_ms,
        })

    # If no schedules are possible, identify pairs of courses that are inherently in conflict.
    return jsonify({
        "error": "No valid schedules found",
        "schedules": [],
        "unresolvablePairs": find_unresolvable_pairs(per_course, labels),
    })


if __name__ == "__main__":
    setup_logging(environment=CONFIG.environment)
    app.run(debug=CONFIG.environment != "production")
