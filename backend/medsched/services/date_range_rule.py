from __future__ import annotations

from medsched.domain.entries import ScheduleEntry
from medsched.domain.registry import CourseInfo
from medsched.domain.violations import ConflictViolation, ViolationKind


def check_date_range(entry: ScheduleEntry, course: CourseInfo) -> ConflictViolation | None:
    # Both ends inclusive; block courses are not narrowed to their sub-block.
    if course.start_date <= entry.date <= course.end_date:
        return None

    params = {
        "date": entry.date.isoformat(),
        "start_date": course.start_date.isoformat(),
        "end_date": course.end_date.isoformat(),
    }
    template = "date_before" if entry.date < course.start_date else "date_after"
    return ConflictViolation(kind=ViolationKind.date_out_of_range, template=template, params=params)
