from __future__ import annotations

from medsched.domain.entries import LargeGroupRef, MakeupGroupRef, ScheduleEntry, ScheduleKind
from medsched.domain.registry import CourseInfo, ResourceRegistry
from medsched.domain.violations import ConflictViolation, ViolationKind

STANDBY_TAG = "standby"


def check_group_term(entry: ScheduleEntry, course: CourseInfo) -> ConflictViolation | None:
    """Makeup-term courses use makeup groups only; regular courses use their own cohort."""
    group = entry.group
    if group is None:
        return None
    if course.is_makeup_term:
        if not isinstance(group, MakeupGroupRef):
            return ConflictViolation(kind=ViolationKind.group_mismatch, template="makeup_term_group")
        return None
    if isinstance(group, MakeupGroupRef):
        return ConflictViolation(kind=ViolationKind.group_mismatch, template="regular_term_group")
    if isinstance(group, LargeGroupRef) and course.semester is not None and group.semester != course.semester:
        return ConflictViolation(
            kind=ViolationKind.group_mismatch,
            template="large_group_semester",
            params={"group_semester": group.semester, "course_semester": course.semester},
        )
    return None


def check_expertise(
    entry: ScheduleEntry,
    course: CourseInfo,
    registry: ResourceRegistry,
) -> ConflictViolation | None:
    if entry.kind is not ScheduleKind.lecture or course.is_makeup_term or not entry.lecturer_ids:
        return None

    topic = (entry.topic or "").strip()
    required = {tag.strip().lower() for tag in course.required_expertise_tags if tag.strip()}
    if not topic and not required:
        return None

    lecturers = registry.get_lecturers(sorted(entry.lecturer_ids))
    for lecturer_id in sorted(entry.lecturer_ids):
        lecturer = lecturers.get(lecturer_id)
        if lecturer is None:
            continue
        expertise = {item.strip().lower() for item in lecturer.expertise if item.strip()}
        if STANDBY_TAG in expertise:
            continue
        listed = ", ".join(lecturer.expertise) or "-"
        if topic:
            if topic.lower() not in expertise:
                return ConflictViolation(
                    kind=ViolationKind.expertise_mismatch,
                    template="expertise_topic",
                    params={"topic": topic, "lecturer_name": lecturer.name, "expertise": listed},
                )
        elif expertise.isdisjoint(required):
            return ConflictViolation(
                kind=ViolationKind.expertise_mismatch,
                template="expertise_tags",
                params={
                    "lecturer_name": lecturer.name,
                    "required": ", ".join(sorted(course.required_expertise_tags)),
                    "expertise": listed,
                },
            )
    return None
