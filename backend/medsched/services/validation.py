from __future__ import annotations

from collections.abc import Iterable, Iterator
import logging

from medsched.core.config import Settings
from medsched.core.exceptions import ConfigurationError
from medsched.domain.entries import ScheduleEntry
from medsched.domain.registry import CourseInfo, ResourceRegistry
from medsched.domain.time_range import SESSION_MINUTES, format_display
from medsched.domain.violations import ConflictViolation, ViolationKind
from medsched.services.capacity_rule import check_capacity
from medsched.services.conflict_rule import iter_conflicts
from medsched.services.date_range_rule import check_date_range
from medsched.services.eligibility_rule import check_expertise, check_group_term

logger = logging.getLogger(__name__)


class ScheduleValidator:
    """Runs every rule for one candidate in cheapest-first order.

    References are resolved first, then the date window, group/term fit, room
    capacity, resource conflicts and finally lecturer expertise. The validator
    holds no state beyond its registry and options, so one instance per request
    is enough.
    """

    def __init__(
        self,
        registry: ResourceRegistry,
        *,
        count_lecturers: bool = False,
        enforce_expertise: bool = True,
        session_minutes: int = SESSION_MINUTES,
    ) -> None:
        self.registry = registry
        self.count_lecturers = count_lecturers
        self.enforce_expertise = enforce_expertise
        self.session_minutes = session_minutes

    @classmethod
    def from_settings(cls, registry: ResourceRegistry, settings: Settings) -> "ScheduleValidator":
        if settings.session_minutes <= 0:
            raise ConfigurationError(f"SESSION_MINUTES must be positive, got {settings.session_minutes}")
        return cls(
            registry,
            count_lecturers=settings.capacity_counts_lecturers,
            enforce_expertise=settings.enforce_lecturer_expertise,
            session_minutes=settings.session_minutes,
        )

    def check_references(self, entry: ScheduleEntry) -> ConflictViolation | None:
        if entry.room_id is not None and self.registry.get_room(entry.room_id) is None:
            return ConflictViolation(kind=ViolationKind.not_found, template="room_missing")
        if entry.lecturer_ids:
            known = self.registry.get_lecturers(entry.lecturer_ids)
            missing = sorted(entry.lecturer_ids - set(known))
            if missing:
                return ConflictViolation(
                    kind=ViolationKind.not_found,
                    template="lecturer_missing",
                    params={"lecturer_ids": ", ".join(missing)},
                )
        if entry.group is not None and not self.registry.group_exists(entry.group):
            return ConflictViolation(
                kind=ViolationKind.not_found,
                template="group_missing",
                params={"group": self.registry.group_label(entry.group)},
            )
        return None

    def note_session_count(self, entry: ScheduleEntry) -> None:
        if not entry.time.matches_session_count(entry.session_count, self.session_minutes):
            start, end = entry.time.display()
            logger.warning(
                "Session count %d does not match %s-%s for %s on %s (expected end %s)",
                entry.session_count,
                start,
                end,
                entry.course_code,
                entry.date.isoformat(),
                format_display(entry.time.start + entry.session_count * self.session_minutes),
            )

    def iter_violations(
        self,
        entry: ScheduleEntry,
        course: CourseInfo,
        existing: Iterable[ScheduleEntry],
    ) -> Iterator[ConflictViolation]:
        missing = self.check_references(entry)
        if missing is not None:
            yield missing
            return

        single_checks = (
            lambda: check_date_range(entry, course),
            lambda: check_group_term(entry, course),
            lambda: check_capacity(entry, self.registry, count_lecturers=self.count_lecturers),
        )
        for check in single_checks:
            violation = check()
            if violation is not None:
                yield violation
        yield from iter_conflicts(entry, existing, self.registry)
        if self.enforce_expertise:
            violation = check_expertise(entry, course, self.registry)
            if violation is not None:
                yield violation

    def first_violation(
        self,
        entry: ScheduleEntry,
        course: CourseInfo,
        existing: Iterable[ScheduleEntry],
    ) -> ConflictViolation | None:
        return next(self.iter_violations(entry, course, existing), None)

    def all_violations(
        self,
        entry: ScheduleEntry,
        course: CourseInfo,
        existing: Iterable[ScheduleEntry],
    ) -> list[ConflictViolation]:
        return list(self.iter_violations(entry, course, existing))
