from __future__ import annotations

from medsched.domain.entries import ScheduleEntry
from medsched.domain.registry import ResourceRegistry
from medsched.domain.violations import ConflictViolation, ViolationKind


def required_seats(entry: ScheduleEntry, registry: ResourceRegistry, *, count_lecturers: bool = False) -> int:
    seats = registry.headcount(entry.group) if entry.group is not None else 0
    if count_lecturers:
        seats += len(entry.lecturer_ids)
    return seats


def check_capacity(
    entry: ScheduleEntry,
    registry: ResourceRegistry,
    *,
    count_lecturers: bool = False,
) -> ConflictViolation | None:
    """Seat check against the booked room; sessions without a physical room are skipped."""
    if not entry.occupies_room:
        return None

    room = registry.get_room(entry.room_id)
    if room is None:
        return ConflictViolation(kind=ViolationKind.not_found, template="room_missing")

    seats = required_seats(entry, registry, count_lecturers=count_lecturers)
    if seats > room.capacity:
        return ConflictViolation(
            kind=ViolationKind.capacity_exceeded,
            template="capacity",
            params={"room_name": room.name, "capacity": room.capacity, "headcount": seats},
        )
    return None
