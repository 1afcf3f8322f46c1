from __future__ import annotations

from collections.abc import Iterable, Iterator

from medsched.domain.entries import GroupRef, LargeGroupRef, MakeupGroupRef, ScheduleEntry, SmallGroupRef
from medsched.domain.registry import ResourceRegistry
from medsched.domain.violations import ConflictViolation, ViolationKind, render


def groups_collide(a: GroupRef, b: GroupRef, registry: ResourceRegistry) -> bool:
    """True when two group references can put the same student in two places.

    Large groups without a resolvable roster fall back to whole-group identity:
    they collide with every makeup group and with small groups of their semester.
    """
    if a == b:
        return True
    if isinstance(a, LargeGroupRef) and isinstance(b, LargeGroupRef):
        return False
    large, other = (a, b) if isinstance(a, LargeGroupRef) else (b, a)
    if isinstance(large, LargeGroupRef) and isinstance(other, SmallGroupRef):
        if registry.group_semester(other) == large.semester:
            return True

    roster_a = registry.roster(a)
    roster_b = registry.roster(b)
    if roster_a is not None and roster_b is not None:
        return not roster_a.isdisjoint(roster_b)
    return isinstance(large, LargeGroupRef) and isinstance(other, MakeupGroupRef)


def _conflict(
    kind: ViolationKind,
    candidate: ScheduleEntry,
    existing: ScheduleEntry,
    detail: str,
    **extra,
) -> ConflictViolation:
    start, end = existing.time.display()
    return ConflictViolation(
        kind=kind,
        template="conflict",
        params={
            "schedule_name": existing.kind.label,
            "date": existing.date.strftime("%d/%m/%Y"),
            "start": start,
            "end": end,
            "detail": detail,
            "candidate_kind": candidate.kind.value,
            "existing_kind": existing.kind.value,
            **extra,
        },
        conflicting_entry_id=existing.id,
    )


def _lecturer_names(lecturer_ids: Iterable[str], registry: ResourceRegistry) -> str:
    ordered = sorted(lecturer_ids)
    known = registry.get_lecturers(ordered)
    return ", ".join(known[item].name if item in known else item for item in ordered)


def _room_name(room_id: str, registry: ResourceRegistry) -> str:
    room = registry.get_room(room_id)
    return room.name if room is not None else room_id


def pair_conflicts(
    candidate: ScheduleEntry,
    existing: ScheduleEntry,
    registry: ResourceRegistry,
) -> list[ConflictViolation]:
    """Every axis on which ``candidate`` and ``existing`` collide, room first."""
    if candidate.is_same_entry(existing) or not candidate.time.overlaps(existing.time):
        return []

    found: list[ConflictViolation] = []
    if candidate.occupies_room and existing.occupies_room and candidate.room_id == existing.room_id:
        found.append(
            _conflict(
                ViolationKind.room_conflict,
                candidate,
                existing,
                render("room_detail", room_name=_room_name(candidate.room_id, registry)),
                room_id=candidate.room_id,
            )
        )

    shared = candidate.lecturer_ids & existing.lecturer_ids
    if shared:
        found.append(
            _conflict(
                ViolationKind.lecturer_conflict,
                candidate,
                existing,
                render("lecturer_detail", lecturer_names=_lecturer_names(shared, registry)),
                lecturer_ids=sorted(shared),
            )
        )

    if candidate.group is not None and existing.group is not None:
        if groups_collide(candidate.group, existing.group, registry):
            found.append(
                _conflict(
                    ViolationKind.group_conflict,
                    candidate,
                    existing,
                    render(
                        "group_detail",
                        source_group=registry.group_label(candidate.group),
                        target_group=registry.group_label(existing.group),
                    ),
                )
            )
    return found


def iter_conflicts(
    candidate: ScheduleEntry,
    existing: Iterable[ScheduleEntry],
    registry: ResourceRegistry,
) -> Iterator[ConflictViolation]:
    for entry in existing:
        yield from pair_conflicts(candidate, entry, registry)


def find_conflicts(
    candidate: ScheduleEntry,
    existing: Iterable[ScheduleEntry],
    registry: ResourceRegistry,
) -> list[ConflictViolation]:
    return list(iter_conflicts(candidate, existing, registry))


def first_conflict(
    candidate: ScheduleEntry,
    existing: Iterable[ScheduleEntry],
    registry: ResourceRegistry,
) -> ConflictViolation | None:
    return next(iter_conflicts(candidate, existing, registry), None)
