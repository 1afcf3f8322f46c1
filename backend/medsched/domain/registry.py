from __future__ import annotations

from dataclasses import dataclass, field
import datetime as dt
from typing import Iterable, Protocol

from medsched.domain.entries import GroupRef, LargeGroupRef, MakeupGroupRef, SmallGroupRef


@dataclass(frozen=True)
class RoomInfo:
    id: str
    name: str
    capacity: int
    building: str = ""


@dataclass(frozen=True)
class LecturerInfo:
    id: str
    name: str
    expertise: tuple[str, ...] = ()


@dataclass(frozen=True)
class CourseInfo:
    code: str
    start_date: dt.date
    end_date: dt.date
    kind: str = "block"
    term: str = "regular"
    semester: int | None = None
    block_number: int | None = None
    required_expertise_tags: tuple[str, ...] = ()

    @property
    def is_makeup_term(self) -> bool:
        return self.term == "makeup"


class ResourceRegistry(Protocol):
    """Read-only lookups the rules need; implementations must not write."""

    def get_room(self, room_id: str) -> RoomInfo | None: ...

    def get_course(self, code: str) -> CourseInfo | None: ...

    def get_lecturers(self, lecturer_ids: Iterable[str]) -> dict[str, LecturerInfo]: ...

    def group_exists(self, group: GroupRef) -> bool: ...

    def headcount(self, group: GroupRef) -> int: ...

    def roster(self, group: GroupRef) -> frozenset[str] | None: ...

    def group_semester(self, group: GroupRef) -> int | None: ...

    def cohort_semesters(self, group: GroupRef) -> frozenset[int | None]:
        """Semesters whose students the group can contain; ``None`` marks members with no known cohort."""
        ...

    def group_label(self, group: GroupRef) -> str: ...


def default_group_label(group: GroupRef, name: str | None = None) -> str:
    if isinstance(group, LargeGroupRef):
        return f"Kelompok Besar Semester {group.semester}"
    if isinstance(group, SmallGroupRef):
        return f"Kelompok Kecil {name or group.id}"
    return f"Kelompok Antara {name or group.id}"


@dataclass
class InMemoryResourceRegistry:
    """Dictionary-backed registry for tests and offline validation of import files."""

    rooms: dict[str, RoomInfo] = field(default_factory=dict)
    courses: dict[str, CourseInfo] = field(default_factory=dict)
    lecturers: dict[str, LecturerInfo] = field(default_factory=dict)
    # id -> (name, semester, members)
    small_groups: dict[str, tuple[str, int, frozenset[str]]] = field(default_factory=dict)
    # semester -> members; None means the roster is not known at this layer
    large_groups: dict[int, frozenset[str] | None] = field(default_factory=dict)
    large_group_sizes: dict[int, int] = field(default_factory=dict)
    # id -> (name, members)
    makeup_groups: dict[str, tuple[str, frozenset[str]]] = field(default_factory=dict)
    # student id -> semester, for students outside any small or large group roster
    student_semesters: dict[str, int] = field(default_factory=dict)

    def get_room(self, room_id: str) -> RoomInfo | None:
        return self.rooms.get(room_id)

    def get_course(self, code: str) -> CourseInfo | None:
        return self.courses.get(code)

    def get_lecturers(self, lecturer_ids: Iterable[str]) -> dict[str, LecturerInfo]:
        return {item: self.lecturers[item] for item in lecturer_ids if item in self.lecturers}

    def group_exists(self, group: GroupRef) -> bool:
        if isinstance(group, LargeGroupRef):
            return group.semester in self.large_groups or group.semester in self.large_group_sizes
        if isinstance(group, SmallGroupRef):
            return group.id in self.small_groups
        return group.id in self.makeup_groups

    def headcount(self, group: GroupRef) -> int:
        if isinstance(group, LargeGroupRef):
            members = self.large_groups.get(group.semester)
            if members is not None:
                return len(members)
            return self.large_group_sizes.get(group.semester, 0)
        members = self.roster(group)
        return len(members) if members is not None else 0

    def roster(self, group: GroupRef) -> frozenset[str] | None:
        if isinstance(group, LargeGroupRef):
            return self.large_groups.get(group.semester)
        if isinstance(group, SmallGroupRef):
            record = self.small_groups.get(group.id)
            return record[2] if record else frozenset()
        record = self.makeup_groups.get(group.id)
        return record[1] if record else frozenset()

    def group_semester(self, group: GroupRef) -> int | None:
        if isinstance(group, LargeGroupRef):
            return group.semester
        if isinstance(group, SmallGroupRef):
            record = self.small_groups.get(group.id)
            return record[1] if record else None
        return None

    def cohort_semesters(self, group: GroupRef) -> frozenset[int | None]:
        if not isinstance(group, MakeupGroupRef):
            return frozenset({self.group_semester(group)})
        semesters: set[int | None] = set()
        for student_id in self.roster(group) or ():
            found = {semester for _, semester, members in self.small_groups.values() if student_id in members}
            found |= {semester for semester, members in self.large_groups.items() if members and student_id in members}
            if student_id in self.student_semesters:
                found.add(self.student_semesters[student_id])
            semesters |= found or {None}
        return frozenset(semesters)

    def group_label(self, group: GroupRef) -> str:
        if isinstance(group, SmallGroupRef) and group.id in self.small_groups:
            return default_group_label(group, self.small_groups[group.id][0])
        if isinstance(group, MakeupGroupRef) and group.id in self.makeup_groups:
            return default_group_label(group, self.makeup_groups[group.id][0])
        return default_group_label(group)
