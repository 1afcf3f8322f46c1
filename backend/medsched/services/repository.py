from __future__ import annotations

from collections.abc import Iterable
import datetime as dt
import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from medsched.core.exceptions import ResourceNotFoundError
from medsched.domain.entries import (
    GroupRef,
    LargeGroupRef,
    MakeupGroupRef,
    ScheduleEntry,
    ScheduleKind,
    SmallGroupRef,
)
from medsched.domain.registry import CourseInfo, LecturerInfo, RoomInfo, default_group_label
from medsched.domain.time_range import TimeRange, minutes_to_time
from medsched.models.course import CourseOffering
from medsched.models.lecturer import Lecturer
from medsched.models.room import Room
from medsched.models.schedule import (
    CSRCategory,
    CSRSession,
    JournalReadingSession,
    LectureSession,
    NonBlockRowType,
    NonBlockSession,
    PBLSession,
    PracticumSession,
    ScheduleColumnsMixin,
    SpecialAgendaSession,
)
from medsched.models.student import Student
from medsched.models.student_group import (
    LargeGroup,
    LargeGroupMember,
    MakeupGroup,
    MakeupGroupMember,
    SmallGroup,
    SmallGroupMember,
)

logger = logging.getLogger(__name__)

KIND_MODELS: dict[ScheduleKind, type[ScheduleColumnsMixin]] = {
    ScheduleKind.lecture: LectureSession,
    ScheduleKind.pbl: PBLSession,
    ScheduleKind.csr: CSRSession,
    ScheduleKind.journal_reading: JournalReadingSession,
    ScheduleKind.practicum: PracticumSession,
    ScheduleKind.special_agenda: SpecialAgendaSession,
    ScheduleKind.non_block: NonBlockSession,
}

# Kind-specific columns copied verbatim between payloads and rows.
KIND_EXTRA_FIELDS: dict[ScheduleKind, tuple[str, ...]] = {
    ScheduleKind.lecture: (),
    ScheduleKind.pbl: ("pbl_type",),
    ScheduleKind.csr: ("category",),
    ScheduleKind.journal_reading: (),
    ScheduleKind.practicum: (),
    ScheduleKind.special_agenda: ("agenda",),
    ScheduleKind.non_block: ("row_type",),
}

# Omitted extras fall back to these on insert and on replace.
EXTRA_FIELD_DEFAULTS: dict[str, object] = {
    "category": CSRCategory.reguler,
    "row_type": NonBlockRowType.materi,
}


class SqlResourceRegistry:
    """ResourceRegistry backed by the request session.

    Headcounts are COUNT queries; rosters are loaded as id sets only when the
    conflict rule needs them, and cached for the lifetime of the registry.
    """

    def __init__(self, db: Session) -> None:
        self.db = db
        self._rosters: dict[GroupRef, frozenset[str]] = {}
        self._large_groups: dict[int, str] | None = None

    def _large_group_ids(self) -> dict[int, str]:
        if self._large_groups is None:
            rows = self.db.execute(select(LargeGroup.semester, LargeGroup.id)).all()
            self._large_groups = {semester: group_id for semester, group_id in rows}
        return self._large_groups

    def large_group_id(self, semester: int) -> str | None:
        return self._large_group_ids().get(semester)

    def large_group_semester(self, group_id: str) -> int | None:
        for semester, known_id in self._large_group_ids().items():
            if known_id == group_id:
                return semester
        return None

    def get_room(self, room_id: str) -> RoomInfo | None:
        room = self.db.get(Room, room_id)
        if room is None:
            return None
        return RoomInfo(id=room.id, name=room.name, capacity=room.capacity, building=room.building)

    def get_course(self, code: str) -> CourseInfo | None:
        course = self.db.execute(select(CourseOffering).where(CourseOffering.code == code)).scalar_one_or_none()
        if course is None:
            return None
        return CourseInfo(
            code=course.code,
            start_date=course.start_date,
            end_date=course.end_date,
            kind=course.kind.value,
            term=course.term.value,
            semester=course.semester,
            block_number=course.block_number,
            required_expertise_tags=tuple(course.required_expertise_tags or ()),
        )

    def get_lecturers(self, lecturer_ids: Iterable[str]) -> dict[str, LecturerInfo]:
        ids = list(lecturer_ids)
        if not ids:
            return {}
        rows = self.db.execute(select(Lecturer).where(Lecturer.id.in_(ids))).scalars()
        return {
            row.id: LecturerInfo(id=row.id, name=row.name, expertise=tuple(row.expertise or ()))
            for row in rows
        }

    def group_exists(self, group: GroupRef) -> bool:
        if isinstance(group, LargeGroupRef):
            return self.large_group_id(group.semester) is not None
        if isinstance(group, SmallGroupRef):
            return self.db.get(SmallGroup, group.id) is not None
        return self.db.get(MakeupGroup, group.id) is not None

    def headcount(self, group: GroupRef) -> int:
        if isinstance(group, LargeGroupRef):
            group_id = self.large_group_id(group.semester)
            if group_id is None:
                return 0
            statement = select(func.count()).select_from(LargeGroupMember).where(LargeGroupMember.group_id == group_id)
        elif isinstance(group, SmallGroupRef):
            statement = select(func.count()).select_from(SmallGroupMember).where(SmallGroupMember.group_id == group.id)
        else:
            statement = select(func.count()).select_from(MakeupGroupMember).where(MakeupGroupMember.group_id == group.id)
        return int(self.db.execute(statement).scalar_one())

    def roster(self, group: GroupRef) -> frozenset[str] | None:
        if group in self._rosters:
            return self._rosters[group]
        if isinstance(group, LargeGroupRef):
            group_id = self.large_group_id(group.semester)
            if group_id is None:
                return None
            statement = select(LargeGroupMember.student_id).where(LargeGroupMember.group_id == group_id)
        elif isinstance(group, SmallGroupRef):
            statement = select(SmallGroupMember.student_id).where(SmallGroupMember.group_id == group.id)
        else:
            statement = select(MakeupGroupMember.student_id).where(MakeupGroupMember.group_id == group.id)
        members = frozenset(self.db.execute(statement).scalars())
        self._rosters[group] = members
        return members

    def group_semester(self, group: GroupRef) -> int | None:
        if isinstance(group, LargeGroupRef):
            return group.semester
        if isinstance(group, SmallGroupRef):
            record = self.db.get(SmallGroup, group.id)
            return record.semester if record is not None else None
        return None

    def cohort_semesters(self, group: GroupRef) -> frozenset[int | None]:
        if not isinstance(group, MakeupGroupRef):
            return frozenset({self.group_semester(group)})
        members = self.roster(group) or frozenset()
        if not members:
            return frozenset()
        student_ids = sorted(members)
        found: dict[str, set[int]] = {student_id: set() for student_id in student_ids}
        statements = (
            select(Student.id, Student.semester).where(Student.id.in_(student_ids)),
            select(SmallGroupMember.student_id, SmallGroup.semester)
            .join(SmallGroup, SmallGroup.id == SmallGroupMember.group_id)
            .where(SmallGroupMember.student_id.in_(student_ids)),
            select(LargeGroupMember.student_id, LargeGroup.semester)
            .join(LargeGroup, LargeGroup.id == LargeGroupMember.group_id)
            .where(LargeGroupMember.student_id.in_(student_ids)),
        )
        for statement in statements:
            for student_id, semester in self.db.execute(statement):
                if semester is not None:
                    found[student_id].add(semester)
        semesters: set[int | None] = set()
        for student_semesters in found.values():
            semesters |= student_semesters or {None}
        return frozenset(semesters)

    def group_label(self, group: GroupRef) -> str:
        if isinstance(group, SmallGroupRef):
            record = self.db.get(SmallGroup, group.id)
            return default_group_label(group, record.name if record is not None else None)
        if isinstance(group, MakeupGroupRef):
            record = self.db.get(MakeupGroup, group.id)
            return default_group_label(group, record.name if record is not None else None)
        return default_group_label(group)


class ScheduleRepository:
    """Per-kind storage plus the single cross-kind query the conflict rule needs."""

    def __init__(self, db: Session, registry: SqlResourceRegistry) -> None:
        self.db = db
        self.registry = registry

    def _group_ref(self, row: ScheduleColumnsMixin) -> GroupRef | None:
        if row.small_group_id:
            return SmallGroupRef(row.small_group_id)
        if row.large_group_id:
            semester = self.registry.large_group_semester(row.large_group_id)
            if semester is None:
                logger.warning(
                    "Schedule %s references unknown large group %s; it is skipped by group conflict checks",
                    row.id,
                    row.large_group_id,
                )
                return None
            return LargeGroupRef(semester)
        if row.makeup_group_id:
            return MakeupGroupRef(row.makeup_group_id)
        return None

    def to_entry(self, kind: ScheduleKind, row: ScheduleColumnsMixin) -> ScheduleEntry:
        return ScheduleEntry(
            kind=kind,
            course_code=row.course_code,
            time=TimeRange.parse(row.date, row.start_time, row.end_time),
            session_count=row.session_count,
            id=row.id,
            room_id=row.room_id,
            uses_room=row.uses_room,
            lecturer_ids=frozenset(row.lecturer_ids or ()),
            group=self._group_ref(row),
            topic=row.topic,
        )

    def rows_on_date(self, date: dt.date) -> list[tuple[ScheduleKind, ScheduleColumnsMixin]]:
        found: list[tuple[ScheduleKind, ScheduleColumnsMixin]] = []
        for kind, model in KIND_MODELS.items():
            rows = self.db.execute(
                select(model).where(model.date == date).order_by(model.start_time, model.id)
            ).scalars()
            found.extend((kind, row) for row in rows)
        return found

    def entries_on_date(self, date: dt.date) -> list[ScheduleEntry]:
        return [self.to_entry(kind, row) for kind, row in self.rows_on_date(date)]

    def list_for_course(self, kind: ScheduleKind, course_code: str) -> list[ScheduleColumnsMixin]:
        model = KIND_MODELS[kind]
        statement = (
            select(model)
            .where(model.course_code == course_code)
            .order_by(model.date, model.start_time, model.id)
        )
        return list(self.db.execute(statement).scalars())

    def get(self, kind: ScheduleKind, entry_id: str, course_code: str | None = None) -> ScheduleColumnsMixin:
        row = self.db.get(KIND_MODELS[kind], entry_id)
        if row is None or (course_code is not None and row.course_code != course_code):
            raise ResourceNotFoundError(kind.label, entry_id, message=f"{kind.label} tidak ditemukan")
        return row

    def _write(self, row: ScheduleColumnsMixin, entry: ScheduleEntry, extras: dict) -> None:
        row.course_code = entry.course_code
        row.date = entry.date
        row.start_time = minutes_to_time(entry.time.start)
        row.end_time = minutes_to_time(entry.time.end)
        row.session_count = entry.session_count
        row.room_id = entry.room_id
        row.uses_room = entry.uses_room
        row.lecturer_ids = sorted(entry.lecturer_ids)
        row.topic = entry.topic
        row.small_group_id = entry.group.id if isinstance(entry.group, SmallGroupRef) else None
        row.makeup_group_id = entry.group.id if isinstance(entry.group, MakeupGroupRef) else None
        row.large_group_id = (
            self.registry.large_group_id(entry.group.semester) if isinstance(entry.group, LargeGroupRef) else None
        )
        for name, value in extras.items():
            setattr(row, name, value if value is not None else EXTRA_FIELD_DEFAULTS.get(name))

    def add(self, entry: ScheduleEntry, extras: dict) -> ScheduleColumnsMixin:
        row = KIND_MODELS[entry.kind]()
        self._write(row, entry, extras)
        self.db.add(row)
        self.db.flush()
        return row

    def replace(self, row: ScheduleColumnsMixin, entry: ScheduleEntry, extras: dict) -> ScheduleColumnsMixin:
        self._write(row, entry, extras)
        self.db.flush()
        return row

    def delete(self, row: ScheduleColumnsMixin) -> None:
        self.db.delete(row)
        self.db.flush()
