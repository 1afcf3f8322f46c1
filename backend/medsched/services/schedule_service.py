from __future__ import annotations

import datetime as dt
import logging

from sqlalchemy.orm import Session

from medsched.core.config import Settings, get_settings
from medsched.core.exceptions import (
    BatchRejectedError,
    ResourceNotFoundError,
    ScheduleInputError,
    ScheduleRejectedError,
)
from medsched.domain.entries import (
    GroupRef,
    LargeGroupRef,
    MakeupGroupRef,
    ScheduleEntry,
    ScheduleKind,
    SmallGroupRef,
)
from medsched.domain.registry import CourseInfo
from medsched.domain.time_range import TimeRange, format_display
from medsched.domain.violations import ConflictViolation, ViolationKind, row_message
from medsched.models.schedule import ScheduleColumnsMixin
from medsched.schemas.schedule import ScheduleEntryIn, ScheduleEntryOut
from medsched.services.batch_import import BatchImportValidator
from medsched.services.locking import acquire_locks, lock_keys
from medsched.services.repository import KIND_EXTRA_FIELDS, ScheduleRepository, SqlResourceRegistry
from medsched.services.validation import ScheduleValidator

logger = logging.getLogger(__name__)


def group_ref_from_payload(payload: ScheduleEntryIn) -> GroupRef | None:
    if payload.small_group_id is not None:
        return SmallGroupRef(payload.small_group_id)
    if payload.large_group_semester is not None:
        return LargeGroupRef(payload.large_group_semester)
    if payload.makeup_group_id is not None:
        return MakeupGroupRef(payload.makeup_group_id)
    return None


def entry_from_payload(
    kind: ScheduleKind,
    course_code: str,
    payload: ScheduleEntryIn,
    entry_id: str | None = None,
) -> ScheduleEntry:
    return ScheduleEntry(
        kind=kind,
        course_code=course_code,
        time=TimeRange.parse(payload.date, payload.start_time, payload.end_time),
        session_count=payload.session_count,
        id=entry_id,
        room_id=payload.room_id,
        uses_room=payload.uses_room,
        lecturer_ids=frozenset(payload.lecturer_ids),
        group=group_ref_from_payload(payload),
        topic=payload.topic,
    )


def rejection_for(entry: ScheduleEntry, violation: ConflictViolation) -> Exception:
    if violation.kind is not ViolationKind.not_found:
        return ScheduleRejectedError([violation])
    if violation.template == "room_missing":
        return ResourceNotFoundError("Ruangan", entry.room_id, message=violation.message)
    if violation.template == "lecturer_missing":
        return ResourceNotFoundError("Dosen", violation.params["lecturer_ids"], message=violation.message)
    return ResourceNotFoundError("Kelompok", violation.params.get("group", ""), message=violation.message)


class ScheduleService:
    """Validated create, replace, delete and import for every schedule kind.

    Each write path runs inside one transaction: resource locks first, then the
    same-date read across all kinds, then the rules, then the write.
    """

    def __init__(self, db: Session, settings: Settings | None = None) -> None:
        self.db = db
        self.settings = settings or get_settings()
        self.registry = SqlResourceRegistry(db)
        self.repository = ScheduleRepository(db, self.registry)
        self.validator = ScheduleValidator.from_settings(self.registry, self.settings)

    def course(self, course_code: str) -> CourseInfo:
        course = self.registry.get_course(course_code)
        if course is None:
            raise ResourceNotFoundError("Mata kuliah", course_code, message="Mata kuliah tidak ditemukan")
        return course

    def _check_shape(self, kind: ScheduleKind, payload: ScheduleEntryIn) -> None:
        errors = payload.shape_errors(kind)
        if errors:
            raise ScheduleInputError(errors[0], details={"errors": errors})

    def to_out(self, kind: ScheduleKind, row: ScheduleColumnsMixin) -> ScheduleEntryOut:
        entry = self.repository.to_entry(kind, row)
        return self.entry_out(entry, row)

    def entry_out(self, entry: ScheduleEntry, row: ScheduleColumnsMixin) -> ScheduleEntryOut:
        group = entry.group
        extras = {name: getattr(row, name) for name in KIND_EXTRA_FIELDS[entry.kind]}
        return ScheduleEntryOut(
            id=row.id,
            kind=entry.kind,
            course_code=entry.course_code,
            date=entry.date,
            start_time=format_display(entry.time.start),
            end_time=format_display(entry.time.end),
            session_count=entry.session_count,
            room_id=entry.room_id,
            uses_room=entry.uses_room,
            lecturer_ids=sorted(entry.lecturer_ids),
            small_group_id=group.id if isinstance(group, SmallGroupRef) else None,
            large_group_semester=group.semester if isinstance(group, LargeGroupRef) else None,
            makeup_group_id=group.id if isinstance(group, MakeupGroupRef) else None,
            topic=entry.topic,
            **extras,
        )

    def list_for_course(self, kind: ScheduleKind, course_code: str) -> list[ScheduleEntryOut]:
        self.course(course_code)
        return [self.to_out(kind, row) for row in self.repository.list_for_course(kind, course_code)]

    def list_on_date(self, date: dt.date) -> list[ScheduleEntryOut]:
        outputs = [self.to_out(kind, row) for kind, row in self.repository.rows_on_date(date)]
        return sorted(outputs, key=lambda item: (item.start_time, item.kind.value, item.id))

    def _write_single(
        self,
        kind: ScheduleKind,
        course: CourseInfo,
        entry: ScheduleEntry,
        payload: ScheduleEntryIn,
        row: ScheduleColumnsMixin | None = None,
    ) -> ScheduleEntryOut:
        self.validator.note_session_count(entry)
        try:
            acquire_locks(self.db, lock_keys(entry, self.registry))
            existing = self.repository.entries_on_date(entry.date)
            violation = self.validator.first_violation(entry, course, existing)
            if violation is not None:
                logger.info(
                    "Rejected %s for %s on %s: %s",
                    kind.value,
                    course.code,
                    entry.date.isoformat(),
                    violation.kind.value,
                )
                raise rejection_for(entry, violation)
            if row is None:
                row = self.repository.add(entry, payload.extras(kind))
            else:
                row = self.repository.replace(row, entry, payload.extras(kind))
            output = self.entry_out(entry, row)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.info("Saved %s %s for %s on %s", kind.value, output.id, course.code, entry.date.isoformat())
        return output

    def create(self, kind: ScheduleKind, course_code: str, payload: ScheduleEntryIn) -> ScheduleEntryOut:
        course = self.course(course_code)
        self._check_shape(kind, payload)
        entry = entry_from_payload(kind, course_code, payload)
        return self._write_single(kind, course, entry, payload)

    def update(
        self,
        kind: ScheduleKind,
        course_code: str,
        entry_id: str,
        payload: ScheduleEntryIn,
    ) -> ScheduleEntryOut:
        course = self.course(course_code)
        row = self.repository.get(kind, entry_id, course_code)
        self._check_shape(kind, payload)
        entry = entry_from_payload(kind, course_code, payload, entry_id=entry_id)
        return self._write_single(kind, course, entry, payload, row=row)

    def delete(self, kind: ScheduleKind, course_code: str, entry_id: str) -> None:
        row = self.repository.get(kind, entry_id, course_code)
        try:
            self.repository.delete(row)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.info("Deleted %s %s for %s", kind.value, entry_id, course_code)

    def check(self, kind: ScheduleKind, course_code: str, payload: ScheduleEntryIn) -> list[ConflictViolation]:
        """Every violation of a candidate without writing or locking anything."""
        course = self.course(course_code)
        self._check_shape(kind, payload)
        entry = entry_from_payload(kind, course_code, payload)
        return self.validator.all_violations(entry, course, self.repository.entries_on_date(entry.date))

    def import_rows(self, kind: ScheduleKind, course_code: str, rows: list[ScheduleEntryIn]) -> list[str]:
        course = self.course(course_code)

        shape_errors = [
            row_message(index + 1, message)
            for index, payload in enumerate(rows)
            for message in payload.shape_errors(kind)
        ]
        if shape_errors:
            raise BatchRejectedError(
                stage=BatchRejectedError.INPUT,
                total=len(rows),
                errors=shape_errors,
                message="Gagal mengimport data. Format data tidak valid.",
            )

        entries = [entry_from_payload(kind, course_code, payload) for payload in rows]
        for entry in entries:
            self.validator.note_session_count(entry)

        batch = BatchImportValidator(self.validator)
        try:
            keys: set[str] = set()
            for entry in entries:
                keys |= lock_keys(entry, self.registry)
            acquire_locks(self.db, keys)

            outcome = batch.validate(entries, course, self.repository.entries_on_date)
            outcome.raise_for_rejection()

            ids = []
            for entry, payload in zip(entries, rows):
                ids.append(self.repository.add(entry, payload.extras(kind)).id)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.info("Imported %d %s row(s) for %s", len(ids), kind.value, course_code)
        return ids
