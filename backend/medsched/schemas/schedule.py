from __future__ import annotations

from dataclasses import dataclass
import datetime as dt

from pydantic import BaseModel, ConfigDict, Field, field_validator

from medsched.domain.entries import ScheduleKind
from medsched.domain.time_range import MAX_SESSION_COUNT, parse_clock
from medsched.models.schedule import CSRCategory, NonBlockRowType


@dataclass(frozen=True)
class KindProfile:
    lecturers: str  # "required", "optional" or "none"
    group_axes: frozenset[str]
    extras: frozenset[str] = frozenset()


KIND_PROFILES: dict[ScheduleKind, KindProfile] = {
    ScheduleKind.lecture: KindProfile("required", frozenset({"large", "makeup"})),
    ScheduleKind.pbl: KindProfile("required", frozenset({"small", "makeup"}), frozenset({"pbl_type"})),
    ScheduleKind.csr: KindProfile("required", frozenset({"small"}), frozenset({"category"})),
    ScheduleKind.journal_reading: KindProfile("required", frozenset({"small", "makeup"})),
    ScheduleKind.practicum: KindProfile("required", frozenset({"small"})),
    ScheduleKind.special_agenda: KindProfile("none", frozenset({"large", "makeup"}), frozenset({"agenda"})),
    ScheduleKind.non_block: KindProfile("optional", frozenset({"large", "makeup"}), frozenset({"row_type"})),
}

EXTRA_FIELDS = ("pbl_type", "category", "agenda", "row_type")
ROOM_OPTIONAL_KINDS = frozenset({ScheduleKind.special_agenda, ScheduleKind.non_block})


class ScheduleEntryIn(BaseModel):
    """One create/update request or one import row.

    Field aliases follow the import spreadsheet columns; the English names are
    accepted as well.
    """

    model_config = ConfigDict(populate_by_name=True)

    date: dt.date = Field(alias="tanggal")
    start_time: str = Field(alias="jam_mulai")
    end_time: str = Field(alias="jam_selesai")
    session_count: int = Field(default=1, ge=1, le=MAX_SESSION_COUNT, alias="jumlah_sesi")
    room_id: str | None = Field(default=None, alias="ruangan_id")
    uses_room: bool = Field(default=True, alias="use_ruangan")
    lecturer_ids: list[str] = Field(default_factory=list, alias="dosen_ids", max_length=20)
    small_group_id: str | None = Field(default=None, alias="kelompok_kecil_id")
    large_group_semester: int | None = Field(default=None, alias="kelompok_besar_id", ge=1, le=14)
    makeup_group_id: str | None = Field(default=None, alias="kelompok_antara_id")
    topic: str | None = Field(default=None, alias="materi", max_length=500)
    pbl_type: str | None = Field(default=None, max_length=20)
    category: CSRCategory | None = None
    agenda: str | None = Field(default=None, max_length=200)
    row_type: NonBlockRowType | None = Field(default=None, alias="jenis_baris")

    @field_validator("lecturer_ids")
    @classmethod
    def drop_blank_lecturers(cls, value: list[str]) -> list[str]:
        cleaned = [item.strip() for item in value if item and item.strip()]
        return list(dict.fromkeys(cleaned))

    @field_validator("room_id", "small_group_id", "makeup_group_id")
    @classmethod
    def blank_to_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        stripped = value.strip()
        return stripped or None

    def time_errors(self) -> list[str]:
        errors: list[str] = []
        minutes: list[int] = []
        for value in (self.start_time, self.end_time):
            try:
                minutes.append(parse_clock(value))
            except ValueError as exc:
                errors.append(str(exc))
        if not errors and minutes[1] <= minutes[0]:
            errors.append("Jam selesai harus setelah jam mulai")
        return errors

    def group_axes(self) -> set[str]:
        axes = set()
        if self.small_group_id is not None:
            axes.add("small")
        if self.large_group_semester is not None:
            axes.add("large")
        if self.makeup_group_id is not None:
            axes.add("makeup")
        return axes

    def shape_errors(self, kind: ScheduleKind) -> list[str]:
        """Clock problems, then kind-dependent shape problems; checked before any rule runs."""
        profile = KIND_PROFILES[kind]
        errors = self.time_errors()
        axes = self.group_axes()
        if len(axes) > 1:
            errors.append("Hanya satu jenis kelompok yang boleh diisi")
        disallowed = sorted(axes - profile.group_axes)
        if disallowed:
            errors.append(f"{kind.label} tidak mendukung kelompok: {', '.join(disallowed)}")
        if profile.lecturers == "required" and not self.lecturer_ids:
            errors.append(f"{kind.label} membutuhkan minimal satu dosen")
        if profile.lecturers == "none" and self.lecturer_ids:
            errors.append(f"{kind.label} tidak menggunakan dosen")
        unexpected = [name for name in EXTRA_FIELDS if getattr(self, name) is not None and name not in profile.extras]
        if unexpected:
            errors.append(f"Field tidak dikenal untuk {kind.label}: {', '.join(unexpected)}")
        if self.uses_room and self.room_id is None and kind not in ROOM_OPTIONAL_KINDS:
            errors.append("Ruangan wajib diisi")
        return errors

    def extras(self, kind: ScheduleKind) -> dict:
        return {name: getattr(self, name) for name in KIND_PROFILES[kind].extras}


class ScheduleImportIn(BaseModel):
    data: list[ScheduleEntryIn] = Field(min_length=1, max_length=1000)


class ScheduleEntryOut(BaseModel):
    id: str
    kind: ScheduleKind
    course_code: str
    date: dt.date
    start_time: str
    end_time: str
    session_count: int
    room_id: str | None
    uses_room: bool
    lecturer_ids: list[str]
    small_group_id: str | None = None
    large_group_semester: int | None = None
    makeup_group_id: str | None = None
    topic: str | None = None
    pbl_type: str | None = None
    category: CSRCategory | None = None
    agenda: str | None = None
    row_type: NonBlockRowType | None = None


class ViolationOut(BaseModel):
    kind: str
    message: str
    conflicting_entry_id: str | None = None


class ValidationReportOut(BaseModel):
    valid: bool
    violations: list[ViolationOut]


class ImportResultOut(BaseModel):
    success: int
    total: int
    message: str
    ids: list[str]


class TimeSlotOut(BaseModel):
    start: str
    ends: dict[int, str]
