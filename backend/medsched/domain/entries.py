from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from medsched.domain.time_range import TimeRange


class ScheduleKind(str, Enum):
    lecture = "lecture"
    pbl = "pbl"
    csr = "csr"
    journal_reading = "journal-reading"
    practicum = "practicum"
    special_agenda = "special-agenda"
    non_block = "non-block"

    @property
    def label(self) -> str:
        return KIND_LABELS[self]


KIND_LABELS = {
    ScheduleKind.lecture: "Jadwal Kuliah Besar",
    ScheduleKind.pbl: "Jadwal PBL",
    ScheduleKind.csr: "Jadwal CSR",
    ScheduleKind.journal_reading: "Jadwal Jurnal Reading",
    ScheduleKind.practicum: "Jadwal Praktikum",
    ScheduleKind.special_agenda: "Jadwal Agenda Khusus",
    ScheduleKind.non_block: "Jadwal Non Blok",
}


@dataclass(frozen=True)
class SmallGroupRef:
    id: str


@dataclass(frozen=True)
class LargeGroupRef:
    semester: int


@dataclass(frozen=True)
class MakeupGroupRef:
    id: str


GroupRef = Union[SmallGroupRef, LargeGroupRef, MakeupGroupRef]


@dataclass(frozen=True)
class ScheduleEntry:
    """Kind-independent projection of one schedule row.

    Rows that are not persisted yet (create requests, import rows) have ``id=None``.
    """

    kind: ScheduleKind
    course_code: str
    time: TimeRange
    session_count: int = 1
    id: str | None = None
    room_id: str | None = None
    uses_room: bool = True
    lecturer_ids: frozenset[str] = field(default_factory=frozenset)
    group: GroupRef | None = None
    topic: str | None = None

    @property
    def date(self):
        return self.time.date

    @property
    def occupies_room(self) -> bool:
        return self.uses_room and self.room_id is not None

    def is_same_entry(self, other: "ScheduleEntry") -> bool:
        return self.id is not None and self.id == other.id
