from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ViolationKind(str, Enum):
    room_conflict = "RoomConflict"
    lecturer_conflict = "LecturerConflict"
    group_conflict = "GroupConflict"
    capacity_exceeded = "CapacityExceeded"
    date_out_of_range = "DateOutOfRange"
    expertise_mismatch = "ExpertiseMismatch"
    group_mismatch = "GroupMismatch"
    not_found = "NotFound"


# Message templates are str.format patterns; params are kept on the violation
# so callers can re-render them in another language.
TEMPLATES: dict[str, str] = {
    "conflict": (
        "Jadwal bentrok dengan {schedule_name} pada tanggal {date} jam {start}-{end}. "
        "Bentrok: ({detail})"
    ),
    "room_detail": "Ruangan: {room_name}",
    "lecturer_detail": "Dosen: {lecturer_names}",
    "group_detail": "{source_group} vs {target_group}",
    "capacity": (
        "Kapasitas ruangan tidak mencukupi. Ruangan: {room_name} hanya dapat menampung "
        "{capacity} orang, sedangkan diperlukan {headcount} orang."
    ),
    "date_before": (
        "Tanggal jadwal ({date}) tidak boleh sebelum tanggal mulai mata kuliah ({start_date}). "
        "Rentang mata kuliah: {start_date} s/d {end_date}"
    ),
    "date_after": (
        "Tanggal jadwal ({date}) tidak boleh setelah tanggal akhir mata kuliah ({end_date}). "
        "Rentang mata kuliah: {start_date} s/d {end_date}"
    ),
    "expertise_topic": (
        'Materi "{topic}" tidak sesuai dengan keahlian dosen "{lecturer_name}". '
        "Keahlian dosen: {expertise}"
    ),
    "expertise_tags": (
        'Dosen "{lecturer_name}" tidak memiliki keahlian yang dibutuhkan mata kuliah ({required}). '
        "Keahlian dosen: {expertise}"
    ),
    "large_group_semester": (
        "Kelompok besar semester {group_semester} tidak sesuai dengan semester mata kuliah "
        "({course_semester}). Hanya boleh menggunakan kelompok besar semester {course_semester}."
    ),
    "makeup_term_group": "Mata kuliah semester Antara hanya dapat menggunakan kelompok Antara.",
    "regular_term_group": "Kelompok Antara hanya dapat digunakan pada mata kuliah semester Antara.",
    "room_missing": "Ruangan tidak ditemukan",
    "lecturer_missing": "Dosen tidak ditemukan: {lecturer_ids}",
    "group_missing": "Kelompok tidak ditemukan: {group}",
    "intra_batch": "Baris {row}: Jadwal bentrok dengan data pada baris {other_row} ({detail})",
    "row": "Baris {row}: {message}",
}


def render(template: str, **params) -> str:
    return TEMPLATES[template].format(**params)


@dataclass(frozen=True)
class ConflictViolation:
    kind: ViolationKind
    template: str
    params: dict = field(default_factory=dict)
    conflicting_entry_id: str | None = None

    @property
    def message(self) -> str:
        return render(self.template, **self.params)

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "conflicting_entry_id": self.conflicting_entry_id,
        }


def row_message(row_number: int, message: str) -> str:
    return render("row", row=row_number, message=message)
