from __future__ import annotations

from dataclasses import dataclass
import datetime as dt
import re

CLOCK_PATTERN = re.compile(r"^\s*([01]?\d|2[0-3])[:.]([0-5]\d)(?:[:.]([0-5]\d))?\s*$")

SESSION_MINUTES = 50
MAX_SESSION_COUNT = 6

# Start-of-period boundaries offered to the frontend, in display format.
DAILY_SLOTS = (
    "07.20",
    "08.10",
    "09.00",
    "09.50",
    "10.40",
    "11.30",
    "12.35",
    "13.25",
    "14.15",
    "15.05",
    "15.35",
    "16.25",
    "17.15",
)


def parse_clock(value: str | dt.time) -> int:
    """Return minute-of-day for ``HH:MM``, ``HH.MM``, ``HH:MM:SS`` or a ``time``."""
    if isinstance(value, dt.time):
        return value.hour * 60 + value.minute
    match = CLOCK_PATTERN.match(str(value))
    if match is None:
        raise ValueError(f"Format jam tidak valid: {value!r} (gunakan HH:MM atau HH.MM)")
    return int(match.group(1)) * 60 + int(match.group(2))


def minutes_to_time(minutes: int) -> dt.time:
    if not 0 <= minutes < 24 * 60:
        raise ValueError(f"Minute of day out of range: {minutes}")
    return dt.time(minutes // 60, minutes % 60)


def format_display(minutes: int) -> str:
    return f"{minutes // 60:02d}.{minutes % 60:02d}"


def format_storage(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}:00"


def expected_end(start: int, session_count: int, session_minutes: int = SESSION_MINUTES) -> int:
    return start + session_count * session_minutes


def slot_table(session_minutes: int = SESSION_MINUTES) -> list[dict]:
    slots = []
    for label in DAILY_SLOTS:
        start = parse_clock(label)
        slots.append(
            {
                "start": label,
                "ends": {
                    count: format_display(expected_end(start, count, session_minutes))
                    for count in range(1, MAX_SESSION_COUNT + 1)
                    if expected_end(start, count, session_minutes) < 24 * 60
                },
            }
        )
    return slots


@dataclass(frozen=True)
class TimeRange:
    """Half-open ``[start, end)`` interval of minutes on one calendar date."""

    date: dt.date
    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start >= self.end:
            raise ValueError(
                f"Jam mulai ({format_display(self.start)}) harus sebelum jam selesai ({format_display(self.end)})"
            )

    @classmethod
    def parse(cls, date: dt.date, start: str | dt.time, end: str | dt.time) -> "TimeRange":
        return cls(date=date, start=parse_clock(start), end=parse_clock(end))

    @property
    def duration(self) -> int:
        return self.end - self.start

    def overlaps(self, other: "TimeRange") -> bool:
        return self.date == other.date and self.start < other.end and other.start < self.end

    def matches_session_count(self, session_count: int, session_minutes: int = SESSION_MINUTES) -> bool:
        return self.duration == session_count * session_minutes

    def display(self) -> tuple[str, str]:
        return format_display(self.start), format_display(self.end)
