import uuid
import datetime as dt
from enum import Enum

from sqlalchemy import Boolean, Date, DateTime, Enum as SAEnum, Integer, JSON, String, Text, Time
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from medsched.db.base import Base


class CSRCategory(str, Enum):
    reguler = "reguler"
    responsi = "responsi"


class NonBlockRowType(str, Enum):
    materi = "materi"
    agenda = "agenda"


class ScheduleColumnsMixin:
    """Columns every schedule table carries; kind-specific fields live on the subclasses."""

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    course_code: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    start_time: Mapped[dt.time] = mapped_column(Time, nullable=False)
    end_time: Mapped[dt.time] = mapped_column(Time, nullable=False)
    session_count: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    room_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    uses_room: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    lecturer_ids: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    small_group_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    large_group_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    makeup_group_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    topic: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())


class LectureSession(ScheduleColumnsMixin, Base):
    __tablename__ = "lecture_sessions"


class PBLSession(ScheduleColumnsMixin, Base):
    __tablename__ = "pbl_sessions"

    pbl_type: Mapped[str | None] = mapped_column(String(20), nullable=True)


class CSRSession(ScheduleColumnsMixin, Base):
    __tablename__ = "csr_sessions"

    category: Mapped[CSRCategory] = mapped_column(
        SAEnum(CSRCategory, name="csr_category"),
        nullable=False,
        default=CSRCategory.reguler,
    )


class JournalReadingSession(ScheduleColumnsMixin, Base):
    __tablename__ = "journal_reading_sessions"


class PracticumSession(ScheduleColumnsMixin, Base):
    __tablename__ = "practicum_sessions"


class SpecialAgendaSession(ScheduleColumnsMixin, Base):
    __tablename__ = "special_agenda_sessions"

    agenda: Mapped[str | None] = mapped_column(String(200), nullable=True)


class NonBlockSession(ScheduleColumnsMixin, Base):
    __tablename__ = "non_block_sessions"

    row_type: Mapped[NonBlockRowType] = mapped_column(
        SAEnum(NonBlockRowType, name="non_block_row_type"),
        nullable=False,
        default=NonBlockRowType.materi,
    )
