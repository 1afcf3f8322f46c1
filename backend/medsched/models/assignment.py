import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, Enum as SAEnum, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from medsched.db.base import Base
from medsched.models.schedule import CSRCategory


class AssignmentKind(str, Enum):
    pbl = "pbl"
    csr = "csr"


class PBLAssignment(Base):
    __tablename__ = "pbl_assignments"
    __table_args__ = (
        UniqueConstraint(
            "course_code",
            "module_number",
            "small_group_id",
            "lecturer_id",
            name="uq_pbl_assignments_identity",
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    course_code: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    module_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    small_group_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    lecturer_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class CSRAssignment(Base):
    __tablename__ = "csr_assignments"
    __table_args__ = (
        UniqueConstraint("course_code", "lecturer_id", "category", name="uq_csr_assignments_identity"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    course_code: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    lecturer_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    category: Mapped[CSRCategory] = mapped_column(
        SAEnum(CSRCategory, name="csr_category"),
        nullable=False,
        default=CSRCategory.reguler,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
