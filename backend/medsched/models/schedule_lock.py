from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from medsched.db.base import Base


class ScheduleResourceLock(Base):
    """Row-lock anchor for one resource on one date, e.g. ``room:<id>:2025-01-15``."""

    __tablename__ = "schedule_resource_locks"

    resource_key: Mapped[str] = mapped_column(String(200), primary_key=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
