from collections.abc import Generator

from fastapi import Depends
from sqlalchemy.orm import Session

from medsched.core.config import Settings, get_settings
from medsched.db.session import SessionLocal
from medsched.services.assignments import AssignmentService
from medsched.services.schedule_service import ScheduleService


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_schedule_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> ScheduleService:
    return ScheduleService(db, settings)


def get_assignment_service(db: Session = Depends(get_db)) -> AssignmentService:
    return AssignmentService(db)
