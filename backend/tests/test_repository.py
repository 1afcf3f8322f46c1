import datetime as dt
import logging

from medsched.domain.entries import LargeGroupRef
from medsched.models.schedule import LectureSession
from medsched.services.repository import ScheduleRepository, SqlResourceRegistry

DAY = dt.date(2025, 1, 15)


def add_lecture(db, entry_id: str, large_group_id: str) -> None:
    db.add(
        LectureSession(
            id=entry_id,
            course_code="MKU001",
            date=DAY,
            start_time=dt.time(8, 10),
            end_time=dt.time(9, 0),
            room_id="101",
            lecturer_ids=["7"],
            large_group_id=large_group_id,
        )
    )
    db.commit()


def test_stored_large_group_is_read_back_as_its_semester(curriculum):
    add_lecture(curriculum, "lec-1", "lg-3")
    repository = ScheduleRepository(curriculum, SqlResourceRegistry(curriculum))

    [entry] = repository.entries_on_date(DAY)

    assert entry.group == LargeGroupRef(3)


def test_unknown_large_group_is_logged(curriculum, caplog):
    add_lecture(curriculum, "lec-orphan", "lg-deleted")
    repository = ScheduleRepository(curriculum, SqlResourceRegistry(curriculum))

    with caplog.at_level(logging.WARNING, logger="medsched.services.repository"):
        [entry] = repository.entries_on_date(DAY)

    assert entry.group is None
    assert "Schedule lec-orphan references unknown large group lg-deleted" in caplog.text
