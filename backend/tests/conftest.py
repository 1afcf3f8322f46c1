import datetime as dt
import os

# The application engine is built at import time; point it at sqlite before that happens.
os.environ["DATABASE_URL"] = "sqlite+pysqlite://"
os.environ["BOOTSTRAP_SCHEMA_ON_STARTUP"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from medsched.api.deps import get_db
from medsched.db.base import Base
from medsched.domain.registry import CourseInfo, InMemoryResourceRegistry, LecturerInfo, RoomInfo
from medsched.main import app
from medsched.models import (
    AcademicTerm,
    CourseKind,
    CourseOffering,
    LargeGroup,
    LargeGroupMember,
    Lecturer,
    MakeupGroup,
    MakeupGroupMember,
    Room,
    SmallGroup,
    SmallGroupMember,
    Student,
)

COURSE_CODE = "MKU001"
MAKEUP_COURSE_CODE = "MKA001"
SCHEDULE_DATE = "2025-01-15"


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture()
def curriculum(db_session):
    """Semester 3 cohort of 45 students, three rooms and a handful of lecturers."""
    db = db_session
    db.add_all(
        [
            Room(id="101", name="Ruang 101", building="Gedung A", capacity=50),
            Room(id="102", name="Ruang 102", building="Gedung A", capacity=40),
            Room(id="201", name="Ruang Diskusi 1", building="Gedung B", capacity=6),
        ]
    )
    db.add_all(
        [
            Lecturer(id="7", name="dr. Sari", expertise=["Anatomi"]),
            Lecturer(id="9", name="dr. Bayu", expertise=["Fisiologi"]),
            Lecturer(id="11", name="dr. Wulan", expertise=["standby"]),
        ]
    )

    students = [
        Student(id=f"s{index:03d}", nim=f"2203{index:04d}", name=f"Mahasiswa {index}", semester=3)
        for index in range(1, 46)
    ]
    db.add_all(students)

    db.add(LargeGroup(id="lg-3", semester=3))
    db.add_all(LargeGroupMember(group_id="lg-3", student_id=student.id) for student in students)

    db.add_all(
        [
            SmallGroup(id="sg-3a", name="A", semester=3),
            SmallGroup(id="sg-3b", name="B", semester=3),
        ]
    )
    db.add_all(SmallGroupMember(group_id="sg-3a", student_id=student.id) for student in students[:5])
    db.add_all(SmallGroupMember(group_id="sg-3b", student_id=student.id) for student in students[5:10])

    db.add(MakeupGroup(id="mg-1", name="Antara 1", course_code=MAKEUP_COURSE_CODE))
    db.add_all(MakeupGroupMember(group_id="mg-1", student_id=student.id) for student in students[:2])

    db.add_all(
        [
            CourseOffering(
                code=COURSE_CODE,
                name="Blok Muskuloskeletal",
                kind=CourseKind.block,
                term=AcademicTerm.regular,
                semester=3,
                block_number=1,
                start_date=dt.date(2025, 1, 1),
                end_date=dt.date(2025, 2, 1),
                required_expertise_tags=[],
            ),
            CourseOffering(
                code=MAKEUP_COURSE_CODE,
                name="Blok Antara",
                kind=CourseKind.block,
                term=AcademicTerm.makeup,
                semester=3,
                start_date=dt.date(2025, 7, 1),
                end_date=dt.date(2025, 8, 1),
                required_expertise_tags=[],
            ),
        ]
    )
    db.commit()
    return db


@pytest.fixture()
def lecture_payload():
    def build(**overrides) -> dict:
        payload = {
            "tanggal": SCHEDULE_DATE,
            "jam_mulai": "08.10",
            "jam_selesai": "09.00",
            "jumlah_sesi": 1,
            "ruangan_id": "101",
            "dosen_ids": ["7"],
            "kelompok_besar_id": 3,
        }
        payload.update(overrides)
        return payload

    return build


@pytest.fixture()
def registry():
    """In-memory lookups mirroring the ``curriculum`` fixture at a smaller scale."""
    cohort = frozenset(f"s{index:03d}" for index in range(1, 41))
    return InMemoryResourceRegistry(
        rooms={
            "101": RoomInfo(id="101", name="Ruang 101", capacity=50),
            "102": RoomInfo(id="102", name="Ruang 102", capacity=40),
        },
        courses={
            COURSE_CODE: CourseInfo(
                code=COURSE_CODE,
                start_date=dt.date(2025, 1, 1),
                end_date=dt.date(2025, 2, 1),
                semester=3,
            ),
        },
        lecturers={
            "7": LecturerInfo(id="7", name="dr. Sari", expertise=("Anatomi",)),
            "9": LecturerInfo(id="9", name="dr. Bayu", expertise=("Fisiologi",)),
            "11": LecturerInfo(id="11", name="dr. Wulan", expertise=("standby",)),
        },
        small_groups={
            "sg-3a": ("A", 3, frozenset({"s001", "s002", "s003"})),
            "sg-3b": ("B", 3, frozenset({"s004", "s005"})),
            "sg-5a": ("A", 5, frozenset({"s900", "s901"})),
        },
        large_groups={3: cohort, 5: None},
        large_group_sizes={5: 41},
        makeup_groups={
            "mg-1": ("Antara 1", frozenset({"s001", "s500"})),
            "mg-2": ("Antara 2", frozenset({"s600"})),
        },
    )
