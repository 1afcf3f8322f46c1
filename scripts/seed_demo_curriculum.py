"""Seed rooms, lecturers, cohorts and course offerings for local validation runs.

Run:
  PYTHONPATH=backend python scripts/seed_demo_curriculum.py
"""

from __future__ import annotations

import datetime as dt
import os

from sqlalchemy import func, select

from medsched.db.bootstrap import ensure_runtime_schema_compatibility
from medsched.db.session import SessionLocal
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

ACADEMIC_YEAR_START = int(os.getenv("SEED_ACADEMIC_YEAR_START", "2025"))
STUDENTS_PER_SEMESTER = int(os.getenv("SEED_STUDENTS_PER_SEMESTER", "45"))
SMALL_GROUP_SIZE = 9
SEMESTERS = (1, 3, 5, 7)

ROOMS = [
    ("Ruang Kuliah 1", "Gedung Kuliah Bersama", 120),
    ("Ruang Kuliah 2", "Gedung Kuliah Bersama", 60),
    ("Ruang Kuliah 3", "Gedung Kuliah Bersama", 50),
    ("Ruang Diskusi 1", "Gedung Skills Lab", 12),
    ("Ruang Diskusi 2", "Gedung Skills Lab", 12),
    ("Ruang Diskusi 3", "Gedung Skills Lab", 12),
    ("Lab Anatomi", "Gedung Laboratorium", 40),
    ("Lab Fisiologi", "Gedung Laboratorium", 40),
]

LECTURERS = [
    ("198001012005011001", "dr. Sari Wulandari, Sp.KK", ["Anatomi", "Histologi"]),
    ("198203142006041002", "dr. Bayu Pratama, M.Biomed", ["Fisiologi", "Biokimia"]),
    ("198505202010122003", "dr. Wulan Kusuma", ["Farmakologi"]),
    ("197912112004011004", "dr. Andi Saputra, Sp.PD", ["Penyakit Dalam", "Fisiologi"]),
    ("199001012015031005", "dr. Citra Lestari", ["standby"]),
]

# (code, name, semester, block number, first day offset, length in days, term)
COURSES = [
    ("MKB101", "Blok Biomedik Dasar", 1, 1, 0, 35, AcademicTerm.regular),
    ("MKB301", "Blok Muskuloskeletal", 3, 1, 0, 35, AcademicTerm.regular),
    ("MKB501", "Blok Kardiovaskular", 5, 1, 0, 35, AcademicTerm.regular),
    ("MKB701", "Blok Kedokteran Keluarga", 7, 1, 0, 35, AcademicTerm.regular),
    ("MKA301", "Blok Antara Muskuloskeletal", 3, None, 180, 28, AcademicTerm.makeup),
]


def upsert_rooms(session) -> None:
    for name, building, capacity in ROOMS:
        room = session.execute(select(Room).where(Room.name == name)).scalar_one_or_none()
        if room is None:
            session.add(Room(name=name, building=building, capacity=capacity))
        else:
            room.building = building
            room.capacity = capacity


def upsert_lecturers(session) -> None:
    for employee_number, name, expertise in LECTURERS:
        lecturer = session.execute(
            select(Lecturer).where(Lecturer.employee_number == employee_number)
        ).scalar_one_or_none()
        if lecturer is None:
            session.add(Lecturer(employee_number=employee_number, name=name, expertise=expertise))
        else:
            lecturer.name = name
            lecturer.expertise = expertise


def upsert_students(session, semester: int) -> list[Student]:
    students: list[Student] = []
    cohort_year = ACADEMIC_YEAR_START - (semester - 1) // 2
    for index in range(1, STUDENTS_PER_SEMESTER + 1):
        nim = f"{cohort_year % 100:02d}{semester:02d}{index:04d}"
        student = session.execute(select(Student).where(Student.nim == nim)).scalar_one_or_none()
        if student is None:
            student = Student(nim=nim, name=f"Mahasiswa {semester}-{index:02d}", semester=semester)
            session.add(student)
        students.append(student)
    session.flush()
    return students


def upsert_cohort(session, semester: int, students: list[Student]) -> None:
    large_group = session.execute(select(LargeGroup).where(LargeGroup.semester == semester)).scalar_one_or_none()
    if large_group is None:
        large_group = LargeGroup(semester=semester)
        session.add(large_group)
        session.flush()
    _replace_members(session, LargeGroupMember, large_group.id, students)

    for offset in range(0, len(students), SMALL_GROUP_SIZE):
        name = chr(ord("A") + offset // SMALL_GROUP_SIZE)
        small_group = session.execute(
            select(SmallGroup).where(SmallGroup.semester == semester, SmallGroup.name == name)
        ).scalar_one_or_none()
        if small_group is None:
            small_group = SmallGroup(semester=semester, name=name)
            session.add(small_group)
            session.flush()
        _replace_members(session, SmallGroupMember, small_group.id, students[offset : offset + SMALL_GROUP_SIZE])


def _replace_members(session, model, group_id: str, students: list[Student]) -> None:
    current = set(session.execute(select(model.student_id).where(model.group_id == group_id)).scalars())
    for student in students:
        if student.id not in current:
            session.add(model(group_id=group_id, student_id=student.id))


def upsert_courses(session) -> None:
    year_start = dt.date(ACADEMIC_YEAR_START, 8, 25)
    for code, name, semester, block_number, offset, length, term in COURSES:
        start_date = year_start + dt.timedelta(days=offset)
        end_date = start_date + dt.timedelta(days=length - 1)
        course = session.execute(select(CourseOffering).where(CourseOffering.code == code)).scalar_one_or_none()
        if course is None:
            course = CourseOffering(code=code, name=name, kind=CourseKind.block)
            session.add(course)
        course.name = name
        course.semester = semester
        course.block_number = block_number
        course.term = term
        course.start_date = start_date
        course.end_date = end_date
        course.required_expertise_tags = []


def upsert_makeup_group(session, students: list[Student]) -> None:
    group = session.execute(select(MakeupGroup).where(MakeupGroup.course_code == "MKA301")).scalar_one_or_none()
    if group is None:
        group = MakeupGroup(name="Antara Muskuloskeletal", course_code="MKA301")
        session.add(group)
        session.flush()
    _replace_members(session, MakeupGroupMember, group.id, students)


def main() -> None:
    ensure_runtime_schema_compatibility()
    with SessionLocal() as session:
        upsert_rooms(session)
        upsert_lecturers(session)
        for semester in SEMESTERS:
            students = upsert_students(session, semester)
            upsert_cohort(session, semester, students)
            if semester == 3:
                upsert_makeup_group(session, students[:6])
        upsert_courses(session)

        session.commit()

        room_count = session.execute(select(func.count(Room.id))).scalar_one()
        lecturer_count = session.execute(select(func.count(Lecturer.id))).scalar_one()
        student_count = session.execute(select(func.count(Student.id))).scalar_one()
        course_count = session.execute(select(func.count(CourseOffering.id))).scalar_one()

    print("Demo curriculum seeded successfully.")
    print(f"Rooms: {room_count}")
    print(f"Lecturers: {lecturer_count}")
    print(f"Students: {student_count}")
    print(f"Course offerings: {course_count}")


if __name__ == "__main__":
    main()
