from __future__ import annotations

import logging

from sqlalchemy import case, select, update
from sqlalchemy.orm import Session

from medsched.core.exceptions import AppError, ResourceNotFoundError
from medsched.models.assignment import AssignmentKind, CSRAssignment, PBLAssignment
from medsched.models.course import CourseOffering
from medsched.models.lecturer import Lecturer
from medsched.schemas.assignment import CSRAssignmentIn, LecturerAssignmentsOut, PBLAssignmentIn

logger = logging.getLogger(__name__)

COUNTER_COLUMNS = {
    AssignmentKind.pbl: Lecturer.pbl_assignment_count,
    AssignmentKind.csr: Lecturer.csr_assignment_count,
}


def adjust_counter(db: Session, lecturer_id: str, kind: AssignmentKind, delta: int) -> None:
    """Move a lecturer's assignment counter in SQL so concurrent writers never lose an update.

    Decrements stop at zero.
    """
    column = COUNTER_COLUMNS[kind]
    if delta >= 0:
        value = column + delta
    else:
        value = case((column + delta > 0, column + delta), else_=0)
    db.execute(
        update(Lecturer)
        .where(Lecturer.id == lecturer_id)
        .values({column.key: value})
        .execution_options(synchronize_session=False)
    )


class AssignmentService:
    """PBL/CSR lecturer mappings with their denormalized counters.

    The mapping row and the counter move commit together or not at all.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def _require_lecturer(self, lecturer_id: str) -> Lecturer:
        lecturer = self.db.get(Lecturer, lecturer_id)
        if lecturer is None:
            raise ResourceNotFoundError("Dosen", lecturer_id, message="Dosen tidak ditemukan")
        return lecturer

    def _require_course(self, course_code: str) -> None:
        found = self.db.execute(
            select(CourseOffering.id).where(CourseOffering.code == course_code)
        ).scalar_one_or_none()
        if found is None:
            raise ResourceNotFoundError("Mata kuliah", course_code, message="Mata kuliah tidak ditemukan")

    def _commit(self, action: str, kind: AssignmentKind, lecturer_id: str, course_code: str) -> None:
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.info("%s %s assignment of lecturer %s on %s", action, kind.value, lecturer_id, course_code)

    def assign_pbl(self, payload: PBLAssignmentIn) -> PBLAssignment:
        self._require_course(payload.course_code)
        self._require_lecturer(payload.lecturer_id)
        existing = self.db.execute(
            select(PBLAssignment).where(
                PBLAssignment.course_code == payload.course_code,
                PBLAssignment.module_number == payload.module_number,
                PBLAssignment.small_group_id == payload.small_group_id,
                PBLAssignment.lecturer_id == payload.lecturer_id,
            )
        ).scalar_one_or_none()
        if existing is not None:
            raise AppError("Dosen sudah ditugaskan pada modul PBL ini", status_code=409)

        assignment = PBLAssignment(
            course_code=payload.course_code,
            module_number=payload.module_number,
            small_group_id=payload.small_group_id,
            lecturer_id=payload.lecturer_id,
        )
        self.db.add(assignment)
        adjust_counter(self.db, payload.lecturer_id, AssignmentKind.pbl, 1)
        self._commit("Created", AssignmentKind.pbl, payload.lecturer_id, payload.course_code)
        self.db.refresh(assignment)
        return assignment

    def assign_csr(self, payload: CSRAssignmentIn) -> CSRAssignment:
        self._require_course(payload.course_code)
        self._require_lecturer(payload.lecturer_id)
        existing = self.db.execute(
            select(CSRAssignment).where(
                CSRAssignment.course_code == payload.course_code,
                CSRAssignment.lecturer_id == payload.lecturer_id,
                CSRAssignment.category == payload.category,
            )
        ).scalar_one_or_none()
        if existing is not None:
            raise AppError("Dosen sudah ditugaskan pada CSR ini", status_code=409)

        assignment = CSRAssignment(
            course_code=payload.course_code,
            lecturer_id=payload.lecturer_id,
            category=payload.category,
        )
        self.db.add(assignment)
        adjust_counter(self.db, payload.lecturer_id, AssignmentKind.csr, 1)
        self._commit("Created", AssignmentKind.csr, payload.lecturer_id, payload.course_code)
        self.db.refresh(assignment)
        return assignment

    def unassign(self, kind: AssignmentKind, assignment_id: str) -> None:
        model = PBLAssignment if kind is AssignmentKind.pbl else CSRAssignment
        assignment = self.db.get(model, assignment_id)
        if assignment is None:
            raise ResourceNotFoundError("Penugasan", assignment_id, message="Penugasan tidak ditemukan")
        lecturer_id = assignment.lecturer_id
        course_code = assignment.course_code
        self.db.delete(assignment)
        adjust_counter(self.db, lecturer_id, kind, -1)
        self._commit("Deleted", kind, lecturer_id, course_code)

    def counters(self, lecturer_id: str) -> LecturerAssignmentsOut:
        lecturer = self._require_lecturer(lecturer_id)
        self.db.refresh(lecturer)
        return LecturerAssignmentsOut(
            lecturer_id=lecturer.id,
            name=lecturer.name,
            pbl_assignment_count=lecturer.pbl_assignment_count,
            csr_assignment_count=lecturer.csr_assignment_count,
        )
