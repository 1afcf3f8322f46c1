from fastapi import APIRouter, Depends, status

from medsched.api.deps import get_assignment_service
from medsched.models.assignment import AssignmentKind
from medsched.schemas.assignment import (
    CSRAssignmentIn,
    CSRAssignmentOut,
    LecturerAssignmentsOut,
    PBLAssignmentIn,
    PBLAssignmentOut,
)
from medsched.services.assignments import AssignmentService

router = APIRouter()


@router.post("/assignments/pbl", response_model=PBLAssignmentOut, status_code=status.HTTP_201_CREATED)
def create_pbl_assignment(
    payload: PBLAssignmentIn,
    service: AssignmentService = Depends(get_assignment_service),
) -> PBLAssignmentOut:
    return service.assign_pbl(payload)


@router.delete("/assignments/pbl/{assignment_id}")
def delete_pbl_assignment(
    assignment_id: str,
    service: AssignmentService = Depends(get_assignment_service),
) -> dict:
    service.unassign(AssignmentKind.pbl, assignment_id)
    return {"success": True}


@router.post("/assignments/csr", response_model=CSRAssignmentOut, status_code=status.HTTP_201_CREATED)
def create_csr_assignment(
    payload: CSRAssignmentIn,
    service: AssignmentService = Depends(get_assignment_service),
) -> CSRAssignmentOut:
    return service.assign_csr(payload)


@router.delete("/assignments/csr/{assignment_id}")
def delete_csr_assignment(
    assignment_id: str,
    service: AssignmentService = Depends(get_assignment_service),
) -> dict:
    service.unassign(AssignmentKind.csr, assignment_id)
    return {"success": True}


@router.get("/lecturers/{lecturer_id}/assignments", response_model=LecturerAssignmentsOut)
def get_lecturer_assignments(
    lecturer_id: str,
    service: AssignmentService = Depends(get_assignment_service),
) -> LecturerAssignmentsOut:
    return service.counters(lecturer_id)
