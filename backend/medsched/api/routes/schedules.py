import datetime as dt

from fastapi import APIRouter, Depends, Query, status

from medsched.api.deps import get_schedule_service
from medsched.core.config import Settings, get_settings
from medsched.domain.entries import ScheduleKind
from medsched.domain.time_range import slot_table
from medsched.schemas.schedule import (
    ImportResultOut,
    ScheduleEntryIn,
    ScheduleEntryOut,
    ScheduleImportIn,
    TimeSlotOut,
    ValidationReportOut,
    ViolationOut,
)
from medsched.services.schedule_service import ScheduleService

router = APIRouter()


@router.get("/schedules", response_model=list[ScheduleEntryOut])
def list_schedules_on_date(
    date: dt.date = Query(...),
    service: ScheduleService = Depends(get_schedule_service),
) -> list[ScheduleEntryOut]:
    return service.list_on_date(date)


@router.get("/time-slots", response_model=list[TimeSlotOut])
def list_time_slots(settings: Settings = Depends(get_settings)) -> list[TimeSlotOut]:
    return [TimeSlotOut(**slot) for slot in slot_table(settings.session_minutes)]


@router.get("/courses/{course_code}/schedules/{kind}", response_model=list[ScheduleEntryOut])
def list_course_schedules(
    course_code: str,
    kind: ScheduleKind,
    service: ScheduleService = Depends(get_schedule_service),
) -> list[ScheduleEntryOut]:
    return service.list_for_course(kind, course_code)


@router.post(
    "/courses/{course_code}/schedules/{kind}",
    response_model=ScheduleEntryOut,
    status_code=status.HTTP_201_CREATED,
)
def create_schedule(
    course_code: str,
    kind: ScheduleKind,
    payload: ScheduleEntryIn,
    service: ScheduleService = Depends(get_schedule_service),
) -> ScheduleEntryOut:
    return service.create(kind, course_code, payload)


@router.post("/courses/{course_code}/schedules/{kind}/validate", response_model=ValidationReportOut)
def validate_schedule(
    course_code: str,
    kind: ScheduleKind,
    payload: ScheduleEntryIn,
    service: ScheduleService = Depends(get_schedule_service),
) -> ValidationReportOut:
    violations = service.check(kind, course_code, payload)
    return ValidationReportOut(
        valid=not violations,
        violations=[ViolationOut(**item.to_dict()) for item in violations],
    )


@router.post(
    "/courses/{course_code}/schedules/{kind}/import",
    response_model=ImportResultOut,
    status_code=status.HTTP_201_CREATED,
)
def import_schedules(
    course_code: str,
    kind: ScheduleKind,
    payload: ScheduleImportIn,
    service: ScheduleService = Depends(get_schedule_service),
) -> ImportResultOut:
    ids = service.import_rows(kind, course_code, payload.data)
    return ImportResultOut(
        success=len(ids),
        total=len(payload.data),
        message=f"Berhasil mengimport {len(ids)} data {kind.label}",
        ids=ids,
    )


@router.put("/courses/{course_code}/schedules/{kind}/{entry_id}", response_model=ScheduleEntryOut)
def update_schedule(
    course_code: str,
    kind: ScheduleKind,
    entry_id: str,
    payload: ScheduleEntryIn,
    service: ScheduleService = Depends(get_schedule_service),
) -> ScheduleEntryOut:
    return service.update(kind, course_code, entry_id, payload)


@router.delete("/courses/{course_code}/schedules/{kind}/{entry_id}")
def delete_schedule(
    course_code: str,
    kind: ScheduleKind,
    entry_id: str,
    service: ScheduleService = Depends(get_schedule_service),
) -> dict:
    service.delete(kind, course_code, entry_id)
    return {"success": True}
