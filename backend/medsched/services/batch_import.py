from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
import datetime as dt
import logging

from medsched.core.exceptions import BatchRejectedError
from medsched.domain.entries import ScheduleEntry
from medsched.domain.registry import CourseInfo
from medsched.domain.violations import render, row_message
from medsched.services.conflict_rule import pair_conflicts
from medsched.services.validation import ScheduleValidator

logger = logging.getLogger(__name__)

INTRA_BATCH_MESSAGE = (
    "Gagal mengimport data. Terdapat jadwal yang saling bentrok antar baris pada data import."
)
DATABASE_MESSAGE = "Gagal mengimport data. Semua data harus valid untuk dapat diimport."


@dataclass
class BatchOutcome:
    total: int
    stage: str | None = None
    errors: list[str] = field(default_factory=list)

    @property
    def accepted(self) -> bool:
        return not self.errors

    def raise_for_rejection(self) -> None:
        if self.accepted:
            return
        message = INTRA_BATCH_MESSAGE if self.stage == BatchRejectedError.INTRA_BATCH else DATABASE_MESSAGE
        raise BatchRejectedError(stage=self.stage, total=self.total, errors=self.errors, message=message)


class BatchImportValidator:
    """All-or-nothing validation of an ordered list of import rows.

    Rows are checked against each other before anything is read from storage;
    a self-contradictory file is reported on its own and never reaches the
    per-row pass.
    """

    def __init__(self, validator: ScheduleValidator) -> None:
        self.validator = validator

    def intra_batch_errors(self, rows: Sequence[ScheduleEntry]) -> list[str]:
        errors: list[str] = []
        registry = self.validator.registry
        for index, row in enumerate(rows):
            for previous_index in range(index):
                found = pair_conflicts(row, rows[previous_index], registry)
                if not found:
                    continue
                detail = ", ".join(item.params["detail"] for item in found)
                errors.append(
                    render("intra_batch", row=index + 1, other_row=previous_index + 1, detail=detail)
                )
                break
        return errors

    def row_errors(
        self,
        rows: Sequence[ScheduleEntry],
        course: CourseInfo,
        load_existing: Callable[[dt.date], list[ScheduleEntry]],
    ) -> list[str]:
        errors: list[str] = []
        existing_by_date: dict[dt.date, list[ScheduleEntry]] = {}
        for index, row in enumerate(rows):
            if row.date not in existing_by_date:
                existing_by_date[row.date] = load_existing(row.date)
            violation = self.validator.first_violation(row, course, existing_by_date[row.date])
            if violation is not None:
                errors.append(row_message(index + 1, violation.message))
        return errors

    def validate(
        self,
        rows: Sequence[ScheduleEntry],
        course: CourseInfo,
        load_existing: Callable[[dt.date], list[ScheduleEntry]],
    ) -> BatchOutcome:
        outcome = BatchOutcome(total=len(rows))

        intra = self.intra_batch_errors(rows)
        if intra:
            outcome.stage = BatchRejectedError.INTRA_BATCH
            outcome.errors = intra
            logger.info("Import for %s rejected: %d intra-batch conflict(s)", course.code, len(intra))
            return outcome

        per_row = self.row_errors(rows, course, load_existing)
        if per_row:
            outcome.stage = BatchRejectedError.DATABASE
            outcome.errors = per_row
            logger.info("Import for %s rejected: %d invalid row(s)", course.code, len(per_row))
        return outcome
