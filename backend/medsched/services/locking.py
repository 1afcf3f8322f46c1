from __future__ import annotations

from collections.abc import Iterable
import logging

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from medsched.domain.entries import LargeGroupRef, MakeupGroupRef, ScheduleEntry
from medsched.domain.registry import ResourceRegistry
from medsched.models.schedule_lock import ScheduleResourceLock

logger = logging.getLogger(__name__)

UPSERT_INSERTS = {
    "postgresql": postgresql_insert,
    "sqlite": sqlite_insert,
}


def lock_keys(entry: ScheduleEntry, registry: ResourceRegistry) -> set[str]:
    """Lock keys covering every resource the entry books on its date.

    Makeup groups also take the cohort key of every semester their members
    belong to, so they queue behind large and small groups sharing a student.
    """
    day = entry.date.isoformat()
    keys: set[str] = set()
    if entry.occupies_room:
        keys.add(f"room:{entry.room_id}:{day}")
    for lecturer_id in entry.lecturer_ids:
        keys.add(f"lecturer:{lecturer_id}:{day}")
    group = entry.group
    if isinstance(group, MakeupGroupRef):
        keys.add(f"makeup:{group.id}:{day}")
        for semester in registry.cohort_semesters(group):
            keys.add(f"cohort:{semester if semester is not None else 'unassigned'}:{day}")
    elif isinstance(group, LargeGroupRef):
        keys.add(f"cohort:{group.semester}:{day}")
    elif group is not None:
        semester = registry.group_semester(group)
        keys.add(f"cohort:{semester}:{day}" if semester is not None else f"small:{group.id}:{day}")
    return keys


def _ensure_anchor(db: Session, key: str) -> None:
    insert = UPSERT_INSERTS.get(db.get_bind().dialect.name)
    if insert is not None:
        db.execute(
            insert(ScheduleResourceLock)
            .values(resource_key=key)
            .on_conflict_do_nothing(index_elements=["resource_key"])
        )
        return
    try:
        with db.begin_nested():
            db.add(ScheduleResourceLock(resource_key=key))
    except IntegrityError:
        logger.debug("Lock anchor %s created concurrently", key)


def acquire_locks(db: Session, keys: Iterable[str]) -> None:
    """Take ``SELECT ... FOR UPDATE`` on each key's anchor row, creating missing anchors.

    Keys are locked in sorted order so two writers touching overlapping
    resources always queue instead of deadlocking.
    """
    for key in sorted(set(keys)):
        statement = (
            select(ScheduleResourceLock.resource_key)
            .where(ScheduleResourceLock.resource_key == key)
            .with_for_update()
        )
        if db.execute(statement).scalar_one_or_none() is None:
            _ensure_anchor(db, key)
            db.execute(statement).scalar_one()
