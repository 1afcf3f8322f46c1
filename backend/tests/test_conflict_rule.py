import datetime as dt

from medsched.domain.entries import LargeGroupRef, MakeupGroupRef, ScheduleEntry, ScheduleKind, SmallGroupRef
from medsched.domain.time_range import TimeRange
from medsched.domain.violations import ViolationKind
from medsched.services.conflict_rule import find_conflicts, first_conflict, groups_collide, pair_conflicts

DAY = dt.date(2025, 1, 15)


def make_entry(kind=ScheduleKind.lecture, start="08:10", end="09:00", **fields):
    return ScheduleEntry(
        kind=kind,
        course_code=fields.pop("course_code", "MKU001"),
        time=TimeRange.parse(fields.pop("date", DAY), start, end),
        **fields,
    )


def test_room_conflict_across_kinds(registry):
    lecture = make_entry(id="lec-1", room_id="101", lecturer_ids=frozenset({"7"}))
    csr = make_entry(ScheduleKind.csr, "08:30", "09:20", room_id="101", lecturer_ids=frozenset({"9"}))

    violation = first_conflict(csr, [lecture], registry)

    assert violation is not None
    assert violation.kind is ViolationKind.room_conflict
    assert violation.conflicting_entry_id == "lec-1"
    assert violation.message == (
        "Jadwal bentrok dengan Jadwal Kuliah Besar pada tanggal 15/01/2025 jam 08.10-09.00. "
        "Bentrok: (Ruangan: Ruang 101)"
    )


def test_back_to_back_entries_in_same_room_do_not_conflict(registry):
    first = make_entry(id="lec-1", room_id="101")
    second = make_entry(start="09:00", end="09:50", room_id="101")
    assert find_conflicts(second, [first], registry) == []


def test_entry_never_conflicts_with_itself(registry):
    stored = make_entry(id="lec-1", room_id="101", lecturer_ids=frozenset({"7"}), group=LargeGroupRef(3))
    assert pair_conflicts(stored, stored, registry) == []


def test_unsaved_entries_are_compared_even_when_identical(registry):
    a = make_entry(room_id="101")
    b = make_entry(room_id="101")
    assert [item.kind for item in pair_conflicts(a, b, registry)] == [ViolationKind.room_conflict]


def test_room_not_in_use_is_ignored(registry):
    stored = make_entry(id="agenda-1", kind=ScheduleKind.special_agenda, room_id="101", uses_room=False)
    candidate = make_entry(room_id="101")
    assert find_conflicts(candidate, [stored], registry) == []


def test_lecturer_conflict_names_only_shared_lecturers(registry):
    stored = make_entry(id="pbl-1", kind=ScheduleKind.pbl, room_id="102", lecturer_ids=frozenset({"9", "11"}))
    candidate = make_entry(room_id="101", lecturer_ids=frozenset({"7", "9"}))

    violations = find_conflicts(candidate, [stored], registry)

    assert [item.kind for item in violations] == [ViolationKind.lecturer_conflict]
    assert violations[0].params["lecturer_ids"] == ["9"]
    assert violations[0].message.endswith("Bentrok: (Dosen: dr. Bayu)")
    assert violations[0].params["schedule_name"] == "Jadwal PBL"


def test_every_axis_is_reported_room_first(registry):
    stored = make_entry(id="lec-1", room_id="101", lecturer_ids=frozenset({"7"}), group=LargeGroupRef(3))
    candidate = make_entry(
        start="08:30", end="09:20", room_id="101", lecturer_ids=frozenset({"7"}), group=LargeGroupRef(3)
    )

    kinds = [item.kind for item in find_conflicts(candidate, [stored], registry)]

    assert kinds == [ViolationKind.room_conflict, ViolationKind.lecturer_conflict, ViolationKind.group_conflict]


def test_group_conflict_detail_labels_both_groups(registry):
    stored = make_entry(id="lec-1", room_id="102", group=LargeGroupRef(3))
    candidate = make_entry(kind=ScheduleKind.pbl, room_id="101", group=SmallGroupRef("sg-3a"))

    violations = find_conflicts(candidate, [stored], registry)

    assert [item.kind for item in violations] == [ViolationKind.group_conflict]
    assert "Kelompok Kecil A vs Kelompok Besar Semester 3" in violations[0].message


def test_large_groups_of_different_semesters_do_not_collide(registry):
    assert groups_collide(LargeGroupRef(3), LargeGroupRef(3), registry)
    assert not groups_collide(LargeGroupRef(3), LargeGroupRef(5), registry)


def test_small_groups_collide_on_shared_students_only(registry):
    assert groups_collide(SmallGroupRef("sg-3a"), SmallGroupRef("sg-3a"), registry)
    assert not groups_collide(SmallGroupRef("sg-3a"), SmallGroupRef("sg-3b"), registry)


def test_large_group_collides_with_small_groups_of_its_semester(registry):
    assert groups_collide(LargeGroupRef(3), SmallGroupRef("sg-3b"), registry)
    assert groups_collide(SmallGroupRef("sg-3b"), LargeGroupRef(3), registry)
    assert not groups_collide(LargeGroupRef(3), SmallGroupRef("sg-5a"), registry)


def test_makeup_group_uses_roster_intersection(registry):
    assert groups_collide(MakeupGroupRef("mg-1"), SmallGroupRef("sg-3a"), registry)
    assert not groups_collide(MakeupGroupRef("mg-2"), SmallGroupRef("sg-3a"), registry)
    assert groups_collide(MakeupGroupRef("mg-1"), LargeGroupRef(3), registry)
    assert not groups_collide(MakeupGroupRef("mg-2"), LargeGroupRef(3), registry)


def test_makeup_group_against_unresolved_large_group_is_a_conflict(registry):
    assert groups_collide(MakeupGroupRef("mg-2"), LargeGroupRef(5), registry)
    assert groups_collide(LargeGroupRef(5), MakeupGroupRef("mg-2"), registry)
