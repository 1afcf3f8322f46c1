from conftest import COURSE_CODE, MAKEUP_COURSE_CODE, SCHEDULE_DATE

BASE = f"/api/courses/{COURSE_CODE}/schedules"


def test_lecture_then_overlapping_csr_in_same_room(client, curriculum, lecture_payload):
    lecture = client.post(f"{BASE}/lecture", json=lecture_payload())
    assert lecture.status_code == 201
    lecture_id = lecture.json()["id"]
    assert lecture.json()["start_time"] == "08.10"
    assert lecture.json()["large_group_semester"] == 3

    csr = client.post(
        f"{BASE}/csr",
        json={
            "tanggal": SCHEDULE_DATE,
            "jam_mulai": "08:30",
            "jam_selesai": "09:20",
            "ruangan_id": "101",
            "dosen_ids": ["9"],
        },
    )

    assert csr.status_code == 422
    body = csr.json()
    assert body["message"] == (
        "Jadwal bentrok dengan Jadwal Kuliah Besar pada tanggal 15/01/2025 jam 08.10-09.00. "
        "Bentrok: (Ruangan: Ruang 101)"
    )
    assert body["details"] == {"kind": "RoomConflict", "conflicting_entry_id": lecture_id}
    assert client.get(f"{BASE}/csr").json() == []


def test_back_to_back_entries_in_same_room_are_accepted(client, curriculum, lecture_payload):
    assert client.post(f"{BASE}/lecture", json=lecture_payload()).status_code == 201
    follow_up = lecture_payload(jam_mulai="09:00", jam_selesai="09:50", dosen_ids=["9"], kelompok_besar_id=None)
    assert client.post(f"{BASE}/lecture", json=follow_up).status_code == 201


def test_update_with_identical_fields_does_not_conflict_with_itself(client, curriculum, lecture_payload):
    created = client.post(f"{BASE}/lecture", json=lecture_payload()).json()

    updated = client.put(f"{BASE}/lecture/{created['id']}", json=lecture_payload())

    assert updated.status_code == 200
    assert updated.json()["id"] == created["id"]


def test_update_moves_entry_and_is_checked_against_others(client, curriculum, lecture_payload):
    first = client.post(f"{BASE}/lecture", json=lecture_payload()).json()
    other = {"ruangan_id": "102", "dosen_ids": ["9"], "kelompok_besar_id": None}
    late_morning = lecture_payload(jam_mulai="10:40", jam_selesai="11:30", **other)
    second = client.post(f"{BASE}/lecture", json=late_morning).json()

    moved = client.put(
        f"{BASE}/lecture/{second['id']}",
        json=lecture_payload(jam_mulai="13:25", jam_selesai="14:15", **other),
    )
    assert moved.status_code == 200
    assert moved.json()["start_time"] == "13.25"

    clash = client.put(
        f"{BASE}/lecture/{second['id']}",
        json=lecture_payload(dosen_ids=["9"], kelompok_besar_id=None),
    )
    assert clash.status_code == 422
    assert clash.json()["details"]["conflicting_entry_id"] == first["id"]


def test_capacity_and_cohort_rules_reject_before_writing(client, curriculum, lecture_payload):
    too_small = client.post(f"{BASE}/lecture", json=lecture_payload(ruangan_id="102"))
    assert too_small.status_code == 422
    assert too_small.json()["details"]["kind"] == "CapacityExceeded"
    assert "diperlukan 45 orang" in too_small.json()["message"]

    makeup_group = lecture_payload(kelompok_besar_id=None, kelompok_antara_id="mg-1")
    wrong_term = client.post(f"{BASE}/lecture", json=makeup_group)
    assert wrong_term.status_code == 422
    assert wrong_term.json()["details"]["kind"] == "GroupMismatch"

    assert client.get(f"{BASE}/lecture").json() == []


def test_makeup_course_accepts_makeup_groups(client, curriculum, lecture_payload):
    response = client.post(
        f"/api/courses/{MAKEUP_COURSE_CODE}/schedules/lecture",
        json=lecture_payload(tanggal="2025-07-15", kelompok_besar_id=None, kelompok_antara_id="mg-1"),
    )
    assert response.status_code == 201
    assert response.json()["makeup_group_id"] == "mg-1"


def test_date_outside_course_window_is_rejected(client, curriculum, lecture_payload):
    response = client.post(f"{BASE}/lecture", json=lecture_payload(tanggal="2025-02-02"))
    assert response.status_code == 422
    assert response.json()["details"]["kind"] == "DateOutOfRange"

    assert client.post(f"{BASE}/lecture", json=lecture_payload(tanggal="2025-02-01")).status_code == 201


def test_missing_references_are_not_found(client, curriculum, lecture_payload):
    unknown_course = client.post("/api/courses/XXX999/schedules/lecture", json=lecture_payload())
    assert unknown_course.status_code == 404
    assert unknown_course.json()["message"] == "Mata kuliah tidak ditemukan"

    unknown_room = client.post(f"{BASE}/lecture", json=lecture_payload(ruangan_id="999"))
    assert unknown_room.status_code == 404
    assert unknown_room.json()["details"]["resource_id"] == "999"

    unknown_entry = client.put(f"{BASE}/lecture/does-not-exist", json=lecture_payload())
    assert unknown_entry.status_code == 404


def test_payload_shape_is_checked_per_kind(client, curriculum, lecture_payload):
    pbl_with_cohort = client.post(f"{BASE}/pbl", json=lecture_payload())
    assert pbl_with_cohort.status_code == 422
    assert "Jadwal PBL tidak mendukung kelompok: large" in pbl_with_cohort.json()["message"]

    agenda_with_lecturer = client.post(f"{BASE}/special-agenda", json=lecture_payload(agenda="Ujian"))
    assert agenda_with_lecturer.status_code == 422

    reversed_times = client.post(f"{BASE}/lecture", json=lecture_payload(jam_mulai="09:00", jam_selesai="08:10"))
    assert reversed_times.status_code == 422
    assert reversed_times.json()["message"] == "Jam selesai harus setelah jam mulai"

    bad_kind = client.post(f"/api/courses/{COURSE_CODE}/schedules/seminar", json=lecture_payload())
    assert bad_kind.status_code == 422


def test_out_of_range_clock_is_an_input_error(client, curriculum, lecture_payload):
    response = client.post(f"{BASE}/lecture", json=lecture_payload(jam_mulai="25.00", jam_selesai="26.00"))

    assert response.status_code == 422
    body = response.json()
    assert body["message"] == "Format jam tidak valid: '25.00' (gunakan HH:MM atau HH.MM)"
    assert body["details"]["errors"] == [
        "Format jam tidak valid: '25.00' (gunakan HH:MM atau HH.MM)",
        "Format jam tidak valid: '26.00' (gunakan HH:MM atau HH.MM)",
    ]
    assert client.get(f"{BASE}/lecture").json() == []


def test_special_agenda_without_room_skips_room_checks(client, curriculum, lecture_payload):
    assert client.post(f"{BASE}/lecture", json=lecture_payload()).status_code == 201

    agenda = client.post(
        f"{BASE}/special-agenda",
        json={
            "tanggal": SCHEDULE_DATE,
            "jam_mulai": "08:10",
            "jam_selesai": "09:00",
            "ruangan_id": "101",
            "use_ruangan": False,
            "agenda": "Pembukaan Blok",
        },
    )

    assert agenda.status_code == 201
    assert agenda.json()["agenda"] == "Pembukaan Blok"


def test_update_replaces_kind_specific_fields(client, curriculum):
    agenda_payload = {
        "tanggal": SCHEDULE_DATE,
        "jam_mulai": "08:10",
        "jam_selesai": "09:00",
        "use_ruangan": False,
        "kelompok_besar_id": 3,
    }
    agenda = client.post(f"{BASE}/special-agenda", json={**agenda_payload, "agenda": "Ujian"}).json()

    cleared = client.put(f"{BASE}/special-agenda/{agenda['id']}", json=agenda_payload)

    assert cleared.status_code == 200
    assert cleared.json()["agenda"] is None

    csr_payload = {
        "tanggal": SCHEDULE_DATE,
        "jam_mulai": "10:40",
        "jam_selesai": "11:30",
        "ruangan_id": "201",
        "dosen_ids": ["7"],
        "kelompok_kecil_id": "sg-3a",
    }
    csr = client.post(f"{BASE}/csr", json={**csr_payload, "category": "responsi"}).json()
    assert csr["category"] == "responsi"

    reset = client.put(f"{BASE}/csr/{csr['id']}", json=csr_payload)

    assert reset.status_code == 200
    assert reset.json()["category"] == "reguler"


def test_delete_frees_the_slot(client, curriculum, lecture_payload):
    created = client.post(f"{BASE}/lecture", json=lecture_payload()).json()

    deleted = client.delete(f"{BASE}/lecture/{created['id']}")
    assert deleted.status_code == 200
    assert deleted.json() == {"success": True}

    assert client.delete(f"{BASE}/lecture/{created['id']}").status_code == 404
    assert client.post(f"{BASE}/lecture", json=lecture_payload()).status_code == 201


def test_entries_on_a_date_cover_every_kind(client, curriculum, lecture_payload):
    client.post(f"{BASE}/lecture", json=lecture_payload())
    client.post(
        f"{BASE}/pbl",
        json={
            "tanggal": SCHEDULE_DATE,
            "jam_mulai": "10.40",
            "jam_selesai": "11.30",
            "ruangan_id": "201",
            "dosen_ids": ["9"],
            "kelompok_kecil_id": "sg-3a",
            "pbl_type": "PBL 1",
        },
    )

    response = client.get("/api/schedules", params={"date": SCHEDULE_DATE})

    assert response.status_code == 200
    body = response.json()
    assert [(item["kind"], item["start_time"], item["end_time"]) for item in body] == [
        ("lecture", "08.10", "09.00"),
        ("pbl", "10.40", "11.30"),
    ]
    assert body[1]["pbl_type"] == "PBL 1"
    assert client.get("/api/schedules", params={"date": "2025-01-16"}).json() == []


def test_validate_reports_every_violation_without_writing(client, curriculum, lecture_payload):
    client.post(f"{BASE}/lecture", json=lecture_payload())

    response = client.post(f"{BASE}/lecture/validate", json=lecture_payload(jam_mulai="08:30", jam_selesai="09:20"))

    assert response.status_code == 200
    body = response.json()
    assert body["valid"] is False
    assert [item["kind"] for item in body["violations"]] == ["RoomConflict", "LecturerConflict", "GroupConflict"]
    assert len(client.get(f"{BASE}/lecture").json()) == 1

    clean = client.post(f"{BASE}/lecture/validate", json=lecture_payload(tanggal="2025-01-20"))
    assert clean.json() == {"valid": True, "violations": []}


def test_time_slots(client):
    response = client.get("/api/time-slots")

    assert response.status_code == 200
    slots = response.json()
    assert len(slots) == 13
    assert slots[0]["start"] == "07.20"
    assert slots[0]["ends"]["2"] == "09.00"
