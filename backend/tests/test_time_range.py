import datetime as dt

import pytest

from medsched.domain.time_range import (
    DAILY_SLOTS,
    TimeRange,
    format_display,
    format_storage,
    parse_clock,
    slot_table,
)

DAY = dt.date(2025, 1, 15)


@pytest.mark.parametrize("value", ["08:10", "08.10", "08:10:00", "8:10", " 08.10 ", dt.time(8, 10)])
def test_parse_clock_accepts_every_supported_format(value):
    assert parse_clock(value) == 8 * 60 + 10


@pytest.mark.parametrize("value", ["8h10", "24:00", "08:60", "", "jam delapan"])
def test_parse_clock_rejects_malformed_values(value):
    with pytest.raises(ValueError):
        parse_clock(value)


def test_display_and_storage_formats():
    assert format_display(490) == "08.10"
    assert format_storage(490) == "08:10:00"


def test_range_must_end_after_it_starts():
    with pytest.raises(ValueError):
        TimeRange.parse(DAY, "09:00", "09:00")
    with pytest.raises(ValueError):
        TimeRange.parse(DAY, "09:50", "09:00")


@pytest.mark.parametrize(
    ("first", "second"),
    [
        (("08:10", "09:00"), ("08:30", "09:20")),
        (("08:10", "09:00"), ("09:00", "09:50")),
        (("07:20", "12:00"), ("09:00", "09:50")),
        (("13:25", "14:15"), ("08:10", "09:00")),
    ],
)
def test_overlap_is_symmetric(first, second):
    a = TimeRange.parse(DAY, *first)
    b = TimeRange.parse(DAY, *second)
    assert a.overlaps(b) == b.overlaps(a)


def test_back_to_back_ranges_do_not_overlap():
    a = TimeRange.parse(DAY, "08.10", "09.00")
    b = TimeRange.parse(DAY, "09:00:00", "09.50")
    assert not a.overlaps(b)


def test_partial_overlap_is_detected_across_formats():
    a = TimeRange.parse(DAY, "08:10", "09:00")
    b = TimeRange.parse(DAY, "08.30", "09:20:00")
    assert a.overlaps(b)


def test_same_times_on_different_dates_do_not_overlap():
    a = TimeRange.parse(DAY, "08:10", "09:00")
    b = TimeRange.parse(DAY + dt.timedelta(days=1), "08:10", "09:00")
    assert not a.overlaps(b)


def test_session_count_cross_check():
    two_sessions = TimeRange.parse(DAY, "08.10", "09.50")
    assert two_sessions.matches_session_count(2)
    assert not two_sessions.matches_session_count(1)


def test_slot_table_derives_end_times_from_session_length():
    table = slot_table()
    assert [slot["start"] for slot in table] == list(DAILY_SLOTS)
    first = table[0]
    assert first["ends"][1] == "08.10"
    assert first["ends"][3] == "09.50"
    assert slot_table(45)[0]["ends"][1] == "08.05"
