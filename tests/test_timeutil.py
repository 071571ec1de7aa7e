"""Tests for interval arithmetic."""
from datetime import datetime, timezone

import pytest

from panel_scheduler.timeutil import (ENCLOSED, ENCLOSES, EXACT, LEFT, NONE, RIGHT,
    TimeChunk, classify, denormalize_time, find_all_overlaps, in_range, merge_chunks,
    normalize_time, overlap_minutes, overlaps, parse_datetime, subtract,
    time_difference, total_minutes)


def c(a, b):
    return TimeChunk(a, b)


def test_normalize_clock_iso_and_number() -> None:
    assert normalize_time("09:30") == 570
    assert normalize_time("2024-02-05T09:30:00Z") == 570
    assert normalize_time(570) == 570
    assert normalize_time("09:00:00.000Z") == 540


def test_denormalize_keeps_representation() -> None:
    assert denormalize_time(570, "08:00") == "09:30"
    assert denormalize_time(570, 0) == 570
    assert denormalize_time(570, "2024-02-05T08:00:00Z") == "2024-02-05T09:30:00+00:00"
    dt = datetime(2024, 2, 5, 8, tzinfo=timezone.utc)
    assert denormalize_time(570, dt) == datetime(2024, 2, 5, 9, 30, tzinfo=timezone.utc)


def test_overlap_is_symmetric() -> None:
    pairs = [
        (c("09:00", "10:00"), c("09:30", "10:30")),
        (c("09:00", "10:00"), c("10:00", "11:00")),
        (c("09:00", "12:00"), c("10:00", "11:00")),
        (c("09:00", "10:00"), c("13:00", "14:00")),
    ]
    for a, b in pairs:
        assert overlaps(a, b) == overlaps(b, a)


def test_touching_chunks_do_not_overlap() -> None:
    assert not overlaps(c("09:00", "10:00"), c("10:00", "11:00"))
    assert classify(c("09:00", "10:00"), c("10:00", "11:00")) == NONE


def test_classify_all_kinds() -> None:
    assert classify(c("09:00", "10:00"), c("09:00", "10:00")) == EXACT
    assert classify(c("09:00", "11:00"), c("10:00", "12:00")) == LEFT
    assert classify(c("10:00", "12:00"), c("09:00", "11:00")) == RIGHT
    assert classify(c("10:00", "10:30"), c("09:00", "11:00")) == ENCLOSED
    assert classify(c("09:00", "11:00"), c("10:00", "10:30")) == ENCLOSES


def test_equal_length_disjoint_windows_are_none() -> None:
    assert classify(c("09:00", "10:00"), c("11:00", "12:00")) == NONE
    assert classify(c("11:00", "12:00"), c("09:00", "10:00")) == NONE


def test_same_clock_on_different_days_does_not_overlap() -> None:
    monday  = c("2024-02-05T09:00:00Z", "2024-02-05T10:00:00Z")
    tuesday = c("2024-02-06T09:00:00Z", "2024-02-06T10:00:00Z")
    assert not overlaps(monday, tuesday)
    assert classify(monday, tuesday) == NONE


def test_overlap_minutes_and_difference() -> None:
    assert overlap_minutes(c("09:00", "10:00"), c("09:30", "10:30")) == 30
    assert overlap_minutes(c("09:00", "10:00"), c("11:00", "12:00")) == 0
    assert time_difference("09:00", "10:30") == 90
    assert time_difference("10:30", "09:00") == -90


def test_in_range_is_half_open() -> None:
    rng = c("09:00", "10:00")
    assert in_range("09:00", rng)
    assert not in_range("10:00", rng)


def test_merge_overlapping_and_adjacent() -> None:
    merged = merge_chunks([
        c("11:00", "12:00"),
        c("09:00", "10:00"),
        c("09:30", "10:30"),
        c("12:00", "12:30"),
    ])
    assert merged == [c("09:00", "10:30"), c("11:00", "12:30")]


def test_merge_empty() -> None:
    assert merge_chunks([]) == []


def test_total_minutes_counts_overlap_once() -> None:
    assert total_minutes([c("09:00", "10:00"), c("09:30", "10:30")]) == 90


def test_subtract_busy_from_day() -> None:
    free = subtract(c("09:00", "17:00"), [c("10:00", "11:00"), c("14:00", "15:00")])
    assert free == [c("09:00", "10:00"), c("11:00", "14:00"), c("15:00", "17:00")]


def test_subtract_ignores_chunks_outside_base() -> None:
    free = subtract(c("09:00", "12:00"), [c("07:00", "08:00"), c("13:00", "14:00")])
    assert free == [c("09:00", "12:00")]


def test_subtract_keeps_dates() -> None:
    base = c("2024-02-05T09:00:00Z", "2024-02-05T12:00:00Z")
    free = subtract(base, [c("2024-02-05T10:00:00Z", "2024-02-05T11:00:00Z")])
    assert [parse_datetime(x.start).hour for x in free] == [9, 11]
    assert free[0].end == "2024-02-05T10:00:00+00:00"


def test_find_all_overlaps() -> None:
    found = find_all_overlaps([c("09:00", "10:00"), c("09:30", "10:30"), c("11:00", "12:00")])
    assert found == [(0, 1, LEFT)]


def test_bad_clock_raises() -> None:
    with pytest.raises(ValueError):
        normalize_time("nine")
