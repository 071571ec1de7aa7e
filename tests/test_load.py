"""Tests for load calculation and limit gating."""
from datetime import datetime, timezone

from panel_scheduler.models import BusyInterval, Limits, LoadLimit, Participant, SearchOptions
from panel_scheduler.solver.load import (HIGH, LOW, MEDIUM, OVER_LIMIT, calculate_load,
    density_category, load_map, sort_by_load_density, week_start, would_exceed_limits)
from panel_scheduler.timeutil import TimeChunk, parse_date


def _utc(day, hour, minute=0):
    return datetime(2024, 2, day, hour, minute, tzinfo=timezone.utc)


def _busy(day, start, end, label="meeting"):
    return BusyInterval(start=f"2024-02-{day:02d}T{start}:00Z",
                        end=f"2024-02-{day:02d}T{end}:00Z", label=label)


def _person(daily=LoadLimit("count", 2), weekly=LoadLimit("count", 5)):
    return Participant(id="P1", name="Pat", limits=Limits(daily=daily, weekly=weekly))


def test_count_load_adds_proposed_slot():
    busy = [_busy(5, "10:00", "11:00"), _busy(6, "10:00", "11:00")]
    load = calculate_load(_person(), _utc(5, 13), _utc(5, 14), busy)
    assert load.daily.current == 2
    assert load.daily.density == 1.0
    assert load.weekly.current == 3
    assert load.weekly.density == 3 / 5


def test_hours_load_merges_overlaps():
    person = _person(daily=LoadLimit("hours", 4), weekly=LoadLimit("hours", 20))
    busy = [_busy(5, "09:00", "10:00"), _busy(5, "09:30", "10:30")]
    load = calculate_load(person, _utc(5, 13), _utc(5, 14), busy)
    # 90 merged busy minutes + 60 proposed = 2.5h
    assert load.daily.current == 2.5
    assert load.daily.density == 2.5 / 4


def test_week_is_sunday_aligned():
    # 2024-02-07 is a Wednesday; its week starts Sunday 2024-02-04
    assert week_start(parse_date("2024-02-07")) == parse_date("2024-02-04")
    assert week_start(parse_date("2024-02-04")) == parse_date("2024-02-04")
    busy = [_busy(3, "10:00", "11:00"), _busy(4, "10:00", "11:00"), _busy(10, "10:00", "11:00")]
    load = calculate_load(_person(), _utc(7, 13), _utc(7, 14), busy)
    # Saturday 3rd belongs to the previous week; Sunday 4th and Saturday 10th count
    assert load.weekly.current == 3


def test_pending_windows_count_as_load():
    pending = [TimeChunk(_utc(5, 9), _utc(5, 10))]
    load = calculate_load(_person(), _utc(5, 13), _utc(5, 14), [], pending)
    assert load.daily.current == 2


def test_density_categories():
    assert density_category(0.5) == LOW
    assert density_category(0.7) == MEDIUM
    assert density_category(0.95) == HIGH
    assert density_category(1.0) == OVER_LIMIT
    assert density_category(1.2) == OVER_LIMIT


def test_would_exceed_limits_respects_flags():
    busy = [_busy(5, "09:00", "10:00"), _busy(5, "10:00", "11:00")]
    load = calculate_load(_person(), _utc(5, 13), _utc(5, 14), busy)
    assert load.daily.density > 1.0
    assert would_exceed_limits(load, SearchOptions())
    assert not would_exceed_limits(load, SearchOptions(respect_daily_limits=False))


def test_exactly_at_limit_does_not_exceed():
    load = calculate_load(_person(), _utc(5, 13), _utc(5, 14), [_busy(5, "09:00", "10:00")])
    assert load.daily.density == 1.0
    assert not would_exceed_limits(load, SearchOptions())


def test_sort_by_load_density():
    a = Participant(id="A", name="A")
    b = Participant(id="B", name="B")
    busy_a = [_busy(5, "09:00", "10:00"), _busy(6, "09:00", "10:00")]
    loads = load_map([a, b], _utc(5, 13), _utc(5, 14), {"A": busy_a})
    assert loads["B"].weekly.current == 1
    assert loads["A"].weekly.current == 3
    assert [p.id for p in sort_by_load_density([a, b], loads)] == ["B", "A"]
