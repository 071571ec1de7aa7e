"""Tests for the search entry points."""
import pytest

from panel_scheduler.errors import ValidationError
from panel_scheduler.models import (BusyInterval, Config, DateRange, Participant,
    SearchOptions, Session, SolverParams, TimeRange)
from panel_scheduler.solver.api import find_slots, find_slots_for_date

HOURS = {d: TimeRange("09:00", "17:00")
         for d in ("monday", "tuesday", "wednesday", "thursday", "friday")}


def _base_cfg(**options) -> Config:
    cfg = Config()
    cfg.date_range   = DateRange("2024-02-05", "2024-02-09")   # Mon .. Fri
    cfg.sessions     = [
        Session(id="S1", name="Tech",   duration=60, break_after=15, order=1),
        Session(id="S2", name="Values", duration=45, order=2),
    ]
    cfg.participants = [
        Participant(id="L1", name="Dr One", work_hours=HOURS),
        Participant(id="L2", name="Dr Two", work_hours=HOURS),
    ]
    cfg.options = SearchOptions(**options)
    return cfg


def _multi_cfg(**options) -> Config:
    cfg = _base_cfg(**options)
    cfg.sessions = [
        Session(id="S1", name="Screen", duration=60, break_after=1440, order=1),
        Session(id="S2", name="Onsite", duration=60, order=2),
    ]
    return cfg


def test_auto_picks_single_day() -> None:
    result = find_slots(_base_cfg())
    assert result.mode == "single"
    assert result.status == "FOUND"
    # 4 panels per day x 5 weekdays
    assert result.count == 20
    assert result.stats["dates_searched"] == 5
    assert result.combinations[0].date == "2024-02-05"


def test_auto_picks_multi_day() -> None:
    result = find_slots(_multi_cfg())
    assert result.mode == "multi"
    assert result.status == "FOUND"
    assert result.stats["staffing"] in ("OPTIMAL", "FEASIBLE")
    for plan in result.plans:
        assert plan.rounds[0].date < plan.rounds[1].date


def test_unknown_mode_rejected() -> None:
    with pytest.raises(ValueError):
        find_slots(_base_cfg(), mode="weekly")


def test_validation_error_on_bad_input() -> None:
    cfg = _base_cfg()
    cfg.sessions = []
    with pytest.raises(ValidationError):
        find_slots(cfg)
    cfg = _base_cfg()
    cfg.date_range = DateRange("2024-02-09", "2024-02-05")
    with pytest.raises(ValidationError):
        find_slots(cfg)


def test_no_slots_is_a_normal_result() -> None:
    busy = {pid: [BusyInterval("2024-02-05T00:00:00Z", "2024-02-10T00:00:00Z")]
            for pid in ("L1", "L2")}
    result = find_slots(_base_cfg(), busy=busy)
    assert result.status == "NO_SLOTS"
    assert result.count == 0
    assert not result.truncated


def test_busy_argument_overrides_config() -> None:
    cfg = _base_cfg()
    cfg.busy = {"L1": [BusyInterval("2024-02-05T00:00:00Z", "2024-02-10T00:00:00Z")]}
    assert find_slots(cfg).count < find_slots(cfg, busy={}).count


def test_step_budget_truncates() -> None:
    result = find_slots(_base_cfg(solver=SolverParams(max_steps=3)))
    assert result.status == "TRUNCATED"
    assert result.truncated
    assert result.diagnostics


def test_max_results_caps_across_dates() -> None:
    result = find_slots(_base_cfg(max_results=6))
    assert result.count == 6
    assert result.status == "FOUND"


def test_identical_inputs_identical_output() -> None:
    first, second = find_slots(_base_cfg()), find_slots(_base_cfg())
    assert [c.id for c in first.combinations] == [c.id for c in second.combinations]


def test_find_slots_for_date() -> None:
    result = find_slots_for_date(_base_cfg(), "2024-02-07")
    assert result.mode == "single"
    assert result.stats["dates_searched"] == 1
    assert {c.date for c in result.combinations} == {"2024-02-07"}


def test_staffing_precheck_short_circuits() -> None:
    cfg = _multi_cfg()
    cfg.participants = cfg.participants[:1]
    result = find_slots(cfg)
    assert result.status == "NO_SLOTS"
    assert result.stats["staffing"] == "INFEASIBLE"
    assert result.diagnostics
    assert result.stats["steps"] == 0


def test_multi_day_without_staffing_precheck() -> None:
    cfg = _multi_cfg(solver=SolverParams(staffing_precheck=False))
    cfg.participants = cfg.participants[:1]
    result = find_slots(cfg)
    assert result.status == "NO_SLOTS"
    assert "staffing" not in result.stats


def test_bad_participant_times_fail_before_the_search() -> None:
    cfg = _base_cfg()
    cfg.participants[0] = Participant(id="L1", name="Dr One",
                                      work_hours={"monday": TimeRange("9am", "5pm")})
    with pytest.raises(ValidationError):
        find_slots(cfg)


def test_bad_busy_override_fails_before_the_search() -> None:
    busy = {"L1": [BusyInterval("2024-02-05T09:00:00Z", "tomorrow")]}
    with pytest.raises(ValidationError):
        find_slots(_base_cfg(), busy=busy)


def test_zero_day_length_is_a_validation_error() -> None:
    cfg = _multi_cfg(day_length_minutes=0)
    with pytest.raises(ValidationError):
        find_slots(cfg)
