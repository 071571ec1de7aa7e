"""Tests for precheck layer."""
import pytest

from panel_scheduler.errors import ValidationError
from panel_scheduler.models import (BusyInterval, Config, DateRange, DateTimeRange, Limits,
    LoadLimit, Participant, SearchOptions, Session, TimeRange)
from panel_scheduler.solver.precheck import ensure_ok, precheck


def _cfg_ok() -> Config:
    cfg = Config()
    cfg.date_range   = DateRange("2024-02-05", "2024-02-09")
    cfg.sessions     = [Session(id="S1", name="Screen", duration=60, required_count=2)]
    cfg.participants = [
        Participant(id="L1", name="Dr One"),
        Participant(id="L2", name="Dr Two", timezone="Europe/London"),
    ]
    return cfg


def test_ok_config_passes() -> None:
    errors, warnings = precheck(_cfg_ok())
    assert errors == []
    assert warnings == []
    ensure_ok(_cfg_ok())


def test_empty_sessions_is_an_error() -> None:
    cfg = _cfg_ok()
    cfg.sessions = []
    errors, _ = precheck(cfg)
    assert any("session" in e.lower() for e in errors)
    with pytest.raises(ValidationError):
        ensure_ok(cfg)


def test_inverted_range() -> None:
    cfg = _cfg_ok()
    cfg.date_range = DateRange("2024-02-09", "2024-02-05")
    errors, _ = precheck(cfg)
    assert any("inverted" in e for e in errors)


def test_missing_range() -> None:
    cfg = _cfg_ok()
    cfg.date_range = None
    errors, _ = precheck(cfg)
    assert errors


def test_unknown_time_zone() -> None:
    cfg = _cfg_ok()
    cfg.participants[1] = Participant(id="L2", name="Dr Two", timezone="Mars/Olympus")
    errors, _ = precheck(cfg)
    assert any("L2" in e for e in errors)


def test_bad_limit_type() -> None:
    cfg = _cfg_ok()
    cfg.participants[0] = Participant(id="L1", name="Dr One",
                                      limits=Limits(daily=LoadLimit("sessions", 3)))
    errors, _ = precheck(cfg)
    assert any("sessions" in e for e in errors)


def test_duplicate_ids() -> None:
    cfg = _cfg_ok()
    cfg.participants.append(Participant(id="L1", name="Duplicate"))
    errors, _ = precheck(cfg)
    assert any("Duplicate participant" in e for e in errors)


def test_pool_too_small_warns() -> None:
    cfg = _cfg_ok()
    cfg.sessions = [Session(id="S1", name="Screen", duration=60, required_count=2,
                            pool=("L1", "L9"))]
    errors, warnings = precheck(cfg)
    assert errors == []
    assert any("L9" in w for w in warnings)
    assert any("only 1" in w for w in warnings)


def test_busy_for_unknown_participant_warns() -> None:
    cfg = _cfg_ok()
    cfg.busy = {"X": [BusyInterval("2024-02-05T09:00:00Z", "2024-02-05T10:00:00Z")]}
    _, warnings = precheck(cfg)
    assert any("X" in w for w in warnings)


def test_malformed_work_hours() -> None:
    cfg = _cfg_ok()
    cfg.participants[0] = Participant(id="L1", name="Dr One",
                                      work_hours={"monday": TimeRange("9am", "5pm")})
    errors, _ = precheck(cfg)
    assert any("work_hours.monday" in e for e in errors)
    with pytest.raises(ValidationError, match="9am"):
        ensure_ok(cfg)


def test_inverted_work_hours() -> None:
    cfg = _cfg_ok()
    cfg.participants[0] = Participant(id="L1", name="Dr One",
                                      work_hours={"friday": TimeRange("17:00", "09:00")})
    errors, _ = precheck(cfg)
    assert any("work_hours.friday ends before it starts" in e for e in errors)


def test_malformed_blocked_time() -> None:
    cfg = _cfg_ok()
    cfg.participants[0] = Participant(id="L1", name="Dr One",
                                      blocked_times=(DateTimeRange("next tuesday", "2024-02-06T10:00:00Z"),))
    errors, _ = precheck(cfg)
    assert any("blocked_times[0]" in e for e in errors)


def test_malformed_busy_interval() -> None:
    cfg = _cfg_ok()
    cfg.busy = {"L2": [
        BusyInterval("2024-02-05T09:00:00Z", "2024-02-05T10:00:00Z"),
        BusyInterval("2024-02-05T11:00:00Z", "soon"),
    ]}
    errors, _ = precheck(cfg)
    assert any("busy.L2[1]" in e for e in errors)
    assert not any("busy.L2[0]" in e for e in errors)


def test_zero_day_length() -> None:
    cfg = _cfg_ok()
    cfg.options = SearchOptions(day_length_minutes=0)
    errors, _ = precheck(cfg)
    assert any("day_length_minutes" in e for e in errors)
