"""
JSON serialisation / deserialisation for Config objects and search results.

Uses only the Python standard-library json module. Structural validation is
applied before domain objects are built so a bad file fails with the path
of the offending key rather than a KeyError deep in the search.

Reference: Python docs — json
https://docs.python.org/3/library/json.html
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from panel_scheduler.models import (BusyInterval, Config, DateRange, DateTimeRange,
    Holiday, Limits, LoadLimit, Participant, SearchOptions, Session, SolverParams,
    TimeRange)
from panel_scheduler.solver.result import SearchResult, VerificationResult


class ConfigError(ValueError):
    """Raised when the config JSON is structurally invalid."""


def _require(obj: Dict[str, Any], key: str, ctx: str) -> Any:
    if key not in obj:
        raise ConfigError(f"Missing required key '{key}' in {ctx}")
    return obj[key]


def _as_list(obj: Any, ctx: str) -> List[Any]:
    if not isinstance(obj, list):
        raise ConfigError(f"Expected a JSON array in {ctx}, got {type(obj).__name__}")
    return obj


def _as_dict(obj: Any, ctx: str) -> Dict[str, Any]:
    if not isinstance(obj, dict):
        raise ConfigError(
            f"Expected a JSON object in {ctx}, got {type(obj).__name__}"
        )
    return obj


def _check_unique_ids(items: list, ctx: str) -> None:
    seen: set = set()
    dupes: set = set()
    for item in items:
        item_id = getattr(item, "id", None)
        if not item_id:
            raise ConfigError(f"Empty or missing 'id' in {ctx}")
        if item_id in seen:
            dupes.add(item_id)
        seen.add(item_id)
    if dupes:
        raise ConfigError(f"Duplicate ids in {ctx}: {sorted(dupes)}")


def _limit(raw: Any, ctx: str, default: LoadLimit) -> LoadLimit:
    if raw is None:
        return default
    raw = _as_dict(raw, ctx)
    return LoadLimit(
        type = str(raw.get("type", default.type)),
        max  = float(raw.get("max", default.max)),
    )


def _session(raw: Any, ctx: str) -> Session:
    raw  = _as_dict(raw, ctx)
    pool = raw.get("pool")
    return Session(
        id             = str(_require(raw, "id",       ctx)),
        name           = str(raw.get("name", raw["id"])),
        duration       = int(_require(raw, "duration", ctx)),
        break_after    = int(raw.get("break_after", 0)),
        required_count = int(raw.get("required_count", 1)),
        order          = int(raw.get("order", 0)),
        pool           = None if pool is None else tuple(str(x) for x in _as_list(pool, f"{ctx}.pool")),
        allow_trainees = bool(raw.get("allow_trainees", False)),
        meeting_type   = str(raw.get("meeting_type", "google_meet")),
        location       = str(raw.get("location", "")),
    )


def _participant(raw: Any, ctx: str) -> Participant:
    raw        = _as_dict(raw, ctx)
    hours_raw  = _as_dict(raw.get("work_hours") or {}, f"{ctx}.work_hours")
    limits_raw = _as_dict(raw.get("limits") or {}, f"{ctx}.limits")
    defaults   = Limits()
    return Participant(
        id         = str(_require(raw, "id",   ctx)),
        name       = str(_require(raw, "name", ctx)),
        email      = str(raw.get("email", "")),
        timezone   = str(raw.get("timezone", "UTC")),
        work_hours = {
            str(day).lower(): TimeRange(
                start = str(_require(_as_dict(r, f"{ctx}.work_hours.{day}"), "start", f"{ctx}.work_hours.{day}")),
                end   = str(_require(r, "end", f"{ctx}.work_hours.{day}")),
            )
            for day, r in hours_raw.items() if r is not None
        },
        limits = Limits(
            daily  = _limit(limits_raw.get("daily"),  f"{ctx}.limits.daily",  defaults.daily),
            weekly = _limit(limits_raw.get("weekly"), f"{ctx}.limits.weekly", defaults.weekly),
        ),
        holidays = tuple(
            Holiday(date=str(_require(h, "date", f"{ctx}.holidays[{i}]")), name=str(h.get("name", "")))
            for i, h in enumerate(_as_list(raw.get("holidays", []), f"{ctx}.holidays"))
        ),
        day_offs = tuple(str(d) for d in _as_list(raw.get("day_offs", []), f"{ctx}.day_offs")),
        blocked_times = tuple(
            DateTimeRange(start=str(_require(b, "start", f"{ctx}.blocked_times[{i}]")),
                          end=str(_require(b, "end", f"{ctx}.blocked_times[{i}]")))
            for i, b in enumerate(_as_list(raw.get("blocked_times", []), f"{ctx}.blocked_times"))
        ),
        is_trainee = bool(raw.get("is_trainee", False)),
    )


def _busy(raw: Any) -> Dict[str, List[BusyInterval]]:
    raw = _as_dict(raw, "busy")
    return {
        str(pid): [
            BusyInterval(
                start = str(_require(b, "start", f"busy.{pid}[{i}]")),
                end   = str(_require(b, "end",   f"busy.{pid}[{i}]")),
                label = str(b.get("label", "")),
                id    = str(b.get("id", "")),
            )
            for i, b in enumerate(_as_list(items, f"busy.{pid}"))
        ]
        for pid, items in raw.items()
    }


def _options(raw: Dict[str, Any]) -> SearchOptions:
    d = SearchOptions()
    solver_raw = _as_dict(raw.get("solver") or {}, "options.solver")
    time_limit = solver_raw.get("max_time_in_seconds")
    max_steps  = solver_raw.get("max_steps")
    max_results: Optional[Any] = raw.get("max_results", d.max_results)
    return SearchOptions(
        respect_work_hours    = bool(raw.get("respect_work_hours",    d.respect_work_hours)),
        respect_holidays      = bool(raw.get("respect_holidays",      d.respect_holidays)),
        respect_day_offs      = bool(raw.get("respect_day_offs",      d.respect_day_offs)),
        respect_daily_limits  = bool(raw.get("respect_daily_limits",  d.respect_daily_limits)),
        respect_weekly_limits = bool(raw.get("respect_weekly_limits", d.respect_weekly_limits)),
        check_busy_intervals  = bool(raw.get("check_busy_intervals",  d.check_busy_intervals)),
        exclude_blocked_times = bool(raw.get("exclude_blocked_times", d.exclude_blocked_times)),
        balance_load          = bool(raw.get("balance_load",          d.balance_load)),
        max_results           = None if max_results is None else int(max_results),
        include_trainees      = bool(raw.get("include_trainees",      d.include_trainees)),
        day_start             = str(raw.get("day_start",              d.day_start)),
        timezone              = str(raw.get("timezone",               d.timezone)),
        day_length_minutes    = int(raw.get("day_length_minutes",     d.day_length_minutes)),
        solver = SolverParams(
            max_time_in_seconds = None if time_limit is None else float(time_limit),
            max_steps           = None if max_steps is None else int(max_steps),
            staffing_precheck   = bool(solver_raw.get("staffing_precheck", True)),
            staffing_time_limit = float(solver_raw.get("staffing_time_limit", 5.0)),
            num_workers         = int(solver_raw.get("num_workers", 0)),
        ),
    )


def load_config(path: str | Path) -> Config:
    """Load and validate a Config from a JSON file."""
    with Path(path).open("r", encoding="utf-8") as f:
        raw = json.load(f)

    raw  = _as_dict(raw, "root")
    meta = _as_dict(raw.get("meta") or {}, "meta")

    sessions_raw     = _as_list(_require(raw, "sessions",     "root"), "sessions")
    participants_raw = _as_list(_require(raw, "participants", "root"), "participants")
    range_raw        = raw.get("date_range")
    options_raw      = _as_dict(raw.get("options") or {}, "options")

    date_range = None
    if range_raw is not None:
        range_raw  = _as_dict(range_raw, "date_range")
        date_range = DateRange(
            start = str(_require(range_raw, "start", "date_range")),
            end   = str(_require(range_raw, "end",   "date_range")),
        )

    cfg = Config(
        meta         = meta,
        date_range   = date_range,
        sessions     = [_session(s, f"sessions[{i}]") for i, s in enumerate(sessions_raw)],
        participants = [_participant(p, f"participants[{i}]") for i, p in enumerate(participants_raw)],
        busy         = _busy(raw.get("busy") or {}),
        options      = _options(options_raw),
    )
    try:
        cfg.validate()
    except ValueError as e:
        raise ConfigError(str(e)) from e
    _check_unique_ids(cfg.sessions,     "sessions")
    _check_unique_ids(cfg.participants, "participants")
    return cfg


def save_config(cfg: Config, path: str | Path) -> None:
    """Serialise Config to JSON, creating parent directories if needed."""
    cfg.validate()
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("w", encoding="utf-8") as f:
        # ensure_ascii=False preserves accented names.
        # sort_keys=True keeps diffs readable in version control.
        json.dump(cfg.to_dict(), f, ensure_ascii=False, indent=2, sort_keys=True)


def save_result(result: SearchResult | VerificationResult, path: str | Path) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("w", encoding="utf-8") as f:
        json.dump(result.to_dict(), f, ensure_ascii=False, indent=2)
