"""
Pre-search checks that run before any search is started.

Catching unsearchable input here means the caller gets plain-English
messages up front instead of an empty result list or a crash halfway
through the recursion.
"""

from __future__ import annotations

from collections import Counter
from typing import Iterable, List, Set, Tuple
from zoneinfo import ZoneInfoNotFoundError

from ..errors import ValidationError
from ..models import LIMIT_TYPES, Config, Participant
from ..timeutil import parse_clock, parse_date, parse_datetime
from .availability import zone
from .combinations import session_pool


def _dupes(ids: List[str]) -> List[str]:
    return sorted(i for i, n in Counter(ids).items() if n > 1)


def _known_zone(name: str) -> bool:
    try:
        zone(name)
    except (ZoneInfoNotFoundError, ValueError):
        return False
    return True


def _bad_ranges(ranges: Iterable, ctx: str) -> List[str]:
    """Timestamp ranges that do not parse or do not move forward."""
    errors: List[str] = []
    for i, r in enumerate(ranges):
        try:
            start, end = parse_datetime(r.start), parse_datetime(r.end)
        except (TypeError, ValueError):
            errors.append(f"{ctx}[{i}] has a malformed timestamp: {r.start!r} .. {r.end!r}")
            continue
        if end <= start:
            errors.append(f"{ctx}[{i}] ends before it starts: {r.start} .. {r.end}")
    return errors


def check_participant_times(p: Participant) -> List[str]:
    errors: List[str] = []
    for day, hours in p.work_hours.items():
        try:
            start, end = parse_clock(hours.start), parse_clock(hours.end)
        except (AttributeError, TypeError, ValueError):
            errors.append(
                f"Participant '{p.id}' work_hours.{day} is not a clock range: "
                f"{hours.start!r} .. {hours.end!r}"
            )
            continue
        if end <= start:
            errors.append(f"Participant '{p.id}' work_hours.{day} ends before it starts.")
    errors.extend(_bad_ranges(p.blocked_times, f"Participant '{p.id}' blocked_times"))
    return errors


def check_date_range(cfg: Config) -> List[str]:
    if cfg.date_range is None:
        return ["A date range with a start and end is required."]
    try:
        start = parse_date(cfg.date_range.start)
        end   = parse_date(cfg.date_range.end)
    except (TypeError, ValueError):
        return [f"Malformed date range: {cfg.date_range.start!r} .. {cfg.date_range.end!r}"]
    if end < start:
        return [f"Date range is inverted: {start} is after {end}."]
    return []


def precheck(cfg: Config) -> Tuple[List[str], List[str]]:
    """Return (errors, warnings). Any error means the search must not run."""
    errors:   List[str] = []
    warnings: List[str] = []

    if not cfg.sessions:
        errors.append("At least one session is required.")
    if not cfg.participants:
        errors.append("At least one participant is required.")
    errors.extend(check_date_range(cfg))

    dup_sessions = _dupes([s.id for s in cfg.sessions])
    if dup_sessions:
        errors.append(f"Duplicate session ids: {dup_sessions}")
    dup_people = _dupes([p.id for p in cfg.participants])
    if dup_people:
        errors.append(f"Duplicate participant ids: {dup_people}")

    if cfg.options.day_length_minutes < 1:
        errors.append("options.day_length_minutes must be >= 1.")

    try:
        parse_clock(cfg.options.day_start)
    except ValueError:
        errors.append(f"options.day_start is not a clock time: {cfg.options.day_start!r}")
    if not _known_zone(cfg.options.timezone):
        errors.append(f"Unknown time zone in options: {cfg.options.timezone!r}")

    known: Set[str] = {p.id for p in cfg.participants}

    for p in cfg.participants:
        if not _known_zone(p.timezone):
            errors.append(f"Participant '{p.id}' has unknown time zone {p.timezone!r}.")
        errors.extend(check_participant_times(p))
        for label, limit in (("daily", p.limits.daily), ("weekly", p.limits.weekly)):
            if limit.type not in LIMIT_TYPES:
                errors.append(
                    f"Participant '{p.id}' {label} limit type {limit.type!r} "
                    f"is not one of {list(LIMIT_TYPES)}."
                )
            if limit.max <= 0:
                errors.append(f"Participant '{p.id}' {label} limit max must be > 0.")

    for s in cfg.sessions:
        if s.required_count < 1:
            errors.append(f"Session '{s.id}' required_count must be >= 1.")
            continue
        if s.pool is not None:
            bad = [pid for pid in s.pool if pid not in known]
            if bad:
                warnings.append(f"Session '{s.id}' pool lists unknown participant(s): {bad}")
        eligible = session_pool(s, cfg.participants, cfg.options)
        if len(eligible) < s.required_count:
            warnings.append(
                f"Session '{s.id}' needs {s.required_count} participant(s) but only "
                f"{len(eligible)} are eligible — no slot can be found for it."
            )

    for pid, intervals in cfg.busy.items():
        errors.extend(_bad_ranges(intervals, f"busy.{pid}"))

    stray = sorted(pid for pid in cfg.busy if pid not in known)
    if stray:
        warnings.append(f"Busy intervals given for unknown participant(s): {stray}")

    return errors, warnings


def ensure_ok(cfg: Config) -> None:
    errors, _ = precheck(cfg)
    if errors:
        raise ValidationError("\n".join(errors))
