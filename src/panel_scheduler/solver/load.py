"""
Participant load, measured against daily and weekly limits.

Load includes the proposed window:

  hours limit   (merged busy minutes + window minutes) / 60
  count limit   number of busy intervals + 1

Daily load looks at commitments on the window's local date; weekly load at
the Sunday-aligned week containing it. Density = current / max, so a value
above 1.0 means the proposed window would break the limit.

This is the exact measure. The day search ranks results with a much cheaper
per-combination proxy (see ranking.assignment_density); the two are kept
apart on purpose and must not be merged.
"""

from __future__ import annotations

import functools
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from ..models import BusyInterval, LoadLimit, Participant, SearchOptions
from ..timeutil import TimeChunk, parse_datetime, total_minutes
from .availability import local_time
from .result import LoadInfo, LoadLevel

LOW, MEDIUM, HIGH, OVER_LIMIT = "low", "medium", "high", "over_limit"


def week_start(day: date) -> date:
    """Sunday on or before `day`."""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def _level(limit: LoadLimit, chunks: List[TimeChunk], window: TimeChunk) -> LoadLevel:
    if limit.type == "hours":
        minutes = total_minutes(chunks)
        proposed = (parse_datetime(window.end) - parse_datetime(window.start)).total_seconds() / 60
        current = (minutes + proposed) / 60
    else:
        current = len(chunks) + 1
    return LoadLevel(current=current, max=limit.max, density=current / limit.max)


def calculate_load(participant: Participant, start: datetime, end: datetime,
                   busy: Sequence[BusyInterval],
                   pending: Iterable[TimeChunk] = ()) -> LoadInfo:
    """
    Daily and weekly load if `participant` also takes [start, end).

    `pending` holds windows already given to the participant in the search
    branch being explored; they count like busy intervals.
    """
    window = TimeChunk(start, end)
    day = local_time(participant, start).date()
    sunday = week_start(day)

    commitments = [TimeChunk(parse_datetime(b.start), parse_datetime(b.end)) for b in busy]
    commitments.extend(TimeChunk(parse_datetime(c.start), parse_datetime(c.end))
                       for c in pending)

    daily, weekly = [], []
    for chunk in commitments:
        d = local_time(participant, chunk.start).date()
        if d == day:
            daily.append(chunk)
        if sunday <= d < sunday + timedelta(days=7):
            weekly.append(chunk)

    return LoadInfo(
        daily  = _level(participant.limits.daily,  daily,  window),
        weekly = _level(participant.limits.weekly, weekly, window),
    )


def density_category(density: float) -> str:
    if density >= 1.0:
        return OVER_LIMIT
    if density >= 0.9:
        return HIGH
    if density >= 0.7:
        return MEDIUM
    return LOW


def would_exceed_limits(load: LoadInfo, options: Optional[SearchOptions] = None) -> bool:
    options = options or SearchOptions()
    if options.respect_daily_limits and load.daily.density > 1.0:
        return True
    if options.respect_weekly_limits and load.weekly.density > 1.0:
        return True
    return False


def sort_by_load_density(participants: Sequence[Participant],
                         load_map: Mapping[str, LoadInfo]) -> List[Participant]:
    """Least loaded first: weekly density, then daily when weekly is close."""
    def cmp(a: Participant, b: Participant) -> int:
        la, lb = load_map.get(a.id), load_map.get(b.id)
        if la is None or lb is None:
            return 0
        weekly = la.weekly.density - lb.weekly.density
        if abs(weekly) > 0.1:
            return -1 if weekly < 0 else 1
        daily = la.daily.density - lb.daily.density
        return (daily > 0) - (daily < 0)

    return sorted(participants, key=functools.cmp_to_key(cmp))


def load_map(participants: Sequence[Participant], start: datetime, end: datetime,
             busy: Mapping[str, Sequence[BusyInterval]]) -> Dict[str, LoadInfo]:
    return {p.id: calculate_load(p, start, end, busy.get(p.id, ())) for p in participants}
