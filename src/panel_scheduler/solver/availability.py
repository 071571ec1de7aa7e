"""
Per-participant availability for a proposed [start, end) window.

Four checks, each switched by SearchOptions:

  respect_work_hours     window must sit inside that weekday's work hours
  respect_holidays       window's date must not be one of their holidays
  respect_day_offs       window's date must not be one of their day-offs
  exclude_blocked_times  window must not touch a blocked range

Weekday, clock time and date are all read in the participant's own time
zone. Every failing check is reported, not just the first, so a caller can
show the whole list.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from functools import lru_cache
from typing import List, Optional
from zoneinfo import ZoneInfo

from ..models import DAYS_OF_WEEK, Participant, SearchOptions
from ..timeutil import TimeChunk, overlaps, parse_clock, parse_datetime
from .result import DAY_OFF, HOLIDAY, RECRUITING_BLOCK, WORK_HOURS, Conflict


@dataclass(frozen=True)
class Availability:
    available: bool
    conflicts: List[Conflict] = field(default_factory=list)


@lru_cache(maxsize=None)
def zone(name: str) -> ZoneInfo:
    return ZoneInfo(name)


def local_time(participant: Participant, dt: datetime) -> datetime:
    return dt.astimezone(zone(participant.timezone or "UTC"))


def weekday_name(dt: datetime) -> str:
    # datetime.weekday() is Monday=0; DAYS_OF_WEEK starts on Sunday
    return DAYS_OF_WEEK[(dt.weekday() + 1) % 7]


def check_work_hours(participant: Participant, start: datetime,
                     end: datetime) -> Optional[Conflict]:
    local_start = local_time(participant, start)
    day = weekday_name(local_start)
    hours = participant.work_hours.get(day)
    if hours is None:
        return Conflict(WORK_HOURS, f"{participant.name} does not work on {day}",
                        participant.id)

    midnight = local_start.replace(hour=0, minute=0, second=0, microsecond=0)
    start_m = (local_start - midnight).total_seconds() / 60
    # measured from the start's midnight so a window past midnight fails
    end_m = (local_time(participant, end) - midnight).total_seconds() / 60
    if start_m < parse_clock(hours.start) or end_m > parse_clock(hours.end):
        return Conflict(WORK_HOURS,
                        f"Outside work hours ({hours.start} - {hours.end})",
                        participant.id)
    return None


def check_holidays(participant: Participant, day: str) -> Optional[Conflict]:
    holiday = next((h for h in participant.holidays if h.date == day), None)
    if holiday is None:
        return None
    return Conflict(HOLIDAY, f"Holiday: {holiday.name or holiday.date}", participant.id)


def check_day_offs(participant: Participant, day: str) -> Optional[Conflict]:
    if day in participant.day_offs:
        return Conflict(DAY_OFF, f"Day off for {participant.name}", participant.id)
    return None


def check_blocked_times(participant: Participant, start: datetime,
                        end: datetime) -> Optional[Conflict]:
    window = TimeChunk(start, end)
    for blocked in participant.blocked_times:
        if overlaps(window, TimeChunk(parse_datetime(blocked.start),
                                      parse_datetime(blocked.end))):
            return Conflict(RECRUITING_BLOCK,
                            f"Overlaps with blocked time ({blocked.start} - {blocked.end})",
                            participant.id)
    return None


def check_availability(participant: Participant, start: datetime, end: datetime,
                       options: Optional[SearchOptions] = None) -> Availability:
    options = options or SearchOptions()
    day = local_time(participant, start).date().isoformat()

    found = []
    if options.respect_work_hours:
        found.append(check_work_hours(participant, start, end))
    if options.respect_holidays:
        found.append(check_holidays(participant, day))
    if options.respect_day_offs:
        found.append(check_day_offs(participant, day))
    if options.exclude_blocked_times:
        found.append(check_blocked_times(participant, start, end))

    conflicts = [c for c in found if c is not None]
    return Availability(available=not conflicts, conflicts=conflicts)
