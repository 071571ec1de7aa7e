"""
Single-day search — place every session of a day, in order, with a panel.

State machine over the session index i = 0..N:

  i == N   every session placed -> emit a Combination
  i <  N   start = day_start           if i == 0
                 = previous.end + previous.break_after   otherwise
           try each candidate panel (generation order); keep the slot only if
           every panel member passes all gates:
             1. availability   work hours / holidays / day-offs / blocks
             2. busy intervals the window misses every calendar commitment
             3. own slots      the window misses their earlier slots today
             4. load limits    daily / weekly density stays <= 1.0
           then recurse with the slot appended

A failing gate prunes the branch silently. Search stops early once the
result cap is reached or the budget runs out; results are then ranked by
start time and mean assignment density.

Complexity: O(C^S * P * E)
  C = panels per session, S = sessions, P = panel size, E = busy intervals
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from ..errors import AlgorithmError
from ..models import (BusyInterval, Combination, Participant, ParticipantAssignment,
                      PlacedSlot, SearchOptions, Session)
from ..timeutil import TimeChunk, overlaps, parse_clock, parse_datetime, to_utc_iso
from .availability import check_availability, zone
from .budget import SearchBudget, cap_reached
from .combinations import generate_panels
from .load import calculate_load
from .ranking import assignment_density, rank_combinations
from .result import (CALENDAR_EVENT, DAILY_LIMIT, TIME_OVERLAP, WEEKLY_LIMIT,
                     Conflict)

logger = logging.getLogger(__name__)


def check_sessions(sessions: Sequence[Session]) -> None:
    for s in sessions:
        if s.duration < 0:
            raise AlgorithmError(f"Session '{s.id}' has negative duration {s.duration}")
        if s.break_after < 0:
            raise AlgorithmError(f"Session '{s.id}' has negative break_after {s.break_after}")


def day_start_time(day: date, options: SearchOptions) -> datetime:
    """The first session's start on `day`, in UTC."""
    midnight = datetime.combine(day, time(0, 0), tzinfo=zone(options.timezone))
    return (midnight + timedelta(minutes=parse_clock(options.day_start))).astimezone(timezone.utc)


def participant_conflicts(participant: Participant, start: datetime, end: datetime,
                          busy: Sequence[BusyInterval], options: SearchOptions,
                          pending: Sequence[TimeChunk] = (),
                          first_only: bool = False) -> List[Conflict]:
    """
    Everything stopping `participant` from taking [start, end).

    `pending` are windows the participant already holds in the branch being
    built. With first_only the scan stops at the first gate that fails,
    which is all the search needs.
    """
    conflicts: List[Conflict] = []

    availability = check_availability(participant, start, end, options)
    conflicts.extend(availability.conflicts)
    if first_only and conflicts:
        return conflicts

    window = TimeChunk(start, end)
    if options.check_busy_intervals:
        for interval in busy:
            if overlaps(window, TimeChunk(parse_datetime(interval.start),
                                          parse_datetime(interval.end))):
                conflicts.append(Conflict(CALENDAR_EVENT,
                                          f'Calendar conflict with "{interval.label}"',
                                          participant.id, interval))
                if first_only:
                    return conflicts

    for held in pending:
        if overlaps(window, held):
            conflicts.append(Conflict(TIME_OVERLAP,
                                      f"{participant.name} is already placed "
                                      f"{to_utc_iso(held.start)} - {to_utc_iso(held.end)}",
                                      participant.id))
            if first_only:
                return conflicts

    if options.respect_daily_limits or options.respect_weekly_limits:
        load = calculate_load(participant, start, end, busy, pending)
        if options.respect_daily_limits and load.daily.density > 1.0:
            conflicts.append(Conflict(DAILY_LIMIT,
                                      f"Daily limit exceeded ({load.daily.current:g}/{load.daily.max:g})",
                                      participant.id))
        if options.respect_weekly_limits and load.weekly.density > 1.0:
            conflicts.append(Conflict(WEEKLY_LIMIT,
                                      f"Weekly limit exceeded ({load.weekly.current:g}/{load.weekly.max:g})",
                                      participant.id))
    return conflicts


def slot_id(session: Session, start: datetime) -> str:
    return f"slot-{session.id}-{start.strftime('%Y%m%dT%H%M')}"


def combination_id(day: str, slots: Sequence[PlacedSlot]) -> str:
    key = day + "|" + "|".join(f"{s.id}:{','.join(s.participant_ids)}" for s in slots)
    return "combo-" + hashlib.sha1(key.encode("utf-8")).hexdigest()[:12]


@dataclass
class _DayState:
    sessions: Sequence[Session]
    panels:   Dict[str, List[List[Participant]]]
    day:      date
    busy:     Mapping[str, Sequence[BusyInterval]]
    options:  SearchOptions
    budget:   SearchBudget
    cap:      Optional[int]
    results:  List[Combination] = field(default_factory=list)


def _held_windows(placed: Sequence[PlacedSlot], pid: str) -> List[TimeChunk]:
    return [TimeChunk(parse_datetime(s.start), parse_datetime(s.end))
            for s in placed if pid in s.participant_ids]


def _try_panel(state: _DayState, session: Session, panel: Sequence[Participant],
               start: datetime, placed: Sequence[PlacedSlot]) -> Optional[PlacedSlot]:
    end = start + timedelta(minutes=session.duration)
    for person in panel:
        if participant_conflicts(person, start, end, state.busy.get(person.id, ()),
                                 state.options, _held_windows(placed, person.id),
                                 first_only=True):
            return None
    return PlacedSlot(
        id           = slot_id(session, start),
        session_id   = session.id,
        session_name = session.name,
        start        = to_utc_iso(start),
        end          = to_utc_iso(end),
        participants = tuple(ParticipantAssignment(
            participant_id = p.id,
            name           = p.name,
            email          = p.email,
            is_trainee     = p.is_trainee,
        ) for p in panel),
        meeting_type = session.meeting_type,
        location     = session.location,
    )


def _emit(state: _DayState, placed: Tuple[PlacedSlot, ...]) -> None:
    day = state.day.isoformat()
    first, last = placed[0], placed[-1]
    span = parse_datetime(last.end) - parse_datetime(first.start)
    state.results.append(Combination(
        id             = combination_id(day, placed),
        date           = day,
        slots          = placed,
        start          = first.start,
        end            = last.end,
        total_duration = int(span.total_seconds() // 60),
        load_density   = assignment_density(placed),
    ))


def _explore(state: _DayState, placed: Tuple[PlacedSlot, ...], index: int) -> None:
    if index >= len(state.sessions):
        _emit(state, placed)
        return

    session = state.sessions[index]
    if placed:
        previous = state.sessions[index - 1]
        start = parse_datetime(placed[-1].end) + timedelta(minutes=previous.break_after)
    else:
        start = day_start_time(state.day, state.options)

    for panel in state.panels.get(session.id, []):
        if state.budget.exhausted():
            return
        slot = _try_panel(state, session, panel, start, placed)
        if slot is None:
            continue
        _explore(state, placed + (slot,), index + 1)
        if cap_reached(len(state.results), state.cap):
            return


def find_slots_for_day(sessions: Sequence[Session], participants: Sequence[Participant],
                       day: date, busy: Mapping[str, Sequence[BusyInterval]],
                       options: Optional[SearchOptions] = None,
                       budget: Optional[SearchBudget] = None) -> List[Combination]:
    """All valid same-day combinations for `sessions` on `day`, ranked."""
    options = options or SearchOptions()
    budget  = budget or SearchBudget.from_options(options)
    ordered = sorted(sessions, key=lambda s: s.order)
    check_sessions(ordered)
    if not ordered:
        return []

    state = _DayState(
        sessions = ordered,
        panels   = generate_panels(ordered, participants, options),
        day      = day,
        busy     = busy,
        options  = options,
        budget   = budget,
        cap      = options.result_cap,
    )
    _explore(state, (), 0)
    logger.debug("%s: %d combination(s) for %d session(s)",
                 day.isoformat(), len(state.results), len(ordered))
    return rank_combinations(state.results, options.balance_load)
