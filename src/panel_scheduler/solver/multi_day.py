"""
Multi-day search — give every round its own date, then its own day search.

Backtracking over the round index r = 0..R:

  r == R   every round placed -> emit a MultiDayPlan
  r <  R   earliest = range start                          if r == 0
                    = previous date + ceil(gap / threshold) otherwise
           for each date in [earliest, range end]:
             for each combination the day search finds for this round:
               skip it if any participant already served in an earlier round
               otherwise recurse with the round appended

The reuse rule is a plain id-set intersection across rounds, regardless of
how many days lie between them. Skipped combinations produce no conflict
record.

The per-round day search is not capped by max_results; the cap counts
finished plans only, and the shared budget bounds the work.

Complexity: O(D^R * C^S)
  D = days in range, R = rounds, C = panels per session, S = sessions per round
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass, field, replace
from datetime import date, timedelta
from typing import FrozenSet, List, Mapping, Optional, Sequence, Tuple

from ..models import (BusyInterval, MultiDayPlan, Participant, Round, RoundPlan,
                      SearchOptions, Session)
from ..timeutil import iter_dates, parse_date
from .budget import SearchBudget, cap_reached
from .ranking import rank_plans
from .rounds import gap_days, group_into_rounds
from .single_day import check_sessions, find_slots_for_day

logger = logging.getLogger(__name__)


def plan_id(rounds: Sequence[RoundPlan]) -> str:
    key = "|".join(f"{r.date}:{r.combination.id}" for r in rounds)
    return "plan-" + hashlib.sha1(key.encode("utf-8")).hexdigest()[:12]


def all_participants(rounds: Sequence[RoundPlan]) -> Tuple[str, ...]:
    seen: dict = {}
    for r in rounds:
        for pid in r.combination.participant_ids():
            seen.setdefault(pid, None)
    return tuple(seen)


@dataclass
class _PlanState:
    rounds:       List[Round]
    gaps:         List[int]
    participants: Sequence[Participant]
    end:          date
    busy:         Mapping[str, Sequence[BusyInterval]]
    # per-round day search runs uncapped; only whole plans count toward max_results
    day_options:  SearchOptions
    budget:       SearchBudget
    cap:          Optional[int]
    results:      List[MultiDayPlan] = field(default_factory=list)


def _schedule(state: _PlanState, index: int, placed: Tuple[RoundPlan, ...],
              used: FrozenSet[str], earliest: date) -> None:
    if index >= len(state.rounds):
        state.results.append(MultiDayPlan(
            id               = plan_id(placed),
            rounds           = placed,
            total_rounds     = len(state.rounds),
            all_participants = all_participants(placed),
        ))
        return

    current = state.rounds[index]
    for day in iter_dates(earliest, state.end):
        if state.budget.exhausted():
            return
        for combo in find_slots_for_day(current.sessions, state.participants, day,
                                        state.busy, state.day_options, state.budget):
            ids = set(combo.participant_ids())
            if ids & used:
                continue
            plan = RoundPlan(
                round_number = index,
                date         = day.isoformat(),
                combination  = combo,
                sessions     = current.sessions,
            )
            next_earliest = day
            if index < len(state.gaps):
                next_earliest = day + timedelta(days=state.gaps[index])
            _schedule(state, index + 1, placed + (plan,), used | ids, next_earliest)
            if cap_reached(len(state.results), state.cap):
                return
        if cap_reached(len(state.results), state.cap):
            return


def find_multi_day_slots(sessions: Sequence[Session], participants: Sequence[Participant],
                         start: date, end: date,
                         busy: Mapping[str, Sequence[BusyInterval]],
                         options: Optional[SearchOptions] = None,
                         budget: Optional[SearchBudget] = None) -> List[MultiDayPlan]:
    """All ways to place every round on its own date within [start, end], ranked."""
    options   = options or SearchOptions()
    budget    = budget or SearchBudget.from_options(options)
    threshold = options.day_length_minutes
    check_sessions(sessions)

    rounds = group_into_rounds(sessions, threshold)
    if not rounds:
        return []
    gaps = [gap_days(r, threshold) for r in rounds[:-1]]

    state = _PlanState(
        rounds       = rounds,
        gaps         = gaps,
        participants = participants,
        end          = parse_date(end),
        busy         = busy,
        day_options  = replace(options, max_results=None),
        budget       = budget,
        cap          = options.result_cap,
    )
    _schedule(state, 0, (), frozenset(), parse_date(start))
    logger.info("Multi-day search: %d round(s), %d plan(s), %d step(s)",
                len(rounds), len(state.results), budget.steps)
    return rank_plans(state.results, options.balance_load)
