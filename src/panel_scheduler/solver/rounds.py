"""
Split an ordered session list into rounds (sessions for the same date).

A session whose break_after reaches the day-length threshold closes the
current round; whatever is left at the end forms the last round.

  [s1 break=15, s2 break=1440, s3 break=30, s4 break=10080, s5]
    -> [s1, s2] | [s3, s4] | [s5]
"""

from __future__ import annotations

import math
from typing import List, Sequence

from ..errors import AlgorithmError
from ..models import MINUTES_IN_DAY, Round, Session


def group_into_rounds(sessions: Sequence[Session],
                      threshold: int = MINUTES_IN_DAY) -> List[Round]:
    rounds: List[Round] = []
    current: List[Session] = []
    for session in sorted(sessions, key=lambda s: s.order):
        current.append(session)
        if session.break_after >= threshold:
            rounds.append(Round(index=len(rounds), sessions=tuple(current)))
            current = []
    if current:
        rounds.append(Round(index=len(rounds), sessions=tuple(current)))
    return rounds


def needs_multi_day(sessions: Sequence[Session], threshold: int = MINUTES_IN_DAY) -> bool:
    return any(s.break_after >= threshold for s in sessions)


def gap_days(previous: Round, threshold: int = MINUTES_IN_DAY) -> int:
    """Whole days the next round must wait after `previous`."""
    days = math.ceil(previous.boundary.break_after / threshold)
    if days < 1:
        raise AlgorithmError(
            f"Round {previous.index} closes with break_after "
            f"{previous.boundary.break_after} < threshold {threshold}; "
            "the next round would not start after it"
        )
    return days
