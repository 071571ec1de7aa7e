"""
Panel enumeration — every k-of-n choice of participants for each session.

choose(pool, k) is the textbook choose/skip recursion:

  choose([a, b, c], 2)
    = [a] + each of choose([b, c], 1)      -> [a, b], [a, c]
    + choose([b, c], 2)                    -> [b, c]

so output order is lexicographic in the pool's input order. The day search
tries panels in exactly this order, which makes it the tie-break between
otherwise equal results.

Trainee augmentation:
  The first pass only draws from regular participants. When trainees are
  allowed for a session, a second pass appends panels that mix
  1..min(k, #trainees) trainees with k - t regular participants. Every
  panel appears once, and regular panels come first.
"""

from __future__ import annotations

from typing import Dict, List, Sequence, TypeVar

from ..models import Participant, SearchOptions, Session

T = TypeVar("T")


def choose(pool: Sequence[T], k: int) -> List[List[T]]:
    if k == 0:
        return [[]]
    if not pool or k > len(pool):
        return []
    first, rest = pool[0], pool[1:]
    with_first = [[first, *combo] for combo in choose(rest, k - 1)]
    return with_first + choose(rest, k)


def choose_with_trainees(pool: Sequence[Participant], k: int) -> List[List[Participant]]:
    regular  = [p for p in pool if not p.is_trainee]
    trainees = [p for p in pool if p.is_trainee]
    if not trainees:
        return []

    panels: List[List[Participant]] = []
    for n_trainees in range(1, min(k, len(trainees)) + 1):
        n_regular = k - n_trainees
        if n_regular > len(regular):
            continue
        trainee_panels = choose(trainees, n_trainees)
        for reg in choose(regular, n_regular):
            for tr in trainee_panels:
                panels.append(reg + tr)
    return panels


def trainees_allowed(session: Session, options: SearchOptions) -> bool:
    return options.include_trainees or session.allow_trainees


def session_pool(session: Session, participants: Sequence[Participant],
                 options: SearchOptions) -> List[Participant]:
    """Eligible participants for a session, in roster order."""
    pool = list(participants)
    if session.pool is not None:
        allowed = set(session.pool)
        pool = [p for p in pool if p.id in allowed]
    if not trainees_allowed(session, options):
        pool = [p for p in pool if not p.is_trainee]
    return pool


def panels_for_session(session: Session, participants: Sequence[Participant],
                       options: SearchOptions) -> List[List[Participant]]:
    pool   = session_pool(session, participants, options)
    panels = choose([p for p in pool if not p.is_trainee], session.required_count)
    if trainees_allowed(session, options):
        panels.extend(choose_with_trainees(pool, session.required_count))
    return panels


def generate_panels(sessions: Sequence[Session], participants: Sequence[Participant],
                    options: SearchOptions) -> Dict[str, List[List[Participant]]]:
    """Map of session id -> candidate panels in exploration order."""
    return {s.id: panels_for_session(s, participants, options) for s in sessions}
