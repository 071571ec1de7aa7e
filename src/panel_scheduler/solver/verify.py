"""
Re-check a found combination or plan against a fresh busy snapshot.

Meant to run right before booking. A slot that is no longer free is a
normal answer (available=False plus every conflict found), never an
exception.
"""

from __future__ import annotations

from typing import Dict, List, Mapping, Optional, Sequence, Union

from ..models import BusyInterval, Combination, MultiDayPlan, Participant, PlacedSlot, SearchOptions
from ..timeutil import TimeChunk, parse_datetime
from .load import calculate_load
from .result import NO_PARTICIPANTS, Conflict, LoadInfo, VerificationResult
from .single_day import participant_conflicts


def extract_slots(target: Union[Combination, MultiDayPlan]) -> List[PlacedSlot]:
    if isinstance(target, MultiDayPlan):
        return [slot for r in target.rounds for slot in r.combination.slots]
    return list(target.slots)


def verify_combination(target: Union[Combination, MultiDayPlan],
                       participants: Sequence[Participant],
                       busy: Mapping[str, Sequence[BusyInterval]],
                       options: Optional[SearchOptions] = None) -> VerificationResult:
    options = options or SearchOptions()
    by_id = {p.id: p for p in participants}

    conflicts: List[Conflict]       = []
    load_info: Dict[str, LoadInfo]  = {}
    held:      Dict[str, List[TimeChunk]] = {}

    for slot in extract_slots(target):
        start, end = parse_datetime(slot.start), parse_datetime(slot.end)
        for assignment in slot.participants:
            person = by_id.get(assignment.participant_id)
            if person is None:
                conflicts.append(Conflict(
                    NO_PARTICIPANTS,
                    f"Participant '{assignment.participant_id}' is not in the roster",
                    assignment.participant_id,
                ))
                continue

            mine    = busy.get(person.id, ())
            pending = held.setdefault(person.id, [])
            conflicts.extend(participant_conflicts(person, start, end, mine, options, pending))
            load_info[person.id] = calculate_load(person, start, end, mine, pending)
            pending.append(TimeChunk(start, end))

    return VerificationResult(
        available = not conflicts,
        conflicts = conflicts,
        load_info = load_info,
    )
