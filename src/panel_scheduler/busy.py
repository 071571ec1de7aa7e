"""
Busy-interval snapshots.

The search never fetches anything. The caller asks a BusyIntervalProvider
for every participant's commitments, freezes the answer, and hands the
frozen mapping to the search. The mapping cannot change while the search
runs, so a branch that was pruned stays pruned.

A participant missing from the mapping simply has no known busy time.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Protocol, Sequence, Tuple

from .models import BusyInterval, DateRange, Participant
from .timeutil import parse_datetime

logger = logging.getLogger(__name__)

Snapshot = Mapping[str, Tuple[BusyInterval, ...]]


class BusyIntervalProvider(Protocol):
    def fetch(self, participant_ids: Sequence[str],
              date_range: DateRange) -> Mapping[str, Sequence[BusyInterval]]:
        ...


class StaticBusyProvider:
    """Serves intervals from an in-memory mapping, e.g. one loaded from JSON."""

    def __init__(self, intervals: Mapping[str, Sequence[BusyInterval]]) -> None:
        self._intervals = {pid: list(items) for pid, items in intervals.items()}

    def fetch(self, participant_ids: Sequence[str],
              date_range: DateRange) -> Dict[str, List[BusyInterval]]:
        return {pid: list(self._intervals[pid])
                for pid in participant_ids if pid in self._intervals}


class BusyCache:
    """
    Read-through cache in front of a provider, owned by the caller.

    Entries are trusted for as long as the caller keeps them; call
    invalidate() after a calendar changes.
    """

    def __init__(self, provider: BusyIntervalProvider) -> None:
        self.provider = provider
        self._entries: Dict[str, Tuple[BusyInterval, ...]] = {}

    def get(self, participant_ids: Sequence[str],
            date_range: DateRange) -> Dict[str, Tuple[BusyInterval, ...]]:
        missing = [pid for pid in participant_ids if pid not in self._entries]
        if missing:
            fetched = self.provider.fetch(missing, date_range)
            for pid in missing:
                self._entries[pid] = tuple(fetched.get(pid, ()))
            logger.debug("Busy cache filled %d participant(s)", len(missing))
        return {pid: self._entries[pid] for pid in participant_ids}

    def invalidate(self, participant_id: Optional[str] = None) -> None:
        if participant_id is None:
            self._entries.clear()
        else:
            self._entries.pop(participant_id, None)


def _sorted(items: Iterable[BusyInterval]) -> Tuple[BusyInterval, ...]:
    return tuple(sorted(items, key=lambda b: parse_datetime(b.start)))


def freeze_snapshot(intervals: Mapping[str, Iterable[BusyInterval]]) -> Snapshot:
    """Read-only copy with each participant's intervals ordered by start."""
    return MappingProxyType({pid: _sorted(items) for pid, items in intervals.items()})


def fetch_snapshot(provider: BusyIntervalProvider, participants: Sequence[Participant],
                   date_range: DateRange, cache: Optional[BusyCache] = None) -> Snapshot:
    ids = [p.id for p in participants]
    if cache is not None:
        return freeze_snapshot(cache.get(ids, date_range))
    return freeze_snapshot(provider.fetch(ids, date_range))
