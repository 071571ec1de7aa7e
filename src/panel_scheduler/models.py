"""
Data model layer for the interview panel scheduler.

Every domain object is a plain Python dataclass. Inputs (sessions,
participants, busy intervals) are frozen: a search reads them but never
writes to them. Outputs (slots, combinations, plans) are frozen too, so a
result list can be cached or compared without defensive copies.

Reference: Python Software Foundation. "dataclasses — Data Classes."
https://docs.python.org/3/library/dataclasses.html

Design note — flat entities with ID references:
  Sessions hold a `pool` of participant ids rather than embedding
  Participant objects, and busy intervals live in a separate mapping keyed
  by participant id. This keeps the busy snapshot swappable per search.

Time representation:
  Clock-of-day values are "HH:MM" strings, dates are "YYYY-MM-DD" and
  placed times are ISO-8601 strings in UTC, so sorting the strings sorts
  the instants.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Tuple

MINUTES_IN_DAY = 1440

DAYS_OF_WEEK = (
    "sunday",
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
)

LIMIT_TYPES = ("hours", "count")


@dataclass(frozen=True)
class TimeRange:
    """A clock-of-day window, e.g. 09:00-17:00."""
    start: str   # HH:MM
    end:   str   # HH:MM


@dataclass(frozen=True)
class DateTimeRange:
    start: str   # ISO 8601
    end:   str   # ISO 8601


@dataclass(frozen=True)
class DateRange:
    start: str   # YYYY-MM-DD
    end:   str   # YYYY-MM-DD


@dataclass(frozen=True)
class Holiday:
    date: str    # YYYY-MM-DD
    name: str = ""


@dataclass(frozen=True)
class LoadLimit:
    type: str   = "count"   # "hours" | "count"
    max:  float = 4


@dataclass(frozen=True)
class Limits:
    daily:  LoadLimit = field(default_factory=lambda: LoadLimit("count", 4))
    weekly: LoadLimit = field(default_factory=lambda: LoadLimit("count", 15))


@dataclass(frozen=True)
class Session:
    """One interview stage. `break_after` is the wait before the next one."""
    id:             str
    name:           str
    duration:       int
    break_after:    int                        = 0
    required_count: int                        = 1
    order:          int                        = 0
    pool:           Optional[Tuple[str, ...]]  = None
    allow_trainees: bool                       = False
    meeting_type:   str                        = "google_meet"
    location:       str                        = ""


@dataclass(frozen=True)
class Participant:
    id:            str
    name:          str
    email:         str                        = ""
    timezone:      str                        = "UTC"
    work_hours:    Dict[str, TimeRange]       = field(default_factory=dict)
    limits:        Limits                     = field(default_factory=Limits)
    holidays:      Tuple[Holiday, ...]        = ()
    day_offs:      Tuple[str, ...]            = ()
    blocked_times: Tuple[DateTimeRange, ...]  = ()
    is_trainee:    bool                       = False


@dataclass(frozen=True)
class BusyInterval:
    """An external commitment pulled from a participant's calendar."""
    start: str   # ISO 8601
    end:   str   # ISO 8601
    label: str = ""
    id:    str = ""


@dataclass(frozen=True)
class ParticipantAssignment:
    participant_id: str
    name:           str
    email:          str  = ""
    is_trainee:     bool = False
    status:         str  = "pending"


@dataclass(frozen=True)
class PlacedSlot:
    id:           str
    session_id:   str
    session_name: str
    start:        str   # ISO 8601, UTC
    end:          str   # ISO 8601, UTC
    participants: Tuple[ParticipantAssignment, ...] = ()
    meeting_type: str = "google_meet"
    location:     str = ""

    @property
    def participant_ids(self) -> List[str]:
        return [a.participant_id for a in self.participants]


@dataclass(frozen=True)
class Combination:
    """All sessions of one day placed and staffed, in session order."""
    id:             str
    date:           str
    slots:          Tuple[PlacedSlot, ...]
    start:          str
    end:            str
    total_duration: int
    load_density:   Dict[str, float] = field(default_factory=dict)

    def participant_ids(self) -> List[str]:
        seen: Dict[str, None] = {}
        for slot in self.slots:
            for pid in slot.participant_ids:
                seen.setdefault(pid, None)
        return list(seen)


@dataclass(frozen=True)
class Round:
    """Sessions meant for the same calendar date, in order."""
    index:    int
    sessions: Tuple[Session, ...]

    @property
    def boundary(self) -> Session:
        return self.sessions[-1]


@dataclass(frozen=True)
class RoundPlan:
    round_number: int
    date:         str
    combination:  Combination
    sessions:     Tuple[Session, ...]


@dataclass(frozen=True)
class MultiDayPlan:
    id:               str
    rounds:           Tuple[RoundPlan, ...]
    total_rounds:     int
    all_participants: Tuple[str, ...]

    @property
    def start(self) -> str:
        return self.rounds[0].combination.start if self.rounds else ""


@dataclass
class SolverParams:
    # None = no deadline / no step budget; only max_results bounds the work.
    max_time_in_seconds: Optional[float] = None
    max_steps:           Optional[int]   = None
    staffing_precheck:   bool            = True
    staffing_time_limit: float           = 5.0
    # 0 = use all available cores (OR-Tools default).
    num_workers:         int             = 0


@dataclass
class SearchOptions:
    respect_work_hours:    bool          = True
    respect_holidays:      bool          = True
    respect_day_offs:      bool          = True
    respect_daily_limits:  bool          = True
    respect_weekly_limits: bool          = True
    check_busy_intervals:  bool          = True
    exclude_blocked_times: bool          = True
    balance_load:          bool          = True
    max_results:           Optional[int] = 100
    include_trainees:      bool          = False
    day_start:             str           = "09:00"
    timezone:              str           = "UTC"
    day_length_minutes:    int           = MINUTES_IN_DAY
    solver:                SolverParams  = field(default_factory=SolverParams)

    @property
    def result_cap(self) -> Optional[int]:
        if self.max_results is None or self.max_results <= 0:
            return None
        return self.max_results


@dataclass
class Config:
    meta:         Dict[str, Any]                 = field(default_factory=dict)
    date_range:   Optional[DateRange]            = None
    sessions:     List[Session]                  = field(default_factory=list)
    participants: List[Participant]              = field(default_factory=list)
    busy:         Dict[str, List[BusyInterval]]  = field(default_factory=dict)
    options:      SearchOptions                  = field(default_factory=SearchOptions)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def validate(self) -> None:
        if self.options.day_length_minutes < 1:
            raise ValueError("options.day_length_minutes must be >= 1")
        if self.options.max_results is not None and self.options.max_results < 0:
            raise ValueError("options.max_results must be >= 0")
        for s in self.sessions:
            if s.required_count < 1:
                raise ValueError(f"Session '{s.id}' required_count must be >= 1")
