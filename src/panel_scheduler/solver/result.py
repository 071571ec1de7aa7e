from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from ..models import BusyInterval, Combination, MultiDayPlan

# Conflict kinds. A conflict is a normal negative outcome, never an exception.
CALENDAR_EVENT   = "calendar_event"
WORK_HOURS       = "work_hours"
DAILY_LIMIT      = "daily_limit"
WEEKLY_LIMIT     = "weekly_limit"
HOLIDAY          = "holiday"
DAY_OFF          = "day_off"
RECRUITING_BLOCK = "recruiting_block"
TIME_OVERLAP     = "time_overlap"
NO_PARTICIPANTS  = "no_participants_available"


@dataclass(frozen=True)
class Conflict:
    kind:           str
    message:        str
    participant_id: Optional[str]          = None
    busy:           Optional[BusyInterval] = None


@dataclass(frozen=True)
class LoadLevel:
    current: float
    max:     float
    density: float   # current / max; > 1.0 means over the limit


@dataclass(frozen=True)
class LoadInfo:
    daily:  LoadLevel
    weekly: LoadLevel


@dataclass
class VerificationResult:
    available: bool
    conflicts: List[Conflict]         = field(default_factory=list)
    load_info: Dict[str, LoadInfo]    = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class SearchResult:
    status:       str                      # FOUND/NO_SLOTS/TRUNCATED
    mode:         str                      # single/multi
    combinations: List[Combination]        = field(default_factory=list)
    plans:        List[MultiDayPlan]       = field(default_factory=list)
    truncated:    bool                     = False
    diagnostics:  List[str]                = field(default_factory=list)
    stats:        Dict[str, Any]           = field(default_factory=dict)

    @property
    def count(self) -> int:
        return len(self.plans) if self.mode == "multi" else len(self.combinations)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
