"""
Work limits shared by the day and multi-day searches.

Two independent limits:
  * a result cap — reaching it is a normal, complete answer;
  * a deadline / step budget — hitting it truncates the search, and the
    caller is told so through `timed_out`.

exhausted() is called once per loop iteration in both recursions.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from ..models import SearchOptions

logger = logging.getLogger(__name__)


class SearchBudget:
    def __init__(self, max_time_in_seconds: Optional[float] = None,
                 max_steps: Optional[int] = None,
                 clock: Callable[[], float] = time.monotonic) -> None:
        self._clock    = clock
        self.started   = clock()
        self.deadline  = None if max_time_in_seconds is None else self.started + max_time_in_seconds
        self.max_steps = max_steps
        self.steps     = 0
        self.timed_out = False

    @classmethod
    def from_options(cls, options: SearchOptions) -> "SearchBudget":
        return cls(options.solver.max_time_in_seconds, options.solver.max_steps)

    def exhausted(self) -> bool:
        if self.timed_out:
            return True
        self.steps += 1
        if self.max_steps is not None and self.steps > self.max_steps:
            logger.info("Step budget of %d exhausted", self.max_steps)
            self.timed_out = True
        elif self.deadline is not None and self._clock() >= self.deadline:
            logger.info("Search deadline reached after %d steps", self.steps)
            self.timed_out = True
        return self.timed_out

    @property
    def elapsed(self) -> float:
        return self._clock() - self.started


def cap_reached(count: int, cap: Optional[int]) -> bool:
    return cap is not None and count >= cap
