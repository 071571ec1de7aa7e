"""
Exception hierarchy for the panel scheduler.

Only two things are ever raised out of a search: bad input (ValidationError)
and a broken internal invariant (AlgorithmError). A slot that cannot be used
is not an error; it is a pruned branch or a Conflict record.
"""

from __future__ import annotations


class SchedulingError(Exception):
    """Base class for every error raised by the scheduler."""


class ValidationError(SchedulingError, ValueError):
    """Raised before a search starts when the input cannot be searched."""


class AlgorithmError(SchedulingError, RuntimeError):
    """Raised when an internal invariant is violated during search setup."""
