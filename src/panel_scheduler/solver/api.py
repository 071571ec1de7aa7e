"""
Search entry points.

find_slots() validates the config, freezes the busy snapshot, picks the
single-day or multi-day search and wraps the answer in a SearchResult.
"auto" goes multi-day as soon as one session's break reaches the
day-length threshold.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable, List, Mapping, Optional

from ..busy import freeze_snapshot
from ..models import BusyInterval, Combination, Config, DateRange
from ..timeutil import iter_dates, parse_date
from .budget import SearchBudget, cap_reached
from .multi_day import find_multi_day_slots
from .precheck import ensure_ok
from .ranking import rank_combinations
from .result import SearchResult
from .rounds import group_into_rounds, needs_multi_day
from .single_day import find_slots_for_day
from .staffing import check_staffing

logger = logging.getLogger(__name__)

MODES = ("auto", "single", "multi")

BusyInput = Optional[Mapping[str, Iterable[BusyInterval]]]


def _resolve_mode(cfg: Config, mode: str) -> str:
    mode = (mode or "auto").lower()
    if mode not in MODES:
        raise ValueError(f"Unknown search mode: {mode!r}")
    if mode == "auto":
        threshold = cfg.options.day_length_minutes
        return "multi" if needs_multi_day(cfg.sessions, threshold) else "single"
    return mode


def _finish(result: SearchResult, budget: SearchBudget, dates: int) -> SearchResult:
    result.truncated = budget.timed_out
    if budget.timed_out:
        result.status = "TRUNCATED"
        result.diagnostics.append(
            f"Search stopped after {budget.steps} step(s); results are partial."
        )
    else:
        result.status = "FOUND" if result.count else "NO_SLOTS"
    result.stats.update({
        "steps":          budget.steps,
        "elapsed_s":      round(budget.elapsed, 3),
        "dates_searched": dates,
    })
    logger.info("Search (%s) finished: %s, %d result(s)", result.mode, result.status, result.count)
    return result


def _search_single(cfg: Config, snapshot, budget: SearchBudget) -> SearchResult:
    opts  = cfg.options
    cap   = opts.result_cap
    found: List[Combination] = []
    dates = 0
    for day in iter_dates(parse_date(cfg.date_range.start), parse_date(cfg.date_range.end)):
        if budget.timed_out or cap_reached(len(found), cap):
            break
        dates += 1
        found.extend(find_slots_for_day(cfg.sessions, cfg.participants, day,
                                        snapshot, opts, budget))
    if cap is not None:
        found = found[:cap]
    result = SearchResult(status="", mode="single",
                          combinations=rank_combinations(found, opts.balance_load))
    return _finish(result, budget, dates)


def _search_multi(cfg: Config, snapshot, budget: SearchBudget) -> SearchResult:
    opts   = cfg.options
    result = SearchResult(status="", mode="multi")

    if opts.solver.staffing_precheck:
        rounds = group_into_rounds(cfg.sessions, opts.day_length_minutes)
        report = check_staffing(rounds, cfg.participants, opts)
        result.stats["staffing"] = report.status
        if report.infeasible:
            result.diagnostics.extend(report.diagnostics)
            return _finish(result, budget, 0)

    start = parse_date(cfg.date_range.start)
    end   = parse_date(cfg.date_range.end)
    result.plans = find_multi_day_slots(cfg.sessions, cfg.participants, start, end,
                                        snapshot, opts, budget)
    return _finish(result, budget, (end - start).days + 1)


def find_slots(cfg: Config, mode: str = "auto", busy: BusyInput = None) -> SearchResult:
    """
    Search the whole date range.

    `busy` overrides cfg.busy; either way it is checked and frozen before
    the search starts. Raises ValidationError on bad input.
    """
    if busy is not None:
        cfg = replace(cfg, busy={pid: list(items) for pid, items in busy.items()})
    ensure_ok(cfg)
    resolved = _resolve_mode(cfg, mode)
    snapshot = freeze_snapshot(cfg.busy)
    budget   = SearchBudget.from_options(cfg.options)
    logger.info("Searching %s .. %s (%s, %d session(s), %d participant(s))",
                cfg.date_range.start, cfg.date_range.end, resolved,
                len(cfg.sessions), len(cfg.participants))
    if resolved == "multi":
        return _search_multi(cfg, snapshot, budget)
    return _search_single(cfg, snapshot, budget)


def find_slots_for_date(cfg: Config, day: str, busy: BusyInput = None) -> SearchResult:
    """Single-day search on one date, ignoring cfg.date_range."""
    one_day = replace(cfg, date_range=DateRange(day, day))
    return find_slots(one_day, mode="single", busy=busy)
