"""
Result ordering shared by both searches.

Primary key:   start time (ISO strings in UTC, so string order = time order)
Secondary key: mean per-participant density, lower first; only used when
               balance_load is on

Python's sort is stable, so results that tie on both keys keep the order
the search found them in.
"""

from __future__ import annotations

from collections import Counter
from typing import Dict, Iterable, List, Mapping, Sequence, Tuple

from ..models import Combination, MultiDayPlan, PlacedSlot

# Rough number of sessions one participant is expected to cover in a day.
TYPICAL_CAPACITY = 4


def assignment_density(slots: Sequence[PlacedSlot]) -> Dict[str, float]:
    """Fast load proxy: slots assigned to each participant / TYPICAL_CAPACITY."""
    counts: Counter = Counter()
    for slot in slots:
        for assignment in slot.participants:
            counts[assignment.participant_id] += 1
    return {pid: n / TYPICAL_CAPACITY for pid, n in counts.items()}


def mean_density(densities: Iterable[float]) -> float:
    values = list(densities)
    return sum(values) / len(values) if values else 0.0


def combination_key(combo: Combination, balance_load: bool = True) -> Tuple:
    if not balance_load:
        return (combo.start,)
    return (combo.start, mean_density(combo.load_density.values()))


def plan_key(plan: MultiDayPlan, balance_load: bool = True) -> Tuple:
    if not balance_load:
        return (plan.start,)
    values = [v for r in plan.rounds for v in r.combination.load_density.values()]
    return (plan.start, mean_density(values))


def rank_combinations(combos: Iterable[Combination],
                      balance_load: bool = True) -> List[Combination]:
    return sorted(combos, key=lambda c: combination_key(c, balance_load))


def rank_plans(plans: Iterable[MultiDayPlan], balance_load: bool = True) -> List[MultiDayPlan]:
    return sorted(plans, key=lambda p: plan_key(p, balance_load))


def density_summary(densities: Mapping[str, float]) -> str:
    return ", ".join(f"{pid}={d:.2f}" for pid, d in sorted(densities.items()))
