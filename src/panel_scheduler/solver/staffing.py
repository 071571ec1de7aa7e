"""
Staffing feasibility — can every round be staffed at all?

Before the multi-day search walks D^R date choices, a CP-SAT model checks
the time-free core of the problem:

  y[s,p] = 1  iff participant p sits on the panel of session s
  u[r,p] = 1  iff participant p serves anywhere in round r

  sum_p y[s,p] == required_count(s)      for every session s
  y[s,p] <= u[round(s),p]                 panel membership implies round membership
  sum_r u[r,p] <= 1                       nobody serves in two rounds

Only participants in a session's eligible pool get a y variable. Dates,
busy time and limits are ignored, so the model is a relaxation of the
search: INFEASIBLE here proves the search would return no plan, while
FEASIBLE or UNKNOWN says nothing and the search runs as usual.

OR-Tools CP-SAT API used here:
  new_bool_var()  create a 0/1 decision variable
  add()           post a linear constraint

Reference: OR-Tools CP-SAT Python API
https://developers.google.com/optimization/reference/python/sat/python/cp_model
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Tuple

from ortools.sat.python import cp_model

from ..models import Participant, Round, SearchOptions
from .combinations import session_pool

logger = logging.getLogger(__name__)


def _status_str(s: object) -> str:
    """Convert a CP-SAT solver status value to a readable string."""
    mapping = {
        int(cp_model.OPTIMAL):       "OPTIMAL",
        int(cp_model.FEASIBLE):      "FEASIBLE",
        int(cp_model.INFEASIBLE):    "INFEASIBLE",
        int(cp_model.MODEL_INVALID): "MODEL_INVALID",
    }
    return mapping.get(int(s), "UNKNOWN")  # type: ignore[call-overload]


@dataclass
class StaffingReport:
    status:      str
    diagnostics: List[str]                  = field(default_factory=list)
    # session id -> participant ids of one witness assignment
    assignment:  Dict[str, List[str]]       = field(default_factory=dict)

    @property
    def infeasible(self) -> bool:
        return self.status == "INFEASIBLE"


def check_staffing(rounds: Sequence[Round], participants: Sequence[Participant],
                   options: SearchOptions) -> StaffingReport:
    diagnostics: List[str] = []
    model = cp_model.CpModel()

    y: Dict[Tuple[str, str], cp_model.IntVar] = {}
    u: Dict[Tuple[int, str], cp_model.IntVar] = {}

    for rnd in rounds:
        for session in rnd.sessions:
            pool = session_pool(session, participants, options)
            if len(pool) < session.required_count:
                diagnostics.append(
                    f"Session '{session.id}' needs {session.required_count} "
                    f"participant(s) but only {len(pool)} are eligible."
                )
                continue
            for p in pool:
                y[session.id, p.id] = model.new_bool_var(f"y_{session.id}_{p.id}")
                if (rnd.index, p.id) not in u:
                    u[rnd.index, p.id] = model.new_bool_var(f"u_r{rnd.index}_{p.id}")
                model.add(y[session.id, p.id] <= u[rnd.index, p.id])
            model.add(sum(y[session.id, p.id] for p in pool) == session.required_count)

    if diagnostics:
        logger.debug("Staffing precheck: %d session(s) short of eligible participants",
                     len(diagnostics))
        return StaffingReport(status="INFEASIBLE", diagnostics=diagnostics)

    # Nobody serves in two rounds
    for p in participants:
        served = [u[r.index, p.id] for r in rounds if (r.index, p.id) in u]
        if len(served) > 1:
            model.add(sum(served) <= 1)

    solver = cp_model.CpSolver()
    solver.parameters.max_time_in_seconds = options.solver.staffing_time_limit
    solver.parameters.num_workers         = options.solver.num_workers
    status = _status_str(solver.solve(model))

    report = StaffingReport(status=status, diagnostics=diagnostics)
    if status in ("OPTIMAL", "FEASIBLE"):
        for (sid, pid), var in y.items():
            if solver.value(var) == 1:
                report.assignment.setdefault(sid, []).append(pid)
    elif status == "INFEASIBLE":
        report.diagnostics.append(
            "No way to staff every round with distinct participants per round."
        )
    logger.debug("Staffing precheck over %d round(s): %s", len(rounds), status)
    return report
