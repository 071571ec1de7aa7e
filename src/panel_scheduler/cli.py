"""
Command-line interface for the interview panel scheduler.

Usage examples:
    python -m panel_scheduler.cli --config data/sample.json
    python -m panel_scheduler.cli --config data/sample.json --out result.json
    python -m panel_scheduler.cli --config data/sample.json --date 2024-02-06
    python -m panel_scheduler.cli --config data/sample.json --mode multi --time-limit 5

Exit codes:
    0  at least one slot combination / plan found
    1  bad arguments, unreadable config, or precheck found blocking errors
    2  no slots found (the search may also have been truncated)
"""

from __future__ import annotations

import argparse
import logging
import sys

from panel_scheduler.errors import SchedulingError
from panel_scheduler.io_json import ConfigError, load_config, save_result
from panel_scheduler.models import Combination
from panel_scheduler.solver.api import MODES, find_slots, find_slots_for_date
from panel_scheduler.solver.precheck import precheck
from panel_scheduler.solver.ranking import density_summary


def _print_combination(combo: Combination, indent: str = "  ") -> None:
    print(f"{indent}{combo.date}  {combo.start[11:16]}–{combo.end[11:16]} UTC  "
          f"({combo.total_duration} min)  load: {density_summary(combo.load_density)}")
    for slot in combo.slots:
        names = ", ".join(a.name + (" (trainee)" if a.is_trainee else "")
                          for a in slot.participants)
        print(f"{indent}  [{slot.start[11:16]}–{slot.end[11:16]}]  {slot.session_name}  |  {names}")


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Interview panel scheduler — command-line mode",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "examples:\n"
            "  panel-schedule --config data/sample.json\n"
            "  panel-schedule --config cfg.json --out result.json --mode multi\n"
        ),
    )
    parser.add_argument("--config", required=True, metavar="FILE",
                        help="path to the scheduling config JSON")
    parser.add_argument("--out",    default=None,  metavar="FILE",
                        help="write result JSON to this path (optional)")
    parser.add_argument("--mode", default="auto", choices=list(MODES),
                        help="auto picks multi-day when a break spans a day (default: auto)")
    parser.add_argument("--date", default=None, metavar="YYYY-MM-DD",
                        help="search this single date instead of the config's date range")
    parser.add_argument("--max-results", type=int, default=None, metavar="N",
                        help="override options.max_results (0 = no cap)")
    parser.add_argument("--time-limit", type=float, default=None, metavar="SECONDS",
                        help="stop the search after this many seconds")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="log search progress to stderr")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # ── 1. load config ────────────────────────────────────────────────────────
    try:
        cfg = load_config(args.config)
    except FileNotFoundError:
        print(f"[ERROR] File not found: {args.config}", file=sys.stderr)
        sys.exit(1)
    except (ConfigError, ValueError) as e:
        print(f"[ERROR] Could not load config: {e}", file=sys.stderr)
        sys.exit(1)

    if args.max_results is not None:
        cfg.options.max_results = args.max_results
    if args.time_limit is not None:
        cfg.options.solver.max_time_in_seconds = args.time_limit

    # ── 2. precheck — catch unsearchable input before the search starts ──────
    if args.date is None:
        errors, warnings = precheck(cfg)
        for w in warnings:
            print(f"[WARNING] {w}")
        if errors:
            print(
                f"\n[ERROR] {len(errors)} precheck error(s) found — "
                "no search can run until these are fixed:\n",
                file=sys.stderr,
            )
            for i, err in enumerate(errors, 1):
                print(f"  {i}. {err}", file=sys.stderr)
            sys.exit(1)

    # ── 3. search ─────────────────────────────────────────────────────────────
    print(f"Searching ({args.mode})…")
    try:
        if args.date is not None:
            result = find_slots_for_date(cfg, args.date)
        else:
            result = find_slots(cfg, args.mode)
    except SchedulingError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        sys.exit(1)

    # ── 4. print summary ──────────────────────────────────────────────────────
    print(f"\nStatus    : {result.status}")
    print(f"Mode      : {result.mode}")
    for k, v in result.stats.items():
        print(f"  {k}: {v}")
    for d in result.diagnostics:
        print(f"[DIAG] {d}")

    if result.mode == "multi":
        print(f"\nPlans ({len(result.plans)}):")
        for n, plan in enumerate(result.plans, 1):
            print(f"  #{n}  {plan.total_rounds} round(s), "
                  f"{len(plan.all_participants)} participant(s)")
            for rnd in plan.rounds:
                _print_combination(rnd.combination, indent="    ")
    else:
        print(f"\nCombinations ({len(result.combinations)}):")
        for combo in result.combinations:
            _print_combination(combo)

    # ── 5. write output file (optional) ──────────────────────────────────────
    if args.out:
        save_result(result, args.out)
        print(f"\nResult written to: {args.out}")

    sys.exit(0 if result.count else 2)


if __name__ == "__main__":
    main()
