#!/usr/bin/env python3
"""
Mitigation Scenario Sweep.

Trains (or loads) the concentration model once, then predicts every
combination of mitigation tactic and time increment and reports how
much each tactic reduces the total and peak predicted concentration
relative to no mitigation.

Usage:
    python experiments/run_scenario_sweep.py
    python experiments/run_scenario_sweep.py --data my_level3.csv --step 5 --seed 42
    python experiments/run_scenario_sweep.py --synthetic --csv sweep.csv
"""

import sys
import os
import argparse
import logging
import time

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pandas as pd

import config
from data.interfaces import MockDataProvider
from data.model_store import DirectoryModelStore, MemoryModelStore
from models.mitigation import TACTICS
from prediction.session import PredictionSession

LOGGER = logging.getLogger(__name__)

BASELINE_TACTIC = "none"


def build_session(args) -> PredictionSession:
    """Create a session with data loaded and the model ready.

    Raises:
        SystemExit: If the data or model stage fails.
    """
    store = MemoryModelStore() if args.no_cache else DirectoryModelStore(args.cache_dir)
    session = PredictionSession(store=store, seed=args.seed)

    if args.synthetic:
        status = session.set_observations(MockDataProvider(seed=args.seed).get_observations())
    else:
        status = session.load_data(args.data)
    print(status.message)
    if not status.ok:
        raise SystemExit(1)

    def _on_epoch_end(epoch, total, loss):
        if not args.quiet:
            print(f"  epoch {epoch:>3}/{total}  loss {loss:.4f}")

    t0 = time.time()
    status = session.retrain(_on_epoch_end) if args.retrain else session.ensure_model(_on_epoch_end)
    print(f"{status.message} ({time.time() - t0:.1f}s)")
    if not session.model.is_ready:
        raise SystemExit(1)
    return session


def reduction_pct(total: float, baseline_total) -> float:
    """Percent reduction of *total* against the unmitigated total.

    NaN when there is no baseline; 0 when the baseline is not positive.
    """
    if baseline_total is None:
        return float("nan")
    if baseline_total <= 0:
        return 0.0
    return 100.0 * (1.0 - total / baseline_total)


def _predict(session: PredictionSession, base_year: int, elapsed: float, tactic_id: str, step: float, label: str):
    result, status = session.predict(base_year, elapsed, tactic_id, step_degrees=step)
    if not status.ok or result is None:
        LOGGER.error("Scenario %s / %s failed: %s", tactic_id, label, status.message)
        return None
    return result


def run_sweep(session: PredictionSession, base_year: int, step: float, verbose: bool = True) -> list:
    """Predict every (tactic, increment) pair.

    Returns:
        List of dicts with tactic, increment, target_year, points,
        total, peak and reduction_pct (total vs. no mitigation at the
        same increment, NaN if that baseline scenario failed).
    """
    rows = []
    for label, elapsed in config.TIME_INCREMENTS.items():
        baseline = _predict(session, base_year, elapsed, BASELINE_TACTIC, step, label)
        baseline_total = None
        if baseline is not None:
            baseline_total = sum(p.adjusted_value for p in baseline.points)
        if verbose:
            print(f"\n{'='*70}")
            print(f"{label}  (target year {base_year + elapsed:.2f})")
            print(f"{'='*70}")
            print(f"  {'Tactic':<18}  {'Points':>7}  {'Total':>14}  {'Peak':>12}  {'Reduction':>9}")
            print(f"  {'-'*18}  {'-'*7}  {'-'*14}  {'-'*12}  {'-'*9}")

        for tactic_id in TACTICS:
            if tactic_id == BASELINE_TACTIC:
                result = baseline
            else:
                result = _predict(session, base_year, elapsed, tactic_id, step, label)
            if result is None:
                continue
            total = sum(p.adjusted_value for p in result.points)
            reduction = reduction_pct(total, baseline_total)

            rows.append({
                "tactic": tactic_id,
                "increment": label,
                "target_year": result.target_year,
                "points": len(result.points),
                "total": total,
                "peak": result.max_adjusted_value,
                "reduction_pct": reduction,
            })
            if verbose:
                print(
                    f"  {tactic_id:<18}  {len(result.points):>7}  {total:>14.1f}  "
                    f"{result.max_adjusted_value:>12.1f}  {reduction:>8.1f}%"
                )
    return rows


def print_summary(rows: list):
    """Print the most effective tactic at each increment."""
    print(f"\n\n{'='*70}")
    print("SCENARIO SWEEP SUMMARY")
    print(f"{'='*70}")

    frame = pd.DataFrame(rows)
    if frame.empty:
        print("  No scenarios completed.")
        return
    for label, group in frame.groupby("increment", sort=False):
        group = group.dropna(subset=["reduction_pct"])
        if group.empty:
            print(f"  {label:<16} no baseline, reductions unavailable")
            continue
        best = group.loc[group["reduction_pct"].idxmax()]
        print(f"  {label:<16} best: {best['tactic']:<18} ({best['reduction_pct']:.1f}% reduction)")


def main():
    parser = argparse.ArgumentParser(description="Mitigation Scenario Sweep")
    parser.add_argument("--data", default=config.SAMPLE_OBSERVATIONS_PATH, help="Level 3 CSV to train on")
    parser.add_argument("--synthetic", action="store_true", help="Train on synthetic observations")
    parser.add_argument("--year", type=int, default=config.DEFAULT_YEAR, help="Base year")
    parser.add_argument("--step", type=float, default=config.GRID_STEP_DEG, help="Grid step (degrees)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for training")
    parser.add_argument("--cache-dir", default=config.MODEL_CACHE_DIR, help="Model cache directory")
    parser.add_argument("--no-cache", action="store_true", help="Keep the model in memory only")
    parser.add_argument("--retrain", action="store_true", help="Ignore any cached model")
    parser.add_argument("--csv", default=None, help="Write results to this CSV file")
    parser.add_argument("--quiet", action="store_true", help="Suppress per-scenario output")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format=config.LOG_FORMAT,
    )

    print("Scenario Sweep")
    print(f"Base year: {args.year}, Grid step: {args.step} deg, Seed: {args.seed}")
    print(f"Tactics: {list(TACTICS)}")

    session = build_session(args)
    try:
        rows = run_sweep(session, args.year, args.step, verbose=not args.quiet)
    finally:
        session.dispose()

    print_summary(rows)
    if args.csv:
        pd.DataFrame(rows).to_csv(args.csv, index=False)
        print(f"\nWrote {len(rows)} rows to {args.csv}")


if __name__ == "__main__":
    main()
