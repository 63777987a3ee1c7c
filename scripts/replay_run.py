"""Replay a recorded GPS track through a run session and save it to history.

Usage:
  python scripts/replay_run.py track.csv
  python scripts/replay_run.py track.csv --db runs.db --place "Ibirapuera Park"

The CSV needs ``seconds,latitude,longitude`` columns; ``seconds`` is the
offset of each fix from the start of the run.
"""

from __future__ import annotations

import argparse
import csv
import logging

from run_scout.geo.calculations import format_time
from run_scout.geo.models import Coordinate
from run_scout.history.recorder import RunHistoryRecorder
from run_scout.history.store import SQLiteKeyValueStore
from run_scout.tracking.position import PushPositionSource
from run_scout.tracking.session import RunSessionTracker
from run_scout.tracking.timer import ManualTicker


def _read_fixes(path: str) -> list[tuple[int, Coordinate]]:
    with open(path, newline="", encoding="utf-8") as fh:
        rows = [
            (int(float(row["seconds"])), Coordinate(float(row["latitude"]), float(row["longitude"])))
            for row in csv.DictReader(fh)
        ]
    return sorted(rows, key=lambda r: r[0])


def main() -> None:
    ap = argparse.ArgumentParser(description="Replay a GPS track as a run")
    ap.add_argument("csv", help="CSV file with seconds,latitude,longitude columns")
    ap.add_argument("--db", default="run_scout.db", help="SQLite history file")
    ap.add_argument("--place", default=None, help="Destination name to record")
    ap.add_argument("-v", "--verbose", action="store_true", help="Log discarded fixes")
    args = ap.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    fixes = _read_fixes(args.csv)
    store = SQLiteKeyValueStore(args.db)
    source = PushPositionSource()
    ticker = ManualTicker()
    tracker = RunSessionTracker(source, RunHistoryRecorder(store), ticker=ticker)

    print(f"{'time':>6}  {'km':>7}  {'pace':>6}  fix")
    print("-" * 48)

    try:
        with tracker:
            tracker.start(args.place)
            clock = 0
            for seconds, fix in fixes:
                ticker.fire(max(0, seconds - clock))
                clock = max(clock, seconds)
                source.push(fix)
                m = tracker.metrics
                print(
                    f"{format_time(m.elapsed_time_seconds):>6}  {m.distance_km:>7.3f}  "
                    f"{m.current_pace:>6}  ({fix.latitude:.5f}, {fix.longitude:.5f})"
                )
            final = tracker.stop()
    finally:
        store.close()

    if final is None:
        return
    print(
        f"\nDistance {final.distance_km:.2f} km, time {format_time(final.elapsed_time_seconds)}, "
        f"pace {final.current_pace}/km, {len(final.path)} points"
    )
    entry = tracker.last_entry
    print(f"Saved as {entry.id} ({entry.place_name})" if entry else "Not saved.")


if __name__ == "__main__":
    main()
