"""Print saved runs, newest first.

Usage:
  python scripts/show_history.py
  python scripts/show_history.py --db runs.db
"""

from __future__ import annotations

import argparse

from run_scout.geo.calculations import format_time
from run_scout.history.recorder import RunHistoryRecorder
from run_scout.history.store import SQLiteKeyValueStore


def main() -> None:
    ap = argparse.ArgumentParser(description="List saved runs")
    ap.add_argument("--db", default="run_scout.db", help="SQLite history file")
    args = ap.parse_args()

    store = SQLiteKeyValueStore(args.db)
    try:
        entries = RunHistoryRecorder(store).load()
    finally:
        store.close()

    if not entries:
        print("No runs saved yet.")
        return

    print(f"{'date':<24}  {'place':<28}  {'km':>6}  {'time':>6}  {'pace':>6}")
    print("-" * 78)
    for e in entries:
        m = e.metrics
        print(
            f"{e.date:<24}  {e.place_name[:28]:<28}  {m.distance_km:>6.2f}  "
            f"{format_time(m.elapsed_time_seconds):>6}  {m.current_pace:>6}"
        )


if __name__ == "__main__":
    main()
