#!/usr/bin/env python3
"""Dump an event's scores and standings as JSON."""

import argparse
import json
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from clubscore.db import open_store
from clubscore.importer import event_team_aggregate, is_match_play
from clubscore.persistence import score_entry_progress
from clubscore.settings import load_settings
from clubscore.strokeplay import order_leaderboard


def export_summary(store, event_id: int) -> dict:
    event = store.fetch_event(event_id)
    if not event:
        raise SystemExit(f"Event {event_id} does not exist.")
    summary = {
        "event": event,
        "progress": score_entry_progress(store, event_id),
        "leaderboard": order_leaderboard(store.fetch_event_scores(event_id)),
    }
    if is_match_play(event):
        summary["team_aggregate"] = event_team_aggregate(store, event)
    return summary


def main() -> None:
    parser = argparse.ArgumentParser(description="Export an event's scores and standings.")
    parser.add_argument("event_id", type=int, help="Event to export.")
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        help="Path to write the JSON export (defaults to stdout).",
    )
    args = parser.parse_args()

    store = open_store(load_settings().database_url)
    payload = json.dumps(export_summary(store, args.event_id), default=str, ensure_ascii=False, indent=2)

    if args.output:
        args.output.write_text(payload, encoding="utf-8")
        print(f"Summary saved to {args.output}")
    else:
        print(payload)


if __name__ == "__main__":
    main()
