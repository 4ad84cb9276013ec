#!/usr/bin/env python3
"""Import a scorecard export for an event from the command line."""

import argparse
import json
import logging
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from clubscore.db import open_store
from clubscore.importer import EventNotFoundError, ImportSession
from clubscore.layout import ScorecardParseError
from clubscore.settings import TOKEN_MODES, load_settings


def _print_preview(preview: dict) -> None:
    print(f"PAR ({preview['par_source']}): {' '.join(str(value) for value in preview['par'])}")
    for row in preview["rows"]:
        team = row["team_name"] or "-"
        print(
            f"  G{row['group_number']:<3} {row['name']:<20} {team:<10} "
            f"{row['total_strokes']:>4}  {' '.join(row['hole_diffs_raw'])}"
        )
    for skipped in preview["skipped"]:
        print(f"  skipped row {skipped['row_number']}: {skipped['name']} ({skipped['reason']})")
    participants = preview["participants"]
    if participants["guests"]:
        print(f"Guests: {', '.join(participants['guests'])}")
    if participants["ambiguous"]:
        print(f"Ambiguous roster names: {', '.join(participants['ambiguous'])}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Parse a scorecard export and save it for an event.")
    parser.add_argument("event_id", type=int, help="Event to import scores into.")
    parser.add_argument("path", type=Path, help="Spreadsheet (.xlsx) or delimited text export.")
    parser.add_argument(
        "--mode",
        choices=TOKEN_MODES,
        help="How bare numerals are read: diffs from par or stroke counts.",
    )
    parser.add_argument(
        "--commit",
        action="store_true",
        help="Save the parsed scores. Without it only the preview is printed.",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Log parser details.")
    args = parser.parse_args()

    settings = load_settings()
    logging.basicConfig(level=logging.DEBUG if args.verbose else settings.log_level)

    try:
        session = ImportSession(
            open_store(settings.database_url),
            args.event_id,
            mode=args.mode or settings.token_mode,
        )
        session.load(args.path.name, args.path.read_bytes())
    except (EventNotFoundError, ScorecardParseError) as exc:
        raise SystemExit(str(exc))

    _print_preview(session.preview())
    if not args.commit:
        session.cancel()
        print("Preview only; re-run with --commit to save.")
        return

    report = session.commit()
    print(json.dumps(report, ensure_ascii=False, indent=2))


if __name__ == "__main__":
    main()
