#!/usr/bin/env python3
"""Create the demo team event and its registered roster."""

import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from clubscore.db import open_store
from clubscore.demo_seed import ensure_demo_event
from clubscore.settings import load_settings


def main() -> None:
    store = open_store(load_settings().database_url)
    store.ensure_schema()
    event_id = ensure_demo_event(store)
    print(f"Demo event ready with id {event_id}.")


if __name__ == "__main__":
    main()
