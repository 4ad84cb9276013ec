#!/usr/bin/env python3
"""Ensure the score tables exist and echo the DDL for reference."""

import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from clubscore.db import SCHEMA_STATEMENTS, open_store
from clubscore.local_store import SCHEMA_STATEMENTS as SQLITE_SCHEMA_STATEMENTS
from clubscore.local_store import sqlite_path
from clubscore.settings import load_settings


def main() -> None:
    settings = load_settings()
    open_store(settings.database_url).ensure_schema()
    db_path = sqlite_path(settings.database_url)
    if db_path:
        print("SQLite schema ensured.")
        print(f"Database file: {db_path}")
        statements = SQLITE_SCHEMA_STATEMENTS
    else:
        print("PostgreSQL schema ensured.")
        print(f"Database url: {settings.database_url}")
        statements = SCHEMA_STATEMENTS

    print("\nSchema DDL dump:")
    for statement in statements:
        print(statement.strip())


if __name__ == "__main__":
    main()
