"""SQLite-backed score store so the importer can run without Postgres."""

from __future__ import annotations

import json
import sqlite3
from pathlib import Path

from clubscore.resolver import Participant

SCORE_COLUMNS = (
    "total_strokes",
    "net_strokes",
    "handicap",
    "hole_scores",
    "group_number",
    "team_name",
    "rank",
    "notes",
)
SCHEMA_STATEMENTS = (
    """
    CREATE TABLE IF NOT EXISTS events (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        title TEXT NOT NULL,
        event_type TEXT NOT NULL DEFAULT 'individual',
        scoring_mode TEXT NOT NULL DEFAULT 'total_strokes',
        par TEXT,
        team_name_mapping TEXT,
        team_colors TEXT,
        created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS members (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        display_name TEXT NOT NULL,
        email TEXT
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS event_registrations (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        event_id INTEGER NOT NULL REFERENCES events(id),
        member_id INTEGER NOT NULL REFERENCES members(id),
        status TEXT NOT NULL DEFAULT 'registered',
        UNIQUE (event_id, member_id)
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS scores (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        event_id INTEGER NOT NULL REFERENCES events(id),
        user_id INTEGER NOT NULL REFERENCES members(id),
        total_strokes INTEGER NOT NULL,
        net_strokes REAL,
        handicap INTEGER NOT NULL DEFAULT 0,
        hole_scores TEXT,
        group_number INTEGER,
        team_name TEXT,
        rank INTEGER,
        notes TEXT,
        updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
        UNIQUE (event_id, user_id)
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS guest_scores (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        event_id INTEGER NOT NULL REFERENCES events(id),
        guest_name TEXT NOT NULL,
        total_strokes INTEGER NOT NULL,
        net_strokes REAL,
        handicap INTEGER NOT NULL DEFAULT 0,
        hole_scores TEXT,
        group_number INTEGER,
        team_name TEXT,
        rank INTEGER,
        notes TEXT,
        updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
        UNIQUE (event_id, guest_name)
    );
    """,
)


def sqlite_path(database_url: str) -> Path | None:
    for prefix in ("sqlite:///", "sqlite://", "sqlite:"):
        if database_url.startswith(prefix):
            return Path(database_url[len(prefix):]).resolve()
    return None


def _load_json(value):
    return json.loads(value) if value else None


def _dump_json(value):
    return json.dumps(value, ensure_ascii=False) if value is not None else None


def _event_from_row(row: sqlite3.Row) -> dict:
    return {
        "id": row["id"],
        "title": row["title"],
        "event_type": row["event_type"],
        "scoring_mode": row["scoring_mode"],
        "par": _load_json(row["par"]),
        "team_name_mapping": _load_json(row["team_name_mapping"]) or {},
        "team_colors": _load_json(row["team_colors"]) or {},
    }


def _score_from_row(row: sqlite3.Row) -> dict:
    return {
        "id": row["id"],
        "event_id": row["event_id"],
        "participant_kind": row["participant_kind"],
        "member_id": str(row["member_id"]) if row["member_id"] is not None else None,
        "participant_name": row["participant_name"],
        "total_strokes": row["total_strokes"],
        "net_strokes": row["net_strokes"],
        "handicap": row["handicap"],
        "hole_scores": _load_json(row["hole_scores"]),
        "group_number": row["group_number"],
        "team_name": row["team_name"],
        "rank": row["rank"],
        "notes": row["notes"],
    }


def _score_values(record: dict) -> dict:
    values = {column: record[column] for column in SCORE_COLUMNS if column in record}
    if "hole_scores" in values:
        values["hole_scores"] = _dump_json(values["hole_scores"])
    return values


class SqliteStore:
    def __init__(self, path: Path | str):
        self.path = Path(path)

    def _connect(self) -> sqlite3.Connection:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    def ensure_schema(self) -> None:
        with self._connect() as conn:
            for statement in SCHEMA_STATEMENTS:
                conn.execute(statement)

    def create_event(
        self,
        title: str,
        event_type: str = "individual",
        scoring_mode: str = "total_strokes",
    ) -> int:
        with self._connect() as conn:
            cursor = conn.execute(
                "INSERT INTO events (title, event_type, scoring_mode) VALUES (?, ?, ?);",
                (title, event_type, scoring_mode),
            )
            return cursor.lastrowid

    def fetch_events(self) -> list[dict]:
        with self._connect() as conn:
            rows = conn.execute("SELECT * FROM events ORDER BY created_at DESC, id DESC;").fetchall()
        return [_event_from_row(row) for row in rows]

    def fetch_event(self, event_id: int) -> dict | None:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM events WHERE id = ?;", (event_id,)).fetchone()
        return _event_from_row(row) if row else None

    def update_event_metadata(
        self,
        event_id: int,
        par: list[int] | None,
        team_name_mapping: dict[str, str],
        team_colors: dict[str, str],
    ) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                UPDATE events
                SET par = ?, team_name_mapping = ?, team_colors = ?
                WHERE id = ?;
                """,
                (_dump_json(par), _dump_json(team_name_mapping), _dump_json(team_colors), event_id),
            )

    def add_member(self, display_name: str, email: str | None = None) -> int:
        with self._connect() as conn:
            cursor = conn.execute(
                "INSERT INTO members (display_name, email) VALUES (?, ?);",
                (display_name, email),
            )
            return cursor.lastrowid

    def register_member(self, event_id: int, member_id: int | str) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT OR IGNORE INTO event_registrations (event_id, member_id)
                VALUES (?, ?);
                """,
                (event_id, int(member_id)),
            )

    def fetch_event_roster(self, event_id: int) -> list[dict]:
        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT m.id, m.display_name
                FROM event_registrations r
                JOIN members m ON m.id = r.member_id
                WHERE r.event_id = ? AND r.status != 'cancelled'
                ORDER BY r.id;
                """,
                (event_id,),
            ).fetchall()
        return [{"id": str(row["id"]), "display_name": row["display_name"]} for row in rows]

    def find_score(self, event_id: int, participant: Participant) -> int | None:
        with self._connect() as conn:
            if participant.is_guest:
                row = conn.execute(
                    "SELECT id FROM guest_scores WHERE event_id = ? AND guest_name = ?;",
                    (event_id, participant.display_name),
                ).fetchone()
            else:
                row = conn.execute(
                    "SELECT id FROM scores WHERE event_id = ? AND user_id = ?;",
                    (event_id, int(participant.member_id)),
                ).fetchone()
        return row["id"] if row else None

    def insert_score(self, event_id: int, participant: Participant, record: dict) -> int:
        values = _score_values(record)
        if participant.is_guest:
            table, identity_column, identity = "guest_scores", "guest_name", participant.display_name
        else:
            table, identity_column, identity = "scores", "user_id", int(participant.member_id)
        columns = ["event_id", identity_column, *values]
        placeholders = ", ".join("?" for _ in columns)
        with self._connect() as conn:
            cursor = conn.execute(
                f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders});",
                (event_id, identity, *values.values()),
            )
            return cursor.lastrowid

    def update_score(self, score_id: int, participant: Participant, record: dict) -> None:
        values = _score_values(record)
        table = "guest_scores" if participant.is_guest else "scores"
        assignments = ", ".join(f"{column} = ?" for column in values)
        with self._connect() as conn:
            conn.execute(
                f"""
                UPDATE {table}
                SET {assignments}, updated_at = CURRENT_TIMESTAMP
                WHERE id = ?;
                """,
                (*values.values(), score_id),
            )

    def fetch_event_scores(self, event_id: int) -> list[dict]:
        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT s.id, s.event_id, 'member' AS participant_kind, s.user_id AS member_id,
                       m.display_name AS participant_name, s.total_strokes, s.net_strokes,
                       s.handicap, s.hole_scores, s.group_number, s.team_name, s.rank, s.notes
                FROM scores s
                JOIN members m ON m.id = s.user_id
                WHERE s.event_id = ?
                UNION ALL
                SELECT g.id, g.event_id, 'guest', NULL, g.guest_name, g.total_strokes,
                       g.net_strokes, g.handicap, g.hole_scores, g.group_number, g.team_name,
                       g.rank, g.notes
                FROM guest_scores g
                WHERE g.event_id = ?
                ORDER BY 6, 5;
                """,
                (event_id, event_id),
            ).fetchall()
        return [_score_from_row(row) for row in rows]

    def count_registrations(self, event_id: int) -> int:
        with self._connect() as conn:
            row = conn.execute(
                """
                SELECT count(*) FROM event_registrations
                WHERE event_id = ? AND status != 'cancelled';
                """,
                (event_id,),
            ).fetchone()
        return row[0]

    def count_member_scores(self, event_id: int) -> int:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT count(DISTINCT user_id) FROM scores WHERE event_id = ?;",
                (event_id,),
            ).fetchone()
        return row[0]
