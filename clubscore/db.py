from typing import Optional

import psycopg
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from clubscore.local_store import SCORE_COLUMNS, SqliteStore, sqlite_path
from clubscore.resolver import Participant

SCHEMA_STATEMENTS = (
    """
    create table if not exists events (
        id serial primary key,
        title text not null,
        event_type text not null default 'individual',
        scoring_mode text not null default 'total_strokes',
        par jsonb,
        team_name_mapping jsonb,
        team_colors jsonb,
        created_at timestamptz not null default now()
    );
    """,
    """
    create table if not exists members (
        id serial primary key,
        display_name text not null,
        email text
    );
    """,
    """
    create table if not exists event_registrations (
        id serial primary key,
        event_id integer not null references events(id),
        member_id integer not null references members(id),
        status text not null default 'registered',
        unique (event_id, member_id)
    );
    """,
    """
    create table if not exists scores (
        id serial primary key,
        event_id integer not null references events(id),
        user_id integer not null references members(id),
        total_strokes integer not null,
        net_strokes numeric,
        handicap integer not null default 0,
        hole_scores integer[],
        group_number integer,
        team_name text,
        rank integer,
        notes text,
        updated_at timestamptz not null default now(),
        unique (event_id, user_id)
    );
    """,
    """
    create table if not exists guest_scores (
        id serial primary key,
        event_id integer not null references events(id),
        guest_name text not null,
        total_strokes integer not null,
        net_strokes numeric,
        handicap integer not null default 0,
        hole_scores integer[],
        group_number integer,
        team_name text,
        rank integer,
        notes text,
        updated_at timestamptz not null default now(),
        unique (event_id, guest_name)
    );
    """,
)


def _jsonb(value):
    return Jsonb(value) if value is not None else None


def _event_from_row(row: dict) -> dict:
    return {
        "id": row["id"],
        "title": row["title"],
        "event_type": row["event_type"],
        "scoring_mode": row["scoring_mode"],
        "par": row["par"],
        "team_name_mapping": row["team_name_mapping"] or {},
        "team_colors": row["team_colors"] or {},
    }


def _score_from_row(row: dict) -> dict:
    net = row["net_strokes"]
    return {
        **row,
        "member_id": str(row["member_id"]) if row["member_id"] is not None else None,
        "net_strokes": float(net) if net is not None else None,
        "hole_scores": list(row["hole_scores"]) if row["hole_scores"] is not None else None,
    }


class PostgresStore:
    def __init__(self, database_url: str):
        self.database_url = database_url

    def _connect(self) -> psycopg.Connection:
        return psycopg.connect(self.database_url, row_factory=dict_row)

    def ensure_schema(self) -> None:
        with self._connect() as conn:
            with conn.cursor() as cur:
                for statement in SCHEMA_STATEMENTS:
                    cur.execute(statement)

    def create_event(
        self,
        title: str,
        event_type: str = "individual",
        scoring_mode: str = "total_strokes",
    ) -> int:
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    insert into events (title, event_type, scoring_mode)
                    values (%s, %s, %s)
                    returning id;
                    """,
                    (title, event_type, scoring_mode),
                )
                return cur.fetchone()["id"]

    def fetch_events(self) -> list[dict]:
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute("select * from events order by created_at desc, id desc;")
                return [_event_from_row(row) for row in cur.fetchall()]

    def fetch_event(self, event_id: int) -> Optional[dict]:
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute("select * from events where id = %s;", (event_id,))
                row = cur.fetchone()
                return _event_from_row(row) if row else None

    def update_event_metadata(
        self,
        event_id: int,
        par: list[int] | None,
        team_name_mapping: dict[str, str],
        team_colors: dict[str, str],
    ) -> None:
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    update events
                    set par = %s,
                        team_name_mapping = %s,
                        team_colors = %s
                    where id = %s;
                    """,
                    (_jsonb(par), _jsonb(team_name_mapping), _jsonb(team_colors), event_id),
                )

    def add_member(self, display_name: str, email: str | None = None) -> int:
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    insert into members (display_name, email)
                    values (%s, %s)
                    returning id;
                    """,
                    (display_name, email),
                )
                return cur.fetchone()["id"]

    def register_member(self, event_id: int, member_id: int | str) -> None:
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    insert into event_registrations (event_id, member_id)
                    values (%s, %s)
                    on conflict (event_id, member_id) do nothing;
                    """,
                    (event_id, int(member_id)),
                )

    def fetch_event_roster(self, event_id: int) -> list[dict]:
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    select m.id, m.display_name
                    from event_registrations r
                    join members m on m.id = r.member_id
                    where r.event_id = %s and r.status <> 'cancelled'
                    order by r.id;
                    """,
                    (event_id,),
                )
                return [
                    {"id": str(row["id"]), "display_name": row["display_name"]}
                    for row in cur.fetchall()
                ]

    def find_score(self, event_id: int, participant: Participant) -> Optional[int]:
        with self._connect() as conn:
            with conn.cursor() as cur:
                if participant.is_guest:
                    cur.execute(
                        "select id from guest_scores where event_id = %s and guest_name = %s;",
                        (event_id, participant.display_name),
                    )
                else:
                    cur.execute(
                        "select id from scores where event_id = %s and user_id = %s;",
                        (event_id, int(participant.member_id)),
                    )
                row = cur.fetchone()
                return row["id"] if row else None

    def insert_score(self, event_id: int, participant: Participant, record: dict) -> int:
        values = {column: record[column] for column in SCORE_COLUMNS if column in record}
        if participant.is_guest:
            table, identity_column, identity = "guest_scores", "guest_name", participant.display_name
        else:
            table, identity_column, identity = "scores", "user_id", int(participant.member_id)
        columns = ["event_id", identity_column, *values]
        placeholders = ", ".join("%s" for _ in columns)
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    f"insert into {table} ({', '.join(columns)}) values ({placeholders}) returning id;",
                    (event_id, identity, *values.values()),
                )
                return cur.fetchone()["id"]

    def update_score(self, score_id: int, participant: Participant, record: dict) -> None:
        values = {column: record[column] for column in SCORE_COLUMNS if column in record}
        table = "guest_scores" if participant.is_guest else "scores"
        assignments = ", ".join(f"{column} = %s" for column in values)
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    f"""
                    update {table}
                    set {assignments},
                        updated_at = now()
                    where id = %s;
                    """,
                    (*values.values(), score_id),
                )

    def fetch_event_scores(self, event_id: int) -> list[dict]:
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    select
                        s.id,
                        s.event_id,
                        'member' as participant_kind,
                        s.user_id as member_id,
                        m.display_name as participant_name,
                        s.total_strokes,
                        s.net_strokes,
                        s.handicap,
                        s.hole_scores,
                        s.group_number,
                        s.team_name,
                        s.rank,
                        s.notes
                    from scores s
                    join members m on m.id = s.user_id
                    where s.event_id = %s
                    union all
                    select
                        g.id,
                        g.event_id,
                        'guest',
                        null,
                        g.guest_name,
                        g.total_strokes,
                        g.net_strokes,
                        g.handicap,
                        g.hole_scores,
                        g.group_number,
                        g.team_name,
                        g.rank,
                        g.notes
                    from guest_scores g
                    where g.event_id = %s
                    order by total_strokes, participant_name;
                    """,
                    (event_id, event_id),
                )
                return [_score_from_row(row) for row in cur.fetchall()]

    def count_registrations(self, event_id: int) -> int:
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    select count(*) as total
                    from event_registrations
                    where event_id = %s and status <> 'cancelled';
                    """,
                    (event_id,),
                )
                return cur.fetchone()["total"]

    def count_member_scores(self, event_id: int) -> int:
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "select count(distinct user_id) as total from scores where event_id = %s;",
                    (event_id,),
                )
                return cur.fetchone()["total"]


def open_store(database_url: str):
    """Pick the store implementation for a configured database url."""
    path = sqlite_path(database_url)
    if path is not None:
        return SqliteStore(path)
    return PostgresStore(database_url)
