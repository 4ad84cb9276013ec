import pytest

from clubscore.local_store import SqliteStore


@pytest.fixture
def store(tmp_path):
    local = SqliteStore(tmp_path / "scores.db")
    local.ensure_schema()
    return local


@pytest.fixture
def team_event(store):
    event_id = store.create_event("Autumn Cup", event_type="team", scoring_mode="ryder_cup")
    for name in ("Jane Doe", "Li Wei"):
        store.register_member(event_id, store.add_member(name))
    return event_id
