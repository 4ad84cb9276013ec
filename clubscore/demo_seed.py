from __future__ import annotations

DEMO_EVENT_TITLE = "Club Ryder Cup"
DEMO_ROSTER = ("Jane Doe", "Li Wei", "Tom Baker", "Wang Fang")


def ensure_demo_event(store) -> int:
    """Create the demo team event with a small registered roster, once."""
    existing = next(
        (
            event
            for event in store.fetch_events()
            if (event.get("title") or "").strip().lower() == DEMO_EVENT_TITLE.lower()
        ),
        None,
    )
    if existing:
        return existing["id"]
    event_id = store.create_event(DEMO_EVENT_TITLE, event_type="team", scoring_mode="ryder_cup")
    for name in DEMO_ROSTER:
        member_id = store.add_member(name)
        store.register_member(event_id, member_id)
    return event_id
