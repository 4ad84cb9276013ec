"""Create-or-update one score row per (event, participant)."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Iterable, Mapping, Sequence

from clubscore.layout import HOLE_COUNT
from clubscore.metadata import EventMetadata, merge_event_metadata
from clubscore.resolver import Participant, RosterIndex
from clubscore.scorecard import ParsedPlayerRow
from clubscore.strokeplay import derive_handicap

logger = logging.getLogger(__name__)


@dataclass
class ImportSummary:
    success_count: int = 0
    failed_count: int = 0
    errors: list[str] = field(default_factory=list)
    guest_count: int = 0
    created_count: int = 0
    updated_count: int = 0

    def record_failure(self, name: str, reason: str) -> None:
        self.failed_count += 1
        self.errors.append(f"{name}: {reason}")

    def to_dict(self) -> dict:
        return asdict(self)


def complete_hole_scores(values: Sequence | None) -> list[int] | None:
    """Return the 18 actual stroke counts, or None unless every hole is present."""
    if not values or len(values) != HOLE_COUNT:
        return None
    if not all(isinstance(value, int) and value > 0 for value in values):
        return None
    return list(values)


def build_score_record(row: ParsedPlayerRow) -> dict:
    return {
        "total_strokes": row.total_strokes,
        "net_strokes": row.net_strokes,
        "handicap": derive_handicap(row.total_strokes, row.net_strokes),
        "hole_scores": complete_hole_scores(row.actual_strokes),
        "group_number": row.group_number,
        "team_name": row.team_name,
    }


def upsert_score(store, event_id: int, participant: Participant, record: dict) -> tuple[int, bool]:
    existing_id = store.find_score(event_id, participant)
    if existing_id:
        store.update_score(existing_id, participant, record)
        return existing_id, False
    return store.insert_score(event_id, participant, record), True


def import_scores(
    store,
    event_id: int,
    rows: Iterable[ParsedPlayerRow],
    roster: RosterIndex,
) -> ImportSummary:
    """Persist every row, isolating failures per player."""
    summary = ImportSummary()
    resolved: dict[str, Participant] = {}
    guests: set[str] = set()
    for row in rows:
        name = row.name.strip()
        try:
            participant = resolved.get(name)
            if participant is None:
                participant = resolved[name] = roster.resolve(name)
            _, created = upsert_score(store, event_id, participant, build_score_record(row))
        except Exception as exc:  # noqa: BLE001
            # One bad row must not abort the rest of the batch.
            logger.warning("Could not save score for %s: %s", name, exc)
            summary.record_failure(name, str(exc))
            continue
        summary.success_count += 1
        if created:
            summary.created_count += 1
        else:
            summary.updated_count += 1
        if participant.is_guest:
            guests.add(participant.display_name)
    summary.guest_count = len(guests)
    logger.info(
        "Event %s import: %d saved (%d new, %d updated), %d failed",
        event_id,
        summary.success_count,
        summary.created_count,
        summary.updated_count,
        summary.failed_count,
    )
    return summary


def persist_event_metadata(store, event: Mapping, metadata: EventMetadata) -> dict | None:
    if metadata.is_empty:
        return None
    merged = merge_event_metadata(event, metadata)
    store.update_event_metadata(
        event["id"],
        par=merged["par"],
        team_name_mapping=merged["team_name_mapping"],
        team_colors=merged["team_colors"],
    )
    return merged


def save_manual_score(
    store,
    event_id: int,
    participant: Participant,
    *,
    total_strokes: int | None,
    net_strokes: float | None = None,
    handicap: int | None = None,
    rank: int | None = None,
    notes: str | None = None,
    hole_scores: Sequence[int] | None = None,
    group_number: int | None = None,
    team_name: str | None = None,
) -> dict:
    if not total_strokes or total_strokes <= 0:
        raise ValueError("Total strokes are required.")
    record = {
        "total_strokes": total_strokes,
        "net_strokes": net_strokes,
        "handicap": handicap if handicap is not None else derive_handicap(total_strokes, net_strokes),
        "rank": rank,
        "notes": (notes or "").strip() or None,
    }
    if hole_scores is not None:
        record["hole_scores"] = complete_hole_scores(hole_scores)
    if group_number is not None:
        record["group_number"] = group_number
    if team_name is not None:
        record["team_name"] = team_name.strip() or None
    score_id, created = upsert_score(store, event_id, participant, record)
    return {"id": score_id, "created": created}


def score_entry_progress(store, event_id: int) -> dict:
    return {
        "total": store.count_registrations(event_id),
        "entered": store.count_member_scores(event_id),
    }
