"""Scorecard import sessions: parse into a preview buffer, then commit.

Nothing is written while a file is parsed or previewed. ``commit`` is the only
step that touches the store, and an abandoned session simply drops its buffer.
"""

from __future__ import annotations

import logging
from typing import Iterable, Mapping, Sequence

from clubscore.layout import HOLE_COUNT
from clubscore.matchplay import compute_event_match_play
from clubscore.metadata import derive_event_metadata
from clubscore.persistence import import_scores, persist_event_metadata
from clubscore.resolver import RosterIndex
from clubscore.scorecard import (
    IncompleteRowError,
    ParsedScorecard,
    build_player_row,
    parse_group_number,
    parse_scorecard,
)
from clubscore.workbook import read_table

logger = logging.getLogger(__name__)

MATCH_PLAY = "ryder_cup"
STROKE_PLAY = "total_strokes"


class EventNotFoundError(LookupError):
    pass


def is_match_play(event: Mapping) -> bool:
    return event.get("scoring_mode") == MATCH_PLAY


def event_team_aggregate(store, event: Mapping) -> dict:
    return compute_event_match_play(
        store.fetch_event_scores(event["id"]),
        team_name_mapping=event.get("team_name_mapping"),
        team_colors=event.get("team_colors"),
    )


class ImportSession:
    def __init__(self, store, event_id: int, mode: str = "diff"):
        event = store.fetch_event(event_id)
        if not event:
            raise EventNotFoundError(f"Event {event_id} does not exist.")
        self.store = store
        self.event = event
        self.mode = mode
        self.overrides: dict[str, str | None] = {}
        self.scorecard: ParsedScorecard | None = None
        self.rejected: list[tuple[str, str]] = []

    @property
    def event_id(self) -> int:
        return self.event["id"]

    def load(self, filename: str, content: bytes) -> ParsedScorecard:
        return self.load_rows(read_table(filename, content))

    def load_rows(self, rows: Sequence[Sequence[str]]) -> ParsedScorecard:
        self.scorecard = parse_scorecard(rows, mode=self.mode, stored_par=self.event.get("par"))
        self.rejected = []
        return self.scorecard

    def load_edited(self, par: Sequence[int], par_source: str, rows: Iterable[Mapping]) -> ParsedScorecard:
        """Rebuild the buffer from preview rows the operator may have edited."""
        if len(par) != HOLE_COUNT:
            raise ValueError(f"PAR must list {HOLE_COUNT} holes.")
        scorecard = ParsedScorecard(par=list(par), par_source=par_source)
        self.rejected = []
        for entry in rows:
            name = (entry.get("name") or "").strip()
            if not name:
                continue
            group_number = parse_group_number(str(entry.get("group_number") or ""))
            # A total the preview derived from the tokens is stale once a token is edited.
            total_strokes = entry.get("total_strokes") if entry.get("total_from_sheet", True) else None
            if group_number is None:
                logger.debug("Edited row %s has no group number, leaving it out", name)
                continue
            try:
                scorecard.rows.append(
                    build_player_row(
                        name,
                        entry.get("hole_diffs_raw") or [],
                        scorecard.par,
                        mode=self.mode,
                        total_strokes=total_strokes,
                        net_strokes=entry.get("net_strokes"),
                        group_number=group_number,
                        team_name=entry.get("team_name"),
                        row_number=entry.get("row_number"),
                    )
                )
            except IncompleteRowError as exc:
                self.rejected.append((name, str(exc)))
        self.scorecard = scorecard
        return scorecard

    def roster(self) -> RosterIndex:
        return RosterIndex(self.store.fetch_event_roster(self.event_id), self.overrides)

    def preview(self) -> dict:
        if self.scorecard is None:
            raise RuntimeError("No scorecard loaded for this session.")
        payload = self.scorecard.to_dict()
        payload["mode"] = self.mode
        payload["participants"] = self.roster().preview(row.name for row in self.scorecard.rows)
        return payload

    def cancel(self) -> None:
        self.scorecard = None
        self.rejected = []

    def commit(self) -> dict:
        if self.scorecard is None:
            raise RuntimeError("No scorecard loaded for this session.")
        scorecard = self.scorecard
        summary = import_scores(self.store, self.event_id, scorecard.rows, self.roster())
        for name, reason in self.rejected:
            summary.record_failure(name, reason)

        if summary.success_count:
            metadata = derive_event_metadata(
                scorecard.team_names,
                scorecard.par if scorecard.par_source == "sheet" else None,
            )
            merged = persist_event_metadata(self.store, self.event, metadata)
            if merged:
                self.event = {**self.event, **merged}

        report = summary.to_dict()
        if is_match_play(self.event):
            report["team_aggregate"] = event_team_aggregate(self.store, self.event)
        self.cancel()
        return report
