"""Turn the data rows of a detected layout into per-player scorecards."""

from __future__ import annotations

import logging
import re
from dataclasses import asdict, dataclass, field
from typing import Sequence

from clubscore.layout import (
    HOLE_COUNT,
    LayoutDescriptor,
    detect_layout,
    first_cell,
    parse_int,
)

logger = logging.getLogger(__name__)

MISSING_TOKENS = ("", "-", "--", "—")
MARKER_NAMES = ("HOLE", "PAR")
CAPTION_RE = re.compile(r"^(?:[\"'“”‘’「『]|\d{4}\s*(?:[-/.]\s*\d{1,2}|年))")
NUMBER_RE = re.compile(r"^[+-]?\d+(?:\.\d+)?$")


class IncompleteRowError(ValueError):
    def __init__(self, name: str, missing: list[int], row_number: int | None = None):
        self.name = name
        self.missing = missing
        self.row_number = row_number
        holes = ", ".join(str(hole) for hole in missing)
        where = f" (row {row_number})" if row_number else ""
        super().__init__(f"{name}{where}: missing score for hole(s) {holes}")


@dataclass
class ParsedPlayerRow:
    name: str
    hole_diffs: list[int]
    hole_diffs_raw: list[str]
    actual_strokes: list[int]
    total_strokes: int
    net_strokes: float | None = None
    group_number: int | None = None
    team_name: str | None = None
    row_number: int | None = None
    total_from_sheet: bool = False

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class SkippedRow:
    row_number: int
    name: str
    reason: str


@dataclass
class ParsedScorecard:
    par: list[int]
    par_source: str
    rows: list[ParsedPlayerRow] = field(default_factory=list)
    skipped: list[SkippedRow] = field(default_factory=list)
    layout: LayoutDescriptor | None = None

    @property
    def team_names(self) -> list[str]:
        names: list[str] = []
        for row in self.rows:
            if row.team_name and row.team_name not in names:
                names.append(row.team_name)
        return names

    def to_dict(self) -> dict:
        return {
            "par": list(self.par),
            "par_source": self.par_source,
            "rows": [row.to_dict() for row in self.rows],
            "skipped": [asdict(entry) for entry in self.skipped],
            "team_names": self.team_names,
        }


def _cell(row: Sequence[str], column: int | None) -> str:
    if column is None or column >= len(row):
        return ""
    return row[column].strip()


def parse_number(value: str | None) -> float | None:
    text = (value or "").strip()
    if not NUMBER_RE.match(text):
        return None
    return float(text)


def parse_group_number(value: str | None) -> int | None:
    """Return the group number, or None for 0/blank/garbage (non-participant rows)."""
    number = parse_int(value)
    if not number or number < 0:
        return None
    return number


def parse_hole_token(token: str | None, par: int, mode: str = "diff") -> int | None:
    """Return the score relative to par encoded by ``token``, or None if missing.

    Signed tokens are always diffs. A bare numeral is a diff in ``diff`` mode
    and a raw stroke count in ``strokes`` mode.
    """
    text = (token or "").strip()
    if text in MISSING_TOKENS:
        return None
    value = parse_int(text)
    if value is None:
        return None
    if text[0] in "+-":
        return value
    if mode == "strokes":
        return value - par
    return value


def build_player_row(
    name: str,
    raw_tokens: Sequence[str],
    par: Sequence[int],
    *,
    mode: str = "diff",
    total_strokes: int | None = None,
    net_strokes: float | None = None,
    group_number: int | None = None,
    team_name: str | None = None,
    row_number: int | None = None,
) -> ParsedPlayerRow:
    tokens = [(token or "").strip() for token in raw_tokens][:HOLE_COUNT]
    tokens += [""] * (HOLE_COUNT - len(tokens))
    diffs: list[int] = []
    actual: list[int] = []
    missing: list[int] = []
    for index, token in enumerate(tokens):
        diff = parse_hole_token(token, par[index], mode)
        if diff is None or par[index] + diff <= 0:
            missing.append(index + 1)
            continue
        diffs.append(diff)
        actual.append(par[index] + diff)
    if missing:
        raise IncompleteRowError(name, missing, row_number)

    return ParsedPlayerRow(
        name=name.strip(),
        hole_diffs=diffs,
        hole_diffs_raw=tokens,
        actual_strokes=actual,
        total_strokes=total_strokes if total_strokes else sum(actual),
        net_strokes=net_strokes,
        group_number=group_number,
        team_name=(team_name or "").strip() or None,
        row_number=row_number,
        total_from_sheet=bool(total_strokes),
    )


def _is_marker_row(name: str) -> bool:
    return name.upper() in MARKER_NAMES or bool(CAPTION_RE.match(name))


def parse_scorecard(
    rows: Sequence[Sequence[str]],
    *,
    mode: str = "diff",
    stored_par: Sequence[int] | None = None,
) -> ParsedScorecard:
    layout = detect_layout(rows, stored_par=stored_par)
    par = list(layout.par)
    scorecard = ParsedScorecard(par=par, par_source=layout.par_source, layout=layout)

    for index in range(layout.data_start, len(rows)):
        row = rows[index]
        row_number = index + 1
        name = first_cell(row)
        if not name or _is_marker_row(name):
            continue

        group_number = parse_group_number(_cell(row, layout.group_col))
        if group_number is None:
            scorecard.skipped.append(SkippedRow(row_number, name, "no group number"))
            logger.debug("Row %d (%s) excluded: no group number", row_number, name)
            continue

        try:
            player = build_player_row(
                name,
                [_cell(row, column) for column in layout.hole_columns],
                par,
                mode=mode,
                total_strokes=parse_int(_cell(row, layout.total_strokes_col)),
                net_strokes=parse_number(_cell(row, layout.net_strokes_col)),
                group_number=group_number,
                team_name=_cell(row, layout.team_col),
                row_number=row_number,
            )
        except IncompleteRowError as exc:
            scorecard.skipped.append(SkippedRow(row_number, name, str(exc)))
            logger.debug("Row %d rejected: %s", row_number, exc)
            continue
        scorecard.rows.append(player)

    logger.info(
        "Parsed scorecard: %d players, %d rows skipped, PAR from %s",
        len(scorecard.rows),
        len(scorecard.skipped),
        layout.par_source,
    )
    return scorecard
