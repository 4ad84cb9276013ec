"""Locate the HOLE/PAR/data rows and the score columns inside an export.

Scoring apps do not agree on a schema: some put a ``HOLE`` header and a
``PAR`` row above the players, some insert front-9/back-9 subtotal columns,
and the trailing total/net/group/team columns come in English or Chinese.
``detect_layout`` turns any of those into a ``LayoutDescriptor`` or raises
``ScorecardParseError`` when the file cannot be a scorecard at all.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Sequence

logger = logging.getLogger(__name__)

HOLE_COUNT = 18
DEFAULT_PAR: tuple[int, ...] = (4, 4, 3, 5, 4, 4, 3, 4, 5, 4, 4, 3, 5, 4, 4, 3, 4, 5)
HEADER_MIN_COLUMNS = 20
HEADER_KEYWORDS = (
    "total strokes",
    "net strokes",
    "group",
    "team",
    "总杆",
    "净杆",
    "分组",
    "团体",
)
# Order matters: a "net strokes" header must not be taken for total strokes.
COLUMN_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("total_diff", ("总差", "difference", "diff", "+/-")),
    ("net_strokes", ("净杆", "net")),
    ("total_strokes", ("总杆", "total", "strokes", "gross")),
    ("group", ("分组", "group")),
    ("team", ("团体", "team", "对抗")),
)
FRONT_NINE_MARKERS = ("前9", "front 9", "front9")
SUBTOTAL_CELLS = ("out", "in", "前9", "后9", "front 9", "back 9")
INT_RE = re.compile(r"^[+-]?\d+(?:\.0+)?$")


class ScorecardParseError(ValueError):
    """The file cannot be read as a scorecard; nothing from it may be imported."""


@dataclass(frozen=True)
class LayoutDescriptor:
    header_row: int | None
    par_row: int | None
    data_start: int
    hole1_start: int
    hole10_start: int
    total_strokes_col: int
    net_strokes_col: int
    group_col: int
    team_col: int
    total_diff_col: int | None
    par: tuple[int, ...]
    par_source: str

    @property
    def front_nine_columns(self) -> list[int]:
        return list(range(self.hole1_start, self.hole1_start + 9))

    @property
    def back_nine_columns(self) -> list[int]:
        return list(range(self.hole10_start, self.hole10_start + 9))

    @property
    def hole_columns(self) -> list[int]:
        return self.front_nine_columns + self.back_nine_columns


def parse_int(value: str | None) -> int | None:
    text = (value or "").strip()
    if not INT_RE.match(text):
        return None
    return int(float(text))


def first_cell(row: Sequence[str]) -> str:
    return row[0].strip() if row else ""


def _filled_width(row: Sequence[str]) -> int:
    for index in range(len(row) - 1, -1, -1):
        if row[index].strip():
            return index + 1
    return 0


def _looks_like_hole_numbers(row: Sequence[str]) -> bool:
    if len(row) < 3:
        return False
    first, second = row[1].strip(), row[2].strip()
    if not (first.isdigit() and second.isdigit()):
        return False
    return int(second) == int(first) + 1


def find_header_row(rows: Sequence[Sequence[str]]) -> int | None:
    for index, row in enumerate(rows):
        if first_cell(row).upper() == "HOLE":
            return index
    for index, row in enumerate(rows):
        if _filled_width(row) < HEADER_MIN_COLUMNS:
            continue
        joined = " ".join(cell.strip().lower() for cell in row)
        if any(keyword in joined for keyword in HEADER_KEYWORDS):
            return index
        if _looks_like_hole_numbers(row):
            return index
    return None


def _hole_one_start(header: Sequence[str]) -> int:
    for index, cell in enumerate(header):
        if cell.strip().upper() == "HOLE":
            return index + 1
    return 1


def _hole_ten_start(header: Sequence[str], hole1_start: int) -> int:
    for index in range(hole1_start + 9, len(header)):
        cell = header[index].strip()
        lowered = cell.lower()
        if cell == "10":
            return index
        if any(marker in lowered for marker in FRONT_NINE_MARKERS) or lowered == "out":
            return index + 1
    return hole1_start + 10


def _keyword_columns(header: Sequence[str], skip: set[int]) -> dict[str, int]:
    found: dict[str, int] = {}
    for index, cell in enumerate(header):
        if index in skip:
            continue
        lowered = cell.strip().lower()
        if not lowered or lowered in SUBTOTAL_CELLS:
            continue
        for category, keywords in COLUMN_KEYWORDS:
            if category in found:
                continue
            if any(keyword in lowered for keyword in keywords):
                found[category] = index
                break
    return found


def _resolve_par(
    par_row: Sequence[str] | None,
    hole_columns: list[int],
    stored_par: Sequence[int] | None,
) -> tuple[tuple[int, ...], str]:
    fallback = list(stored_par) if stored_par and len(stored_par) == HOLE_COUNT else None
    if par_row is None:
        if fallback:
            return tuple(fallback), "event"
        return DEFAULT_PAR, "default"

    values: list[int | None] = []
    for column in hole_columns:
        value = parse_int(par_row[column]) if column < len(par_row) else None
        values.append(value if value and value > 0 else None)
    if fallback:
        values = [value if value is not None else fallback[idx] for idx, value in enumerate(values)]
    missing = [idx + 1 for idx, value in enumerate(values) if value is None]
    if missing:
        holes = ", ".join(str(hole) for hole in missing)
        raise ScorecardParseError(f"PAR row has no usable value for hole(s) {holes}.")
    return tuple(int(value) for value in values), "sheet"


def detect_layout(
    rows: Sequence[Sequence[str]],
    stored_par: Sequence[int] | None = None,
) -> LayoutDescriptor:
    if not rows or not any(cell.strip() for row in rows for cell in row):
        raise ScorecardParseError("The file contains no cells.")

    header_index = find_header_row(rows)
    header: Sequence[str] = rows[header_index] if header_index is not None else ()

    par_index = None
    if header_index is not None and header_index + 1 < len(rows):
        if first_cell(rows[header_index + 1]).upper() == "PAR":
            par_index = header_index + 1

    if par_index is not None:
        data_start = par_index + 1
    elif header_index is not None:
        data_start = header_index + 1
    else:
        data_start = 1

    hole1_start = _hole_one_start(header)
    hole10_start = _hole_ten_start(header, hole1_start)
    back_end = hole10_start + 9
    if max(len(row) for row in rows) < back_end:
        raise ScorecardParseError("No row is wide enough to hold 18 holes of scores.")

    skip = {0, *range(hole1_start, back_end)}
    columns = _keyword_columns(header, skip)
    par, par_source = _resolve_par(
        rows[par_index] if par_index is not None else None,
        list(range(hole1_start, hole1_start + 9)) + list(range(hole10_start, back_end)),
        stored_par,
    )

    layout = LayoutDescriptor(
        header_row=header_index,
        par_row=par_index,
        data_start=data_start,
        hole1_start=hole1_start,
        hole10_start=hole10_start,
        total_strokes_col=columns.get("total_strokes", back_end + 1),
        net_strokes_col=columns.get("net_strokes", back_end + 2),
        group_col=columns.get("group", back_end + 3),
        team_col=columns.get("team", back_end + 4),
        total_diff_col=columns.get("total_diff"),
        par=par,
        par_source=par_source,
    )
    logger.debug("Detected scorecard layout %s", layout)
    return layout
