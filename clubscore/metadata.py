"""Event-level metadata derived from an import: PAR values and team styling."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Mapping, Sequence

from clubscore.layout import HOLE_COUNT

TEAM_COLOR_KEYWORDS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("red", "红"), "#dc2626"),
    (("blue", "蓝"), "#2563eb"),
    (("green", "绿"), "#16a34a"),
    (("yellow", "gold", "黄", "金"), "#ca8a04"),
    (("orange", "橙"), "#ea580c"),
    (("purple", "紫"), "#9333ea"),
    (("black", "黑"), "#111827"),
    (("white", "白"), "#9ca3af"),
)
FALLBACK_COLORS = ("#0891b2", "#db2777", "#65a30d", "#7c3aed", "#b45309")


@dataclass
class EventMetadata:
    par: list[int] | None = None
    team_names: list[str] = field(default_factory=list)
    team_name_mapping: dict[str, str] = field(default_factory=dict)
    team_colors: dict[str, str] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return self.par is None and not self.team_names


def detect_team_color(team_name: str, fallback_index: int = 0) -> str:
    lowered = team_name.strip().lower()
    for keywords, color in TEAM_COLOR_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return color
    return FALLBACK_COLORS[fallback_index % len(FALLBACK_COLORS)]


def derive_event_metadata(
    team_names: Iterable[str | None],
    par: Sequence[int] | None = None,
) -> EventMetadata:
    """Build the metadata an import would store.

    ``par`` is only passed when the file carried its own PAR row; PAR that
    came from defaults is never written back to the event.
    """
    metadata = EventMetadata(par=list(par) if par and len(par) == HOLE_COUNT else None)
    fallback_index = 0
    for name in team_names:
        team = (name or "").strip()
        if not team or team in metadata.team_names:
            continue
        metadata.team_names.append(team)
        metadata.team_name_mapping[team] = team
        color = detect_team_color(team, fallback_index)
        if color in FALLBACK_COLORS:
            fallback_index += 1
        metadata.team_colors[team] = color
    return metadata


def merge_event_metadata(existing: Mapping, derived: EventMetadata) -> dict:
    """Return the event fields to store after an import.

    PAR supplied by the file replaces the stored PAR. Teams already on the
    event keep their display name and colour; new teams are added.
    """
    par = derived.par if derived.par else existing.get("par")
    mapping = dict(existing.get("team_name_mapping") or {})
    colors = dict(existing.get("team_colors") or {})
    for team in derived.team_names:
        mapping.setdefault(team, derived.team_name_mapping[team])
        colors.setdefault(team, derived.team_colors[team])
    return {"par": par, "team_name_mapping": mapping, "team_colors": colors}
