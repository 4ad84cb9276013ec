from __future__ import annotations

import math


def derive_handicap(total_strokes: int | None, net_strokes: float | None) -> int:
    """Gross minus net, rounded half up; 0 when no net score was supplied."""
    if total_strokes is None or net_strokes is None:
        return 0
    return math.floor(total_strokes - net_strokes + 0.5)


def _stroke_key(score: dict) -> tuple:
    net = score.get("net_strokes")
    return (
        score.get("total_strokes") if score.get("total_strokes") is not None else math.inf,
        net if net is not None else math.inf,
    )


def rank_stroke_play(scores: list[dict]) -> list[dict]:
    """Sort by total then net strokes and attach competition positions (1, 1, 3)."""
    ordered = sorted(scores, key=lambda entry: (*_stroke_key(entry), entry.get("participant_name") or ""))
    ranked: list[dict] = []
    previous_key = None
    position = 0
    for index, score in enumerate(ordered, start=1):
        key = _stroke_key(score)
        if key != previous_key:
            position = index
            previous_key = key
        ranked.append({**score, "position": position})
    return ranked


def order_leaderboard(scores: list[dict]) -> list[dict]:
    """Stored ranks come first, unranked scores follow by stroke order."""
    ranked = rank_stroke_play(scores)
    return sorted(
        ranked,
        key=lambda entry: (
            entry.get("rank") is None,
            entry.get("rank") or 0,
            entry["position"],
            entry.get("participant_name") or "",
        ),
    )
