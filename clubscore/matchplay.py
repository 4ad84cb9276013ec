"""Ryder-Cup style best-ball match play over persisted 18-hole scores.

Within a group every team plays its best ball: the lowest actual stroke count
among its players on each hole. The team (or teams) with the lowest best ball
share the hole's single point. Points are kept as exact fractions so three-way
splits do not drift when groups are compared; the displayed "holes won" figure
is rounded half up and that rounded figure is what the event standings add up.
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from fractions import Fraction
from typing import Iterable, Mapping

from clubscore.layout import HOLE_COUNT

logger = logging.getLogger(__name__)

TIE = "tie"


def _valid_stroke(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def is_eligible(score: Mapping) -> bool:
    holes = score.get("hole_scores")
    return (
        score.get("group_number") is not None
        and bool((score.get("team_name") or "").strip())
        and isinstance(holes, (list, tuple))
        and len(holes) == HOLE_COUNT
    )


def round_half_up(value: Fraction) -> int:
    return math.floor(value + Fraction(1, 2))


def hole_points(best_by_team: Mapping[str, int]) -> dict[str, Fraction]:
    """Split one point between the teams tied on the lowest best ball."""
    if not best_by_team:
        return {}
    winning_score = min(best_by_team.values())
    winners = [team for team, score in best_by_team.items() if score == winning_score]
    share = Fraction(1, len(winners))
    return {team: (share if team in winners else Fraction(0)) for team in best_by_team}


def _partition_by_team(scores: Iterable[Mapping]) -> dict[str, list[Mapping]]:
    teams: dict[str, list[Mapping]] = {}
    for score in scores:
        teams.setdefault(score["team_name"].strip(), []).append(score)
    return teams


def _best_ball(players: list[Mapping], hole: int) -> int | None:
    values = [
        player["hole_scores"][hole]
        for player in players
        if _valid_stroke(player["hole_scores"][hole])
    ]
    return min(values) if values else None


def compute_group_outcome(group_number: int, scores: Iterable[Mapping]) -> dict:
    teams = _partition_by_team(scores)
    points = {team: Fraction(0) for team in teams}
    holes: list[dict] = []
    for hole in range(HOLE_COUNT):
        best: dict[str, int] = {}
        for team, players in teams.items():
            value = _best_ball(players, hole)
            if value is not None:
                best[team] = value
        awarded = hole_points(best)
        for team, share in awarded.items():
            points[team] += share
        holes.append(
            {
                "hole": hole + 1,
                "best": best,
                "points": {team: float(share) for team, share in awarded.items()},
            }
        )

    winner = TIE
    if points:
        top = max(points.values())
        leaders = [team for team, value in points.items() if value == top]
        if len(leaders) == 1:
            winner = leaders[0]

    return {
        "group": group_number,
        "teams": [
            {
                "team_name": team,
                "points": float(points[team]),
                "holes_won": round_half_up(points[team]),
                "player_count": len(players),
            }
            for team, players in teams.items()
        ],
        "winner": winner,
        "holes": holes,
    }


def compute_event_match_play(
    scores: Iterable[Mapping],
    team_name_mapping: Mapping[str, str] | None = None,
    team_colors: Mapping[str, str] | None = None,
) -> dict:
    """Per-group outcomes plus event standings from the rounded group totals."""
    mapping = team_name_mapping or {}
    colors = team_colors or {}
    groups: dict[int, list[Mapping]] = defaultdict(list)
    excluded = 0
    for score in scores:
        if not is_eligible(score):
            excluded += 1
            continue
        groups[int(score["group_number"])].append(score)

    per_group: list[dict] = []
    totals: dict[str, int] = {}
    for group_number in sorted(groups):
        outcome = compute_group_outcome(group_number, groups[group_number])
        for team in outcome["teams"]:
            totals[team["team_name"]] = totals.get(team["team_name"], 0) + team["holes_won"]
        per_group.append(outcome)

    total_scores = [
        {
            "team_name": team,
            "display_name": mapping.get(team, team),
            "color": colors.get(team),
            "score": score,
        }
        for team, score in sorted(totals.items(), key=lambda item: (-item[1], item[0]))
    ]
    if excluded:
        logger.info("Match play: %d score(s) lack group/team/hole data and were left out", excluded)
    return {
        "total_scores": total_scores,
        "per_group": per_group,
        "excluded_count": excluded,
    }
