from clubscore.metadata import (
    FALLBACK_COLORS,
    derive_event_metadata,
    detect_team_color,
    merge_event_metadata,
)
from scorecard_fixtures import SAMPLE_PAR


def test_team_colors_follow_keywords():
    assert detect_team_color("RED") == "#dc2626"
    assert detect_team_color("红队") == "#dc2626"
    assert detect_team_color("Team Blue") == "#2563eb"
    assert detect_team_color("蓝") == "#2563eb"
    assert detect_team_color("Eagles") == FALLBACK_COLORS[0]


def test_derive_assigns_distinct_fallback_colors():
    metadata = derive_event_metadata(["Eagles", "RED", None, "Hawks", "Eagles"], SAMPLE_PAR)
    assert metadata.par == SAMPLE_PAR
    assert metadata.team_names == ["Eagles", "RED", "Hawks"]
    assert metadata.team_name_mapping == {"Eagles": "Eagles", "RED": "RED", "Hawks": "Hawks"}
    assert metadata.team_colors["Eagles"] == FALLBACK_COLORS[0]
    assert metadata.team_colors["Hawks"] == FALLBACK_COLORS[1]


def test_derive_without_par_or_teams_is_empty():
    assert derive_event_metadata([None, ""]).is_empty


def test_merge_keeps_operator_edits_and_replaces_par():
    existing = {
        "par": [4] * 18,
        "team_name_mapping": {"RED": "Red Dragons"},
        "team_colors": {"RED": "#ff0000"},
    }
    merged = merge_event_metadata(existing, derive_event_metadata(["RED", "BLUE"], SAMPLE_PAR))
    assert merged["par"] == SAMPLE_PAR
    assert merged["team_name_mapping"] == {"RED": "Red Dragons", "BLUE": "BLUE"}
    assert merged["team_colors"] == {"RED": "#ff0000", "BLUE": "#2563eb"}


def test_merge_without_new_par_keeps_stored_par():
    existing = {"par": [4] * 18}
    merged = merge_event_metadata(existing, derive_event_metadata(["RED"]))
    assert merged["par"] == [4] * 18
