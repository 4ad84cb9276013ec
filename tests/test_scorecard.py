import pytest

from clubscore.scorecard import (
    IncompleteRowError,
    build_player_row,
    parse_hole_token,
    parse_scorecard,
)
from scorecard_fixtures import SAMPLE_PAR, HEADER, even_tokens, player_row, sheet


def test_parse_hole_token_forms():
    assert parse_hole_token("+2", 4) == 2
    assert parse_hole_token("-1", 4) == -1
    assert parse_hole_token("0", 4) == 0
    assert parse_hole_token("3", 4) == 3
    assert parse_hole_token(" +1 ", 4) == 1
    assert parse_hole_token("", 4) is None
    assert parse_hole_token("-", 4) is None
    assert parse_hole_token("x", 4) is None


def test_strokes_mode_reads_bare_numerals_as_strokes():
    assert parse_hole_token("5", 4, mode="strokes") == 1
    assert parse_hole_token("3", 4, mode="strokes") == -1
    assert parse_hole_token("+1", 4, mode="strokes") == 1


def test_diff_tokens_derive_actual_strokes():
    tokens = ["+1", "-1"] + ["0"] * 16
    row = build_player_row("Jane Doe", tokens, SAMPLE_PAR)
    assert row.actual_strokes[0] == 5
    assert row.actual_strokes[1] == 2
    assert row.hole_diffs[:2] == [1, -1]
    assert row.hole_diffs_raw[:2] == ["+1", "-1"]
    assert row.total_strokes == sum(SAMPLE_PAR)


def test_incomplete_row_names_player_and_holes():
    tokens = ["0"] * 17
    with pytest.raises(IncompleteRowError) as excinfo:
        build_player_row("Jane Doe", tokens, SAMPLE_PAR, row_number=7)
    assert excinfo.value.missing == [18]
    assert "Jane Doe" in str(excinfo.value)
    assert "row 7" in str(excinfo.value)


def test_non_positive_strokes_count_as_missing():
    tokens = ["-4"] + ["0"] * 17
    with pytest.raises(IncompleteRowError):
        build_player_row("A", tokens, SAMPLE_PAR)


def test_parse_scorecard_reads_players():
    rows = sheet(
        player_row("Jane Doe", ["+1", "-1"] + ["0"] * 16, group="1", team="RED", total="71", net="63.4"),
        player_row("Li Wei", even_tokens(), group="1", team="BLUE"),
    )
    scorecard = parse_scorecard(rows)
    assert scorecard.par == SAMPLE_PAR
    assert scorecard.par_source == "sheet"
    assert [row.name for row in scorecard.rows] == ["Jane Doe", "Li Wei"]
    jane, li = scorecard.rows
    assert jane.total_strokes == 71
    assert jane.net_strokes == 63.4
    assert jane.group_number == 1
    assert jane.team_name == "RED"
    assert jane.row_number == 3
    assert li.total_strokes == sum(SAMPLE_PAR)
    assert li.net_strokes is None
    assert scorecard.team_names == ["RED", "BLUE"]


def test_incomplete_rows_are_skipped_not_parsed():
    rows = sheet(
        player_row("Jane Doe", ["0"] * 17, group="1", team="RED"),
        player_row("Li Wei", even_tokens(), group="1", team="BLUE"),
    )
    scorecard = parse_scorecard(rows)
    assert [row.name for row in scorecard.rows] == ["Li Wei"]
    assert len(scorecard.skipped) == 1
    assert scorecard.skipped[0].name == "Jane Doe"
    assert scorecard.skipped[0].row_number == 3
    assert "18" in scorecard.skipped[0].reason


def test_rows_without_group_are_excluded():
    rows = sheet(
        player_row("Marker", even_tokens(), group="0"),
        player_row("Nobody", even_tokens(), group=""),
        player_row("Jane Doe", even_tokens(), group="2"),
    )
    scorecard = parse_scorecard(rows)
    assert [row.name for row in scorecard.rows] == ["Jane Doe"]
    assert {entry.name for entry in scorecard.skipped} == {"Marker", "Nobody"}


def test_stray_headers_and_captions_are_ignored():
    rows = sheet(
        player_row("Jane Doe", even_tokens()),
        HEADER,
        ["PAR"] + [""] * 24,
        [""] * 25,
        ['"2024-05-01 Autumn Cup"'],
        ["2024/5/1 printed"],
    )
    scorecard = parse_scorecard(rows)
    assert [row.name for row in scorecard.rows] == ["Jane Doe"]
    assert scorecard.skipped == []


def test_strokes_mode_scorecard():
    strokes = [str(value) for value in SAMPLE_PAR]
    strokes[0] = "6"
    scorecard = parse_scorecard(sheet(player_row("A", strokes)), mode="strokes")
    row = scorecard.rows[0]
    assert row.hole_diffs[0] == 2
    assert row.actual_strokes[0] == 6
    assert row.actual_strokes[1:] == SAMPLE_PAR[1:]


def test_preview_dict_shape():
    scorecard = parse_scorecard(sheet(player_row("A", even_tokens(), team="RED")))
    payload = scorecard.to_dict()
    assert payload["par"] == SAMPLE_PAR
    assert payload["rows"][0]["hole_diffs_raw"] == ["0"] * 18
    assert payload["team_names"] == ["RED"]
    assert payload["skipped"] == []
