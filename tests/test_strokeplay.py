from clubscore.strokeplay import derive_handicap, order_leaderboard, rank_stroke_play


def test_handicap_is_rounded_gross_minus_net():
    assert derive_handicap(85, 72.4) == 13
    assert derive_handicap(85, 72.5) == 13
    assert derive_handicap(85, 73) == 12
    assert derive_handicap(85, None) == 0


def test_rank_by_total_then_net():
    scores = [
        {"participant_name": "C", "total_strokes": 80, "net_strokes": None},
        {"participant_name": "A", "total_strokes": 78, "net_strokes": 70},
        {"participant_name": "B", "total_strokes": 78, "net_strokes": 68},
        {"participant_name": "D", "total_strokes": 80, "net_strokes": None},
    ]
    ranked = rank_stroke_play(scores)
    assert [entry["participant_name"] for entry in ranked] == ["B", "A", "C", "D"]
    assert [entry["position"] for entry in ranked] == [1, 2, 3, 3]


def test_stored_ranks_lead_the_leaderboard():
    scores = [
        {"participant_name": "A", "total_strokes": 70, "net_strokes": None, "rank": None},
        {"participant_name": "B", "total_strokes": 75, "net_strokes": None, "rank": 2},
        {"participant_name": "C", "total_strokes": 78, "net_strokes": None, "rank": 1},
    ]
    ordered = order_leaderboard(scores)
    assert [entry["participant_name"] for entry in ordered] == ["C", "B", "A"]
