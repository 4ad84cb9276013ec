from clubscore.resolver import GUEST, MEMBER, RosterIndex

ROSTER = [
    {"id": "1", "display_name": "Jane Doe"},
    {"id": "2", "display_name": " Li Wei "},
    {"id": "3", "display_name": "Jane Doe"},
]


def test_exact_name_resolves_member():
    participant = RosterIndex(ROSTER).resolve("Li Wei")
    assert participant.kind == MEMBER
    assert participant.member_id == "2"
    assert participant.display_name == "Li Wei"


def test_whitespace_is_trimmed_but_case_matters():
    index = RosterIndex(ROSTER)
    assert index.resolve("  Li Wei").member_id == "2"
    unmatched = index.resolve("li wei")
    assert unmatched.kind == GUEST
    assert unmatched.display_name == "li wei"


def test_unknown_name_becomes_guest():
    participant = RosterIndex(ROSTER).resolve(" Walk In ")
    assert participant.is_guest
    assert participant.display_name == "Walk In"
    assert participant.key == (GUEST, "Walk In")


def test_duplicate_display_names_are_flagged():
    index = RosterIndex(ROSTER)
    assert index.ambiguous_names == ["Jane Doe"]
    assert index.resolve("Jane Doe").member_id == "1"


def test_overrides_pick_member_or_force_guest():
    index = RosterIndex(ROSTER, overrides={"Jane Doe": "3", "Li Wei": None, "JD": "1"})
    assert index.resolve("Jane Doe").member_id == "3"
    assert index.resolve("Li Wei").is_guest
    assert index.resolve("JD").member_id == "1"
    assert index.resolve("JD").display_name == "Jane Doe"


def test_override_to_unknown_member_falls_back_to_lookup():
    index = RosterIndex(ROSTER, overrides={"Li Wei": "99"})
    assert index.resolve("Li Wei").member_id == "2"


def test_preview_buckets():
    preview = RosterIndex(ROSTER).preview(["Jane Doe", "Guest One", "Li Wei", "Guest One"])
    assert preview["members"] == ["Jane Doe", "Li Wei"]
    assert preview["guests"] == ["Guest One"]
    assert preview["ambiguous"] == ["Jane Doe"]
