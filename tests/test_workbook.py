import io
import zipfile

import pytest

from clubscore.layout import ScorecardParseError
from clubscore.scorecard import parse_scorecard
from clubscore.workbook import read_table

NS = "http://schemas.openxmlformats.org/spreadsheetml/2006/main"


def _xlsx(sheet_rows: str, shared: list[str]) -> bytes:
    shared_xml = "".join(f"<si><t>{text}</t></si>" for text in shared)
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as workbook:
        workbook.writestr(
            "xl/worksheets/sheet1.xml",
            f'<worksheet xmlns="{NS}"><sheetData>{sheet_rows}</sheetData></worksheet>',
        )
        workbook.writestr("xl/sharedStrings.xml", f'<sst xmlns="{NS}">{shared_xml}</sst>')
    return buffer.getvalue()


def test_reads_first_sheet_into_rows():
    rows = (
        '<row r="1"><c r="A1" t="s"><v>0</v></c><c r="C1"><v>4.0</v></c></row>'
        '<row r="3"><c r="A3" t="s"><v>1</v></c><c r="B3"><v>-1</v></c>'
        '<c r="AA3" t="inlineStr"><is><t>RED</t></is></c></row>'
    )
    grid = read_table("card.xlsx", _xlsx(rows, ["HOLE", "Jane Doe"]))
    assert grid[0] == ["HOLE", "", "4"]
    assert grid[1] == []
    assert len(grid[2]) == 27
    assert grid[2][:2] == ["Jane Doe", "-1"]
    assert grid[2][26] == "RED"


def _inline_row(number, cells):
    xml = "".join(
        f'<c r="{chr(ord("A") + index)}{number}" t="inlineStr"><is><t>{value}</t></is></c>'
        for index, value in enumerate(cells)
        if value != ""
    )
    return f'<row r="{number}">{xml}</row>'


def test_title_row_above_chinese_header_stays_a_title():
    header = ["姓名", *[str(number) for number in range(1, 19)], "总杆", "净杆", "分组", "团体"]
    rows = (
        _inline_row(1, ["2024 秋季团体赛"])
        + _inline_row(2, header)
        + _inline_row(3, ["张三", *["0"] * 18, "72", "70", "1", "红队"])
    )
    grid = read_table("card.xlsx", _xlsx(rows, []))
    assert [len(row) for row in grid] == [1, 23, 23]

    scorecard = parse_scorecard(grid)
    assert scorecard.layout.header_row == 1
    assert scorecard.layout.group_col == 21
    assert scorecard.skipped == []
    (player,) = scorecard.rows
    assert player.name == "张三"
    assert player.group_number == 1
    assert player.team_name == "红队"
    assert player.total_strokes == 72


def test_first_tab_is_taken_from_workbook_xml():
    rel_ns = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
    pkg_ns = "http://schemas.openxmlformats.org/package/2006/relationships"
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as workbook:
        workbook.writestr(
            "xl/workbook.xml",
            f'<workbook xmlns="{NS}" xmlns:r="{rel_ns}"><sheets>'
            '<sheet name="Scores" sheetId="2" r:id="rId7"/>'
            '<sheet name="Notes" sheetId="1" r:id="rId1"/>'
            "</sheets></workbook>",
        )
        workbook.writestr(
            "xl/_rels/workbook.xml.rels",
            f'<Relationships xmlns="{pkg_ns}">'
            '<Relationship Id="rId1" Target="worksheets/sheet1.xml"/>'
            '<Relationship Id="rId7" Target="/xl/worksheets/sheet2.xml"/>'
            "</Relationships>",
        )
        workbook.writestr(
            "xl/worksheets/sheet1.xml",
            f'<worksheet xmlns="{NS}"><sheetData>{_inline_row(1, ["notes"])}</sheetData></worksheet>',
        )
        workbook.writestr(
            "xl/worksheets/sheet2.xml",
            f'<worksheet xmlns="{NS}"><sheetData>{_inline_row(1, ["HOLE", "1"])}</sheetData></worksheet>',
        )
    assert read_table("card.xlsx", buffer.getvalue()) == [["HOLE", "1"]]


def test_trailing_blank_cells_are_dropped_from_text_rows():
    content = "HOLE,1,2,,\nJane Doe,0,,,\n".encode("utf-8")
    assert read_table("card.csv", content) == [["HOLE", "1", "2"], ["Jane Doe", "0"]]


def test_reads_csv_with_bom():
    content = "\ufeffHOLE,1,2\nJane Doe,+1,0\n".encode("utf-8")
    assert read_table("card.csv", content) == [["HOLE", "1", "2"], ["Jane Doe", "+1", "0"]]


def test_reads_tab_separated_gb18030_text():
    content = "HOLE\t1\t2\n张三\t0\t-1\n".encode("gb18030")
    assert read_table("card.txt", content) == [["HOLE", "1", "2"], ["张三", "0", "-1"]]


def test_rejects_unknown_file_types():
    with pytest.raises(ScorecardParseError):
        read_table("card.pdf", b"%PDF-1.4")


def test_rejects_corrupt_workbooks():
    with pytest.raises(ScorecardParseError):
        read_table("card.xlsx", b"not a zip file")
