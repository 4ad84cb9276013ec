"""Read spreadsheet exports into rows of strings.

Scoring devices export either a native ``.xlsx`` workbook or delimited text.
Only the first tab of a workbook is read; every cell comes back as a stripped
string so the layout detector never has to care about cell types. Rows end at
their last non-empty cell, the way the exporting apps write them.
"""

from __future__ import annotations

import csv
import io
import logging
import re
import zipfile
from xml.etree import ElementTree as ET

from clubscore.layout import ScorecardParseError

logger = logging.getLogger(__name__)

NS = "{http://schemas.openxmlformats.org/spreadsheetml/2006/main}"
REL_NS = "{http://schemas.openxmlformats.org/officeDocument/2006/relationships}"
PKG_REL_NS = "{http://schemas.openxmlformats.org/package/2006/relationships}"
WORKBOOK_SUFFIXES = (".xlsx", ".xlsm")
TEXT_SUFFIXES = (".csv", ".tsv", ".txt")
CELL_REF_RE = re.compile(r"^([A-Z]+)(\d+)$")


def _column_index(letters: str) -> int:
    index = 0
    for char in letters:
        index = index * 26 + (ord(char) - ord("A") + 1)
    return index - 1


def _render_number(raw: str) -> str:
    try:
        number = float(raw)
    except ValueError:
        return raw
    if number.is_integer():
        return str(int(number))
    return raw


def _trim_trailing(cells: list[str]) -> list[str]:
    """Drop trailing blank cells so each row is only as wide as its content."""
    while cells and not cells[-1]:
        cells.pop()
    return cells


def _first_sheet_name(workbook: zipfile.ZipFile) -> str:
    """Return the part name of the first tab listed in ``xl/workbook.xml``."""
    names = set(workbook.namelist())
    if "xl/workbook.xml" in names and "xl/_rels/workbook.xml.rels" in names:
        book = ET.fromstring(workbook.read("xl/workbook.xml"))
        first = book.find(f"{NS}sheets/{NS}sheet")
        rel_id = first.get(f"{REL_NS}id") if first is not None else None
        rels = ET.fromstring(workbook.read("xl/_rels/workbook.xml.rels"))
        for rel in rels.findall(f"{PKG_REL_NS}Relationship"):
            if rel_id and rel.get("Id") == rel_id:
                target = rel.get("Target") or ""
                part = target.lstrip("/") if target.startswith("/") else f"xl/{target}"
                if part in names:
                    return part
                break
        logger.warning("workbook.xml does not point at a worksheet part, guessing from file names")

    sheets = sorted(
        name
        for name in names
        if name.startswith("xl/worksheets/sheet") and name.endswith(".xml")
    )
    if "xl/worksheets/sheet1.xml" in sheets:
        return "xl/worksheets/sheet1.xml"
    if not sheets:
        raise ScorecardParseError("Workbook has no worksheets.")
    return sheets[0]


def _shared_strings(workbook: zipfile.ZipFile) -> list[str]:
    try:
        shared_xml = workbook.read("xl/sharedStrings.xml")
    except KeyError:
        return []
    shared = ET.fromstring(shared_xml)
    return [
        "".join(text.text or "" for text in item.iter() if text.tag.endswith("}t"))
        for item in shared.findall(f".//{NS}si")
    ]


def read_workbook(content: bytes) -> list[list[str]]:
    try:
        with zipfile.ZipFile(io.BytesIO(content)) as workbook:
            sheet_xml = workbook.read(_first_sheet_name(workbook))
            shared_strings = _shared_strings(workbook)
    except (KeyError, zipfile.BadZipFile, ET.ParseError) as exc:
        raise ScorecardParseError(f"Unreadable workbook: {exc}") from exc

    try:
        sheet = ET.fromstring(sheet_xml)
    except ET.ParseError as exc:
        raise ScorecardParseError(f"Unreadable worksheet: {exc}") from exc

    values: dict[tuple[int, int], str] = {}
    for cell in sheet.findall(f".//{NS}c"):
        match = CELL_REF_RE.match(cell.get("r") or "")
        if not match:
            continue
        row_index = int(match.group(2)) - 1
        col_index = _column_index(match.group(1))
        cell_type = cell.get("t")
        if cell_type == "inlineStr":
            value = "".join(
                text.text or "" for text in cell.iter() if text.tag.endswith("}t")
            )
        else:
            value_node = cell.find(f"{NS}v")
            if value_node is None:
                continue
            raw = value_node.text or ""
            if cell_type == "s":
                try:
                    value = shared_strings[int(raw)]
                except (IndexError, ValueError):
                    continue
            elif cell_type in ("str", "b", "e"):
                value = raw
            else:
                value = _render_number(raw)
        values[(row_index, col_index)] = value.strip()

    if not values:
        return []
    cells_by_row: dict[int, dict[int, str]] = {}
    for (row, col), value in values.items():
        cells_by_row.setdefault(row, {})[col] = value
    height = max(cells_by_row) + 1
    grid: list[list[str]] = []
    for row in range(height):
        cells = cells_by_row.get(row, {})
        width = max(cells) + 1 if cells else 0
        grid.append(_trim_trailing([cells.get(col, "") for col in range(width)]))
    return grid


def _decode_text(content: bytes) -> str:
    for encoding in ("utf-8-sig", "gb18030"):
        try:
            return content.decode(encoding)
        except UnicodeDecodeError:
            continue
    raise ScorecardParseError("Text export is neither UTF-8 nor GB18030 encoded.")


def read_delimited(content: bytes) -> list[list[str]]:
    text = _decode_text(content)
    if not text.strip():
        return []
    try:
        dialect = csv.Sniffer().sniff(text[:4096], delimiters=",\t;")
        delimiter = dialect.delimiter
    except csv.Error:
        delimiter = "\t" if "\t" in text.splitlines()[0] else ","
    reader = csv.reader(io.StringIO(text), delimiter=delimiter)
    return [_trim_trailing([cell.strip() for cell in row]) for row in reader]


def read_table(filename: str, content: bytes) -> list[list[str]]:
    """Return the rows of an uploaded export, dispatching on the file suffix."""
    lowered = (filename or "").lower()
    if lowered.endswith(WORKBOOK_SUFFIXES):
        rows = read_workbook(content)
    elif lowered.endswith(TEXT_SUFFIXES):
        rows = read_delimited(content)
    else:
        raise ScorecardParseError(f"Unsupported file type: {filename or 'unnamed upload'}")
    logger.debug("Read %d rows from %s", len(rows), filename)
    return rows
