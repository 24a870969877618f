import csv
import io as stdio
import json

import pytest
from openpyxl import load_workbook

from shopify_catalog.io import (
    build_csv,
    csv_bytes,
    escape_field,
    format_row,
    read_mappings,
    read_products,
    read_workbook_rows,
    workbook_bytes,
)


@pytest.mark.parametrize("value", [
    "a,b",
    'say "hi"',
    "line1\nline2",
    'all, of "them"\nhere',
    '"',
    ",",
    "\r\n",
])
def test_escaped_fields_reparse_to_original(value):
    line = format_row([value, "tail"])
    parsed = next(csv.reader(stdio.StringIO(line, newline="")))
    assert parsed == [value, "tail"]


def test_plain_fields_are_not_quoted():
    assert escape_field("hello world") == "hello world"
    assert escape_field("") == ""
    assert escape_field(42) == "42"
    assert escape_field(None) == ""


def test_quotes_are_doubled_inside_wrapping_quotes():
    assert escape_field('a "b" c') == '"a ""b"" c"'


def test_header_first_and_lf_join():
    text = build_csv(["A", "B"], [["1", "2"], ["3", "x,y"]])
    assert text == 'A,B\n1,2\n3,"x,y"'


def test_header_only_when_no_rows():
    assert build_csv(["A", "B"], []) == "A,B"


def test_csv_bytes_are_utf8():
    assert csv_bytes(["Name"], [["Café"]]) == "Name\nCafé".encode("utf-8")


def test_workbook_has_products_sheet_with_header_row():
    content = workbook_bytes(["id", "title", "price"], [[1, "Tee", 19.5], [2, "Cap", ""]])
    rows = read_workbook_rows(content)
    assert rows[0] == ["id", "title", "price"]
    assert rows[1] == [1, "Tee", 19.5]
    assert rows[2][:2] == [2, "Cap"]
    assert len(rows) == 3


def test_read_products_accepts_payload_or_list(tmp_path):
    a = tmp_path / "a.json"
    a.write_text(json.dumps({"products": [{"id": 1}, {"id": 2}]}))
    b = tmp_path / "b.json"
    b.write_text(json.dumps([{"id": 3}, "junk"]))
    assert [p["id"] for p in read_products(a)] == [1, 2]
    assert [p["id"] for p in read_products(b)] == [3]


def test_read_products_rejects_other_shapes(tmp_path):
    p = tmp_path / "c.json"
    p.write_text(json.dumps("nope"))
    with pytest.raises(ValueError):
        read_products(p)


def test_read_mappings(tmp_path):
    p = tmp_path / "m.json"
    p.write_text(json.dumps({"mappings": [{"field_name": "Title", "product_key": "title"}]}))
    assert read_mappings(p) == [{"field_name": "Title", "product_key": "title"}]


def test_workbook_drops_control_characters():
    content = workbook_bytes(["title\x01"], [["Soft\x0bcotton"], ["tab\tkept"]])
    rows = read_workbook_rows(content)
    assert rows == [["title"], ["Softcotton"], ["tab\tkept"]]


def test_workbook_stores_formula_like_text_as_strings():
    content = workbook_bytes(["T"], [["=1+1"], ["=HYPERLINK(\"x\")"], [3]])
    ws = load_workbook(filename=stdio.BytesIO(content))["Products"]
    assert ws["A2"].value == "=1+1"
    assert ws["A2"].data_type == "s"
    assert ws["A3"].data_type == "s"
    assert ws["A4"].value == 3
    assert ws["A4"].data_type == "n"
