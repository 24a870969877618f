from __future__ import annotations
import io
import json
from pathlib import Path
from typing import Iterable, List, Sequence

from openpyxl import Workbook, load_workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE

from .normalize import to_text


CSV_SPECIALS = (",", '"', "\n", "\r")
SHEET_NAME = "Products"
CSV_MEDIA_TYPE = "text/csv;charset=utf-8"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def escape_field(value) -> str:
    """Quote a field only when it holds a comma, a double quote or a newline."""
    text = value if isinstance(value, str) else to_text(value)
    if any(ch in text for ch in CSV_SPECIALS):
        return '"' + text.replace('"', '""') + '"'
    return text


def format_row(values: Iterable) -> str:
    return ",".join(escape_field(v) for v in values)


def build_csv(headers: Sequence[str], rows: Iterable[Sequence]) -> str:
    lines = [format_row(headers)]
    for row in rows:
        lines.append(format_row(row))
    return "\n".join(lines)


def csv_bytes(headers: Sequence[str], rows: Iterable[Sequence]) -> bytes:
    return build_csv(headers, rows).encode("utf-8")


def _cell(value):
    if value is None:
        return ""
    if isinstance(value, str):
        return ILLEGAL_CHARACTERS_RE.sub("", value)
    if isinstance(value, (int, float, bool)):
        return value
    return ILLEGAL_CHARACTERS_RE.sub("", to_text(value))


def _write_row(ws, r: int, values: Sequence) -> None:
    """Write one row, storing every string as literal text (never a formula)."""
    for col, value in enumerate(values, start=1):
        cell = ws.cell(row=r, column=col, value=_cell(value))
        if isinstance(cell.value, str):
            cell.data_type = "s"


def build_workbook(headers: Sequence[str], rows: Iterable[Sequence], sheet_name: str = SHEET_NAME) -> Workbook:
    wb = Workbook()
    ws = wb.active
    ws.title = sheet_name
    _write_row(ws, 1, headers)
    for r, row in enumerate(rows, start=2):
        _write_row(ws, r, row)
    return wb


def workbook_bytes(headers: Sequence[str], rows: Iterable[Sequence], sheet_name: str = SHEET_NAME) -> bytes:
    wb = build_workbook(headers, rows, sheet_name=sheet_name)
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


def read_workbook_rows(content: bytes, sheet_name: str = SHEET_NAME) -> List[list]:
    """Read a sheet back as lists of cell values (header row first)."""
    wb = load_workbook(filename=io.BytesIO(content), read_only=True, data_only=True)
    ws = wb[sheet_name]
    rows = [["" if v is None else v for v in row] for row in ws.iter_rows(values_only=True)]
    wb.close()
    return rows


def dict_rows(rows: Iterable[dict], headers: Sequence[str]) -> List[list]:
    return [[r.get(h, "") for h in headers] for r in rows]


def read_products(input_path: Path) -> list:
    """Read products from a JSON file.

    Accepts the storefront payload shape (``{"products": [...]}``) or a bare
    list of product objects.
    """
    with input_path.open("r", encoding="utf-8-sig") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("products") or []
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of products in {input_path}")
    return [p for p in data if isinstance(p, dict)]


def read_mappings(input_path: Path) -> list:
    with input_path.open("r", encoding="utf-8-sig") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("mappings") or []
    return list(data)


def write_bytes(output_path: Path, content: bytes) -> Path:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(content)
    return output_path
