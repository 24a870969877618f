"""
Export orchestration: pick the records to export, run a codec, return bytes.

Every export is a pure ``(records, options) -> ExportPayload`` call; writing
the payload somewhere is left to ``save_payload`` or the caller.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Iterable, List, Mapping, Optional, Sequence, Union

from . import io
from .errors import ExportError
from .flatten import DEFAULT_SUMMARY_FIELDS, SummaryField, flatten_records
from .mapping import build_custom_rows
from .transform import SHOPIFY_HEADERS, transform_rows


logger = logging.getLogger(__name__)

CSV = "csv"
XLSX = "xlsx"
SHOPIFY = "shopify"
CUSTOM_CSV = "custom-csv"
CUSTOM_XLSX = "custom-xlsx"
FORMATS = (CSV, XLSX, SHOPIFY, CUSTOM_CSV, CUSTOM_XLSX)

Selection = Union[Mapping[str, bool], Iterable, None]


@dataclass
class ExportPayload:
    content: bytes
    filename: str
    media_type: str
    row_count: int


def default_filename(fmt: str, today: Optional[date] = None) -> str:
    stamp = (today or date.today()).isoformat()
    if fmt in (CUSTOM_CSV, CUSTOM_XLSX):
        base = f"custom-products-{stamp}"
    elif fmt == SHOPIFY:
        base = f"shopify-products-{stamp}"
    else:
        base = f"products-{stamp}"
    return f"{base}.{extension_for(fmt)}"


def extension_for(fmt: str) -> str:
    return "xlsx" if fmt in (XLSX, CUSTOM_XLSX) else "csv"


def _with_extension(filename: str, fmt: str) -> str:
    ext = "." + extension_for(fmt)
    return filename if filename.lower().endswith(ext) else filename + ext


def select_records(records: Sequence[dict], selection: Selection = None, key: str = "id") -> List[dict]:
    """Records picked by a row selection, in source order.

    ``selection`` is either a mapping of row id to bool or an iterable of ids.
    With nothing selected, every record is returned.
    """
    if selection is None:
        return list(records)
    if isinstance(selection, Mapping):
        chosen = {str(k) for k, on in selection.items() if on}
    else:
        chosen = {str(k) for k in selection}
    if not chosen:
        return list(records)
    return [r for r in records if str(r.get(key, "")) in chosen]


def export_csv(records: Sequence[dict], fields: Sequence[SummaryField] = DEFAULT_SUMMARY_FIELDS, filename: str = "") -> ExportPayload:
    headers, rows = flatten_records(list(records), fields)
    return ExportPayload(
        content=io.csv_bytes(headers, rows),
        filename=_with_extension(filename, CSV) if filename else default_filename(CSV),
        media_type=io.CSV_MEDIA_TYPE,
        row_count=len(rows),
    )


def export_xlsx(records: Sequence[dict], fields: Sequence[SummaryField] = DEFAULT_SUMMARY_FIELDS, filename: str = "") -> ExportPayload:
    headers, rows = flatten_records(list(records), fields)
    return ExportPayload(
        content=io.workbook_bytes(headers, rows),
        filename=_with_extension(filename, XLSX) if filename else default_filename(XLSX),
        media_type=io.XLSX_MEDIA_TYPE,
        row_count=len(rows),
    )


def export_shopify(records: Sequence[dict], filename: str = "") -> ExportPayload:
    rows = transform_rows(list(records))
    return ExportPayload(
        content=io.csv_bytes(SHOPIFY_HEADERS, io.dict_rows(rows, SHOPIFY_HEADERS)),
        filename=_with_extension(filename, SHOPIFY) if filename else default_filename(SHOPIFY),
        media_type=io.CSV_MEDIA_TYPE,
        row_count=len(rows),
    )


def export_custom(records: Sequence[dict], mappings: Iterable, fmt: str = CUSTOM_CSV, filename: str = "") -> ExportPayload:
    headers, rows = build_custom_rows(list(records), mappings)
    if fmt in (XLSX, CUSTOM_XLSX):
        fmt = CUSTOM_XLSX
        content = io.workbook_bytes(headers, rows)
        media_type = io.XLSX_MEDIA_TYPE
    else:
        fmt = CUSTOM_CSV
        content = io.csv_bytes(headers, rows)
        media_type = io.CSV_MEDIA_TYPE
    return ExportPayload(
        content=content,
        filename=_with_extension(filename, fmt) if filename else default_filename(fmt),
        media_type=media_type,
        row_count=len(rows),
    )


class ExportOrchestrator:
    """Runs one export over a record set, honoring the current row selection."""

    def __init__(self, fields: Sequence[SummaryField] = DEFAULT_SUMMARY_FIELDS, row_key: str = "id"):
        self.fields = tuple(fields)
        self.row_key = row_key

    def run(
        self,
        fmt: str,
        records: Sequence[dict],
        selection: Selection = None,
        mappings: Optional[Iterable] = None,
        filename: str = "",
    ) -> ExportPayload:
        if fmt not in FORMATS:
            raise ExportError(f"Unknown export format: {fmt}")
        subset = select_records(records, selection, key=self.row_key)
        logger.debug(f"export: format={fmt} records={len(records)} selected={len(subset)}")
        if fmt == CSV:
            payload = export_csv(subset, self.fields, filename)
        elif fmt == XLSX:
            payload = export_xlsx(subset, self.fields, filename)
        elif fmt == SHOPIFY:
            payload = export_shopify(subset, filename)
        else:
            payload = export_custom(subset, mappings or [], fmt, filename)
        logger.info(f"export: format={fmt} rows={payload.row_count} file={payload.filename}")
        return payload


def save_payload(payload: ExportPayload, directory: Path) -> Path:
    return io.write_bytes(Path(directory) / payload.filename, payload.content)
