"""
Summary flattening for the plain CSV and workbook exports.

Each product becomes one row. Nested lists are reduced to scalars (tags
joined, variant and image counts) and the first variant's fields are promoted
to top-level columns. The projection is lossy by intent; use the custom field
mapping when every value matters.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from .errors import EmptyInput
from .normalize import TAG_RE, yes_no


MISSING = object()


@dataclass(frozen=True)
class SummaryField:
    name: str
    getter: Callable[[dict], object]


def _first_variant(p: dict) -> Optional[dict]:
    variants = p.get("variants") or []
    return variants[0] if variants else None


def _variant_field(key: str, fmt: Callable = lambda v: v) -> Callable[[dict], object]:
    def get(p: dict):
        v = _first_variant(p)
        if v is None:
            return MISSING
        return fmt(v.get(key))
    return get


def _body_excerpt(p: dict) -> str:
    html = p.get("body_html") or ""
    return TAG_RE.sub("", html)[:100]


def _tags(p: dict) -> str:
    tags = p.get("tags") or []
    if isinstance(tags, str):
        return tags
    return ", ".join(str(t) for t in tags)


def _options(p: dict):
    options = p.get("options") or []
    if not options:
        return MISSING
    return "; ".join(
        f"{o.get('name', '')}: {', '.join(str(v) for v in (o.get('values') or []))}" for o in options
    )


DEFAULT_SUMMARY_FIELDS: Tuple[SummaryField, ...] = (
    SummaryField("id", lambda p: p.get("id")),
    SummaryField("title", lambda p: p.get("title")),
    SummaryField("handle", lambda p: p.get("handle")),
    SummaryField("vendor", lambda p: p.get("vendor")),
    SummaryField("product_type", lambda p: p.get("product_type")),
    SummaryField("tags", _tags),
    SummaryField("body_html", _body_excerpt),
    SummaryField("created_at", lambda p: p.get("created_at")),
    SummaryField("updated_at", lambda p: p.get("updated_at")),
    SummaryField("published_at", lambda p: p.get("published_at")),
    SummaryField("variants_count", lambda p: len(p.get("variants") or [])),
    SummaryField("images_count", lambda p: len(p.get("images") or [])),
    SummaryField("price", _variant_field("price")),
    SummaryField("compare_at_price", _variant_field("compare_at_price", lambda v: v or "")),
    SummaryField("sku", _variant_field("sku", lambda v: v or "")),
    SummaryField("available", _variant_field("available", yes_no)),
    SummaryField("requires_shipping", _variant_field("requires_shipping", yes_no)),
    SummaryField("taxable", _variant_field("taxable", yes_no)),
    SummaryField("grams", _variant_field("grams", lambda v: v or 0)),
    SummaryField("options", _options),
)

SUMMARY_FIELD_NAMES = [f.name for f in DEFAULT_SUMMARY_FIELDS]


def summary_fields_by_name(names: Optional[Iterable[str]]) -> Tuple[SummaryField, ...]:
    """Select summary fields by name, keeping the order of ``names``.

    Unknown names are skipped; ``None`` or an empty selection means all fields.
    """
    if not names:
        return DEFAULT_SUMMARY_FIELDS
    by_name = {f.name: f for f in DEFAULT_SUMMARY_FIELDS}
    picked = tuple(by_name[n] for n in names if n in by_name)
    return picked or DEFAULT_SUMMARY_FIELDS


def flatten_record(product: dict, fields: Sequence[SummaryField] = DEFAULT_SUMMARY_FIELDS) -> dict:
    flat: dict = {}
    for field in fields:
        value = field.getter(product)
        if value is MISSING:
            continue
        flat[field.name] = "" if value is None else value
    return flat


def flatten_records(
    products: list,
    fields: Sequence[SummaryField] = DEFAULT_SUMMARY_FIELDS,
) -> Tuple[List[str], List[list]]:
    """Flatten products into ``(headers, rows)``.

    Headers follow the declared field order, restricted to fields at least
    one product produced, so columns no product fills (e.g. ``options`` when
    no product has options) are left out. Rows missing a column get a blank.
    """
    if not products:
        raise EmptyInput()
    flats = [flatten_record(p, fields) for p in products]
    seen = set()
    for flat in flats:
        seen.update(flat)
    headers = [f.name for f in fields if f.name in seen]
    rows = [[flat.get(h, "") for h in headers] for flat in flats]
    return headers, rows
