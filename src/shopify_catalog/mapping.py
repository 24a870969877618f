from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Iterable, List, Tuple

from .errors import EmptyInput, InvalidMapping
from .paths import resolve


@dataclass(frozen=True)
class FieldMapping:
    field_name: str
    product_key: str = ""


DEFAULT_MAPPINGS = [
    FieldMapping("Product Title", "title"),
    FieldMapping("Price", "variants[0].price"),
]


# Suggested keys offered when building a custom export, grouped by category.
PRODUCT_KEYS: List[Dict[str, str]] = [
    {"key": "id", "label": "Product ID", "category": "Product"},
    {"key": "title", "label": "Title", "category": "Product"},
    {"key": "handle", "label": "Handle", "category": "Product"},
    {"key": "body_html", "label": "Description", "category": "Product"},
    {"key": "vendor", "label": "Vendor", "category": "Product"},
    {"key": "product_type", "label": "Product Type", "category": "Product"},
    {"key": "tags", "label": "Tags", "category": "Product"},
    {"key": "published_at", "label": "Published At", "category": "Dates"},
    {"key": "created_at", "label": "Created At", "category": "Dates"},
    {"key": "updated_at", "label": "Updated At", "category": "Dates"},
    {"key": "variants.length", "label": "Variants Count", "category": "Variants"},
    {"key": "variants[0].id", "label": "First Variant ID", "category": "Variants"},
    {"key": "variants[0].title", "label": "First Variant Title", "category": "Variants"},
    {"key": "variants[0].sku", "label": "First Variant SKU", "category": "Variants"},
    {"key": "variants[0].price", "label": "First Variant Price", "category": "Variants"},
    {"key": "variants[0].compare_at_price", "label": "First Variant Compare At Price", "category": "Variants"},
    {"key": "variants[0].grams", "label": "First Variant Weight (g)", "category": "Variants"},
    {"key": "variants[0].available", "label": "First Variant Available", "category": "Variants"},
    {"key": "variants[0].requires_shipping", "label": "First Variant Requires Shipping", "category": "Variants"},
    {"key": "variants[0].taxable", "label": "First Variant Taxable", "category": "Variants"},
    {"key": "variants[0].option1", "label": "First Variant Option 1", "category": "Variants"},
    {"key": "variants[0].option2", "label": "First Variant Option 2", "category": "Variants"},
    {"key": "variants[0].option3", "label": "First Variant Option 3", "category": "Variants"},
    {"key": "variants[0].featured_image.src", "label": "First Variant Image", "category": "Variants"},
    {"key": "images.length", "label": "Images Count", "category": "Images"},
    {"key": "images[0].src", "label": "First Image URL", "category": "Images"},
    {"key": "images[0].width", "label": "First Image Width", "category": "Images"},
    {"key": "images[0].height", "label": "First Image Height", "category": "Images"},
    {"key": "images[1].src", "label": "Second Image URL", "category": "Images"},
    {"key": "options.length", "label": "Options Count", "category": "Options"},
    {"key": "options[0].name", "label": "Option 1 Name", "category": "Options"},
    {"key": "options[0].values", "label": "Option 1 Values", "category": "Options"},
    {"key": "options[1].name", "label": "Option 2 Name", "category": "Options"},
    {"key": "options[1].values", "label": "Option 2 Values", "category": "Options"},
    {"key": "options[2].name", "label": "Option 3 Name", "category": "Options"},
    {"key": "options[2].values", "label": "Option 3 Values", "category": "Options"},
]


def available_product_keys() -> List[Dict[str, str]]:
    return [dict(k) for k in PRODUCT_KEYS]


def grouped_product_keys() -> Dict[str, List[Dict[str, str]]]:
    groups: Dict[str, List[Dict[str, str]]] = {}
    for k in PRODUCT_KEYS:
        groups.setdefault(k["category"], []).append({"value": k["key"], "label": k["label"]})
    return groups


def coerce_mappings(items: Iterable) -> List[FieldMapping]:
    """Accept FieldMapping objects, dicts or (label, path) pairs."""
    out: List[FieldMapping] = []
    for it in items:
        if isinstance(it, FieldMapping):
            out.append(it)
        elif isinstance(it, dict):
            label = it.get("field_name", it.get("fieldName", ""))
            key = it.get("product_key", it.get("productKey", ""))
            out.append(FieldMapping(str(label or ""), str(key or "")))
        else:
            label, key = it
            out.append(FieldMapping(str(label or ""), str(key or "")))
    return out


def validate_mappings(mappings: List[FieldMapping]) -> None:
    if not mappings:
        raise InvalidMapping("No field mappings defined")
    for i, m in enumerate(mappings):
        if not (m.field_name or "").strip():
            raise InvalidMapping(f"Field mapping #{i + 1} is missing a field name")


def build_custom_rows(products: list, mappings: Iterable) -> Tuple[List[str], List[list]]:
    """Project products through a field mapping into ``(headers, rows)``.

    Column ``i`` of every row is the resolved value of mapping ``i``'s path,
    or ``''`` when that mapping has no path. Mappings are validated before the
    product list is checked, and both before any row is built.
    """
    mappings = coerce_mappings(mappings)
    validate_mappings(mappings)
    if not products:
        raise EmptyInput()
    headers = [m.field_name for m in mappings]
    rows: List[list] = []
    for product in products:
        row = []
        for m in mappings:
            key = (m.product_key or "").strip()
            row.append(resolve(product, key) if key else "")
        rows.append(row)
    return headers, rows
