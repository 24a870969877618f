import pytest

from shopify_catalog.errors import EmptyInput
from shopify_catalog.flatten import (
    DEFAULT_SUMMARY_FIELDS,
    SUMMARY_FIELD_NAMES,
    flatten_record,
    flatten_records,
    summary_fields_by_name,
)
from conftest import make_product, make_variant


def test_one_row_per_product_with_promoted_first_variant(products):
    headers, rows = flatten_records(products)
    assert len(rows) == len(products)
    assert headers[:3] == ["id", "title", "handle"]
    first = dict(zip(headers, rows[0]))
    assert first["price"] == "19.99"
    assert first["sku"] == "SKU-1"
    assert first["available"] == "Yes"
    assert first["variants_count"] == 2
    assert first["tags"] == "summer, cotton"


def test_body_is_stripped_and_truncated():
    p = make_product(body_html="<div>" + "x" * 150 + "</div>")
    flat = flatten_record(p)
    assert flat["body_html"] == "x" * 100


def test_options_summary():
    p = make_product(variants=2)
    p["options"].append({"name": "Color", "values": ["Red", "Blue"]})
    assert flatten_record(p)["options"] == "Size: S1, S2; Color: Red, Blue"


def test_products_without_variants_get_blank_variant_columns():
    with_variant = make_product(1)
    bare = make_product(2, variants=0)
    headers, rows = flatten_records([bare, with_variant])
    bare_row = dict(zip(headers, rows[0]))
    assert bare_row["price"] == ""
    assert bare_row["sku"] == ""
    assert "options" in headers
    assert headers == [n for n in SUMMARY_FIELD_NAMES if n in headers]


def test_unfilled_columns_are_dropped():
    headers, _ = flatten_records([make_product(variants=0)])
    assert "price" not in headers
    assert "options" not in headers


def test_missing_optional_variant_values_default():
    p = make_product(variants=0)
    p["variants"] = [make_variant(1, sku=None, grams=None, compare_at_price=None)]
    flat = flatten_record(p)
    assert flat["sku"] == ""
    assert flat["grams"] == 0
    assert flat["compare_at_price"] == ""


def test_empty_input_raises():
    with pytest.raises(EmptyInput):
        flatten_records([])


def test_summary_fields_by_name_keeps_requested_order():
    fields = summary_fields_by_name(["sku", "title", "bogus"])
    assert [f.name for f in fields] == ["sku", "title"]
    assert summary_fields_by_name(None) == DEFAULT_SUMMARY_FIELDS
    assert summary_fields_by_name(["bogus"]) == DEFAULT_SUMMARY_FIELDS


def test_custom_subset_flattening(products):
    headers, rows = flatten_records(products, summary_fields_by_name(["title", "images_count"]))
    assert headers == ["title", "images_count"]
    assert rows[0] == ["Product 1", 1]
