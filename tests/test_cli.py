import json

import pytest

import shopify_export
from shopify_catalog import io
from shopify_catalog.transform import SHOPIFY_HEADERS


@pytest.fixture
def products_file(tmp_path, products):
    path = tmp_path / "products.json"
    path.write_text(json.dumps({"products": products}))
    return path


@pytest.fixture(autouse=True)
def clean_env(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    for name in ("STORE_URL", "EXPORT_FORMAT", "FETCH_LIMIT"):
        monkeypatch.delenv(name, raising=False)


def test_shopify_export_to_output(tmp_path, products_file):
    out = tmp_path / "out" / "bulk.csv"
    assert shopify_export.main(["--input", str(products_file), "--format", "shopify", "--output", str(out)]) == 0
    assert out.read_text(encoding="utf-8").split("\n")[0] == ",".join(SHOPIFY_HEADERS)


def test_default_output_is_dated_file_in_cwd(tmp_path, products_file):
    shopify_export.main(["--input", str(products_file), "--ids", "1,2", "--fields", "id,title"])
    written = list(tmp_path.glob("products-*.csv"))
    assert len(written) == 1
    assert written[0].read_text(encoding="utf-8").split("\n") == ["id,title", "1,Product 1", "2,Product 2"]


def test_custom_xlsx_with_mapping_file(tmp_path, products_file):
    mapping = tmp_path / "mapping.json"
    mapping.write_text(json.dumps([{"field_name": "SKU", "product_key": "variants[0].sku"}]))
    out = tmp_path / "custom.xlsx"
    shopify_export.main(["--input", str(products_file), "--format", "custom-xlsx", "--mapping", str(mapping), "--output", str(out)])
    rows = io.read_workbook_rows(out.read_bytes())
    assert rows[:2] == [["SKU"], ["SKU-1"]]


def test_format_from_env_file(tmp_path, products_file):
    env = tmp_path / "export.env"
    env.write_text("EXPORT_FORMAT=shopify\n")
    shopify_export.main(["--env-file", str(env), "--input", str(products_file)])
    assert list(tmp_path.glob("shopify-products-*.csv"))


def test_missing_source_or_mapping_exits(products_file):
    with pytest.raises(SystemExit):
        shopify_export.main([])
    with pytest.raises(SystemExit):
        shopify_export.main(["--input", str(products_file), "--format", "custom-csv"])


def test_missing_env_file_raises(products_file):
    with pytest.raises(FileNotFoundError):
        shopify_export.main(["--env-file", "nope.env", "--input", str(products_file)])
