import os
import tempfile

os.environ.setdefault("DATA_DIR", tempfile.mkdtemp(prefix="shopify-catalog-"))

import pytest
import requests
from fastapi.testclient import TestClient

from server import app as server_app
from server import settings as app_settings
from shopify_catalog.transform import SHOPIFY_HEADERS


@pytest.fixture
def client(tmp_path):
    app_settings.init_settings(tmp_path / "settings.json")
    return TestClient(server_app.app)


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_settings_roundtrip(client):
    assert client.get("/settings").json()["page_size"] == 10
    resp = client.post("/settings", json={"page_size": 25, "filename_prefix": "acme"})
    assert resp.status_code == 200
    assert client.get("/settings").json()["page_size"] == 25
    assert client.post("/settings", json={"bogus": 1}).status_code == 400


def test_export_keys(client):
    groups = client.get("/exports/keys").json()
    assert "Variants" in groups


def test_csv_export_headers(client, products):
    resp = client.post("/exports/csv", json={"products": products, "selected_ids": ["2", "3"]})
    assert resp.status_code == 200
    assert resp.headers["x-row-count"] == "2"
    assert 'filename="products-' in resp.headers["content-disposition"]
    assert resp.text.split("\n")[0].startswith("id,title")


def test_filename_prefix_setting(client, products):
    client.post("/settings", json={"filename_prefix": "acme"})
    resp = client.post("/exports/shopify", json={"products": products})
    assert 'filename="acme-' in resp.headers["content-disposition"]
    assert resp.text.split("\n")[0] == ",".join(SHOPIFY_HEADERS)


def test_custom_xlsx_export(client, products):
    body = {"products": products, "mappings": [{"field_name": "Name", "product_key": "title"}], "filename": "mine"}
    resp = client.post("/exports/custom-xlsx", json=body)
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("application/vnd.openxmlformats")
    assert 'filename="mine.xlsx"' in resp.headers["content-disposition"]


def test_export_errors(client, products):
    assert client.post("/exports/pdf", json={"products": products}).status_code == 404
    resp = client.post("/exports/csv", json={"products": []})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "No products to export"
    resp = client.post("/exports/custom-csv", json={"products": products, "mappings": []})
    assert resp.status_code == 400
    assert "No field mappings" in resp.json()["detail"]


def test_table_view(client):
    from conftest import make_product

    products = [make_product(i, title=f"Tee {i}" if i % 2 else f"Cap {i}") for i in range(1, 26)]
    actions = [
        {"type": "set_filter", "column_id": "title", "token": "tee"},
        {"type": "set_page", "page": 2},
        {"type": "set_column_pin", "column_id": "vendor", "side": "left"},
        {"type": "toggle_row", "row_id": "3"},
    ]
    data = client.post("/table/view", json={"products": products, "actions": actions, "page_size": 5}).json()
    assert data["filtered_count"] == 13
    assert data["page"] == 2
    assert data["page_count"] == 3
    assert data["row_ids"] == ["11", "13", "15", "17", "19"]
    assert data["page_items"] == [1, 2, 3]
    assert data["visible_columns"][0] == "vendor"
    assert data["pin_offsets"] == {"vendor": {"side": "left", "offset": 0}}
    assert data["selected_ids"] == ["3"]


def test_fetch_products(client, monkeypatch):
    monkeypatch.setattr(server_app.sc, "fetch_all_products", lambda cfg: [{"id": 1}])
    resp = client.post("/products/fetch", json={"base_url": "shop.example.com"})
    assert resp.json() == {"products": [{"id": 1}], "count": 1}
    assert client.post("/products/fetch", json={}).status_code == 400


def test_fetch_failure_is_bad_gateway(client, monkeypatch):
    def boom(cfg):
        raise requests.ConnectionError("down")

    monkeypatch.setattr(server_app.sc, "fetch_all_products", boom)
    resp = client.post("/products/fetch", json={"base_url": "shop.example.com"})
    assert resp.status_code == 502
