from __future__ import annotations
import logging
import os
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests
from fastapi import FastAPI, HTTPException
from fastapi.responses import Response
from pydantic import BaseModel

from shopify_catalog.errors import ExportError
from shopify_catalog.export import FORMATS, ExportOrchestrator
from shopify_catalog.flatten import summary_fields_by_name
from shopify_catalog.mapping import grouped_product_keys
from shopify_catalog.table import TableEngine, row_id
from shopify_catalog import shopify_client as sc
from . import settings as app_settings


logger = logging.getLogger("server")

ROOT = Path(__file__).resolve().parents[2]
DATA_DIR = Path(os.getenv("DATA_DIR", str(ROOT / "data")))

app = FastAPI(title="Shopify Catalog Export API", version="0.1.0")
app_settings.init_settings(DATA_DIR / "settings.json")


class FieldMappingIn(BaseModel):
    field_name: str = ""
    product_key: str = ""


class ExportRequest(BaseModel):
    products: List[Dict[str, Any]] = []
    selected_ids: Optional[List[str]] = None
    mappings: List[FieldMappingIn] = []
    filename: str = ""


class TableRequest(BaseModel):
    products: List[Dict[str, Any]] = []
    actions: List[Dict[str, Any]] = []
    page_size: Optional[int] = None


class TableResponse(BaseModel):
    rows: List[Dict[str, Any]]
    row_ids: List[str]
    filtered_count: int
    total_count: int
    page: int
    page_count: int
    page_items: List[Any]
    visible_columns: List[str]
    selected_ids: List[str]
    pin_offsets: Dict[str, Any]


class FetchRequest(BaseModel):
    base_url: str = ""
    limit: Optional[int] = None


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.get("/settings")
def get_settings() -> Dict:
    return app_settings.get_settings()


@app.post("/settings")
def post_settings(data: Dict[str, Any]) -> Dict:
    current = app_settings.get_settings()
    unknown = sorted(set(data) - set(app_settings.default_settings()))
    if unknown:
        raise HTTPException(400, f"Unknown settings: {', '.join(unknown)}")
    current.update(data)
    app_settings.save_settings(current)
    return current


@app.get("/exports/keys")
def export_keys() -> Dict[str, List[Dict[str, str]]]:
    return grouped_product_keys()


@app.post("/exports/{fmt}")
def create_export(fmt: str, req: ExportRequest) -> Response:
    if fmt not in FORMATS:
        raise HTTPException(404, f"Unknown export format: {fmt}")
    s = app_settings.get_settings()
    orchestrator = ExportOrchestrator(fields=summary_fields_by_name(s.get("summary_fields")))
    filename = req.filename
    if not filename and s.get("filename_prefix"):
        filename = f"{s['filename_prefix']}-{date.today().isoformat()}"
    try:
        payload = orchestrator.run(
            fmt,
            req.products,
            selection=req.selected_ids,
            mappings=[m.model_dump() for m in req.mappings],
            filename=filename,
        )
    except ExportError as e:
        logger.info(f"export rejected: format={fmt} error={e}")
        raise HTTPException(400, str(e))
    return Response(
        content=payload.content,
        media_type=payload.media_type,
        headers={
            "Content-Disposition": f'attachment; filename="{payload.filename}"',
            "X-Row-Count": str(payload.row_count),
        },
    )


@app.post("/table/view", response_model=TableResponse)
def table_view(req: TableRequest) -> TableResponse:
    s = app_settings.get_settings()
    engine = TableEngine(
        req.products,
        page_size=req.page_size or int(s.get("page_size") or 10),
        pinned_column_width=int(s.get("pinned_column_width") or 200),
    )
    for action in req.actions:
        engine.dispatch(action)
    view = engine.get_visible_slice()
    columns = engine.visible_columns()
    offsets = {}
    for c in columns:
        off = engine.pin_offset(c.id)
        if off:
            offsets[c.id] = {"side": off[0], "offset": off[1]}
    return TableResponse(
        rows=view.rows,
        row_ids=[row_id(r) for r in view.rows],
        filtered_count=view.filtered_count,
        total_count=view.total_count,
        page=view.page,
        page_count=view.page_count,
        page_items=view.page_items,
        visible_columns=[c.id for c in columns],
        selected_ids=engine.selected_ids(),
        pin_offsets=offsets,
    )


@app.post("/products/fetch")
def fetch_products(req: FetchRequest) -> Dict[str, Any]:
    s = app_settings.get_settings()
    base_url = req.base_url or s.get("store_url") or ""
    if not base_url:
        raise HTTPException(400, "Base URL is required")
    cfg = sc.StorefrontConfig(
        base_url=base_url,
        limit=req.limit or int(s.get("fetch_limit") or sc.MAX_PAGE_LIMIT),
        timeout=int(s.get("fetch_timeout") or 30),
    )
    try:
        products = sc.fetch_all_products(cfg)
    except (requests.RequestException, ValueError) as e:
        logger.exception(f"fetch failed for {base_url}")
        raise HTTPException(502, f"Failed to fetch products: {e}")
    return {"products": products, "count": len(products)}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=os.getenv("HOST", "127.0.0.1"), port=int(os.getenv("PORT", "8000")))
