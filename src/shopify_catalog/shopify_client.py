from __future__ import annotations
import logging
import re
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

import requests


logger = logging.getLogger(__name__)

MAX_PAGE_LIMIT = 250


@dataclass
class StorefrontConfig:
    base_url: str
    limit: int = MAX_PAGE_LIMIT
    timeout: int = 30

    @property
    def products_url(self) -> str:
        return normalize_url(self.base_url).rstrip("/") + "/products.json"


def normalize_url(url: str) -> str:
    url = (url or "").strip()
    if not url:
        return url
    if re.match(r"^https?://", url, flags=re.IGNORECASE):
        return url
    return f"https://{url}"


def build_session() -> requests.Session:
    s = requests.Session()
    s.headers.update(
        {
            "Accept": "application/json",
            "User-Agent": "shopify-catalog-export/1.0",
        }
    )
    return s


def _rest_get(session: requests.Session, url: str, params: Dict, timeout: int) -> requests.Response:
    backoff = 1.0
    while True:
        resp = session.get(url, params=params, timeout=timeout)
        if resp.status_code == 429:
            retry_after = float(resp.headers.get("Retry-After", backoff))
            logger.debug(f"rate limited on {url}; sleeping {retry_after}s")
            time.sleep(retry_after)
            backoff = min(backoff * 2, 10.0)
            continue
        return resp


def fetch_products(
    session: requests.Session,
    cfg: StorefrontConfig,
    page: int = 1,
    limit: Optional[int] = None,
) -> List[Dict]:
    if not cfg.base_url:
        raise ValueError("Base URL is required")
    params = {"limit": min(limit or cfg.limit, MAX_PAGE_LIMIT), "page": page}
    resp = _rest_get(session, cfg.products_url, params, cfg.timeout)
    resp.raise_for_status()
    data = resp.json() or {}
    return list(data.get("products") or [])


def fetch_all_products(
    cfg: StorefrontConfig,
    session: Optional[requests.Session] = None,
    on_progress: Optional[Callable[[int, int], None]] = None,
    should_stop: Optional[Callable[[], bool]] = None,
) -> List[Dict]:
    """Page through ``/products.json`` until a short page comes back.

    ``on_progress(page, fetched_so_far)`` is called after each page. When
    ``should_stop()`` returns True the fetch is abandoned and ``[]`` returned.
    """
    if not cfg.base_url:
        raise ValueError("Base URL is required")
    session = session or build_session()
    limit = min(cfg.limit, MAX_PAGE_LIMIT)
    products: List[Dict] = []
    page = 1
    while True:
        if should_stop and should_stop():
            logger.warning("fetch cancelled")
            return []
        batch = fetch_products(session, cfg, page=page, limit=limit)
        products.extend(batch)
        logger.debug(f"fetched page={page} count={len(batch)} total={len(products)}")
        if on_progress:
            on_progress(page, len(products))
        if len(batch) < limit:
            break
        page += 1
    logger.info(f"fetched {len(products)} products from {cfg.products_url}")
    return products
