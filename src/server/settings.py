from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import Dict

from shopify_catalog.flatten import SUMMARY_FIELD_NAMES


logger = logging.getLogger(__name__)

SETTINGS_PATH: Path | None = None


def init_settings(path: Path) -> None:
    global SETTINGS_PATH
    SETTINGS_PATH = path
    path.parent.mkdir(parents=True, exist_ok=True)
    if not path.exists():
        save_settings(default_settings())


def default_settings() -> Dict:
    return {
        "page_size": 10,
        "pinned_column_width": 200,
        # Columns of the summary CSV/Excel export, in order
        "summary_fields": list(SUMMARY_FIELD_NAMES),
        "filename_prefix": "",
        "store_url": "",
        "fetch_limit": 250,
        "fetch_timeout": 30,
    }


def get_settings() -> Dict:
    assert SETTINGS_PATH is not None
    base = default_settings()
    try:
        data = json.loads(SETTINGS_PATH.read_text())
    except (OSError, ValueError) as e:
        logger.warning(f"settings unreadable at {SETTINGS_PATH}: {e}; using defaults")
        return base
    base.update(data or {})
    return base


def save_settings(data: Dict) -> None:
    assert SETTINGS_PATH is not None
    SETTINGS_PATH.write_text(json.dumps(data, indent=2))
