#!/usr/bin/env python3
"""Basic smoke test for the export pipeline.

Runs every export format over a sample products file and checks that each
produces a non-empty payload. No network is used.
"""
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / 'src'))

from shopify_catalog.export import FORMATS, ExportOrchestrator, save_payload  # type: ignore
from shopify_catalog.io import read_products  # type: ignore
from shopify_catalog.mapping import DEFAULT_MAPPINGS  # type: ignore


def main() -> int:
    sample = ROOT / 'data' / 'input' / 'products.json'
    if not sample.exists():
        print(f"Sample input not found: {sample}")
        return 0

    products = read_products(sample)
    out_dir = ROOT / 'data' / 'output'
    orchestrator = ExportOrchestrator()
    for fmt in FORMATS:
        payload = orchestrator.run(fmt, products, mappings=DEFAULT_MAPPINGS)
        if not payload.content:
            print(f"Smoke test failed: empty {fmt} payload")
            return 1
        path = save_payload(payload, out_dir)
        print(f"{fmt}: wrote {payload.row_count} rows to {path}")
    print("Smoke test ok")
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
