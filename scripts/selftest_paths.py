#!/usr/bin/env python3
"""Self-test for path resolution and CSV escaping.

No network required. Validates deterministic behavior of non-API logic.
"""
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / 'src'))

from shopify_catalog.io import escape_field  # type: ignore
from shopify_catalog.paths import resolve  # type: ignore


def main() -> int:
    product = {'title': 'Tee', 'variants': [], 'tags': ['a', 'b'], 'published': True}
    assert resolve(product, 'variants[0].sku') == ''
    assert resolve(product, 'variants.length') == 0
    assert resolve(product, 'tags') == 'a, b'
    assert resolve(product, 'published') == 'Yes'
    assert escape_field('plain') == 'plain'
    assert escape_field('a,b') == '"a,b"'
    assert escape_field('say "hi"') == '"say ""hi"""'
    print('Self-test ok: resolve and escape_field pass basic checks')
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
