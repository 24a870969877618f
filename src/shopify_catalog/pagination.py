from __future__ import annotations
import math
from typing import List, Union


ELLIPSIS = "ellipsis"

PageItem = Union[int, str]


def page_count(filtered_count: int, page_size: int) -> int:
    """Number of pages for ``filtered_count`` rows; at least 1."""
    if page_size <= 0:
        return 1
    return max(1, math.ceil(filtered_count / page_size))


def clamp_page(page: int, total: int) -> int:
    return min(max(1, page), max(1, total))


def _range(start: int, end: int) -> List[int]:
    return list(range(start, end + 1))


def build_page_items(current: int, total: int, sibling_count: int = 1, boundary_count: int = 1) -> List[PageItem]:
    """Windowed page list, e.g. ``[1, 'ellipsis', 4, 5, 6, 'ellipsis', 10]``.

    The first and last ``boundary_count`` pages and ``current ± sibling_count``
    are always present. The sibling window slides inward near the edges so
    the list keeps a constant length, and a gap of exactly one page is
    filled with that page rather than an ellipsis. When
    ``total <= 2 * boundary_count + 2 * sibling_count + 1`` every page appears.
    """
    total = max(1, total)
    current = clamp_page(current, total)
    sibling_count = max(0, sibling_count)
    boundary_count = max(1, boundary_count)

    start_pages = _range(1, min(boundary_count, total))
    end_pages = _range(max(total - boundary_count + 1, boundary_count + 1), total)

    siblings_start = max(
        min(current - sibling_count, total - boundary_count - sibling_count * 2 - 1),
        boundary_count + 2,
    )
    siblings_end = min(
        max(current + sibling_count, boundary_count + sibling_count * 2 + 2),
        end_pages[0] - 2 if end_pages else total - 1,
    )

    items: List[PageItem] = list(start_pages)
    if siblings_start > boundary_count + 2:
        items.append(ELLIPSIS)
    elif boundary_count + 1 < total - boundary_count:
        items.append(boundary_count + 1)

    items.extend(_range(siblings_start, siblings_end))

    if siblings_end < total - boundary_count - 1:
        items.append(ELLIPSIS)
    elif total - boundary_count > boundary_count:
        items.append(total - boundary_count)

    items.extend(end_pages)
    return items
