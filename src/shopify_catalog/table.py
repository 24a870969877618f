"""
Tabular view engine over an in-memory product list.

State lives in an immutable ``TableState``; every operation is a pure
``(state, ...) -> state`` transition, so views can be replayed and tested
without any rendering surface. ``TableEngine`` bundles the records, the
column set and the current state for callers that prefer an object.

Nothing here raises on bad input: unknown columns are ignored, pages clamp.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from .normalize import format_number
from .pagination import build_page_items, clamp_page, page_count
from .paths import resolve_raw


LEFT = "left"
RIGHT = "right"
ASC = "asc"
DESC = "desc"

DEFAULT_PAGE_SIZE = 10
PINNED_COLUMN_WIDTH = 200
DEFAULT_COLUMN_SIZE = 150


@dataclass(frozen=True)
class ColumnDescriptor:
    id: str
    header: str = ""
    # A path string (``variants[0].sku``) or a callable taking the record.
    accessor: Union[str, Callable[[dict], Any], None] = None
    default_visible: bool = True
    size: int = DEFAULT_COLUMN_SIZE
    min_size: Optional[int] = None
    max_size: Optional[int] = None
    sortable: bool = True
    filterable: bool = True
    hideable: bool = True

    @property
    def label(self) -> str:
        if self.header:
            return self.header
        return " ".join(w[:1].upper() + w[1:] for w in self.id.split("_"))

    def value(self, record: dict) -> Any:
        acc = self.accessor if self.accessor is not None else self.id
        if callable(acc):
            return acc(record)
        return resolve_raw(record, acc)


@dataclass(frozen=True)
class TableState:
    filters: Mapping[str, str] = field(default_factory=dict)
    # (column id, descending) pairs, highest priority first
    sorting: Tuple[Tuple[str, bool], ...] = ()
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    visibility: Mapping[str, bool] = field(default_factory=dict)
    pin_left: Tuple[str, ...] = ()
    pin_right: Tuple[str, ...] = ()
    selection: Mapping[str, bool] = field(default_factory=dict)
    title_filter: Tuple[str, ...] = ()


@dataclass
class TableView:
    rows: List[dict]
    filtered_count: int
    total_count: int
    page: int
    page_count: int
    page_size: int

    @property
    def page_items(self) -> list:
        return build_page_items(self.page, self.page_count)


def initial_state(
    columns: Sequence[ColumnDescriptor],
    page_size: int = DEFAULT_PAGE_SIZE,
) -> TableState:
    hidden = {c.id: False for c in columns if not c.default_visible}
    return TableState(page_size=max(1, page_size), visibility=hidden)


# --- filtering ---

def set_filter(state: TableState, column_id: str, token: Optional[str]) -> TableState:
    filters = dict(state.filters)
    token = "" if token is None else str(token)
    if token.strip():
        filters[column_id] = token
    else:
        filters.pop(column_id, None)
    return replace(state, filters=filters, page=1)


def remove_filter(state: TableState, column_id: str) -> TableState:
    return set_filter(state, column_id, "")


def clear_filters(state: TableState) -> TableState:
    return replace(state, filters={}, page=1)


def set_title_filter(state: TableState, names: Iterable[str]) -> TableState:
    """Keep only products whose title equals one of ``names`` (case-insensitive).

    Applying a non-empty list clears the row selection.
    """
    cleaned = tuple(n.strip().lower() for n in names if n and n.strip())
    selection = {} if cleaned else state.selection
    return replace(state, title_filter=cleaned, selection=selection, page=1)


# --- sorting ---

def with_sort(state: TableState, column_id: str, direction: Optional[str]) -> TableState:
    """Set one column's direction, keeping other sort entries.

    The column moves to the end of the sort list, so a later call overrides
    an earlier one for the same column. ``None`` removes the column.
    """
    sorting = [(cid, desc) for cid, desc in state.sorting if cid != column_id]
    if direction in (ASC, DESC):
        sorting.append((column_id, direction == DESC))
    return replace(state, sorting=tuple(sorting))


def sort_direction(state: TableState, column_id: str) -> Optional[str]:
    for cid, desc in state.sorting:
        if cid == column_id:
            return DESC if desc else ASC
    return None


def set_sort(state: TableState, column_id: str) -> TableState:
    """Cycle ``column_id`` through unsorted -> asc -> desc -> unsorted.

    Only one column is sorted at a time; a new column replaces the old one.
    """
    current = sort_direction(state, column_id)
    nxt = {None: ASC, ASC: DESC, DESC: None}[current]
    cleared = replace(state, sorting=())
    return with_sort(cleared, column_id, nxt)


# --- pagination ---

def set_page(state: TableState, page: int, total_pages: int) -> TableState:
    return replace(state, page=clamp_page(int(page), total_pages))


def set_page_size(state: TableState, page_size: int) -> TableState:
    if page_size <= 0:
        return state
    return replace(state, page_size=int(page_size), page=1)


# --- columns ---

def is_visible(state: TableState, column_id: str) -> bool:
    return state.visibility.get(column_id, True)


def set_column_visibility(state: TableState, column_id: str, visible: bool) -> TableState:
    visibility = dict(state.visibility)
    visibility[column_id] = bool(visible)
    return replace(state, visibility=visibility)


def toggle_column_visibility(state: TableState, column_id: str) -> TableState:
    return set_column_visibility(state, column_id, not is_visible(state, column_id))


def set_column_pin(state: TableState, column_id: str, side: Optional[str]) -> TableState:
    left = tuple(c for c in state.pin_left if c != column_id)
    right = tuple(c for c in state.pin_right if c != column_id)
    if side == LEFT:
        left = left + (column_id,)
    elif side == RIGHT:
        right = right + (column_id,)
    return replace(state, pin_left=left, pin_right=right)


def pinned_side(state: TableState, column_id: str) -> Optional[str]:
    if column_id in state.pin_left:
        return LEFT
    if column_id in state.pin_right:
        return RIGHT
    return None


def pin_offset(state: TableState, column_id: str, width: int = PINNED_COLUMN_WIDTH) -> Optional[Tuple[str, int]]:
    """Sticky offset of a pinned column as ``(side, pixels)``.

    Left-pinned columns sit ``index * width`` from the left edge; right-pinned
    columns count from the right edge, so the last one sits at 0.
    """
    side = pinned_side(state, column_id)
    if side == LEFT:
        return LEFT, state.pin_left.index(column_id) * width
    if side == RIGHT:
        idx = state.pin_right.index(column_id)
        return RIGHT, (len(state.pin_right) - idx - 1) * width
    return None


# --- row selection ---

def row_id(record: dict, key: str = "id") -> str:
    return str(record.get(key, ""))


def set_row_selected(state: TableState, rid: str, selected: bool) -> TableState:
    selection = dict(state.selection)
    if selected:
        selection[str(rid)] = True
    else:
        selection.pop(str(rid), None)
    return replace(state, selection=selection)


def set_rows_selected(state: TableState, ids: Iterable[str], selected: bool) -> TableState:
    for rid in ids:
        state = set_row_selected(state, rid, selected)
    return state


def clear_selection(state: TableState) -> TableState:
    return replace(state, selection={})


def selected_ids(state: TableState) -> List[str]:
    return [rid for rid, on in state.selection.items() if on]


# --- derived view ---

def filter_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return format_number(value)
    if isinstance(value, (list, tuple)):
        return ", ".join(filter_text(v) for v in value)
    return str(value)


def sort_key(value: Any) -> tuple:
    """Total ordering key: missing values lowest, then numbers, then text."""
    if value is None:
        return (0, 0)
    if isinstance(value, bool):
        return (1, int(value))
    if isinstance(value, (int, float)):
        if value != value:
            return (0, 1)
        return (1, value)
    if isinstance(value, str):
        return (2, value)
    return (3, filter_text(value))


def _columns_by_id(columns: Sequence[ColumnDescriptor]) -> Dict[str, ColumnDescriptor]:
    return {c.id: c for c in columns}


def filter_records(records: Sequence[dict], columns: Sequence[ColumnDescriptor], state: TableState) -> List[dict]:
    by_id = _columns_by_id(columns)
    active = [
        (by_id[cid], token.lower())
        for cid, token in state.filters.items()
        if cid in by_id and by_id[cid].filterable and token.strip()
    ]
    titles = set(state.title_filter)
    out = []
    for rec in records:
        if titles and str(rec.get("title") or "").strip().lower() not in titles:
            continue
        if all(token in filter_text(col.value(rec)).lower() for col, token in active):
            out.append(rec)
    return out


def sort_records(records: Sequence[dict], columns: Sequence[ColumnDescriptor], state: TableState) -> List[dict]:
    by_id = _columns_by_id(columns)
    rows = list(records)
    # Stable sorts applied from lowest to highest priority.
    for cid, desc in reversed(state.sorting):
        col = by_id.get(cid)
        if col is None or not col.sortable:
            continue
        rows.sort(key=lambda r, c=col: sort_key(c.value(r)), reverse=desc)
    return rows


def build_view(records: Sequence[dict], columns: Sequence[ColumnDescriptor], state: TableState) -> TableView:
    filtered = filter_records(records, columns, state)
    ordered = sort_records(filtered, columns, state)
    pages = page_count(len(filtered), state.page_size)
    page = clamp_page(state.page, pages)
    start = (page - 1) * state.page_size
    return TableView(
        rows=ordered[start:start + state.page_size],
        filtered_count=len(filtered),
        total_count=len(records),
        page=page,
        page_count=pages,
        page_size=state.page_size,
    )


class TableEngine:
    def __init__(
        self,
        records: Sequence[dict],
        columns: Optional[Sequence[ColumnDescriptor]] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        pinned_column_width: int = PINNED_COLUMN_WIDTH,
        row_key: str = "id",
    ):
        self.records: Tuple[dict, ...] = tuple(records)
        self.columns: Tuple[ColumnDescriptor, ...] = tuple(columns if columns is not None else PRODUCT_COLUMNS)
        self.pinned_column_width = pinned_column_width
        self.row_key = row_key
        self.state = initial_state(self.columns, page_size=page_size)
        self._by_id = _columns_by_id(self.columns)

    def column(self, column_id: str) -> Optional[ColumnDescriptor]:
        return self._by_id.get(column_id)

    def page_count(self) -> int:
        return page_count(len(filter_records(self.records, self.columns, self.state)), self.state.page_size)

    def set_filter(self, column_id: str, token: Optional[str]) -> TableState:
        col = self.column(column_id)
        if col is not None and col.filterable:
            self.state = set_filter(self.state, column_id, token)
        return self.state

    def remove_filter(self, column_id: str) -> TableState:
        self.state = remove_filter(self.state, column_id)
        return self.state

    def clear_filters(self) -> TableState:
        self.state = clear_filters(self.state)
        return self.state

    def active_filters(self) -> Dict[str, str]:
        return {cid: tok for cid, tok in self.state.filters.items() if tok.strip()}

    def set_title_filter(self, names: Iterable[str]) -> TableState:
        self.state = set_title_filter(self.state, names)
        return self.state

    def set_sort(self, column_id: str) -> TableState:
        col = self.column(column_id)
        if col is not None and col.sortable:
            self.state = set_sort(self.state, column_id)
        return self.state

    def set_page(self, page: int) -> TableState:
        self.state = set_page(self.state, page, self.page_count())
        return self.state

    def set_page_size(self, page_size: int) -> TableState:
        self.state = set_page_size(self.state, page_size)
        return self.state

    def set_column_visibility(self, column_id: str, visible: bool) -> TableState:
        col = self.column(column_id)
        if col is not None and col.hideable:
            self.state = set_column_visibility(self.state, column_id, visible)
        return self.state

    def toggle_column_visibility(self, column_id: str) -> TableState:
        col = self.column(column_id)
        if col is not None and col.hideable:
            self.state = toggle_column_visibility(self.state, column_id)
        return self.state

    def set_column_pin(self, column_id: str, side: Optional[str]) -> TableState:
        if self.column(column_id) is not None and side in (LEFT, RIGHT, None):
            self.state = set_column_pin(self.state, column_id, side)
        return self.state

    def pinned_side(self, column_id: str) -> Optional[str]:
        return pinned_side(self.state, column_id)

    def pin_offset(self, column_id: str) -> Optional[Tuple[str, int]]:
        return pin_offset(self.state, column_id, self.pinned_column_width)

    def visible_columns(self) -> List[ColumnDescriptor]:
        """Visible columns in render order: left-pinned, unpinned, right-pinned."""
        visible = [c for c in self.columns if is_visible(self.state, c.id)]
        by_id = {c.id: c for c in visible}
        left = [by_id[cid] for cid in self.state.pin_left if cid in by_id]
        right = [by_id[cid] for cid in self.state.pin_right if cid in by_id]
        pinned = set(self.state.pin_left) | set(self.state.pin_right)
        center = [c for c in visible if c.id not in pinned]
        return left + center + right

    def toggle_row(self, rid, selected: Optional[bool] = None) -> TableState:
        rid = str(rid)
        if selected is None:
            selected = not self.state.selection.get(rid, False)
        self.state = set_row_selected(self.state, rid, selected)
        return self.state

    def toggle_page_rows(self, selected: bool) -> TableState:
        ids = [row_id(r, self.row_key) for r in self.get_visible_slice().rows]
        self.state = set_rows_selected(self.state, ids, selected)
        return self.state

    def is_all_page_rows_selected(self) -> bool:
        rows = self.get_visible_slice().rows
        return bool(rows) and all(self.state.selection.get(row_id(r, self.row_key)) for r in rows)

    def selected_ids(self) -> List[str]:
        return selected_ids(self.state)

    def selected_records(self) -> List[dict]:
        chosen = set(self.selected_ids())
        return [r for r in self.records if row_id(r, self.row_key) in chosen]

    def get_visible_slice(self) -> TableView:
        return build_view(self.records, self.columns, self.state)

    def page_items(self, sibling_count: int = 1, boundary_count: int = 1) -> list:
        view = self.get_visible_slice()
        return build_page_items(view.page, view.page_count, sibling_count, boundary_count)

    def dispatch(self, action: Mapping[str, Any]) -> TableState:
        """Apply an action dict such as ``{"type": "set_filter", "column_id": "title", "token": "tee"}``.

        Unknown action types leave the state unchanged.
        """
        kind = action.get("type")
        cid = action.get("column_id", "")
        if kind == "set_filter":
            return self.set_filter(cid, action.get("token"))
        if kind == "remove_filter":
            return self.remove_filter(cid)
        if kind == "clear_filters":
            return self.clear_filters()
        if kind == "set_title_filter":
            return self.set_title_filter(action.get("names") or [])
        if kind == "set_sort":
            return self.set_sort(cid)
        if kind == "set_page":
            try:
                return self.set_page(int(action.get("page", 1)))
            except (TypeError, ValueError):
                return self.state
        if kind == "set_page_size":
            try:
                return self.set_page_size(int(action.get("page_size", 0)))
            except (TypeError, ValueError):
                return self.state
        if kind == "set_column_visibility":
            return self.set_column_visibility(cid, bool(action.get("visible", True)))
        if kind == "toggle_column_visibility":
            return self.toggle_column_visibility(cid)
        if kind == "set_column_pin":
            return self.set_column_pin(cid, action.get("side"))
        if kind == "toggle_row":
            return self.toggle_row(action.get("row_id", ""), action.get("selected"))
        if kind == "toggle_page_rows":
            return self.toggle_page_rows(bool(action.get("selected", True)))
        return self.state


# --- default product columns ---

def _first_variant(p: dict) -> dict:
    variants = p.get("variants") or []
    return variants[0] if variants and isinstance(variants[0], dict) else {}


def _to_float(v) -> float:
    try:
        return float(v)
    except (TypeError, ValueError):
        return 0.0


def _compare_at(p: dict) -> Optional[float]:
    v = _first_variant(p).get("compare_at_price")
    return _to_float(v) if v else None


def _tags(p: dict) -> str:
    tags = p.get("tags") or []
    return tags if isinstance(tags, str) else ", ".join(str(t) for t in tags)


PRODUCT_COLUMNS: Tuple[ColumnDescriptor, ...] = (
    ColumnDescriptor("id", "ID", default_visible=False),
    ColumnDescriptor("title", "Product Name", size=300, min_size=200, max_size=500),
    ColumnDescriptor("handle", "Handle", default_visible=False, size=350, min_size=200, max_size=600),
    ColumnDescriptor("vendor", "Vendor"),
    ColumnDescriptor("body_html", "Description", lambda p: p.get("body_html") or ""),
    ColumnDescriptor("price", "Price", lambda p: _to_float(_first_variant(p).get("price")) if _first_variant(p) else 0),
    ColumnDescriptor("compare_at_price", "Compare At Price", _compare_at),
    ColumnDescriptor("variants", "Variants Count", lambda p: len(p.get("variants") or [])),
    ColumnDescriptor("product_type", "Type"),
    ColumnDescriptor("variant_sku", "SKU", lambda p: _first_variant(p).get("sku") or "-"),
    ColumnDescriptor("variant_available", "Available", lambda p: bool(_first_variant(p).get("available", False))),
    ColumnDescriptor("variant_requires_shipping", "Requires Shipping", lambda p: bool(_first_variant(p).get("requires_shipping", False))),
    ColumnDescriptor("variant_taxable", "Taxable", lambda p: bool(_first_variant(p).get("taxable", False))),
    ColumnDescriptor("variant_grams", "Weight (g)", lambda p: _first_variant(p).get("grams") or 0),
    ColumnDescriptor("images", "Images Count", lambda p: len(p.get("images") or [])),
    ColumnDescriptor("image_src", "First Image", "images[0].src"),
    ColumnDescriptor("tags", "Tags", _tags),
    ColumnDescriptor("published_at", "Published At"),
    ColumnDescriptor("created_at", "Created At"),
    ColumnDescriptor("updated_at", "Updated At"),
)
