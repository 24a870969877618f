from __future__ import annotations
import json
import re
import unicodedata
from datetime import datetime


ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}(?::\d{2}(?:\.\d+)?)?(?:Z|[+-]\d{2}:?\d{2})?")
MARKUP_RE = re.compile(r"</?[A-Za-z][^>]*>")
TAG_RE = re.compile(r"<[^>]*>")
WS_RE = re.compile(r"\s+")
FRACTION_RE = re.compile(r"\.(\d+)")


def slugify_for_handle(s: str) -> str:
    if not s:
        return ""
    s = unicodedata.normalize('NFKD', s)
    s = s.encode('ascii', 'ignore').decode('ascii')
    s = re.sub(r"[^a-zA-Z0-9]+", "-", s)
    s = s.strip('-').lower()
    return s


# --- Value classifiers, applied in this order by format_value ---

def is_date_like(value: str) -> bool:
    return bool(ISO_DATE_RE.match(value or ""))


def looks_like_markup(value: str) -> bool:
    return bool(MARKUP_RE.search(value or ""))


def strip_markup(value: str) -> str:
    text = TAG_RE.sub("", value or "")
    return WS_RE.sub(" ", text).strip()


def parse_iso_datetime(value: str) -> datetime | None:
    m = ISO_DATE_RE.match(value or "")
    if not m:
        return None
    text = m.group(0)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    # fromisoformat on older interpreters wants +HH:MM and exactly 6 fraction digits
    text = re.sub(r"([+-]\d{2})(\d{2})$", r"\1:\2", text)
    text = FRACTION_RE.sub(lambda f: "." + (f.group(1) + "000000")[:6], text)
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def format_datetime(dt: datetime) -> str:
    """Render as an en-US locale date-time, e.g. ``1/15/2024, 3:04:05 PM``.

    The wall-clock time of the source string is kept; no timezone conversion
    happens, so the output is stable across machines.
    """
    hour = dt.hour % 12 or 12
    suffix = "AM" if dt.hour < 12 else "PM"
    return f"{dt.month}/{dt.day}/{dt.year}, {hour}:{dt.minute:02d}:{dt.second:02d} {suffix}"


def format_date(value: str) -> str:
    dt = parse_iso_datetime(value)
    if dt is None:
        return value
    return format_datetime(dt)


def format_number(value) -> str:
    if isinstance(value, float):
        if value != value:
            return "NaN"
        if value.is_integer():
            return str(int(value))
    return str(value)


def yes_no(value) -> str:
    return "Yes" if value else "No"


def to_text(value) -> str:
    """Natural string conversion used when no classifier applies."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return format_number(value)
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def format_value(value) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ", ".join(to_text(v) for v in value)
    if isinstance(value, bool):
        return yes_no(value)
    if isinstance(value, str):
        if is_date_like(value):
            return format_date(value)
        if looks_like_markup(value):
            return strip_markup(value)
        return value
    return to_text(value)
