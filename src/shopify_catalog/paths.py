"""
Path expressions over product records.

A path addresses a value inside a nested record parsed from JSON:

    path     := segment ('.' segment)* ['.length']
    segment  := name ['[' digits ']']

``variants[0].sku`` reads the SKU of the first variant, ``images.length``
counts the images. Paths are parsed once into a small ``PathExpr`` and then
walked over plain dict/list trees; nothing ever uses attribute access.

Resolution never raises. A miss (missing key, out-of-range index, a value
that is not a container, or a path that does not parse) yields ``0`` for
``.length`` paths and ``''`` otherwise.
"""

from __future__ import annotations
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Optional, Tuple, Union

from .normalize import format_value


LENGTH = "length"


class PathSyntaxError(ValueError):
    pass


@dataclass(frozen=True)
class Segment:
    name: str
    index: Optional[int] = None


@dataclass(frozen=True)
class PathExpr:
    segments: Tuple[Segment, ...]
    length: bool = False

    def __str__(self) -> str:
        parts = [s.name if s.index is None else f"{s.name}[{s.index}]" for s in self.segments]
        if self.length:
            parts.append(LENGTH)
        return ".".join(parts)


class _Parser:
    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def error(self, msg: str) -> PathSyntaxError:
        return PathSyntaxError(f"{msg} at position {self.pos} in {self.text!r}")

    def peek(self) -> str:
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def parse(self) -> PathExpr:
        if not self.text:
            raise self.error("empty path")
        segments = [self.segment()]
        while self.peek() == ".":
            self.pos += 1
            segments.append(self.segment())
        if self.pos != len(self.text):
            raise self.error(f"unexpected {self.peek()!r}")
        length = False
        last = segments[-1]
        if len(segments) > 1 and last.name == LENGTH and last.index is None:
            segments.pop()
            length = True
        return PathExpr(tuple(segments), length)

    def segment(self) -> Segment:
        start = self.pos
        while self.peek() and self.peek() not in ".[]":
            self.pos += 1
        name = self.text[start:self.pos].strip()
        if not name:
            raise self.error("expected field name")
        if self.peek() != "[":
            return Segment(name)
        self.pos += 1
        start = self.pos
        while self.peek().isdigit():
            self.pos += 1
        digits = self.text[start:self.pos]
        if not digits:
            raise self.error("expected array index")
        if self.peek() != "]":
            raise self.error("expected ']'")
        self.pos += 1
        return Segment(name, int(digits))


@lru_cache(maxsize=512)
def parse_path(text: str) -> PathExpr:
    return _Parser((text or "").strip()).parse()


_MISSING = object()


def _step(node: Any, segment: Segment) -> Any:
    if not isinstance(node, dict):
        return _MISSING
    node = node.get(segment.name, _MISSING)
    if node is None or node is _MISSING:
        return _MISSING
    if segment.index is None:
        return node
    if not isinstance(node, (list, tuple)) or segment.index >= len(node):
        return _MISSING
    node = node[segment.index]
    return _MISSING if node is None else node


def _walk(record: Any, expr: PathExpr) -> Any:
    node = record
    for segment in expr.segments:
        node = _step(node, segment)
        if node is _MISSING:
            return _MISSING
    return node


def resolve_raw(record: Any, path: Union[str, PathExpr]) -> Any:
    """Return the unformatted value at ``path`` or ``None`` on a miss.

    ``.length`` paths return the element count (``0`` on a miss). A record
    whose value at the prefix is a dict with its own ``length`` key returns
    that key's value instead of a count.
    """
    try:
        expr = path if isinstance(path, PathExpr) else parse_path(path)
    except PathSyntaxError:
        return None
    node = _walk(record, expr)
    if expr.length:
        if node is _MISSING:
            return 0
        if isinstance(node, dict) and LENGTH in node:
            return node[LENGTH]
        if isinstance(node, (list, tuple, str)):
            return len(node)
        return 0
    return None if node is _MISSING else node


def is_length_path(path: str) -> bool:
    try:
        return parse_path(path).length
    except PathSyntaxError:
        return (path or "").strip().endswith("." + LENGTH)


def resolve(record: Any, path: Union[str, PathExpr]) -> Union[str, int]:
    value = resolve_raw(record, path)
    if isinstance(path, PathExpr):
        length = path.length
    else:
        length = is_length_path(path)
    if length:
        if value is None:
            return 0
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    return format_value(value)
