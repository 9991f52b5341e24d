"""Addressing values inside decoded YAML documents.

A field path is a tuple of segments: ``str`` for a mapping key and ``int``
for a sequence index.  Paths travel as dot-joined text (``"team.0.name"``)
only at the HTTP boundary.  A mapping key that itself contains ``.`` cannot
be told apart from a separator in that form; :func:`ambiguous_keys` reports
such keys instead of rewriting them.
"""

from __future__ import annotations

from typing import Any, Iterator, Sequence, Union

from .errors import InvalidPath

Segment = Union[str, int]
FieldPath = tuple[Segment, ...]

SEPARATOR = "."


class _Missing:
    _instance: "_Missing | None" = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


def is_container(value: Any) -> bool:
    return isinstance(value, (dict, list))


def _as_index(segment: Segment) -> int | None:
    if isinstance(segment, bool):
        return None
    if isinstance(segment, int):
        return segment if segment >= 0 else None
    if isinstance(segment, str) and segment.isdecimal():
        return int(segment)
    return None


def _resolve_key(node: dict, segment: Segment) -> Any:
    """Return the key actually stored in *node* for *segment*, or MISSING.

    YAML allows integer keys (``2024: ...``) which arrive from the boundary as
    text, so ``"2024"`` and ``2024`` are tried both ways.
    """
    if segment in node:
        return segment
    if isinstance(segment, str) and segment.isdecimal() and int(segment) in node:
        return int(segment)
    if isinstance(segment, int) and not isinstance(segment, bool) and str(segment) in node:
        return str(segment)
    return MISSING


def _step(node: Any, segment: Segment) -> Any:
    if isinstance(node, dict):
        key = _resolve_key(node, segment)
        return MISSING if key is MISSING else node[key]
    if isinstance(node, list):
        index = _as_index(segment)
        if index is None or index >= len(node):
            return MISSING
        return node[index]
    return MISSING


def get_value(document: Any, path: Sequence[Segment]) -> Any:
    """Value at *path*, or ``MISSING`` when any step does not resolve."""
    node = document
    for segment in path:
        node = _step(node, segment)
        if node is MISSING:
            return MISSING
    return node


def set_value(document: Any, path: Sequence[Segment], value: Any) -> None:
    """Assign *value* at *path* in place.

    Every container above the final segment must already exist; nothing is
    created on the way down.
    """
    path = tuple(path)
    if not path:
        raise InvalidPath("Field path must not be empty.")

    parent = document
    for depth, segment in enumerate(path[:-1]):
        parent = _step(parent, segment)
        if parent is MISSING or not is_container(parent):
            raise InvalidPath(
                f"'{join_path(path[: depth + 1])}' does not resolve to a container.",
                path=join_path(path),
            )

    last = path[-1]
    if isinstance(parent, dict):
        key = _resolve_key(parent, last)
        parent[last if key is MISSING else key] = value
        return
    if isinstance(parent, list):
        index = _as_index(last)
        if index is None:
            raise InvalidPath(f"Sequence index expected, got '{last}'.", path=join_path(path))
        if index >= len(parent):
            raise InvalidPath(f"Index {index} is out of range.", path=join_path(path))
        parent[index] = value
        return
    raise InvalidPath("Field path does not address a container.", path=join_path(path))


def join_path(path: Sequence[Segment]) -> str:
    return SEPARATOR.join(str(segment) for segment in path)


def split_path(text: str, document: Any = None) -> FieldPath:
    """Decode a dot-joined path.

    With *document*, a decimal segment becomes an ``int`` only where it
    indexes a sequence.  Without one, every decimal segment becomes an ``int``.
    """
    cleaned = (text or "").strip()
    if not cleaned:
        raise InvalidPath("Field path must not be empty.")
    parts = cleaned.split(SEPARATOR)
    if any(part == "" for part in parts):
        raise InvalidPath(f"Malformed field path '{cleaned}'.", path=cleaned)

    if document is None:
        return tuple(int(part) if part.isdecimal() else part for part in parts)

    segments: list[Segment] = []
    node = document
    for part in parts:
        if isinstance(node, list) and part.isdecimal():
            segment: Segment = int(part)
        elif isinstance(node, dict):
            key = _resolve_key(node, part)
            segment = part if key is MISSING else key
        else:
            segment = part
        segments.append(segment)
        node = _step(node, segment)
    return tuple(segments)


def walk_keys(document: Any, prefix: FieldPath = ()) -> Iterator[FieldPath]:
    """Yield the path of every mapping key and sequence element, pre-order."""
    if isinstance(document, dict):
        items: Iterator[tuple[Segment, Any]] = iter(document.items())
    elif isinstance(document, list):
        items = iter(enumerate(document))
    else:
        return
    for segment, value in items:
        path = prefix + (segment,)
        yield path
        yield from walk_keys(value, path)


def ambiguous_keys(document: Any) -> list[FieldPath]:
    """Paths whose last segment is a mapping key containing the separator."""
    return [
        path
        for path in walk_keys(document)
        if isinstance(path[-1], str) and SEPARATOR in path[-1]
    ]
