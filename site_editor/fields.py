"""Editable field view of a YAML document.

``expand`` flattens a document into descriptors the editor renders one input
per leaf; ``collapse`` applies the edited leaf values back onto a copy of the
document the descriptors came from.
"""

from __future__ import annotations

import copy
import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Mapping, Sequence

from .errors import ValidationFailure
from .paths import FieldPath, Segment, is_container, join_path, set_value, split_path
from .yamlio import to_plain


class FieldKind(str, Enum):
    ARRAY = "array"
    OBJECT = "object"
    BOOLEAN = "boolean"
    NUMBER = "number"
    MARKDOWN = "markdown"
    URL = "url"
    TEXT = "text"


MARKDOWN_NAMES = frozenset(
    {
        "content",
        "body",
        "description",
        "bio",
        "summary",
        "text",
        "excerpt",
        "message",
        "quote",
        "details",
        "about",
    }
)
MARKDOWN_MARKERS = ("\n\n", "**", "*", "[", "#")
URL_NAME_PARTS = ("link", "url", "href", "image", "video", "src", "path")
LONG_TEXT = 100

_INTEGER_TEXT = re.compile(r"[+-]?\d+")
_UNCHECKED = {"", "off", "false", "0", "no"}


def _looks_like_markdown(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    if any(marker in value for marker in MARKDOWN_MARKERS):
        return True
    return len(value) > LONG_TEXT and "\n" in value


def infer_kind(name: str, value: Any) -> FieldKind:
    """Pick the input kind for a field; the first matching rule wins."""
    lowered = str(name or "").lower()
    if isinstance(value, list):
        return FieldKind.ARRAY
    if isinstance(value, dict):
        return FieldKind.OBJECT
    if isinstance(value, bool):
        return FieldKind.BOOLEAN
    if isinstance(value, (int, float)):
        return FieldKind.NUMBER
    if lowered in MARKDOWN_NAMES:
        return FieldKind.MARKDOWN
    if _looks_like_markdown(value):
        return FieldKind.MARKDOWN
    if any(part in lowered for part in URL_NAME_PARTS):
        return FieldKind.URL
    return FieldKind.TEXT


@dataclass(frozen=True)
class FieldDescriptor:
    path: FieldPath
    name: str
    kind: FieldKind
    value: Any

    @property
    def key(self) -> str:
        return join_path(self.path)

    @property
    def depth(self) -> int:
        return len(self.path) - 1

    @property
    def is_leaf(self) -> bool:
        return not is_container(self.value)

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": list(self.path),
            "key": self.key,
            "name": self.name,
            "type": self.kind.value,
            "depth": self.depth,
            "value": to_plain(self.value),
        }


def _item_label(parent_name: str, index: int) -> str:
    return f"{parent_name} #{index + 1}" if parent_name else f"Item #{index + 1}"


def _expand_into(
    out: list[FieldDescriptor],
    container: Any,
    prefix: tuple[Segment, ...],
    parent_name: str,
) -> None:
    if isinstance(container, dict):
        for key, value in container.items():
            name = str(key)
            path = prefix + (key,)
            out.append(FieldDescriptor(path, name, infer_kind(name, value), value))
            _expand_into(out, value, path, name)
    elif isinstance(container, list):
        # Elements have no name of their own; they are classified under the
        # name of the sequence holding them.
        for index, item in enumerate(container):
            path = prefix + (index,)
            label = _item_label(parent_name, index)
            out.append(FieldDescriptor(path, label, infer_kind(parent_name, item), item))
            _expand_into(out, item, path, parent_name)


def expand(document: Any) -> list[FieldDescriptor]:
    """All fields of *document* in document order, parents before children."""
    fields: list[FieldDescriptor] = []
    _expand_into(fields, document, (), "")
    return fields


def leaf_values(fields: Iterable[FieldDescriptor]) -> dict[FieldPath, Any]:
    return {field.path: field.value for field in fields if field.is_leaf}


def collapse(base: Any, edits: Mapping[Any, Any]) -> Any:
    """Copy *base* and assign every edit onto the copy.

    Keys of *edits* are path tuples or dot-joined text.  *base* itself is
    never modified; anything not named in *edits* is carried over as is.
    """
    result = copy.deepcopy(base)
    for raw_path, value in edits.items():
        if isinstance(raw_path, str):
            path = split_path(raw_path, result)
        else:
            path = tuple(raw_path)
        set_value(result, path, copy.deepcopy(value))
    return result


def _is_checked(raw: Any) -> bool:
    if raw is None or raw is False:
        return False
    if isinstance(raw, str):
        return raw.strip().lower() not in _UNCHECKED
    return bool(raw)


def coerce_input(kind: FieldKind, raw: Any) -> Any:
    """Turn a submitted input value into the value stored for *kind*."""
    if kind is FieldKind.BOOLEAN:
        return _is_checked(raw)
    if kind is FieldKind.NUMBER:
        if isinstance(raw, bool):
            raise ValidationFailure(f"'{raw}' is not a number.")
        if isinstance(raw, (int, float)):
            return raw
        text = str(raw if raw is not None else "").strip()
        try:
            number = float(text)
        except ValueError:
            raise ValidationFailure(f"'{text}' is not a number.") from None
        if not math.isfinite(number):
            raise ValidationFailure(f"'{text}' is not a finite number.")
        if _INTEGER_TEXT.fullmatch(text):
            # Whole numbers typed without a fraction stay YAML integers.
            return int(text)
        return number
    if raw is None:
        return ""
    return raw if isinstance(raw, str) else str(raw)


def collect_edits(
    fields: Sequence[FieldDescriptor],
    submitted: Mapping[str, Any],
) -> dict[FieldPath, Any]:
    """Edits from a form-style submission keyed by dot-joined paths.

    A boolean field missing from *submitted* is an unchecked box; any other
    field missing from it keeps its current value.
    """
    edits: dict[FieldPath, Any] = {}
    for field in fields:
        if not field.is_leaf:
            continue
        if field.kind is FieldKind.BOOLEAN:
            edits[field.path] = coerce_input(field.kind, submitted.get(field.key))
        elif field.key in submitted:
            edits[field.path] = coerce_input(field.kind, submitted[field.key])
    return edits
