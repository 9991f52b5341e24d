from __future__ import annotations

from datetime import date, datetime
from io import StringIO
from typing import Any

from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap, CommentedSeq
from ruamel.yaml.error import YAMLError

from .errors import ParseFailure


def _new_yaml() -> YAML:
    y = YAML()
    y.preserve_quotes = True
    # Data files are hand edited: keep 2-space blocks and never wrap long text.
    y.indent(mapping=2, sequence=4, offset=2)
    y.width = 4096
    return y


def load_yaml(text: str, *, source: str = "document") -> Any:
    """Round-trip load *text*; key order, quotes and comments are kept."""
    try:
        return _new_yaml().load(text)
    except YAMLError as exc:
        raise ParseFailure(f"Failed to read {source}: {exc}", path=source) from exc


def dump_yaml(document: Any) -> str:
    buf = StringIO()
    _new_yaml().dump(to_commented(document), buf)
    return buf.getvalue()


def to_commented(value: Any) -> Any:
    """Convert plain dicts/lists (e.g. a JSON payload) to ruamel containers.

    Values that already are ruamel containers are returned untouched so
    their comments survive.
    """
    if isinstance(value, (CommentedMap, CommentedSeq)):
        return value
    if isinstance(value, dict):
        return CommentedMap((key, to_commented(item)) for key, item in value.items())
    if isinstance(value, list):
        return CommentedSeq(to_commented(item) for item in value)
    return value


def to_plain(value: Any) -> Any:
    """JSON-ready copy of a loaded document."""
    if isinstance(value, dict):
        return {str(key): to_plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_plain(item) for item in value]
    if isinstance(value, bool) or value is None:
        return value
    if isinstance(value, int):
        return int(value)
    if isinstance(value, float):
        return float(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, str):
        return str(value)
    return str(value)
