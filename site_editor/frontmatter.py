from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from ruamel.yaml.comments import CommentedMap

from .errors import ParseFailure
from .yamlio import dump_yaml, load_yaml

logger = logging.getLogger(__name__)

FENCE = "---"


class FrontMatterMode(str, Enum):
    # The user edited the YAML text itself; it is written back verbatim.
    RAW = "raw"
    # The front matter arrives as a mapping and is serialized on save.
    STRUCTURED = "structured"


def split(raw: str) -> tuple[str, str]:
    """Split page text into ``(front_matter_raw, body)``.

    Only text that opens with the fence at offset 0 and has a second fence
    later on carries front matter; anything else is all body.
    """
    text = raw or ""
    if not text.startswith(FENCE):
        return "", text
    end = text.find(FENCE, len(FENCE))
    if end == -1:
        return "", text
    front = text[len(FENCE):end].strip()
    body = text[end + len(FENCE):].strip()
    return front, body


def parse(front_matter_raw: str) -> CommentedMap:
    """Decode front matter, falling back to an empty mapping.

    Front matter only decorates a page, so a YAML error never blocks the
    body from loading.
    """
    if not (front_matter_raw or "").strip():
        return CommentedMap()
    try:
        data = load_yaml(front_matter_raw, source="front matter")
    except ParseFailure as exc:
        logger.warning("Ignoring unreadable front matter: %s", exc.message)
        return CommentedMap()
    if data is None:
        return CommentedMap()
    if not isinstance(data, dict):
        logger.warning("Ignoring front matter that is not a mapping (%s)", type(data).__name__)
        return CommentedMap()
    return data


def wrap(front_matter_text: str, body: str) -> str:
    return f"{FENCE}\n{front_matter_text}\n{FENCE}\n{body}"


def render_raw(front_matter_raw: str, body: str) -> str:
    if not (front_matter_raw or "").strip():
        return body
    return wrap(front_matter_raw, body)


def render_structured(front_matter: dict[str, Any], body: str) -> str:
    if not front_matter:
        return body
    return wrap(dump_yaml(front_matter).rstrip("\n"), body)


def render(page: Any) -> str:
    """Full page text for *page* using the front matter mode it carries."""
    if page.mode is FrontMatterMode.STRUCTURED:
        return render_structured(page.front_matter or {}, page.body)
    return render_raw(page.front_matter_raw, page.body)
