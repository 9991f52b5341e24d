from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from . import frontmatter
from .errors import ValidationFailure
from .frontmatter import FrontMatterMode
from .yamlio import dump_yaml, load_yaml, to_plain

PAGE_SUFFIX = ".md"
INDEX_PAGE = "index.md"
NEW_PAGE_BODY = "Start writing your content here..."


@dataclass
class Page:
    path: str
    body: str = ""
    front_matter_raw: str = ""
    front_matter: dict[str, Any] | None = None
    mode: FrontMatterMode = FrontMatterMode.RAW

    @classmethod
    def from_text(cls, path: str, raw: str) -> "Page":
        front_raw, body = frontmatter.split(raw)
        return cls(
            path=path,
            body=body,
            front_matter_raw=front_raw,
            front_matter=frontmatter.parse(front_raw),
        )

    @classmethod
    def from_payload(cls, path: str, payload: dict[str, Any]) -> "Page":
        """Build the page a save request describes.

        ``frontMatterRaw`` selects raw mode and ``frontMatter`` structured
        mode; a request carrying both is refused.
        """
        body = payload.get("markdown", "")
        if body is None:
            body = ""
        if not isinstance(body, str):
            raise ValidationFailure("`markdown` must be a string.", path=path)
        raw = payload.get("frontMatterRaw")
        if raw is None:
            raw = ""
        if not isinstance(raw, str):
            raise ValidationFailure("`frontMatterRaw` must be a string.", path=path)
        has_raw = raw != ""
        has_mapping = payload.get("frontMatter") is not None
        if has_raw and has_mapping:
            raise ValidationFailure(
                "Send either `frontMatterRaw` or `frontMatter`, not both.", path=path
            )
        if has_mapping:
            mapping = payload["frontMatter"]
            if not isinstance(mapping, dict):
                raise ValidationFailure("`frontMatter` must be an object.", path=path)
            return cls(path=path, body=body, front_matter=mapping, mode=FrontMatterMode.STRUCTURED)
        return cls(path=path, body=body, front_matter_raw=raw, mode=FrontMatterMode.RAW)

    def render(self) -> str:
        return frontmatter.render(self)

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "markdown": self.body,
            "frontMatter": to_plain(self.front_matter or {}),
            "frontMatterRaw": self.front_matter_raw,
        }


@dataclass
class DataFile:
    path: str
    document: Any = field(default=None)

    @classmethod
    def from_text(cls, path: str, raw: str) -> "DataFile":
        return cls(path=path, document=load_yaml(raw, source=path))

    def render(self) -> str:
        if not isinstance(self.document, (dict, list)):
            raise ValidationFailure(
                "A data file must hold a mapping or a sequence.", path=self.path
            )
        return dump_yaml(self.document)

    def to_dict(self) -> dict[str, Any]:
        return {"path": self.path, "data": to_plain(self.document)}


def title_from_path(path: str) -> str:
    stem = path[: -len(PAGE_SUFFIX)] if path.endswith(PAGE_SUFFIX) else path
    name = stem.split("/")[-1].replace("-", " ")
    return re.sub(r"\b\w", lambda m: m.group(0).upper(), name)


def new_page(path: str, *, today: date | None = None) -> Page:
    """A draft for a page that does not exist yet; nothing is written."""
    cleaned = (path or "").strip()
    if not cleaned:
        raise ValidationFailure("Please enter a page path (e.g., about.md or blog/post.md)")
    if ".." in cleaned or cleaned.startswith("/"):
        raise ValidationFailure("Invalid page path", path=cleaned)
    if not cleaned.endswith(PAGE_SUFFIX):
        cleaned += PAGE_SUFFIX

    title = title_from_path(cleaned)
    day = (today or date.today()).isoformat()
    raw = f'title: "{title}"\ndate: {day}\npublished: true'
    return Page(
        path=cleaned,
        body=f"# {title}\n\n{NEW_PAGE_BODY}",
        front_matter_raw=raw,
        front_matter=frontmatter.parse(raw),
    )
