from __future__ import annotations

import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Iterable

from .errors import AccessDenied, NotFound, ParseFailure, ValidationFailure

logger = logging.getLogger(__name__)


def safe_rel_path(rel: str) -> str:
    """Normalize a client supplied relative path or refuse it.

    Rejects absolute paths, home-relative paths, drive letters and any
    ``.``/``..`` segment before the filesystem is touched.
    """
    raw = (rel or "").strip().replace("\\", "/")
    if not raw:
        raise ValidationFailure("A file path is required.")
    if raw.startswith("/") or raw.startswith("~") or re.match(r"^[A-Za-z]:", raw):
        raise AccessDenied("Invalid relative path.", path=rel)
    cleaned = re.sub(r"/+", "/", raw).rstrip("/")
    parts = cleaned.split("/")
    if not cleaned or any(part in ("..", ".") for part in parts):
        raise AccessDenied("Invalid relative path.", path=rel)
    return cleaned


class DocumentStore:
    """Files of one kind (pages or data) under a single root directory."""

    def __init__(self, root: Path, extensions: Iterable[str], *, pinned: Iterable[str] = ()) -> None:
        self.root = Path(root)
        self.extensions = frozenset(ext.lower() for ext in extensions)
        self.pinned = tuple(pinned)

    def __repr__(self) -> str:
        return f"DocumentStore({str(self.root)!r}, {sorted(self.extensions)!r})"

    def _allowed(self, name: str) -> bool:
        return any(name.lower().endswith(ext) for ext in self.extensions)

    def resolve(self, rel: str) -> tuple[str, Path]:
        """Return ``(clean_rel, absolute_path)`` for *rel* inside the root."""
        clean = safe_rel_path(rel)
        if not self._allowed(clean):
            raise AccessDenied(
                f"Only {', '.join(sorted(self.extensions))} files are allowed.", path=clean
            )
        root = self.root.resolve()
        path = (root / clean).resolve()
        if root not in path.parents:
            raise AccessDenied("Path escapes its document root.", path=clean)
        return clean, path

    def list(self) -> list[str]:
        if not self.root.is_dir():
            return []
        root = self.root.resolve()
        found: list[str] = []
        for path in root.rglob("*"):
            rel_parts = path.relative_to(root).parts
            if any(part.startswith(".") for part in rel_parts):
                continue
            if not path.is_file() or not self._allowed(path.name):
                continue
            if root not in path.resolve().parents:
                continue
            found.append(Path(*rel_parts).as_posix())
        return self.order(found)

    def order(self, paths: Iterable[str]) -> list[str]:
        """Lexicographic order with pinned names (``index.md``) in front."""
        ordered = sorted(paths)
        head = [p for p in self.pinned if p in ordered]
        return head + [p for p in ordered if p not in head]

    def exists(self, rel: str) -> bool:
        _, path = self.resolve(rel)
        return path.is_file()

    def read(self, rel: str) -> str:
        clean, path = self.resolve(rel)
        if not path.is_file():
            raise NotFound(f"File not found: {clean}", path=clean)
        try:
            return path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise ParseFailure(f"{clean} is not UTF-8 text: {exc}", path=clean) from exc

    def write(self, rel: str, content: str) -> str:
        clean, path = self.resolve(rel)
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
                handle.write(content)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.remove(tmp_name)
            raise
        logger.info("Wrote %s (%d bytes)", path, len(content.encode("utf-8")))
        return clean

    def delete(self, rel: str) -> str:
        clean, path = self.resolve(rel)
        if not path.is_file():
            raise NotFound(f"File not found: {clean}", path=clean)
        path.unlink()
        logger.info("Deleted %s", path)
        return clean
