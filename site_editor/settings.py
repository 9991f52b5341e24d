from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_BUILD_COMMAND = "composer exec cecil build"
PAGE_EXTS = frozenset({".md"})
DATA_EXTS = frozenset({".yml", ".yaml"})


def _env_flag(name: str, default: bool = True) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return str(raw).strip().lower() not in {"0", "false", "no", "off"}


def _site_root() -> Path:
    env = os.environ.get("SITE_ROOT")
    if env:
        p = Path(env)
        return p if p.is_absolute() else (Path.cwd() / p)
    return Path.cwd()


def _under_root(root: Path, env_name: str, default: str) -> Path:
    env = os.environ.get(env_name)
    p = Path(env) if env else Path(default)
    return p if p.is_absolute() else (root / p)


@dataclass(frozen=True)
class EditorSettings:
    site_root: Path
    pages_dir: Path
    data_dir: Path
    build_command: str = DEFAULT_BUILD_COMMAND
    build_output_dir: str = "_site"
    publish_dir: str = "docs"
    build_enabled: bool = True
    port: int = 3000
    log_level: str = "INFO"

    @classmethod
    def for_root(cls, root: Path, **overrides) -> "EditorSettings":
        """Settings with the default `pages/` and `data/` layout under *root*."""
        root = Path(root)
        values = {
            "site_root": root,
            "pages_dir": root / "pages",
            "data_dir": root / "data",
        }
        values.update(overrides)
        return cls(**values)

    @classmethod
    def from_env(cls) -> "EditorSettings":
        root = _site_root()
        try:
            port = int(os.environ.get("PORT", "3000"))
        except ValueError:
            port = 3000
        return cls(
            site_root=root,
            pages_dir=_under_root(root, "PAGES_DIR", "pages"),
            data_dir=_under_root(root, "DATA_DIR", "data"),
            build_command=os.environ.get("BUILD_COMMAND") or DEFAULT_BUILD_COMMAND,
            build_output_dir=os.environ.get("BUILD_OUTPUT_DIR") or "_site",
            publish_dir=os.environ.get("PUBLISH_DIR") or "docs",
            build_enabled=_env_flag("SITE_BUILD", True),
            port=port,
            log_level=(os.environ.get("LOG_LEVEL") or "INFO").upper(),
        )
