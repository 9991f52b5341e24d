"""Shared fixtures: a throwaway site layout and an app wired to it."""

from __future__ import annotations

import shlex
import sys
from pathlib import Path

import pytest

from site_editor.app import create_app
from site_editor.settings import EditorSettings

# Stands in for the site generator: writes a one-page site into _site/.
FAKE_BUILD = (
    "import os, pathlib; "
    "os.makedirs('_site', exist_ok=True); "
    "pathlib.Path('_site/index.html').write_text('built'); "
    "print('site built')"
)


def python_command(script: str) -> str:
    return f"{shlex.quote(sys.executable)} -c {shlex.quote(script)}"


@pytest.fixture
def site_root(tmp_path: Path) -> Path:
    """Site with a pages/ and a data/ root holding a few documents."""
    pages = tmp_path / "pages"
    data = tmp_path / "data"
    (pages / "blog").mkdir(parents=True)
    data.mkdir()

    (pages / "index.md").write_text(
        "---\ntitle: Home\ndate: 2024-01-05\npublished: true\n---\n# Welcome\n",
        encoding="utf-8",
    )
    (pages / "about.md").write_text("Just a body.", encoding="utf-8")
    (pages / "blog" / "first-post.md").write_text(
        "---\ntitle: First\n---\nHello", encoding="utf-8"
    )
    (data / "site.yml").write_text(
        "# site settings\n"
        "title: A  # shown in the header\n"
        "tags:\n"
        "  - x\n"
        "  - y\n"
        "featured: false\n"
        "count: 3\n",
        encoding="utf-8",
    )
    (data / "team.yaml").write_text(
        "- name: Ada\n"
        "  bio: Writes **code**\n"
        "  image: ada.png\n"
        "- name: Linus\n"
        "  bio: Kernel person\n"
        "  image: linus.png\n",
        encoding="utf-8",
    )
    return tmp_path


@pytest.fixture
def settings(site_root: Path) -> EditorSettings:
    return EditorSettings.for_root(site_root, build_command=python_command(FAKE_BUILD))


@pytest.fixture
def app(settings: EditorSettings):
    flask_app = create_app(settings)
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()
