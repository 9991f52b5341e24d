"""Tests for the external site build trigger."""

import threading
import time
from pathlib import Path

from site_editor.build import BUILD_LOG_LIMIT, SiteBuilder
from tests.conftest import FAKE_BUILD, python_command


def _builder(root: Path, script: str, **kwargs) -> SiteBuilder:
    return SiteBuilder(root, python_command(script), **kwargs)


class TestSiteBuilder:
    def test_success_publishes_output(self, tmp_path: Path) -> None:
        (tmp_path / "docs").mkdir()
        (tmp_path / "docs" / "stale.html").write_text("old", encoding="utf-8")

        result = _builder(tmp_path, FAKE_BUILD).build()

        assert result.success is True
        assert result.moved is True
        assert "site built" in result.output
        assert (tmp_path / "docs" / "index.html").read_text(encoding="utf-8") == "built"
        assert not (tmp_path / "docs" / "stale.html").exists()
        assert not (tmp_path / "_site").exists()

    def test_success_without_output_is_soft(self, tmp_path: Path) -> None:
        result = _builder(tmp_path, "print('nothing to do')").build()
        assert result.success is True
        assert result.moved is False

    def test_custom_directories(self, tmp_path: Path) -> None:
        script = "import os; os.makedirs('public', exist_ok=True)"
        result = _builder(tmp_path, script, output_dir="public", publish_dir="site").build()
        assert result.moved is True
        assert (tmp_path / "site").is_dir()

    def test_failure_is_reported(self, tmp_path: Path) -> None:
        builder = _builder(tmp_path, "import sys; print('boom'); sys.exit(3)")
        result = builder.build()
        assert result.success is False
        assert "code 3" in result.error
        assert "boom" in result.output
        status = builder.status()
        assert status["state"] == "error"
        assert status["last"]["success"] is False

    def test_missing_executable(self, tmp_path: Path) -> None:
        result = SiteBuilder(tmp_path, "definitely-not-a-site-generator build").build()
        assert result.success is False
        assert "not found" in result.error

    def test_empty_command(self, tmp_path: Path) -> None:
        result = SiteBuilder(tmp_path, "   ").build()
        assert result.success is False

    def test_disabled(self, tmp_path: Path) -> None:
        builder = SiteBuilder(tmp_path, "anything", enabled=False)
        result = builder.build()
        assert result.success is False
        assert result.error == "build disabled"
        assert builder.status()["state"] == "disabled"

    def test_log_is_bounded(self, tmp_path: Path) -> None:
        builder = _builder(tmp_path, "for i in range(300): print('line', i)")
        builder.build()
        logs = builder.status()["logs"]
        assert len(logs) == BUILD_LOG_LIMIT
        assert logs[-1] == "line 299"

    def test_status_after_success(self, tmp_path: Path) -> None:
        builder = _builder(tmp_path, FAKE_BUILD)
        assert builder.status()["state"] == "idle"
        builder.build()
        status = builder.status()
        assert status["state"] == "ready"
        assert status["last"]["moved"] is True

    def test_status_readable_while_building(self, tmp_path: Path) -> None:
        builder = _builder(tmp_path, "import time; time.sleep(1.5)")
        worker = threading.Thread(target=builder.build)
        worker.start()
        try:
            seen = []
            deadline = time.monotonic() + 5
            while time.monotonic() < deadline and worker.is_alive():
                started = time.monotonic()
                state = builder.status()["state"]
                assert time.monotonic() - started < 0.5
                seen.append(state)
                if state == "building":
                    break
                time.sleep(0.05)
            assert "building" in seen
        finally:
            worker.join()
        assert builder.status()["state"] == "ready"
