from __future__ import annotations

import logging
import shlex
import shutil
import subprocess
import threading
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

from .errors import BuildFailure

logger = logging.getLogger(__name__)

BUILD_LOG_LIMIT = 200


@dataclass
class BuildResult:
    success: bool
    moved: bool = False
    output: str = ""
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class SiteBuilder:
    """Runs the site generator and publishes its output directory.

    A build blocks its caller until the command exits.  Builds never raise:
    failures end up on the returned :class:`BuildResult`.
    """

    def __init__(
        self,
        project_root: Path,
        command: str,
        *,
        output_dir: str = "_site",
        publish_dir: str = "docs",
        enabled: bool = True,
    ) -> None:
        self.project_root = Path(project_root)
        self.command = command
        self.output_dir = output_dir
        self.publish_dir = publish_dir
        self.enabled = enabled
        self._lock = threading.RLock()
        # Serialises builds; _lock only guards logs and status.
        self._build_lock = threading.Lock()
        self._logs: list[str] = []
        self._status: dict[str, Any] = {
            "state": "idle",  # idle | building | ready | error | disabled
            "message": "",
            "last": None,
        }

    def _add_log(self, line: str) -> None:
        text = (line or "").rstrip()
        if not text:
            return
        with self._lock:
            self._logs.append(text)
            if len(self._logs) > BUILD_LOG_LIMIT:
                del self._logs[: len(self._logs) - BUILD_LOG_LIMIT]

    def _set_status(self, state: str, message: str, result: BuildResult | None = None) -> None:
        with self._lock:
            self._status["state"] = state
            self._status["message"] = message
            if result is not None:
                self._status["last"] = result.to_dict()

    def status(self) -> dict[str, Any]:
        with self._lock:
            snapshot = dict(self._status)
            snapshot["logs"] = list(self._logs)
        snapshot["command"] = self.command
        snapshot["enabled"] = self.enabled
        return snapshot

    def _run(self) -> str:
        try:
            argv = shlex.split(self.command)
        except ValueError as exc:
            raise BuildFailure(f"Invalid build command: {exc}") from exc
        if not argv:
            raise BuildFailure("No build command configured.")
        try:
            proc = subprocess.run(
                argv,
                cwd=str(self.project_root),
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
            )
        except FileNotFoundError as exc:
            raise BuildFailure(f"{argv[0]} not found in PATH") from exc
        except OSError as exc:
            raise BuildFailure(f"Failed to start build: {exc}") from exc

        output = proc.stdout or ""
        for line in output.splitlines():
            self._add_log(line)
        if proc.returncode != 0:
            raise BuildFailure(f"Build exited with code {proc.returncode}", output=output)
        return output

    def _publish(self) -> bool:
        """Replace the publish directory with fresh build output."""
        source = self.project_root / self.output_dir
        target = self.project_root / self.publish_dir
        if not source.is_dir():
            logger.warning("Build output %s not found; nothing to publish", source)
            return False
        try:
            if target.exists():
                shutil.rmtree(target)
            shutil.move(str(source), str(target))
        except OSError as exc:
            logger.warning("Could not move %s to %s: %s", source, target, exc)
            self._add_log(f"publish failed: {exc}")
            return False
        self._add_log(f"moved {self.output_dir} to {self.publish_dir}")
        return True

    def build(self) -> BuildResult:
        if not self.enabled:
            result = BuildResult(success=False, error="build disabled")
            self._set_status("disabled", "build disabled", result)
            return result

        with self._build_lock:
            self._add_log(f"$ {self.command}")
            self._set_status("building", "build started")
            try:
                output = self._run()
            except BuildFailure as exc:
                logger.error("Site build failed: %s", exc.message)
                self._add_log(exc.message)
                result = BuildResult(
                    success=False,
                    output=exc.output,
                    error=exc.message,
                )
                self._set_status("error", exc.message, result)
                return result

            moved = self._publish()
            result = BuildResult(success=True, moved=moved, output=output)
            logger.info("Site rebuilt%s", "" if moved else " (output not published)")
            self._set_status("ready", "site rebuilt", result)
            return result
