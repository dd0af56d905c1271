"""Custom build hook for Hatchling to embed the git commit in the package."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Any

from hatchling.builders.hooks.plugin.interface import BuildHookInterface

BUILD_INFO_PATH = "pledit/_build_info.py"


class CustomBuildHook(BuildHookInterface):
    """Writes pledit/_build_info.py, read by pledit.version."""

    def initialize(self, version: str, build_data: dict[str, Any]) -> None:
        project_root = Path(self.root)
        commit = self._run_git(["rev-parse", "HEAD"], cwd=project_root)
        date = self._run_git(["show", "-s", "--format=%cI", "HEAD"], cwd=project_root)
        content = (
            "# Auto-generated at build time.\n"
            f"COMMIT = {commit!r}\n"
            f"DATE = {date!r}\n"
        )
        (project_root / BUILD_INFO_PATH).write_text(content, encoding="utf-8")
        build_data.setdefault("artifacts", []).append(BUILD_INFO_PATH)

    def _run_git(self, args: list[str], cwd: Path) -> str | None:
        try:
            out = subprocess.check_output(["git", *args], cwd=str(cwd), stderr=subprocess.DEVNULL)
            return out.decode().strip() or None
        except (subprocess.CalledProcessError, FileNotFoundError, OSError):
            # A source tarball has no git metadata
            return None
