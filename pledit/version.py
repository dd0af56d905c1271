from __future__ import annotations

import importlib.metadata
import subprocess
from pathlib import Path
from typing import NamedTuple, Optional

DISTRIBUTION = "pledit"


class BuildInfo(NamedTuple):
    version: Optional[str]
    commit: Optional[str]
    date: Optional[str]
    dirty: bool


def _run_git(args: list[str], cwd: Path) -> Optional[str]:
    try:
        out = subprocess.check_output(["git", *args], cwd=str(cwd), stderr=subprocess.DEVNULL)
        return out.decode().strip() or None
    except (subprocess.CalledProcessError, FileNotFoundError, OSError):
        return None


def _package_version() -> Optional[str]:
    try:
        return importlib.metadata.version(DISTRIBUTION)
    except importlib.metadata.PackageNotFoundError:
        return None


def _from_git_checkout() -> Optional[tuple[str, str, bool]]:
    """Commit, date and dirty flag when running from a source checkout."""
    here = Path(__file__).resolve().parent
    commit = _run_git(["rev-parse", "HEAD"], cwd=here)
    if commit is None:
        return None
    date = _run_git(["show", "-s", "--format=%cI", "HEAD"], cwd=here)
    status = _run_git(["status", "--porcelain"], cwd=here)
    return commit, date, bool(status)


def _from_embedded_file() -> Optional[tuple[str, str, bool]]:
    # Generated at build time by the hatch build hook
    try:
        from . import _build_info  # type: ignore
    except ImportError:
        return None
    commit = getattr(_build_info, "COMMIT", None)
    date = getattr(_build_info, "DATE", None)
    if commit or date:
        return commit, date, False
    return None


def get_build_info() -> BuildInfo:
    # Priority: live git checkout -> embedded file -> unknowns
    vcs = _from_git_checkout() or _from_embedded_file() or (None, None, False)
    return BuildInfo(_package_version(), *vcs)


def get_version_string() -> str:
    info = get_build_info()
    version = info.version or "unknown"
    # Short (7-character) git hashes
    commit = info.commit[:7] if info.commit else "unknown"
    dirty_suffix = "-dirty" if info.dirty else ""
    date = info.date or "unknown"
    return f"pledit {version} ({commit}{dirty_suffix} {date})"
