"""Editor configuration loaded from a JSON file.

The first file found is used:

- the path in the ``PLEDIT_CONFIG`` environment variable,
- ``./pledit.json``,
- ``config.json`` in the platform config directory (``platformdirs``).
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import platformdirs

from .constants import EditorConstants

logger = logging.getLogger(__name__)


@dataclass
class EditorConfig:
    """User settings for the editor."""

    tab_width: int = EditorConstants.TAB_WIDTH
    # Number of spaces inserted by the TAB key, or None to insert a TAB
    tabspaces: Optional[int] = None
    hscroll_step: int = EditorConstants.HSCROLL_STEP
    undo_limit: Optional[int] = None
    log_file: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EditorConfig":
        """Build a config from a dict, keeping defaults for invalid values."""
        config = cls()
        known = {f.name for f in fields(cls)}
        for key, value in data.items():
            if key not in known:
                # Unknown settings are ignored (forward compatibility)
                continue
            if validate_setting(key, value):
                setattr(config, key, value)
            else:
                logger.warning(f"Invalid value for setting {key!r}: {value!r}, using default")
        return config


def validate_setting(key: str, value: Any) -> bool:
    """Validate a setting value.

    Args:
        key: Setting key name.
        value: Setting value to validate.

    Returns:
        True if setting is valid, False otherwise.
    """
    is_int = isinstance(value, int) and not isinstance(value, bool)
    if key in ('tab_width', 'hscroll_step'):
        return is_int and 1 <= value <= 200
    if key == 'tabspaces':
        # false (as in JSON) means "insert a TAB character"
        return value is None or value is False or (is_int and 1 <= value <= 16)
    if key == 'undo_limit':
        return value is None or (is_int and value > 0)
    if key == 'log_file':
        return value is None or isinstance(value, str)
    return True


def config_search_path() -> list[Path]:
    """Return candidate config files, most specific first."""
    paths = []
    env_path = os.environ.get(EditorConstants.CONFIG_ENV_VAR)
    if env_path:
        paths.append(Path(env_path))
    paths.append(Path.cwd() / EditorConstants.LOCAL_CONFIG_NAME)
    paths.append(Path(platformdirs.user_config_dir("pledit")) / EditorConstants.CONFIG_FILE_NAME)
    return paths


def load_config(paths: Optional[list[Path]] = None) -> EditorConfig:
    """Load the first config file found.

    Returns defaults if no file exists or the file cannot be parsed.
    """
    for path in paths if paths is not None else config_search_path():
        if not path.is_file():
            continue
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError, UnicodeDecodeError) as e:
            logger.warning(f"Could not load config from {path}: {e}")
            return EditorConfig()
        if not isinstance(data, dict):
            logger.warning(f"Config file {path} has invalid format (not a dict), ignoring")
            return EditorConfig()
        logger.info(f"Loaded config from {path}")
        config = EditorConfig.from_dict(data)
        if config.tabspaces is False:
            config.tabspaces = None
        return config
    return EditorConfig()
