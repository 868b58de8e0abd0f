"""Config file discovery and reading.

Walk-up finder locates backlinkctl.toml, similar to how git finds .git/.
Supports the BACKLINKCTL_CONFIG env var and the --config CLI flag.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Any

CONFIG_FILENAME = "backlinkctl.toml"
CONFIG_ENV_VAR = "BACKLINKCTL_CONFIG"

logger = logging.getLogger(__name__)


def find_config(start: Path | None = None) -> Path | None:
    """Walk up from *start* (default: cwd) looking for backlinkctl.toml.

    Returns the path to the config file, or None if not found.
    Checks BACKLINKCTL_CONFIG env var first.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        if p.is_file():
            return p
        return None

    current = (start or Path.cwd()).resolve()
    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent
    return None


def read_toml(path: Path) -> dict[str, Any]:
    """Parse *path* as TOML. Unreadable or malformed files yield ``{}``."""
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as exc:
        logger.warning("Ignoring config %s: %s. Using defaults.", path, exc)
        return {}

