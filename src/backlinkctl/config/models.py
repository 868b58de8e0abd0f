"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, backlinkctl.toml only contains
overrides. Invalid option values are never fatal; they fall back to the
default and log a warning.
"""

from __future__ import annotations

import logging
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

DEFAULT_HEADER = "## Backlinks"
DEFAULT_DEBOUNCE_MS = 500
HEADER_PREFIX = "## "


# --- backlinkctl.toml sections ---


class BacklinksConfig(BaseModel):
    """[backlinks] section."""

    model_config = {"frozen": True}

    auto_create: bool = True
    backlinks_header: str = DEFAULT_HEADER
    link_format: Literal["markdown", "wiki"] = "markdown"
    notify: bool = True
    workspace_only: bool = True
    debounce_ms: int = DEFAULT_DEBOUNCE_MS
    scan_on_open: bool = True
    scan_notify: bool = True

    @field_validator("link_format", mode="before")
    @classmethod
    def _fallback_link_format(cls, value: Any) -> Any:
        if value in ("markdown", "wiki"):
            return value
        logger.warning("Invalid link_format %r. Using 'markdown'.", value)
        return "markdown"

    @field_validator("debounce_ms", mode="before")
    @classmethod
    def _fallback_debounce(cls, value: Any) -> Any:
        if isinstance(value, str) and value.strip().isdigit():
            return int(value)
        # bool is an int subclass; reject it explicitly.
        if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
            return value
        logger.warning("Invalid debounce_ms %r. Using default %dms.", value, DEFAULT_DEBOUNCE_MS)
        return DEFAULT_DEBOUNCE_MS

    @field_validator("backlinks_header", mode="before")
    @classmethod
    def _fallback_header(cls, value: Any) -> Any:
        if isinstance(value, str) and value.startswith(HEADER_PREFIX):
            return value
        logger.warning(
            "backlinks_header must start with %r, got %r. Using default.", HEADER_PREFIX, value
        )
        return DEFAULT_HEADER


class ScanConfig(BaseModel):
    """[scan] section."""

    model_config = {"frozen": True}

    extension: str = ".md"
    skip_dirs: list[str] = Field(
        default_factory=lambda: [".git", ".obsidian", ".trash", "node_modules"]
    )
    workers: int = Field(default=1, ge=1)

