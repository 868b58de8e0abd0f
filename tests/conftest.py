"""Shared pytest fixtures and test helpers for backlinkctl tests."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from backlinkctl.config.models import BacklinksConfig, ScanConfig
from backlinkctl.config.settings import BacklinkSettings
from backlinkctl.infrastructure.workspace import Workspace
from backlinkctl.output.notify import Level
from backlinkctl.services.telemetry import disable_telemetry


class RecordingNotifier:
    """Notifier that keeps every message for assertions."""

    def __init__(self) -> None:
        self.messages: list[tuple[str, Level]] = []

    def notify(self, message: str, level: Level = Level.INFO) -> None:
        self.messages.append((message, level))

    @property
    def texts(self) -> list[str]:
        return [message for message, _ in self.messages]

    def at(self, level: Level) -> list[str]:
        return [message for message, lvl in self.messages if lvl == level]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer environment variables out of the settings chain."""
    import os

    for name in list(os.environ):
        if name.startswith("BACKLINKCTL_"):
            monkeypatch.delenv(name)


@pytest.fixture(autouse=True)
def _restore_root_logging() -> Iterator[None]:
    """CLI invocations reconfigure logging; put the root logger back."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)


@pytest.fixture(autouse=True)
def _reset_telemetry() -> Iterator[None]:
    """`-v` turns telemetry on for the whole thread; switch it back off."""
    yield
    disable_telemetry()


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def workspace_root(tmp_path: Path) -> Path:
    """Temporary workspace directory with a ``notes/`` folder.

    Single source of truth for the workspace layout; ``workspace`` and
    ``_isolated_workspace`` build on it.
    """
    (tmp_path / "notes").mkdir()
    return tmp_path


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def make_workspace(
    workspace_root: Path, notifier: RecordingNotifier
) -> Callable[..., Workspace]:
    """Factory: a Workspace on ``workspace_root`` with ``[backlinks]`` overrides."""
    created: list[Workspace] = []

    def _make(*, scan: dict[str, Any] | None = None, **backlinks: Any) -> Workspace:
        settings = BacklinkSettings.from_cli(
            root=workspace_root,
            backlinks=BacklinksConfig(**backlinks),
            scan=ScanConfig(**(scan or {})),
        )
        ws = Workspace(settings, notifier=notifier)
        created.append(ws)
        return ws

    yield _make
    for ws in created:
        ws.close()


@pytest.fixture
def workspace(make_workspace: Callable[..., Workspace]) -> Workspace:
    """Workspace with default configuration and a recording notifier."""
    return make_workspace()


@pytest.fixture
def _isolated_workspace(workspace_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to the temp workspace so the CLI operates on it.

    Use via ``@pytest.mark.usefixtures("_isolated_workspace")`` on command
    test classes.
    """
    monkeypatch.chdir(workspace_root)


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


def write_note(root: Path, relative: str, *lines: str) -> Path:
    """Write a note (one argument per line) and return its absolute path."""
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")
    return path


def read_note(path: Path) -> list[str]:
    return path.read_text(encoding="utf-8").splitlines()
