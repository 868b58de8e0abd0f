"""Tests for the sync and ensure commands."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from backlinkctl.cli import cli
from tests.conftest import read_note, write_note


@pytest.mark.usefixtures("_isolated_workspace")
class TestSyncCommand:
    def test_sync_file(self, cli_runner: CliRunner, workspace_root: Path) -> None:
        write_note(workspace_root, "notes/a.md", "[B](b.md)")
        b = write_note(workspace_root, "notes/b.md", "# B")
        result = cli_runner.invoke(cli, ["sync", "notes/a.md"])
        assert result.exit_code == 0, result.output
        assert "OK  sync" in result.stdout
        assert "inserted: 1" in result.stdout
        assert "backlinkctl: Added backlink in b.md" in result.stderr
        assert read_note(b)[-2] == "- [a](a.md)"

    def test_sync_json(self, cli_runner: CliRunner, workspace_root: Path) -> None:
        a = write_note(workspace_root, "notes/a.md", "[B](b.md)", "[ghost](ghost.md)")
        write_note(workspace_root, "notes/b.md")
        result = cli_runner.invoke(cli, ["--json", "sync", "notes/a.md"])
        data = json.loads(result.stdout)
        assert data["ok"] is True
        assert data["data"]["path"] == str(a)
        assert data["data"]["unresolved"] == ["ghost.md"]

    def test_sync_several_files(self, cli_runner: CliRunner, workspace_root: Path) -> None:
        write_note(workspace_root, "notes/a.md", "[C](c.md)")
        write_note(workspace_root, "notes/b.md", "[C](c.md)")
        c = write_note(workspace_root, "notes/c.md")
        result = cli_runner.invoke(cli, ["-q", "sync", "notes/a.md", "notes/b.md"])
        assert result.exit_code == 0
        assert result.stdout == "OK: sync\nOK: sync\n"
        assert {"- [a](a.md)", "- [b](b.md)"} <= set(read_note(c))

    def test_sync_all(self, cli_runner: CliRunner, workspace_root: Path) -> None:
        write_note(workspace_root, "notes/a.md", "[B](b.md)")
        write_note(workspace_root, "notes/b.md")
        result = cli_runner.invoke(cli, ["--json", "sync", "--all"])
        data = json.loads(result.stdout)
        assert data["op"] == "sync_all"
        assert data["data"]["count"] == 1

    @pytest.mark.parametrize("args", [["sync"], ["sync", "--all", "notes/a.md"]])
    def test_usage_error(self, cli_runner: CliRunner, args: list[str]) -> None:
        result = cli_runner.invoke(cli, args)
        assert result.exit_code == 2
        assert "Pass one or more FILES, or --all." in result.output

    def test_failed_file_does_not_stop_batch(
        self, cli_runner: CliRunner, workspace_root: Path
    ) -> None:
        write_note(workspace_root, "notes/a.md", "[B](b.md)")
        write_note(workspace_root, "notes/c.md", "[B](b.md)")
        b = write_note(workspace_root, "notes/b.md", "# B")
        result = cli_runner.invoke(
            cli, ["-q", "sync", "notes/a.md", "notes/missing.md", "notes/c.md"]
        )
        assert result.exit_code == 1
        assert result.stdout == "OK: sync\nOK: sync\n"
        assert "ERROR: sync - " in result.stderr
        assert "missing.md" in result.stderr
        assert {"- [a](a.md)", "- [c](c.md)"} <= set(read_note(b))

    def test_missing_file_exits_1(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["sync", "notes/nope.md"])
        assert result.exit_code == 1
        assert "ERROR  sync" in result.stderr

    def test_non_markdown_warns(self, cli_runner: CliRunner, workspace_root: Path) -> None:
        (workspace_root / "notes" / "a.txt").write_text("[B](b.md)\n")
        result = cli_runner.invoke(cli, ["sync", "notes/a.txt"])
        assert result.exit_code == 0
        assert "skipped: not a markdown file" in result.stdout
        assert "WARNING: Not a markdown file" in result.stderr

    def test_wiki_format_from_toml(self, cli_runner: CliRunner, workspace_root: Path) -> None:
        (workspace_root / "backlinkctl.toml").write_text('[backlinks]\nlink_format = "wiki"\n')
        write_note(workspace_root, "notes/a.md", "[B](b.md)")
        b = write_note(workspace_root, "notes/b.md")
        cli_runner.invoke(cli, ["sync", "notes/a.md"])
        assert "- [[a]]" in read_note(b)

    def test_notify_off_silences_info(
        self, cli_runner: CliRunner, workspace_root: Path
    ) -> None:
        (workspace_root / "backlinkctl.toml").write_text("[backlinks]\nnotify = false\n")
        write_note(workspace_root, "notes/a.md", "[B](b.md)")
        write_note(workspace_root, "notes/b.md")
        result = cli_runner.invoke(cli, ["sync", "notes/a.md"])
        assert "backlinkctl:" not in result.stderr


@pytest.mark.usefixtures("_isolated_workspace")
class TestEnsureCommand:
    def test_ensure(self, cli_runner: CliRunner, workspace_root: Path) -> None:
        write_note(workspace_root, "notes/a.md")
        b = write_note(workspace_root, "notes/b.md", "# B")
        result = cli_runner.invoke(cli, ["ensure", "notes/b.md", "notes/a.md"])
        assert result.exit_code == 0, result.output
        assert "status: inserted" in result.stdout
        assert read_note(b) == ["# B", "", "## Backlinks", "- [a](a.md)", ""]

    def test_ensure_twice_reports_exists(
        self, cli_runner: CliRunner, workspace_root: Path
    ) -> None:
        write_note(workspace_root, "notes/a.md")
        write_note(workspace_root, "notes/b.md")
        cli_runner.invoke(cli, ["ensure", "notes/b.md", "notes/a.md"])
        result = cli_runner.invoke(cli, ["--json", "ensure", "notes/b.md", "notes/a.md"])
        assert json.loads(result.stdout)["data"]["status"] == "exists"

    def test_ensure_missing_target(self, cli_runner: CliRunner, workspace_root: Path) -> None:
        write_note(workspace_root, "notes/a.md")
        result = cli_runner.invoke(cli, ["--json", "ensure", "notes/b.md", "notes/a.md"])
        assert result.exit_code == 1
        assert json.loads(result.stderr)["error"]["code"] == "NOT_FOUND"
