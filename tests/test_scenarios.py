"""End-to-end scenarios through the services, the way the CLI drives them."""

from __future__ import annotations

from pathlib import Path

from backlinkctl.infrastructure.resolver import PathResolver
from backlinkctl.infrastructure.workspace import Workspace
from backlinkctl.services.graph import GraphService
from backlinkctl.services.sync import SyncService
from tests.conftest import read_note, write_note


def _section(path: Path) -> list[str]:
    lines = read_note(path)
    start = lines.index("## Backlinks") + 1
    section: list[str] = []
    for line in lines[start:]:
        if not line.startswith("- "):
            break
        section.append(line)
    return section


class TestBacklinkScenarios:
    def test_link_creates_section_with_one_entry(
        self, workspace: Workspace, workspace_root: Path
    ) -> None:
        a = write_note(workspace_root, "notes/a.md", "[B](b.md)")
        b = write_note(workspace_root, "notes/b.md")
        SyncService(workspace).sync_file(a)
        assert _section(b) == ["- [a](a.md)"]

    def test_second_identical_link_adds_nothing(
        self, workspace: Workspace, workspace_root: Path
    ) -> None:
        a = write_note(workspace_root, "notes/a.md", "[B](b.md)")
        b = write_note(workspace_root, "notes/b.md")
        svc = SyncService(workspace)
        svc.sync_file(a)
        first = b.read_text()
        write_note(workspace_root, "notes/a.md", "[B](b.md)", "[B again](b.md)")
        svc.sync_file(a)
        assert b.read_text() == first
        assert _section(b) == ["- [a](a.md)"]

    def test_dead_link_reported_never_created(
        self, workspace: Workspace, workspace_root: Path
    ) -> None:
        a = write_note(workspace_root, "notes/a.md", "[ghost](ghost.md)")
        before = a.read_text()
        result = GraphService(workspace).dead_links(a)
        assert [item["target"] for item in result.data["items"]] == ["ghost.md"]
        assert a.read_text() == before
        assert sorted(p.name for p in (workspace_root / "notes").iterdir()) == ["a.md"]

    def test_backlink_path_round_trips(self, workspace_root: Path) -> None:
        a = write_note(workspace_root, "notes/deep/a.md", "[B](../other/b.md)")
        b = write_note(workspace_root, "notes/other/b.md")
        resolver = PathResolver(workspace_root)
        assert resolver.resolve(a, "../other/b.md") == b
        back = resolver.backlink_target_path(b, a)
        assert resolver.resolve(b, back) == a

    def test_full_workspace_cycle(self, workspace: Workspace, workspace_root: Path) -> None:
        a = write_note(workspace_root, "notes/a.md", "# A", "[B](b.md) and [[sub/c]]")
        b = write_note(workspace_root, "notes/b.md", "# B")
        c = write_note(workspace_root, "notes/sub/c.md", "# C", "[ghost](ghost.md)")
        graph = GraphService(workspace)
        assert graph.orphans().data["items"] == [str(a)]

        SyncService(workspace).sync_all()
        assert graph.orphans().data["items"] == []
        assert _section(b) == ["- [a](a.md)"]
        assert _section(c) == ["- [a](../a.md)"]
        assert SyncService(workspace).check_file(a).data["count"] == 0
        assert graph.dead_links_all().data["count"] == 1
