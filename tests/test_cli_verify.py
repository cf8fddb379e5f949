import json
from pathlib import Path

from typer.testing import CliRunner

from navpack.artifact import write_snapshot
from navpack.cli.app import app
from navpack.core.models import NavNode


def _tree() -> NavNode:
    return NavNode(
        "root",
        [
            NavNode("home", label="Home"),
            NavNode("inbox", [NavNode("thread-1"), NavNode("thread-2")], active="thread-2"),
        ],
        active="inbox",
    )


def test_cli_verify_passes_for_valid_snapshot(tmp_path: Path) -> None:
    path = tmp_path / "state.navtree"
    write_snapshot(_tree(), path)

    result = CliRunner().invoke(app, ["verify", str(path), "--json"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout.strip())
    assert payload["status"] == "ok"
    assert payload["snapshot_id"] == "state"
    assert payload["node_count"] == 5


def test_cli_verify_text_output(tmp_path: Path) -> None:
    path = tmp_path / "state.navtree"
    write_snapshot(_tree(), path)

    result = CliRunner().invoke(app, ["verify", str(path)])

    assert result.exit_code == 0
    assert "snapshot ok: state version=1.0 nodes=5" in result.stdout


def test_cli_verify_fails_for_tampered_snapshot(tmp_path: Path) -> None:
    path = tmp_path / "state.navtree"
    write_snapshot(_tree(), path)
    raw = json.loads(path.read_text(encoding="utf-8"))
    raw["payload"]["tree"]["active"] = "home"
    path.write_text(json.dumps(raw), encoding="utf-8")

    result = CliRunner().invoke(app, ["verify", str(path), "--json"])

    assert result.exit_code == 1
    payload = json.loads(result.stdout.strip())
    assert payload["status"] == "error"
    assert "checksum mismatch" in payload["message"]


def test_cli_show_marks_visible_stack(tmp_path: Path) -> None:
    path = tmp_path / "state.navtree"
    write_snapshot(_tree(), path)

    result = CliRunner().invoke(app, ["show", str(path)])

    assert result.exit_code == 0
    assert result.stdout.splitlines() == [
        "* root",
        "    home (Home)",
        "*   inbox",
        "      thread-1",
        "*     thread-2",
    ]


def test_cli_show_empty_tree(tmp_path: Path) -> None:
    path = tmp_path / "empty.navtree"
    write_snapshot(None, path)

    result = CliRunner().invoke(app, ["show", str(path)])

    assert result.exit_code == 0
    assert result.stdout.strip() == "<empty tree>"
