import json
from importlib.metadata import PackageNotFoundError, version as package_version
from dataclasses import dataclass
from pathlib import Path
from typing import Any, NoReturn

import typer

from navpack.artifact import (
    SnapshotError,
    read_snapshot,
    read_snapshot_envelope,
    tree_from_envelope,
)
from navpack.core.models import NavNode
from navpack.core.traversal import active_path, count_nodes
from navpack.diff import (
    ExpectationError,
    TransitionAssertionResult,
    assert_transition,
    diff_trees,
    load_expected_actions,
    render_actions,
    render_diff_summary,
)
from navpack.plugins import PluginError, plugins_from_env

app = typer.Typer(help="NavKit CLI")


@dataclass(slots=True)
class _OutputOptions:
    quiet: bool = False
    no_color: bool = False
    stable_json: bool = True


_OUTPUT_OPTIONS = _OutputOptions()


def _resolve_cli_version() -> str:
    try:
        return package_version("navkit")
    except PackageNotFoundError:
        from navpack import __version__ as local_version

        return local_version


def _version_callback(value: bool) -> None:
    if not value:
        return
    typer.echo(_resolve_cli_version(), color=False)
    raise typer.Exit()


@app.callback()
def app_options(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show NavKit version and exit.",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        help="Suppress non-error text output.",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable ANSI color output.",
    ),
    stable_json: bool = typer.Option(
        True,
        "--stable-json/--pretty-json",
        help="Emit stable compact JSON (or pretty JSON).",
    ),
) -> None:
    """Global output controls for all CLI commands."""
    _OUTPUT_OPTIONS.quiet = quiet
    _OUTPUT_OPTIONS.no_color = no_color
    _OUTPUT_OPTIONS.stable_json = stable_json


def _echo(message: str, *, err: bool = False, force: bool = False) -> None:
    if _OUTPUT_OPTIONS.quiet and not err and not force:
        return
    typer.echo(message, err=err, color=not _OUTPUT_OPTIONS.no_color)


def _echo_json(payload: dict[str, Any], *, err: bool = False) -> None:
    if _OUTPUT_OPTIONS.stable_json:
        rendered = json.dumps(payload, ensure_ascii=True, sort_keys=True, separators=(",", ":"))
    else:
        rendered = json.dumps(payload, ensure_ascii=True, sort_keys=True, indent=2)
    typer.echo(rendered, err=err, color=not _OUTPUT_OPTIONS.no_color)


def _fail(command: str, error: Exception, *, json_output: bool, **paths: Path) -> NoReturn:
    message = f"{command} failed: {error}"
    if json_output:
        _echo_json(
            {
                "status": "error",
                "exit_code": 1,
                "message": message,
                **{name: str(value) for name, value in paths.items()},
            }
        )
    else:
        _echo(message, err=True)
    raise typer.Exit(code=1) from error


def _load_pair(
    command: str, last: Path, current: Path, *, json_output: bool
) -> tuple[NavNode | None, NavNode | None]:
    try:
        return read_snapshot(last), read_snapshot(current)
    except (SnapshotError, FileNotFoundError) as error:
        _fail(command, error, json_output=json_output, last_path=last, current_path=current)


def _render_mismatches(result: TransitionAssertionResult, *, limit: int = 8) -> str:
    lines = [f"action mismatches: {len(result.mismatches)}"]
    for mismatch in result.mismatches[:limit]:
        lines.append(f"- #{mismatch.index}")
        lines.append(f"  expected={json.dumps(mismatch.expected, sort_keys=True)}")
        lines.append(f"  actual={json.dumps(mismatch.actual, sort_keys=True)}")
    remaining = len(result.mismatches) - limit
    if remaining > 0:
        lines.append(f"... {remaining} additional mismatch(es) not shown")
    return "\n".join(lines)


@app.command()
def diff(
    last: Path = typer.Argument(..., help="Path to the last-state .navtree snapshot."),
    current: Path = typer.Argument(..., help="Path to the current-state .navtree snapshot."),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Emit machine-readable diff output.",
    ),
    max_actions: int = typer.Option(
        50,
        "--max-actions",
        help="Maximum number of actions to print in text mode.",
    ),
) -> None:
    """Print the actions that move the UI from LAST to CURRENT."""
    last_tree, current_tree = _load_pair("diff", last, current, json_output=json_output)
    try:
        plugins_from_env(strict=True)
        result = diff_trees(last_tree, current_tree)
    except (PluginError, OSError) as error:
        _fail("diff", error, json_output=json_output, last_path=last, current_path=current)

    if json_output:
        _echo_json(
            {
                **result.to_dict(),
                "status": "ok",
                "exit_code": 0,
                "message": "diff completed",
                "last_path": str(last),
                "current_path": str(current),
            }
        )
        return

    _echo(render_diff_summary(result))
    _echo(render_actions(result, max_actions=max(1, max_actions)))


@app.command(name="assert")
def assert_actions(
    last: Path = typer.Argument(..., help="Path to the last-state .navtree snapshot."),
    current: Path = typer.Argument(..., help="Path to the current-state .navtree snapshot."),
    expected: Path = typer.Option(
        ...,
        "--expected",
        help="JSON file with the expected action list.",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Emit machine-readable assertion output.",
    ),
) -> None:
    """Fail (exit 1) unless the diff of LAST -> CURRENT matches the expected actions."""
    last_tree, current_tree = _load_pair("assert", last, current, json_output=json_output)
    try:
        expected_actions = load_expected_actions(expected)
    except (ExpectationError, FileNotFoundError) as error:
        _fail("assert", error, json_output=json_output, expected_path=expected)

    try:
        plugins_from_env(strict=True)
        result = assert_transition(last_tree, current_tree, expected_actions)
    except (PluginError, OSError) as error:
        _fail("assert", error, json_output=json_output, last_path=last, current_path=current)

    if json_output:
        _echo_json(
            {
                **result.to_dict(),
                "last_path": str(last),
                "current_path": str(current),
                "expected_path": str(expected),
            }
        )
    elif result.passed:
        _echo(f"assertion passed: {len(expected_actions)} action(s) matched")
    else:
        _echo("assertion failed", err=True)
        _echo(_render_mismatches(result), err=True)

    if not result.passed:
        raise typer.Exit(code=result.exit_code)


@app.command()
def verify(
    path: Path = typer.Argument(..., help="Path to a .navtree snapshot."),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Emit machine-readable verification output.",
    ),
) -> None:
    """Check a snapshot's schema, checksum and tree invariants."""
    try:
        envelope = read_snapshot_envelope(path)
        root = tree_from_envelope(envelope)
    except (SnapshotError, FileNotFoundError) as error:
        _fail("verify", error, json_output=json_output, path=path)

    metadata = envelope["metadata"]
    if json_output:
        _echo_json(
            {
                "status": "ok",
                "exit_code": 0,
                "message": "snapshot verified",
                "path": str(path),
                "snapshot_id": metadata["snapshot_id"],
                "version": envelope["version"],
                "node_count": count_nodes(root),
                "tree_hash": envelope["payload"]["tree_hash"],
            }
        )
        return

    _echo(
        f"snapshot ok: {metadata['snapshot_id']} "
        f"version={envelope['version']} nodes={count_nodes(root)}"
    )


@app.command()
def show(
    path: Path = typer.Argument(..., help="Path to a .navtree snapshot."),
) -> None:
    """Print the snapshot as an outline; '*' marks the visible navigation stack."""
    try:
        root = read_snapshot(path)
    except (SnapshotError, FileNotFoundError) as error:
        _fail("show", error, json_output=False, path=path)

    if root is None:
        _echo("<empty tree>")
        return

    visible = {node.key for node in active_path(root)}
    stack: list[tuple[NavNode, int]] = [(root, 0)]
    while stack:
        node, depth = stack.pop()
        marker = "*" if node.key in visible else " "
        label = f" ({node.label})" if node.label else ""
        _echo(f"{marker} {'  ' * depth}{node.key}{label}")
        stack.extend((child, depth + 1) for child in reversed(node.children))


def main() -> None:
    app()
