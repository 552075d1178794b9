"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO). Renderers
are dispatched by ``result.op`` in :func:`render_result`; unknown ops
fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from mdctl.output.console import create_console, get_output, style_for_action

if TYPE_CHECKING:
    from rich.console import Console

    from mdctl.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal, which is
    the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} - {msg}"

    if result.op == "read":
        return str(result.data.get("content", ""))
    if result.op == "exists":
        return "true" if result.data.get("exists") else "false"

    items = result.data.get("items")
    if items and isinstance(items, list):
        paths = [str(item.get("file_path", "")) for item in items if isinstance(item, dict)]
        return "\n".join(p for p in paths if p)
    if "path" in result.data:
        return str(result.data["path"])

    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    label = Text("OK", style="md.ok")
    op = Text(f"  {result.op}", style="md.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="md.key")
    if key == "id":
        v = Text(str(value), style="md.id")
    elif key.endswith("path"):
        v = Text(str(value), style="md.path")
    elif key.endswith("_count") or key.startswith("total_"):
        v = Text(str(value), style="md.count")
    else:
        v = Text(str(value))
    console.print(k, v, end="")
    console.print()


def _fields(console: Console, data: dict[str, Any], keys: tuple[str, ...]) -> None:
    for key in keys:
        if key in data and data[key] is not None:
            _field(console, key, data[key])


def _human_size(size: int) -> str:
    value = float(size)
    for unit in ("B", "KB", "MB"):
        if value < 1024:
            return f"{value:.0f} {unit}" if unit == "B" else f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} GB"


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="md.error")
    op = Text(f"  {result.op}", style="md.op")
    console.print(label, op, Text(" - "), Text(msg))
    if err is None:
        return
    suggestion = err.detail.get("suggestion")
    if suggestion:
        console.print(Text(f"  suggestion: {suggestion}", style="md.key"))
    if verbose and err.detail:
        console.print(Text(f"  code: {err.code}", style="dim"))
        for k, v in err.detail.items():
            if k != "suggestion":
                console.print(Text(f"    {k}: {v}", style="dim"))


# ── File renderers ────────────────────────────────────────────────────


def _render_mutation(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render create/update/delete/path results."""
    _status_line(console, result)
    keys: tuple[str, ...] = ("id", "type", "path", "size", "backup_path", "exists")
    if verbose:
        keys = (*keys, "absolute_path")
    _fields(console, result.data, keys)


def _render_read(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Print file content verbatim (no markup interpretation)."""
    console.print(Text(str(result.data.get("content", ""))), end="", soft_wrap=True)


def _render_metadata(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    _fields(
        console,
        result.data,
        ("id", "file_path", "size", "created_at", "updated_at", "checksum"),
    )


def _render_list(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    items = result.data.get("items", [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("ID", style="md.id", no_wrap=True)
    table.add_column("Path", style="md.path")
    table.add_column("Size", justify="right")
    table.add_column("Modified", style="dim")
    for item in items:
        table.add_row(
            str(item.get("id", "")),
            str(item.get("file_path", "")),
            _human_size(int(item.get("size", 0))),
            str(item.get("updated_at", "")),
        )
    console.print(table)
    console.print(f"\n{result.data.get('count', len(items))} {result.data.get('type', '')} files")


def _render_verify(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    _fields(console, result.data, ("path", "current_checksum", "expected_checksum", "restored"))


# ── Directory renderers ───────────────────────────────────────────────


def _render_stats(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Type")
    table.add_column("Directory", style="md.path")
    table.add_column("Files", justify="right", style="md.count")
    table.add_column("Size", justify="right")
    table.add_column("Last modified", style="dim")
    for item in result.data.get("items", []):
        table.add_row(
            str(item.get("type", "")),
            str(item.get("directory", "")),
            str(item.get("file_count", 0)),
            _human_size(int(item.get("total_size", 0))),
            str(item.get("last_modified") or "-"),
        )
    console.print(table)
    console.print(
        f"\n{result.data.get('total_files', 0)} files, "
        f"{_human_size(int(result.data.get('total_size', 0)))}"
    )


def _render_paths(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render init/initialize/validate/cleanup results that list directories."""
    _status_line(console, result)
    d = result.data
    _fields(
        console,
        d,
        (
            "project_path",
            "config_path",
            "base_path",
            "data_dir",
            "is_valid",
            "backup_path",
            "file_count",
        ),
    )
    for key in ("created", "missing", "removed"):
        if key in d:
            paths = d[key]
            _field(console, key, len(paths))
            for p in paths:
                console.print(Text(f"    {p}", style="md.path"))


# ── Embed renderers ───────────────────────────────────────────────────


def _render_embeds(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    _fields(console, result.data, ("is_valid", "references"))


def _render_references(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    refs = result.data.get("references", [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Line", justify="right")
    table.add_column("Col", justify="right")
    table.add_column("Type")
    table.add_column("Index", justify="right", style="md.id")
    table.add_column("Text")
    for ref in refs:
        table.add_row(
            str(ref.get("line", "")),
            str(ref.get("column", "")),
            str(ref.get("type", "")),
            str(ref.get("index", "")),
            Text(str(ref.get("text") or "")),
        )
    console.print(table)
    console.print(f"\n{result.data.get('count', len(refs))} references")


# ── Migration renderers ───────────────────────────────────────────────


def _render_migration(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render migrate_all / migrate_file / rollback summaries."""
    d = result.data
    _status_line(console, result)
    if d.get("dry_run"):
        console.print("  [md.warning]DRY RUN[/md.warning]")
    _fields(
        console,
        d,
        (
            "total_files",
            "total_items",
            "success_count",
            "skipped_count",
            "failure_count",
            "backup_dir",
        ),
    )

    rows = [r for r in d.get("results", []) if verbose or r.get("action") != "skipped"]
    if rows:
        console.print()
        table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
        table.add_column("ID", style="md.id", no_wrap=True)
        table.add_column("Source")
        table.add_column("Action")
        table.add_column("Path", style="md.path")
        table.add_column("Detail")
        for r in rows:
            action = str(r.get("action", ""))
            table.add_row(
                str(r.get("id", "")),
                str(r.get("source_file", "")),
                Text(action, style=style_for_action(action)),
                str(r.get("markdown_path") or ""),
                Text(str(r.get("reason") or "")),
            )
        console.print(table)


def _render_status(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("File")
    table.add_column("Items", justify="right")
    table.add_column("Migrated", justify="right", style="md.ok")
    table.add_column("Pending", justify="right", style="md.warning")
    for f in d.get("files", []):
        table.add_row(
            str(f.get("file", "")),
            str(f.get("total_items", 0)),
            str(f.get("migrated_items", 0)),
            str(f.get("pending_items", 0)),
        )
    console.print(table)
    console.print(
        f"\n{d.get('total_files', 0)} files: {d.get('migrated_items', 0)} of "
        f"{d.get('total_items', 0)} items migrated, {d.get('pending_items', 0)} pending"
    )


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    # Files
    "generate_path": _render_mutation,
    "create": _render_mutation,
    "update": _render_mutation,
    "delete": _render_mutation,
    "exists": _render_mutation,
    "read": _render_read,
    "metadata": _render_metadata,
    "list_by_type": _render_list,
    "verify": _render_verify,
    # Project
    "init": _render_paths,
    # Directories
    "initialize": _render_paths,
    "validate": _render_paths,
    "cleanup": _render_paths,
    "backup": _render_paths,
    "stats": _render_stats,
    # Embeds
    "validate_embeds": _render_embeds,
    "extract_references": _render_references,
    # Migration
    "migrate_all": _render_migration,
    "migrate_file": _render_migration,
    "rollback": _render_migration,
    "status": _render_status,
}
