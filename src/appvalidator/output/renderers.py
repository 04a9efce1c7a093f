"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO). The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from appvalidator.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from appvalidator.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
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
        return f"ERROR: {result.op}: {msg}"

    if result.op == "rules":
        return "\n".join(result.data.get("rules", []))
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    """Print the OK status line."""
    console.print(Text.assemble(("OK", "av.ok"), (f"  {result.op}", "av.op")))


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="av.key")
    if key in ("rule", "tag"):
        v = Text(str(value), style="av.rule")
    elif isinstance(value, (dict, list)):
        v = Text(json.dumps(value, separators=(",", ":")))
    else:
        v = Text(str(value))
    console.print(Text.assemble(k, v))


def _dependency_lines(console: Console, dependencies: list[dict[str, Any]]) -> None:
    if not dependencies:
        console.print(Text("  dependencies: none", style="av.key"))
        return
    console.print(Text("  dependencies:", style="av.key"))
    for dep in dependencies:
        if dep.get("present"):
            mark = Text("present", style="av.present")
        else:
            mark = Text("absent", style="av.absent")
        console.print(Text(f"    {dep.get('path', '')}"), mark)


def _field_error_lines(console: Console, errors: list[dict[str, Any]]) -> None:
    for err in errors:
        tag = err.get("tag", "")
        param = err.get("param", "")
        rule = f"{tag}={param}" if param else tag
        console.print(
            Text(f"  {err.get('namespace', '')}", style="bold"),
            Text(rule, style="av.rule"),
            Text(f"value={err.get('value')!r}", style="av.key"),
        )


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    console.print(Text.assemble(("ERROR", "av.error"), (f"  {result.op}", "av.op"), f": {msg}"))

    errors = result.data.get("errors")
    if errors:
        _field_error_lines(console, errors)
    if "dependencies" in result.data:
        _dependency_lines(console, result.data["dependencies"])

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(Text(f"    {k}: {v}"))


# ── Operation renderers ───────────────────────────────────────────────


def _render_rules(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render the rule registry as a table."""
    rules = result.data.get("rules", [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Rule", style="av.rule", no_wrap=True)
    for name in rules:
        table.add_row(name)
    console.print(table)
    console.print(f"\n{len(rules)} rule(s) registered")
    if verbose:
        _field(console, "plugins", result.data.get("plugins", []))


def _render_eval(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render a passing evaluation with the dependencies that were checked."""
    _status_line(console, result)
    for key in ("rule", "param", "kind", "threshold"):
        if key in result.data:
            _field(console, key, result.data[key])
    _dependency_lines(console, result.data.get("dependencies", []))


def _render_check(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    checked = result.data.get("checked", 0)
    console.print(f"[av.ok]OK[/av.ok]  {checked} field(s) passed validation.")


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    "rules": _render_rules,
    "eval": _render_eval,
    "check": _render_check,
}
