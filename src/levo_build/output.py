"""Rich console output for levo-build.

Status helpers for the CLI plus table and JSON renderings of a
PipelineResult. Respects the NO_COLOR environment variable.
"""

from __future__ import annotations

import json
import os
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from levo_build.interface import ComponentInterface
from levo_build.invoker import Invocation
from levo_build.models import PipelineResult, PipelineState, StageResult, StageStatus

# Rich respects NO_COLOR on its own, but --no-color must be able to force it
_force_no_color = os.environ.get("NO_COLOR") is not None


def create_console(no_color: bool = False, stderr: bool = False) -> Console:
    """Create a Rich Console instance with appropriate color settings.

    Args:
        no_color: If True, disable colored output. Also respects NO_COLOR env var.
        stderr: Write to standard error instead of standard output.

    Returns:
        Configured Console instance.
    """
    force_terminal = None
    if no_color or _force_no_color:
        force_terminal = False
    return Console(
        force_terminal=force_terminal,
        no_color=no_color or _force_no_color,
        stderr=stderr,
    )


# Default console instances
console = create_console()
diagnostics = create_console(stderr=True)


def success(message: str, **kwargs: Any) -> None:
    """Print a success message with green checkmark.

    Example:
        >>> success("Published ../../levo-server/public/read-file.wasm")
        ✓ Published ../../levo-server/public/read-file.wasm
    """
    console.print(f"[green]✓[/green] {message}", **kwargs)


def error(message: str, **kwargs: Any) -> None:
    """Print an error message with red X.

    Example:
        >>> error("Compilation failed with exit status 101")
        ✗ Compilation failed with exit status 101
    """
    console.print(f"[red]✗[/red] {message}", **kwargs)


def warning(message: str, **kwargs: Any) -> None:
    """Print a warning message with yellow triangle."""
    console.print(f"[yellow]⚠[/yellow] {message}", **kwargs)


def print_json(data: dict[str, Any], **kwargs: Any) -> None:
    """Print JSON data with syntax highlighting."""
    console.print_json(json.dumps(data, default=str), **kwargs)


def _current_console() -> Console:
    return console


def set_no_color(no_color: bool) -> None:
    """Replace the module consoles to enable/disable colors.

    Args:
        no_color: If True, disable colored output.
    """
    global console, diagnostics
    console = create_console(no_color=no_color)
    diagnostics = create_console(no_color=no_color, stderr=True)


def _status_icon(status: StageStatus) -> str:
    icons = {
        StageStatus.PASSED: "✓",
        StageStatus.FAILED: "✗",
        StageStatus.NOT_RUN: "·",
    }
    return icons.get(status, "?")


def _status_color(status: StageStatus) -> str:
    colors = {
        StageStatus.PASSED: "green",
        StageStatus.FAILED: "red",
        StageStatus.NOT_RUN: "dim",
    }
    return colors.get(status, "white")


def format_result_table(result: PipelineResult, console: Console | None = None) -> None:
    """Render a pipeline result as a Rich panel and table.

    Args:
        result: PipelineResult to display
        console: Optional Rich console (module console if not provided)
    """
    if console is None:
        console = _current_console()

    done = result.state == PipelineState.DONE
    color = "green" if done else "red"
    header = Text()
    header.append("Status: ", style="bold")
    header.append(result.state.value.upper(), style=f"bold {color}")
    if result.failed_stage is not None:
        header.append(f"\nFailed stage: {result.failed_stage.value}")
    if result.published_path is not None:
        header.append(f"\nPublished: {result.published_path}")
    if result.total_duration_ms > 0:
        header.append(f"\nDuration: {result.total_duration_ms}ms")
    console.print(Panel(header, title="[bold]levo-build[/bold]"))

    table = Table(show_header=True, header_style="bold")
    table.add_column("", width=2, justify="center")
    table.add_column("Stage", min_width=12)
    table.add_column("Message", min_width=30)
    table.add_column("Duration", justify="right", width=10)

    for stage in result.stages:
        duration = f"{stage.duration_ms}ms" if stage.duration_ms > 0 else "-"
        table.add_row(
            Text(_status_icon(stage.status), style=_status_color(stage.status)),
            Text(stage.stage.value, style=_status_color(stage.status)),
            Text(stage.message or "-", style="" if stage.message else "dim"),
            duration,
        )
    console.print(table)

    failed = [stage for stage in result.stages if stage.failed]
    for stage in failed:
        if stage.invocation is not None:
            console.print(f"[bold red]Command:[/bold red] {stage.invocation.display()}")
        if stage.output:
            console.print("[bold red]Output:[/bold red]")
            console.out(stage.output, highlight=False)


def format_result_json(result: PipelineResult, pretty: bool = True) -> str:
    """Format a pipeline result as JSON.

    Args:
        result: PipelineResult to format
        pretty: Whether to use indentation

    Returns:
        JSON string representation
    """
    data = _result_to_dict(result)
    if pretty:
        return json.dumps(data, indent=2, default=str)
    return json.dumps(data, default=str)


def _result_to_dict(result: PipelineResult) -> dict[str, Any]:
    return {
        "state": result.state.value,
        "passed": result.passed,
        "failed_stage": result.failed_stage.value if result.failed_stage else None,
        "error": _error_to_dict(result),
        "published_path": str(result.published_path) if result.published_path else None,
        "interface": _interface_to_dict(result.interface) if result.interface else None,
        "duration_ms": result.total_duration_ms,
        "started_at": result.started_at.isoformat(),
        "finished_at": result.finished_at.isoformat() if result.finished_at else None,
        "stages": [_stage_to_dict(stage) for stage in result.stages],
    }


def _error_to_dict(result: PipelineResult) -> dict[str, Any] | None:
    if result.error is None:
        return None
    return {
        "type": type(result.error).__name__,
        "message": result.error.user_message,
        "exit_status": result.error.exit_status,
    }


def _interface_to_dict(interface: ComponentInterface) -> dict[str, Any]:
    return {
        "world": interface.world,
        "imports": interface.import_names,
        "exports": interface.export_names,
    }


def _stage_to_dict(stage: StageResult) -> dict[str, Any]:
    return {
        "stage": stage.stage.value,
        "status": stage.status.value,
        "command": stage.invocation.display() if stage.invocation else None,
        "exit_status": stage.exit_status,
        "artifact": str(stage.artifact) if stage.artifact else None,
        "message": stage.message,
        "duration_ms": stage.duration_ms,
    }


def print_result(
    result: PipelineResult,
    output_format: str = "table",
    console: Console | None = None,
) -> None:
    """Print a pipeline result in the requested format.

    Args:
        result: PipelineResult to display
        output_format: Output format ("table" or "json")
        console: Optional Rich console
    """
    if console is None:
        console = _current_console()

    if output_format == "json":
        # Raw write so the JSON stays parseable
        console.file.write(format_result_json(result) + "\n")
    else:
        format_result_table(result, console)


def print_plan(invocations: list[Invocation], console: Console | None = None) -> None:
    """Print the command lines of a dry run, one per stage."""
    if console is None:
        console = _current_console()

    table = Table(show_header=True, header_style="bold")
    table.add_column("#", justify="right", width=3)
    table.add_column("Command")
    table.add_column("Working directory")
    for number, invocation in enumerate(invocations, start=1):
        table.add_row(str(number), invocation.display(), str(invocation.cwd))
    console.print(table)


def print_interface(interface: ComponentInterface, console: Console | None = None) -> None:
    """Print a component's imports and exports as a table."""
    if console is None:
        console = _current_console()

    table = Table(title=f"world {interface.world}", show_header=True, header_style="bold")
    table.add_column("Direction", width=9)
    table.add_column("Name")
    table.add_column("Kind", width=10)
    for direction, items in (("export", interface.exports), ("import", interface.imports)):
        for item in items:
            table.add_row(direction, item.name, item.kind.value)
    console.print(table)
