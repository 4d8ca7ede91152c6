"""levo-build inspect command - Show a component's interface."""

from __future__ import annotations

from pathlib import Path

import click

from levo_build.cli.errors import (
    CLIError,
    handle_build_error,
    handle_file_not_found,
    handle_not_a_file,
    handle_permission_error,
)


@click.command("inspect")
@click.argument("component", type=click.Path(dir_okay=False), required=False)
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to levo-build.yaml [default: ./levo-build.yaml if present]",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json", "wit"]),
    default="table",
    help="Output format [default: table]",
)
def inspect_cmd(component: str | None, config_path: str | None, output_format: str) -> None:
    """Introspect an existing component without rebuilding it.

    Defaults to the configured component artifact (my-component.wasm).

    Examples:

        levo-build inspect

        levo-build inspect my-component.wasm --format json
    """
    from rich.console import Console

    from levo_build import output
    from levo_build.config import DEFAULT_CONFIG_FILENAME, load_config
    from levo_build.errors import BuildError
    from levo_build.invoker import SubprocessInvoker
    from levo_build.stages import IntrospectStage

    try:
        config = load_config(config_path)
    except FileNotFoundError:
        handle_file_not_found(config_path or "")
    except IsADirectoryError:
        handle_not_a_file(config_path or DEFAULT_CONFIG_FILENAME)
    except PermissionError:
        handle_permission_error(config_path or DEFAULT_CONFIG_FILENAME, "read")
    except BuildError as e:
        handle_build_error(e)

    target = Path(component).resolve() if component else None
    # Only the wit format wants the raw description on the console
    console = output.console if output_format == "wit" else Console(quiet=True)
    stage = IntrospectStage(config, SubprocessInvoker(), console=console, component=target)

    try:
        stage.run()
    except BuildError as e:
        handle_build_error(e)

    interface = stage.interface
    if interface is None:
        raise CLIError("Introspection produced no interface description")

    if output_format == "json":
        output.print_json(
            {
                "world": interface.world,
                "imports": [item.model_dump(mode="json") for item in interface.imports],
                "exports": [item.model_dump(mode="json") for item in interface.exports],
            }
        )
    elif output_format == "table":
        output.print_interface(interface)
