"""levo-build build command - Run the full pipeline."""

from __future__ import annotations

from pathlib import Path

import click

from levo_build.cli.errors import (
    CLIError,
    exit_code_for,
    format_pydantic_error,
    handle_build_error,
    handle_file_not_found,
    handle_not_a_file,
    handle_permission_error,
)
from levo_build.output import error, success


@click.command("build")
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to levo-build.yaml [default: ./levo-build.yaml if present]",
)
@click.option(
    "-s",
    "--source",
    "source",
    type=click.Path(file_okay=False),
    default=None,
    help="Source tree to build; working directory of every tool",
)
@click.option(
    "-t",
    "--target",
    "target",
    type=str,
    default=None,
    help="Compiler target triple [default: wasm32-wasi]",
)
@click.option(
    "-o",
    "--output-dir",
    "output_dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Serving directory the artifact is published into",
)
@click.option(
    "--adapter",
    "adapter",
    type=click.Path(dir_okay=False),
    default=None,
    help="Adapter artifact [default: ../wasi_snapshot_preview1.reactor.wasm]",
)
@click.option(
    "--dry-run",
    is_flag=True,
    default=False,
    help="Print the commands without running them",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Result format [default: table]",
)
def build(
    config_path: str | None,
    source: str | None,
    target: str | None,
    output_dir: str | None,
    adapter: str | None,
    dry_run: bool,
    output_format: str,
) -> None:
    """Compile, adapt, introspect and publish the component.

    Stops at the first failing stage; later stages never run and the
    published artifact is left as it was.

    Examples:

        levo-build build

        levo-build build --source clients/rust-test-read-file

        levo-build build --output-dir /srv/levo/public --format json
    """
    from pydantic import ValidationError as PydanticValidationError

    from levo_build import output
    from levo_build.config import DEFAULT_CONFIG_FILENAME, load_config
    from levo_build.errors import BuildError
    from levo_build.runner import PipelineRunner

    try:
        config = load_config(config_path)
        config = config.with_overrides(
            source_path=Path(source) if source else None,
            target_triple=target,
            serving_dir=Path(output_dir) if output_dir else None,
            adapter_path=Path(adapter) if adapter else None,
        )
    except FileNotFoundError:
        handle_file_not_found(config_path or "")
    except IsADirectoryError:
        handle_not_a_file(config_path or DEFAULT_CONFIG_FILENAME)
    except PermissionError:
        handle_permission_error(config_path or DEFAULT_CONFIG_FILENAME, "read")
    except PydanticValidationError as e:
        raise CLIError(format_pydantic_error(e)) from None
    except BuildError as e:
        handle_build_error(e)

    runner = PipelineRunner(config, console=output.diagnostics)

    if dry_run:
        output.print_plan(runner.plan())
        return

    result = runner.run()
    output.print_result(result, output_format=output_format)

    if result.error is not None:
        if output_format == "table":
            error(result.error.user_message)
        raise SystemExit(exit_code_for(result.error))

    if output_format == "table":
        success(f"Published {result.published_path}")
