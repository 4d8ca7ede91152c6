"""CLI entry point for levo-build.

Defines the main command group. Sub-commands are imported lazily so
``levo-build --help`` stays fast; running ``levo-build`` without a
sub-command performs a full ``build`` with the default configuration.
"""

from __future__ import annotations

import importlib
from typing import Any

import click
import rich_click as rclick

from levo_build import __version__
from levo_build.logging_config import configure_logging
from levo_build.output import set_no_color

rclick.rich_click.TEXT_MARKUP = "markdown"
rclick.rich_click.SHOW_ARGUMENTS = True
rclick.rich_click.GROUP_ARGUMENTS_OPTIONS = True


class LazyGroup(rclick.RichGroup):
    """Click group that loads commands lazily.

    Commands are only imported when actually invoked, not at import time.

    Attributes:
        lazy_subcommands: Mapping of command names to module paths.
    """

    def __init__(
        self,
        *args: Any,
        lazy_subcommands: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> None:
        """Initialize LazyGroup.

        Args:
            *args: Positional arguments for parent class.
            lazy_subcommands: Mapping of command name to module path.
                Format: {"build": "levo_build.cli.commands.build.build"}
            **kwargs: Keyword arguments for parent class.
        """
        super().__init__(*args, **kwargs)
        self.lazy_subcommands: dict[str, str] = lazy_subcommands or {}

    def list_commands(self, ctx: click.Context) -> list[str]:
        commands = set(super().list_commands(ctx))
        commands.update(self.lazy_subcommands.keys())
        return sorted(commands)

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        cmd = super().get_command(ctx, cmd_name)  # type: ignore[arg-type]
        if cmd is not None:
            return cmd

        if cmd_name not in self.lazy_subcommands:
            return None

        module_path = self.lazy_subcommands[cmd_name]
        module_name, attr_name = module_path.rsplit(".", 1)
        mod = importlib.import_module(module_name)
        return getattr(mod, attr_name)  # type: ignore[no-any-return]


LAZY_COMMANDS = {
    "build": "levo_build.cli.commands.build.build",
    "inspect": "levo_build.cli.commands.inspect.inspect_cmd",
    "init": "levo_build.cli.commands.init.init",
    "config": "levo_build.cli.commands.config.config_cmd",
}


@click.command(
    cls=LazyGroup,
    lazy_subcommands=LAZY_COMMANDS,
    invoke_without_command=True,
)
@click.version_option(version=__version__, prog_name="levo-build")
@click.option(
    "--no-color",
    is_flag=True,
    default=False,
    help="Disable colored output.",
    is_eager=True,
    expose_value=False,
    callback=lambda ctx, param, value: set_no_color(value) if value else None,
)
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    default=False,
    help="Log every pipeline event to stderr.",
)
@click.option(
    "--log-format",
    type=click.Choice(["console", "json"]),
    default="console",
    help="Log line format [default: console]",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, log_format: str) -> None:
    """levo-build - build and publish a levo WebAssembly component.

    Runs `cargo build`, `wasm-tools component new`, `wasm-tools component wit`
    and the brotli encoder in sequence, stopping at the first failure.

    **Getting Started:**

    - `levo-build` - Build and publish with the default layout
    - `levo-build build --dry-run` - Show the commands without running them
    - `levo-build inspect my-component.wasm` - List a component's interface
    - `levo-build init` - Write a levo-build.yaml to customise paths
    """
    configure_logging(verbose=verbose, log_format=log_format)  # type: ignore[arg-type]

    if ctx.invoked_subcommand is None:
        build_cmd = ctx.command.get_command(ctx, "build")  # type: ignore[attr-defined]
        ctx.invoke(build_cmd)


if __name__ == "__main__":
    cli()
