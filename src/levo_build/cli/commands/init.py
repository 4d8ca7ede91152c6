"""levo-build init command - Write a pipeline configuration file."""

from __future__ import annotations

from pathlib import Path

import click

from levo_build.config import DEFAULT_CONFIG_FILENAME
from levo_build.output import error, success, warning

CONFIG_TEMPLATE = """\
# levo-build pipeline configuration
#
# Relative paths resolve against source_path, which is also the working
# directory of cargo and wasm-tools. source_path itself is relative to
# this file. Values are written as JSON strings, which YAML reads verbatim.

source_path: {{ config.source_path | string | tojson }}
target_triple: {{ config.target_triple | tojson }}
profile: {{ config.profile | tojson }}
module_name: {{ config.module_name | tojson }}

# Binary module: <target_dir>/<target_triple>/<profile>/<module_name>.wasm
target_dir: {{ config.target_dir | string | tojson }}

# Shim providing the preview1 system interface to the component
adapter_path: {{ config.adapter_path | string | tojson }}
component_path: {{ config.component_path | string | tojson }}

# Published as <serving_dir>/<published_name>
serving_dir: {{ config.serving_dir | string | tojson }}
published_name: {{ config.published_name | tojson }}

tools:
  cargo: {{ config.tools.cargo | tojson }}
  wasm_tools: {{ config.tools.wasm_tools | tojson }}
  encoder_package: {{ config.tools.encoder_package | tojson }}
"""


@click.command()
@click.option(
    "-m",
    "--module-name",
    "module_name",
    type=str,
    default=None,
    help="File stem of the compiled module [default: test_rust_read_file]",
)
@click.option(
    "-n",
    "--published-name",
    "published_name",
    type=str,
    default=None,
    help="Filename the server expects [default: read-file.wasm]",
)
@click.option(
    "--force",
    is_flag=True,
    default=False,
    help="Overwrite an existing levo-build.yaml",
)
def init(module_name: str | None, published_name: str | None, force: bool) -> None:
    """Write a levo-build.yaml with the default layout.

    Examples:

        levo-build init

        levo-build init --module-name my_client --published-name my-client.wasm

        levo-build init --force
    """
    config_file = Path(DEFAULT_CONFIG_FILENAME)
    existed = config_file.exists()
    if existed and not force:
        error(f"{DEFAULT_CONFIG_FILENAME} already exists.")
        error("Use --force to overwrite.")
        raise SystemExit(1)

    try:
        from jinja2.sandbox import SandboxedEnvironment
        from pydantic import ValidationError as PydanticValidationError

        from levo_build.cli.errors import format_pydantic_error
        from levo_build.config import PipelineConfig

        try:
            config = PipelineConfig().with_overrides(
                module_name=module_name,
                published_name=published_name,
            )
        except PydanticValidationError as e:
            error(format_pydantic_error(e))
            raise SystemExit(1) from None

        env = SandboxedEnvironment(trim_blocks=True, lstrip_blocks=True)
        content = env.from_string(CONFIG_TEMPLATE).render(config=config)
        config_file.write_text(content)

        if existed:
            warning(f"Overwrote existing {DEFAULT_CONFIG_FILENAME}")
        success(f"Created {DEFAULT_CONFIG_FILENAME}")

    except PermissionError:
        error("Cannot write to current directory.")
        raise SystemExit(2) from None
