"""levo-build config command - Show the effective configuration."""

from __future__ import annotations

import click

from levo_build.cli.errors import (
    handle_build_error,
    handle_file_not_found,
    handle_not_a_file,
    handle_permission_error,
)


@click.command("config")
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to levo-build.yaml [default: ./levo-build.yaml if present]",
)
def config_cmd(config_path: str | None) -> None:
    """Print the effective configuration and the artifact paths it implies."""
    from levo_build.config import DEFAULT_CONFIG_FILENAME, load_config
    from levo_build.errors import BuildError
    from levo_build.output import print_json

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

    data = config.to_yaml_dict()
    data["artifacts"] = {
        "binary_module": str(config.binary_module_path),
        "adapter": str(config.adapter_path),
        "component": str(config.component_path),
        "published": str(config.destination_path),
    }
    print_json(data)
