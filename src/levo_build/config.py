"""Pipeline configuration model.

All paths the pipeline touches are enumerated here instead of being
scattered through the stages. Defaults reproduce the layout of the
read-file client inside the levo repository, so a bare ``levo-build``
run from ``clients/rust-test-read-file`` behaves like the client's
build.sh.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from levo_build.errors import ConfigurationError

DEFAULT_CONFIG_FILENAME = "levo-build.yaml"

DEFAULT_TARGET_TRIPLE = "wasm32-wasi"
DEFAULT_PROFILE = "release"
DEFAULT_MODULE_NAME = "test_rust_read_file"
DEFAULT_TARGET_DIR = Path("../../target")
DEFAULT_ADAPTER_PATH = Path("../wasi_snapshot_preview1.reactor.wasm")
DEFAULT_COMPONENT_PATH = Path("my-component.wasm")
DEFAULT_SERVING_DIR = Path("../../levo-server/public")
DEFAULT_PUBLISHED_NAME = "read-file.wasm"

# Cargo writes the "dev" profile to target/<triple>/debug
_PROFILE_DIRS = {"dev": "debug"}


class ToolsConfig(BaseModel):
    """Executables for the external collaborators.

    Attributes:
        cargo: Cargo executable, used to compile and to run the encoder.
        wasm_tools: wasm-tools executable, used to adapt and introspect.
        encoder_package: Cargo package providing the brotli encoder.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    cargo: str = Field(default="cargo", min_length=1, description="Cargo executable")
    wasm_tools: str = Field(default="wasm-tools", min_length=1, description="wasm-tools executable")
    encoder_package: str = Field(
        default="brotli-encoder",
        min_length=1,
        description="Cargo package of the compression encoder",
    )


class PipelineConfig(BaseModel):
    """Configuration for one pipeline run.

    Relative paths are resolved against ``source_path``, which is also the
    working directory of every external invocation.

    Attributes:
        source_path: Source tree of the module to build.
        target_triple: Compiler target triple.
        profile: Cargo build profile.
        module_name: File stem of the binary module cargo produces.
        target_dir: Cargo target directory.
        adapter_path: System-interface adapter shim.
        component_path: Output path of the component artifact.
        serving_dir: Static asset directory of the levo server.
        published_name: Filename the server expects for the artifact.
        tools: External tool executables.

    Example:
        >>> config = PipelineConfig()
        >>> config.binary_module_path
        PosixPath('../../target/wasm32-wasi/release/test_rust_read_file.wasm')
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    source_path: Path = Field(default=Path("."), description="Source tree to build")
    target_triple: str = Field(
        default=DEFAULT_TARGET_TRIPLE,
        pattern=r"^[a-z0-9_]+(-[a-z0-9_.]+){1,3}$",
        description="Compiler target triple",
    )
    profile: str = Field(
        default=DEFAULT_PROFILE,
        pattern=r"^[a-zA-Z][a-zA-Z0-9_-]*$",
        description="Cargo build profile",
    )
    module_name: str = Field(
        default=DEFAULT_MODULE_NAME,
        min_length=1,
        description="File stem of the compiled module",
    )
    target_dir: Path = Field(default=DEFAULT_TARGET_DIR, description="Cargo target directory")
    adapter_path: Path = Field(default=DEFAULT_ADAPTER_PATH, description="Adapter artifact")
    component_path: Path = Field(
        default=DEFAULT_COMPONENT_PATH, description="Component artifact output path"
    )
    serving_dir: Path = Field(default=DEFAULT_SERVING_DIR, description="Serving directory")
    published_name: str = Field(
        default=DEFAULT_PUBLISHED_NAME,
        min_length=1,
        pattern=r"^[^/\\]+$",
        description="Filename of the published artifact",
    )
    tools: ToolsConfig = Field(default_factory=ToolsConfig, description="External tools")

    @property
    def profile_dir(self) -> str:
        """Directory cargo uses for the configured profile."""
        return _PROFILE_DIRS.get(self.profile, self.profile)

    @property
    def binary_module_path(self) -> Path:
        """Binary module path, relative to ``source_path`` when not absolute."""
        return self.target_dir / self.target_triple / self.profile_dir / f"{self.module_name}.wasm"

    @property
    def destination_path(self) -> Path:
        """Published artifact path, relative to ``source_path`` when not absolute."""
        return self.serving_dir / self.published_name

    def resolve(self, path: Path) -> Path:
        """Resolve a configured path against the source tree.

        Args:
            path: Path as configured (absolute or relative to the source tree).

        Returns:
            Path usable from the current process working directory.
        """
        if path.is_absolute():
            return path
        return self.source_path / path

    @classmethod
    def from_yaml(cls, path: str | Path) -> PipelineConfig:
        """Load and validate a PipelineConfig from a YAML file.

        Relative ``source_path`` values are interpreted relative to the
        directory holding the file.

        Args:
            path: Path to the YAML file.

        Returns:
            Validated PipelineConfig instance.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            IsADirectoryError: If the path names a directory.
            PermissionError: If the file cannot be read.
            ConfigurationError: If the YAML is malformed or fails validation.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        try:
            with path.open("r") as f:
                data: Any = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(
                "Invalid YAML",
                file_path=str(path),
                internal_details=str(e),
            ) from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError("Configuration must be a mapping", file_path=str(path))

        source = Path(data.get("source_path", "."))
        if not source.is_absolute():
            data["source_path"] = path.parent / source

        try:
            return cls.model_validate(data)
        except PydanticValidationError as e:
            first = e.errors()[0]
            field_path = ".".join(str(x) for x in first["loc"])
            raise ConfigurationError(
                first["msg"],
                file_path=str(path),
                field_path=field_path,
                internal_details=str(e),
            ) from e

    def with_overrides(self, **overrides: Any) -> PipelineConfig:
        """Return a copy with the given non-None fields replaced and re-validated.

        Args:
            **overrides: Field values; ``None`` values are ignored.

        Returns:
            New validated PipelineConfig.
        """
        update = {key: value for key, value in overrides.items() if value is not None}
        if not update:
            return self
        return type(self).model_validate({**self.model_dump(), **update})

    def to_yaml_dict(self) -> dict[str, Any]:
        """Dump the configuration with paths as strings."""
        return self.model_dump(mode="json")


def load_config(path: str | Path | None = None) -> PipelineConfig:
    """Load configuration from ``path``, or the default file when present.

    Args:
        path: Explicit configuration file. When ``None``, ``levo-build.yaml``
            in the current directory is used if it exists, else defaults.

    Returns:
        PipelineConfig instance.

    Raises:
        FileNotFoundError: If an explicit path does not exist.
        IsADirectoryError: If the path names a directory.
        PermissionError: If the file cannot be read.
        ConfigurationError: If the file is invalid.
    """
    if path is not None:
        return PipelineConfig.from_yaml(path)

    default = Path(DEFAULT_CONFIG_FILENAME)
    if default.exists():
        return PipelineConfig.from_yaml(default)
    return PipelineConfig()
