"""levo-build - build and publish levo WebAssembly components.

Compiles a Rust crate for wasm32-wasi, adapts the module into a
component, prints its WIT interface, and publishes a brotli-compressed
copy into the levo server's static asset directory.

Example:
    >>> from levo_build import PipelineConfig, run_pipeline
    >>> result = run_pipeline(PipelineConfig())
    >>> result.raise_for_error()
"""

from __future__ import annotations

__version__ = "0.1.0"

from levo_build.config import PipelineConfig, ToolsConfig, load_config
from levo_build.errors import (
    AdaptationError,
    BuildError,
    CompileError,
    CompressionError,
    ConfigurationError,
    IntrospectionError,
    MissingDependencyError,
    PipelineStateError,
    StageError,
)
from levo_build.interface import ComponentInterface, InterfaceItem, parse_wit
from levo_build.invoker import Invocation, InvocationResult, Invoker, SubprocessInvoker
from levo_build.models import (
    PipelineResult,
    PipelineState,
    StageName,
    StageResult,
    StageStatus,
)
from levo_build.runner import PipelineRunner, run_pipeline

__all__ = [
    "__version__",
    # Configuration
    "PipelineConfig",
    "ToolsConfig",
    "load_config",
    # Errors
    "AdaptationError",
    "BuildError",
    "CompileError",
    "CompressionError",
    "ConfigurationError",
    "IntrospectionError",
    "MissingDependencyError",
    "PipelineStateError",
    "StageError",
    # Interface
    "ComponentInterface",
    "InterfaceItem",
    "parse_wit",
    # Invocation
    "Invocation",
    "InvocationResult",
    "Invoker",
    "SubprocessInvoker",
    # Results
    "PipelineResult",
    "PipelineState",
    "StageName",
    "StageResult",
    "StageStatus",
    # Driver
    "PipelineRunner",
    "run_pipeline",
]
