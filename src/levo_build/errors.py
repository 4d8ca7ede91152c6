"""Exception hierarchy for levo-build.

This module defines the exception classes raised by the pipeline:
- BuildError: Base exception for all levo-build errors
- ConfigurationError: Raised when a configuration file cannot be loaded
- PipelineStateError: Raised on an illegal pipeline driver transition
- StageError: Base for the one-per-stage failures (CompileError,
  MissingDependencyError, AdaptationError, IntrospectionError,
  CompressionError)

User-facing messages are short and safe to display. The captured output
of the failing external tool travels on the exception (``output``) so the
CLI can surface it verbatim; extra technical details are logged via
structlog only.
"""

from __future__ import annotations

from pathlib import Path

import structlog

logger = structlog.get_logger(__name__)


class BuildError(Exception):
    """Base exception for levo-build.

    Args:
        user_message: Message to display to the operator.
        internal_details: Optional technical details for logging. Logged
            at construction time, never part of ``str(error)``.

    Example:
        >>> raise BuildError(
        ...     "Build failed",
        ...     internal_details="cargo returned 101 in /src/clients/read-file",
        ... )
    """

    def __init__(
        self,
        user_message: str,
        *,
        internal_details: str | None = None,
    ) -> None:
        """Initialize BuildError with user message and optional internal details.

        Args:
            user_message: Message to display to the operator.
            internal_details: Technical details for internal logging only.
        """
        super().__init__(user_message)
        self.user_message = user_message

        if internal_details:
            logger.error(
                "build_error",
                error_type=self.__class__.__name__,
                user_message=user_message,
                internal_details=internal_details,
            )


class ConfigurationError(BuildError):
    """Raised when a pipeline configuration file cannot be loaded.

    Attributes:
        file_path: Path to the configuration file (if known).
        field_path: Dot-separated path to the invalid field (if known).

    Example:
        >>> raise ConfigurationError(
        ...     "Invalid target triple",
        ...     file_path="levo-build.yaml",
        ...     field_path="target_triple",
        ... )
    """

    def __init__(
        self,
        user_message: str,
        *,
        file_path: str | None = None,
        field_path: str | None = None,
        internal_details: str | None = None,
    ) -> None:
        """Initialize ConfigurationError with context.

        Args:
            user_message: Message to display to the operator.
            file_path: Path to the configuration file (optional).
            field_path: Dot-separated path to the field (optional).
            internal_details: Technical details for internal logging only.
        """
        context_parts: list[str] = []
        if file_path:
            context_parts.append(f"in {file_path}")
        if field_path:
            context_parts.append(f"field '{field_path}'")

        if context_parts:
            full_message = f"{user_message} ({', '.join(context_parts)})"
        else:
            full_message = user_message

        super().__init__(full_message, internal_details=internal_details)

        self.file_path = file_path
        self.field_path = field_path


class PipelineStateError(BuildError):
    """Raised when the pipeline driver attempts an illegal state transition.

    Attributes:
        current: State the driver was in.
        requested: State the driver tried to enter.
    """

    def __init__(self, current: str, requested: str) -> None:
        super().__init__(f"Illegal pipeline transition: {current} -> {requested}")
        self.current = current
        self.requested = requested


class StageError(BuildError):
    """Base class for a failure of one pipeline stage.

    Every stage failure is fatal to the run. The error carries the exit
    status of the external tool (``None`` when the tool was never invoked)
    and its captured diagnostic output.

    Attributes:
        stage: Name of the stage that failed.
        exit_status: Exit status of the external process, if it ran.
        output: Captured stdout/stderr of the external process.
    """

    stage: str = "unknown"

    def __init__(
        self,
        user_message: str,
        *,
        exit_status: int | None = None,
        output: str = "",
        internal_details: str | None = None,
    ) -> None:
        """Initialize StageError.

        Args:
            user_message: Message to display to the operator.
            exit_status: Exit status of the external process, if it ran.
            output: Captured diagnostic output of the external process.
            internal_details: Technical details for internal logging only.
        """
        super().__init__(user_message, internal_details=internal_details)
        self.exit_status = exit_status
        self.output = output


class CompileError(StageError):
    """Raised when the compiler exits non-zero or produces no binary module."""

    stage = "compile"


class MissingDependencyError(StageError):
    """Raised when the adapter artifact is absent or is not a core module.

    This indicates a broken environment rather than a transient condition,
    so it is never retried.

    Attributes:
        path: Path of the missing or unusable dependency.

    Example:
        >>> raise MissingDependencyError(
        ...     "Adapter artifact not found",
        ...     path=Path("../wasi_snapshot_preview1.reactor.wasm"),
        ... )
    """

    stage = "adapt"

    def __init__(
        self,
        user_message: str,
        *,
        path: Path,
        internal_details: str | None = None,
    ) -> None:
        super().__init__(f"{user_message}: {path}", internal_details=internal_details)
        self.path = path


class AdaptationError(StageError):
    """Raised when the component adaptation tool fails."""

    stage = "adapt"


class IntrospectionError(StageError):
    """Raised when a component's interface cannot be extracted.

    A failure here means the adapter produced a structurally invalid
    component. No partial description is emitted.
    """

    stage = "introspect"


class CompressionError(StageError):
    """Raised when the compression encoder cannot publish the artifact.

    Typical causes are an unreadable component or an unwritable
    destination inside the serving directory. The stage reports these
    conditions but does not remediate them.
    """

    stage = "publish"
