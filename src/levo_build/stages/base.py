"""Base class for pipeline stages.

Each stage maps to exactly one external tool invocation: check
preconditions, run the tool through the injected invoker, turn a non-zero
exit into the stage's own error type, then verify the artifact the tool
was supposed to leave behind.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, ClassVar

import structlog

from levo_build.errors import StageError
from levo_build.invoker import Invocation, InvocationResult
from levo_build.models import StageName, StageResult, StageStatus

if TYPE_CHECKING:
    from levo_build.config import PipelineConfig
    from levo_build.invoker import Invoker

logger = structlog.get_logger(__name__)


class BaseStage(ABC):
    """Base class for pipeline stages.

    Subclasses declare their ``name``, a human ``label``, the ``error_class``
    raised on failure, and build the ``invocation`` for their tool.

    Attributes:
        config: Pipeline configuration
        invoker: Capability used to run the external tool

    Example:
        >>> class EchoStage(BaseStage):
        ...     name = StageName.COMPILE
        ...     label = "Echo"
        ...     error_class = CompileError
        ...
        ...     def invocation(self) -> Invocation:
        ...         return self._invocation("echo", "hello")
    """

    name: ClassVar[StageName]
    label: ClassVar[str]
    error_class: ClassVar[type[StageError]]

    def __init__(self, config: PipelineConfig, invoker: Invoker) -> None:
        """Initialize the stage.

        Args:
            config: Pipeline configuration
            invoker: Invoker used to run the external tool
        """
        self.config = config
        self.invoker = invoker
        self._log = logger.bind(stage=self.name.value)

    @abstractmethod
    def invocation(self) -> Invocation:
        """Build the command line for this stage's tool."""

    @property
    def artifact(self) -> Path | None:
        """Artifact the stage produces, relative to the source tree."""
        return None

    def check_preconditions(self) -> None:
        """Verify inputs before the tool is invoked.

        Raises:
            StageError: If an input is missing or unusable.
        """

    def verify(self, result: InvocationResult) -> str:
        """Verify the tool's effect after a zero exit.

        Args:
            result: Outcome of the tool invocation

        Returns:
            Message describing the stage outcome.

        Raises:
            StageError: If the expected artifact is missing or invalid.
        """
        return f"{self.label} succeeded"

    def run(self) -> StageResult:
        """Run the stage.

        Returns:
            StageResult with PASSED status.

        Raises:
            StageError: The stage's error type on any failure. Nothing is
                caught here; the driver decides what a failure means.
        """
        start_time = time.monotonic()
        self.check_preconditions()

        invocation = self.invocation()
        self._log.info("stage_started", command=invocation.display(), cwd=str(invocation.cwd))

        result = self.invoker.run(invocation.command, list(invocation.args), invocation.cwd)
        if not result.succeeded:
            raise self.error_class(
                f"{self.label} failed with exit status {result.exit_status}",
                exit_status=result.exit_status,
                output=result.output,
            )

        message = self.verify(result)
        duration_ms = int((time.monotonic() - start_time) * 1000)
        self._log.info("stage_completed", duration_ms=duration_ms)

        return StageResult(
            stage=self.name,
            status=StageStatus.PASSED,
            invocation=invocation,
            exit_status=result.exit_status,
            artifact=self.artifact,
            message=message,
            output=result.output,
            duration_ms=duration_ms,
        )

    def _invocation(self, command: str, *args: str | Path) -> Invocation:
        """Create an Invocation running in the source tree."""
        return Invocation(
            command=command,
            args=tuple(str(arg) for arg in args),
            cwd=self.config.source_path,
        )

    def _require_file(self, path: Path, message: str) -> Path:
        """Resolve ``path`` and raise the stage error if it is not a file."""
        resolved = self.config.resolve(path)
        if not resolved.is_file():
            raise self.error_class(f"{message}: {path}")
        return resolved
