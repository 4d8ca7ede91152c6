"""Pipeline state and result models."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from levo_build.errors import StageError
from levo_build.interface import ComponentInterface
from levo_build.invoker import Invocation


class PipelineState(str, Enum):
    """State of the pipeline driver.

    Attributes:
        IDLE: Nothing has run yet
        COMPILING: Compiler is running
        ADAPTING: Component adapter is running
        INTROSPECTING: Interface introspector is running
        PUBLISHING: Compressor/publisher is running
        DONE: Every stage succeeded
        FAILED: A stage failed; absorbing
    """

    IDLE = "idle"
    COMPILING = "compiling"
    ADAPTING = "adapting"
    INTROSPECTING = "introspecting"
    PUBLISHING = "publishing"
    DONE = "done"
    FAILED = "failed"

    @property
    def terminal(self) -> bool:
        """True for DONE and FAILED."""
        return self in (PipelineState.DONE, PipelineState.FAILED)


class StageName(str, Enum):
    """Pipeline stages, in execution order."""

    COMPILE = "compile"
    ADAPT = "adapt"
    INTROSPECT = "introspect"
    PUBLISH = "publish"


class StageStatus(str, Enum):
    """Outcome of a single stage.

    Attributes:
        PASSED: Stage succeeded
        FAILED: Stage failed and aborted the run
        NOT_RUN: Stage was never invoked because an earlier stage failed
    """

    PASSED = "passed"
    FAILED = "failed"
    NOT_RUN = "not_run"


class StageResult(BaseModel):
    """Result of a single pipeline stage.

    Attributes:
        stage: Which stage this is
        status: Stage outcome
        invocation: Command line that was run (None if nothing was spawned)
        exit_status: Exit status of the external tool
        artifact: Artifact path the stage produced
        message: Human-readable result message
        output: Captured diagnostic output of the tool
        duration_ms: Stage duration in milliseconds
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    stage: StageName = Field(..., description="Stage")
    status: StageStatus = Field(..., description="Stage status")
    invocation: Invocation | None = Field(default=None, description="Command line")
    exit_status: int | None = Field(default=None, description="Tool exit status")
    artifact: Path | None = Field(default=None, description="Produced artifact")
    message: str = Field(default="", description="Result message")
    output: str = Field(default="", description="Captured tool output")
    duration_ms: int = Field(default=0, ge=0, description="Duration in milliseconds")

    @property
    def passed(self) -> bool:
        """Check if the stage succeeded."""
        return self.status == StageStatus.PASSED

    @property
    def failed(self) -> bool:
        """Check if the stage failed."""
        return self.status == StageStatus.FAILED


class PipelineResult(BaseModel):
    """Tagged outcome of a pipeline run.

    On failure ``error`` holds the exception raised by the failing stage,
    exactly as that stage raised it.

    Attributes:
        state: Final driver state (DONE or FAILED)
        stages: One result per stage, in order
        error: Originating stage error when the run failed
        interface: Component interface found by introspection
        published_path: Destination of the published artifact on success
        started_at: When the run started
        finished_at: When the run finished
        total_duration_ms: Total duration in milliseconds

    Example:
        >>> result = run_pipeline(PipelineConfig())
        >>> if result.failed:
        ...     result.raise_for_error()
    """

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    state: PipelineState = Field(..., description="Final driver state")
    stages: list[StageResult] = Field(default_factory=list, description="Stage results")
    error: StageError | None = Field(default=None, description="Originating error")
    interface: ComponentInterface | None = Field(default=None, description="Introspected interface")
    published_path: Path | None = Field(default=None, description="Published artifact")
    started_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC), description="Start time"
    )
    finished_at: datetime | None = Field(default=None, description="End time")
    total_duration_ms: int = Field(default=0, ge=0, description="Total duration")

    @property
    def passed(self) -> bool:
        """Check if the whole pipeline succeeded."""
        return self.state == PipelineState.DONE

    @property
    def failed(self) -> bool:
        """Check if the pipeline ended in FAILED."""
        return self.state == PipelineState.FAILED

    @property
    def failed_stage(self) -> StageName | None:
        """Stage that aborted the run, if any."""
        for stage in self.stages:
            if stage.failed:
                return stage.stage
        return None

    def stage(self, name: StageName) -> StageResult:
        """Return the result for ``name``."""
        for stage in self.stages:
            if stage.stage == name:
                return stage
        raise KeyError(name.value)

    def raise_for_error(self) -> None:
        """Re-raise the originating stage error, if the run failed."""
        if self.error is not None:
            raise self.error
