"""Pipeline driver.

Sequences compile, adapt, introspect and publish as a linear state
machine. The first stage error moves the driver to FAILED, nothing after
it is invoked, and the error is handed back untouched in the result.
"""

from __future__ import annotations

import time
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import structlog

from levo_build.errors import PipelineStateError, StageError
from levo_build.invoker import Invocation, SubprocessInvoker
from levo_build.models import (
    PipelineResult,
    PipelineState,
    StageName,
    StageResult,
    StageStatus,
)
from levo_build.stages import (
    AdaptStage,
    BaseStage,
    CompileStage,
    IntrospectStage,
    PublishStage,
)

if TYPE_CHECKING:
    from rich.console import Console

    from levo_build.config import PipelineConfig
    from levo_build.interface import ComponentInterface
    from levo_build.invoker import Invoker

logger = structlog.get_logger(__name__)

# Legal transitions; FAILED is reachable from every non-terminal state
TRANSITIONS: dict[PipelineState, frozenset[PipelineState]] = {
    PipelineState.IDLE: frozenset({PipelineState.COMPILING, PipelineState.FAILED}),
    PipelineState.COMPILING: frozenset({PipelineState.ADAPTING, PipelineState.FAILED}),
    PipelineState.ADAPTING: frozenset({PipelineState.INTROSPECTING, PipelineState.FAILED}),
    PipelineState.INTROSPECTING: frozenset({PipelineState.PUBLISHING, PipelineState.FAILED}),
    PipelineState.PUBLISHING: frozenset({PipelineState.DONE, PipelineState.FAILED}),
    PipelineState.DONE: frozenset(),
    PipelineState.FAILED: frozenset(),
}

STAGE_STATES: dict[StageName, PipelineState] = {
    StageName.COMPILE: PipelineState.COMPILING,
    StageName.ADAPT: PipelineState.ADAPTING,
    StageName.INTROSPECT: PipelineState.INTROSPECTING,
    StageName.PUBLISH: PipelineState.PUBLISHING,
}


class PipelineRunner:
    """Runs the four pipeline stages in order, stopping at the first failure.

    A runner is single-use: create a new one for every run.

    Attributes:
        config: Pipeline configuration
        invoker: Capability used by every stage to run its tool
        state: Current driver state
        history: Every state the driver has entered, starting with IDLE

    Example:
        >>> runner = PipelineRunner(PipelineConfig())
        >>> result = runner.run()
        >>> print(result.state)
    """

    def __init__(
        self,
        config: PipelineConfig,
        invoker: Invoker | None = None,
        console: Console | None = None,
    ) -> None:
        """Initialize the runner.

        Args:
            config: Pipeline configuration
            invoker: Invoker for external tools (real subprocesses by default)
            console: Diagnostic console for the interface description
        """
        self.config = config
        self.invoker = invoker if invoker is not None else SubprocessInvoker()
        self.console = console
        self.state = PipelineState.IDLE
        self.history: list[PipelineState] = [PipelineState.IDLE]
        self._log = logger.bind(component="pipeline_runner")

    def plan(self) -> list[Invocation]:
        """Return the command lines a run would execute, without running them."""
        return [stage.invocation() for stage in self._build_stages()]

    def run(self) -> PipelineResult:
        """Run every stage in order.

        Returns:
            PipelineResult in DONE state, or in FAILED state carrying the
            originating stage error.

        Raises:
            PipelineStateError: If this runner has already been used.
        """
        if self.state != PipelineState.IDLE:
            raise PipelineStateError(self.state.value, PipelineState.COMPILING.value)

        start_time = time.monotonic()
        started_at = datetime.now(UTC)
        stages = self._build_stages()
        results: list[StageResult] = []
        introspect = next(s for s in stages if isinstance(s, IntrospectStage))

        self._log.info("pipeline_started", source=str(self.config.source_path))

        for index, stage in enumerate(stages):
            self._transition(STAGE_STATES[stage.name])
            try:
                results.append(stage.run())
            except StageError as e:
                self._transition(PipelineState.FAILED)
                self._log.error(
                    "stage_failed",
                    stage=stage.name.value,
                    error_type=type(e).__name__,
                    exit_status=e.exit_status,
                )
                results.append(
                    StageResult(
                        stage=stage.name,
                        status=StageStatus.FAILED,
                        invocation=stage.invocation() if e.exit_status is not None else None,
                        exit_status=e.exit_status,
                        message=e.user_message,
                        output=e.output,
                    )
                )
                results.extend(
                    StageResult(stage=skipped.name, status=StageStatus.NOT_RUN)
                    for skipped in stages[index + 1 :]
                )
                return self._finish(results, started_at, start_time, error=e)

        self._transition(PipelineState.DONE)
        return self._finish(
            results,
            started_at,
            start_time,
            interface=introspect.interface,
        )

    def _build_stages(self) -> list[BaseStage]:
        """Build the stages in execution order."""
        return [
            CompileStage(self.config, self.invoker),
            AdaptStage(self.config, self.invoker),
            IntrospectStage(self.config, self.invoker, console=self.console),
            PublishStage(self.config, self.invoker),
        ]

    def _transition(self, new_state: PipelineState) -> None:
        """Move to ``new_state``, rejecting anything off the linear path."""
        if new_state not in TRANSITIONS[self.state]:
            raise PipelineStateError(self.state.value, new_state.value)
        self._log.debug("state_changed", previous=self.state.value, state=new_state.value)
        self.state = new_state
        self.history.append(new_state)

    def _finish(
        self,
        results: list[StageResult],
        started_at: datetime,
        start_time: float,
        error: StageError | None = None,
        interface: ComponentInterface | None = None,
    ) -> PipelineResult:
        total_duration_ms = int((time.monotonic() - start_time) * 1000)
        self._log.info(
            "pipeline_completed",
            state=self.state.value,
            total_duration_ms=total_duration_ms,
            passed=sum(1 for r in results if r.passed),
        )
        published = self.config.destination_path if self.state == PipelineState.DONE else None
        return PipelineResult(
            state=self.state,
            stages=results,
            published_path=published,
            started_at=started_at,
            finished_at=datetime.now(UTC),
            total_duration_ms=total_duration_ms,
            error=error,
            interface=interface,
        )


def run_pipeline(
    config: PipelineConfig,
    invoker: Invoker | None = None,
    console: Console | None = None,
) -> PipelineResult:
    """Run the pipeline once with the given configuration.

    Convenience function that creates a runner and executes it.

    Args:
        config: Pipeline configuration
        invoker: Invoker for external tools (real subprocesses by default)
        console: Diagnostic console for the interface description

    Returns:
        PipelineResult with the outcome of every stage

    Example:
        >>> result = run_pipeline(PipelineConfig())
        >>> result.raise_for_error()
    """
    return PipelineRunner(config, invoker=invoker, console=console).run()
