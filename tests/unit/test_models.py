"""Unit tests for pipeline result models."""

from __future__ import annotations

from pathlib import Path

import pytest

from levo_build.errors import CompileError
from levo_build.models import (
    PipelineResult,
    PipelineState,
    StageName,
    StageResult,
    StageStatus,
)


class TestPipelineState:
    def test_terminal_states(self) -> None:
        assert PipelineState.DONE.terminal
        assert PipelineState.FAILED.terminal
        assert not PipelineState.IDLE.terminal
        assert not PipelineState.PUBLISHING.terminal

    def test_stage_order(self) -> None:
        assert [stage.value for stage in StageName] == [
            "compile",
            "adapt",
            "introspect",
            "publish",
        ]


class TestStageResult:
    def test_passed(self) -> None:
        result = StageResult(stage=StageName.COMPILE, status=StageStatus.PASSED)
        assert result.passed
        assert not result.failed

    def test_not_run_is_neither(self) -> None:
        result = StageResult(stage=StageName.PUBLISH, status=StageStatus.NOT_RUN)
        assert not result.passed
        assert not result.failed

    def test_negative_duration_rejected(self) -> None:
        with pytest.raises(ValueError):
            StageResult(stage=StageName.ADAPT, status=StageStatus.PASSED, duration_ms=-1)


class TestPipelineResult:
    def _failed(self) -> PipelineResult:
        error = CompileError("Compilation failed with exit status 101", exit_status=101)
        return PipelineResult(
            state=PipelineState.FAILED,
            stages=[
                StageResult(stage=StageName.COMPILE, status=StageStatus.FAILED, exit_status=101),
                StageResult(stage=StageName.ADAPT, status=StageStatus.NOT_RUN),
            ],
            error=error,
        )

    def test_done(self) -> None:
        result = PipelineResult(
            state=PipelineState.DONE,
            published_path=Path("../../levo-server/public/read-file.wasm"),
        )
        assert result.passed
        assert not result.failed
        assert result.failed_stage is None
        result.raise_for_error()

    def test_failed_stage(self) -> None:
        result = self._failed()
        assert result.failed
        assert result.failed_stage == StageName.COMPILE

    def test_raise_for_error_reraises_same_exception(self) -> None:
        result = self._failed()
        with pytest.raises(CompileError) as exc_info:
            result.raise_for_error()
        assert exc_info.value is result.error

    def test_stage_lookup(self) -> None:
        result = self._failed()
        assert result.stage(StageName.ADAPT).status == StageStatus.NOT_RUN
        with pytest.raises(KeyError):
            result.stage(StageName.PUBLISH)
