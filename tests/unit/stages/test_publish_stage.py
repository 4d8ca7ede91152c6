"""Unit tests for the compressor/publisher stage."""

from __future__ import annotations

import zlib
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from levo_build.config import PipelineConfig
from levo_build.errors import CompressionError
from levo_build.models import StageStatus
from levo_build.stages import PublishStage

if TYPE_CHECKING:
    from conftest import FakeInvoker, Workspace

COMPONENT_BYTES = b"\x00asm\x0d\x00\x01\x00component body"


@pytest.fixture
def component(workspace: Workspace) -> Path:
    workspace.component.write_bytes(COMPONENT_BYTES)
    return workspace.component


class TestPublishInvocation:
    def test_command(self, pipeline_config: PipelineConfig, fake_invoker: FakeInvoker) -> None:
        invocation = PublishStage(pipeline_config, fake_invoker).invocation()

        assert invocation.argv == [
            "cargo",
            "run",
            "--package",
            "brotli-encoder",
            "--release",
            "--",
            "my-component.wasm",
            "../../levo-server/public/read-file.wasm",
        ]


@pytest.mark.usefixtures("component")
class TestPublishRun:
    def test_success(
        self,
        pipeline_config: PipelineConfig,
        fake_invoker: FakeInvoker,
        workspace: Workspace,
    ) -> None:
        result = PublishStage(pipeline_config, fake_invoker).run()

        assert result.status == StageStatus.PASSED
        assert result.artifact == pipeline_config.destination_path
        assert zlib.decompress(workspace.published.read_bytes()) == COMPONENT_BYTES

    def test_replaces_stale_artifact(
        self,
        pipeline_config: PipelineConfig,
        fake_invoker: FakeInvoker,
        workspace: Workspace,
    ) -> None:
        workspace.published.write_bytes(b"stale")

        PublishStage(pipeline_config, fake_invoker).run()

        assert zlib.decompress(workspace.published.read_bytes()) == COMPONENT_BYTES

    def test_missing_serving_directory_is_not_created(
        self,
        pipeline_config: PipelineConfig,
        fake_invoker: FakeInvoker,
        workspace: Workspace,
    ) -> None:
        workspace.serving_dir.rmdir()

        with pytest.raises(CompressionError) as exc_info:
            PublishStage(pipeline_config, fake_invoker).run()

        assert exc_info.value.exit_status == 101
        assert "No such file or directory" in exc_info.value.output
        assert not workspace.serving_dir.exists()

    def test_encoder_failure(self, pipeline_config: PipelineConfig, fake_invoker: FakeInvoker) -> None:
        fake_invoker.fail("publish", exit_status=101, stderr="thread 'main' panicked\n")

        with pytest.raises(CompressionError) as exc_info:
            PublishStage(pipeline_config, fake_invoker).run()
        assert "panicked" in exc_info.value.output

    def test_zero_exit_without_artifact(
        self, pipeline_config: PipelineConfig, fake_invoker: FakeInvoker
    ) -> None:
        fake_invoker.silent("publish")

        with pytest.raises(CompressionError, match="no artifact"):
            PublishStage(pipeline_config, fake_invoker).run()

    def test_stale_artifact_left_in_place(
        self,
        pipeline_config: PipelineConfig,
        fake_invoker: FakeInvoker,
        workspace: Workspace,
    ) -> None:
        workspace.published.write_bytes(b"stale artifact from last week")
        fake_invoker.silent("publish")

        with pytest.raises(CompressionError, match="did not replace"):
            PublishStage(pipeline_config, fake_invoker).run()
        assert workspace.published.read_bytes() == b"stale artifact from last week"

    def test_empty_artifact(
        self,
        pipeline_config: PipelineConfig,
        fake_invoker: FakeInvoker,
        workspace: Workspace,
    ) -> None:
        fake_invoker.silent("publish")
        workspace.published.write_bytes(b"")

        with pytest.raises(CompressionError, match="empty artifact"):
            PublishStage(pipeline_config, fake_invoker).run()


def test_missing_component(pipeline_config: PipelineConfig, fake_invoker: FakeInvoker) -> None:
    with pytest.raises(CompressionError, match="Component artifact not found"):
        PublishStage(pipeline_config, fake_invoker).run()
    assert fake_invoker.calls == []
