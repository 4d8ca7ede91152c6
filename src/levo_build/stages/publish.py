"""Compressor/publisher stage."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from levo_build.errors import CompressionError
from levo_build.invoker import Invocation, InvocationResult
from levo_build.models import StageName
from levo_build.stages.base import BaseStage

if TYPE_CHECKING:
    from levo_build.config import PipelineConfig
    from levo_build.invoker import Invoker

# (inode, size, mtime_ns, ctime_ns) of a file
FileSignature = tuple[int, int, int, int]


def _signature(path: Path) -> FileSignature | None:
    try:
        st = path.stat()
    except FileNotFoundError:
        return None
    return (st.st_ino, st.st_size, st.st_mtime_ns, st.st_ctime_ns)


class PublishStage(BaseStage):
    """Brotli-compress the component into the levo server's public directory.

    Runs the encoder package through ``cargo run``. The encoder owns the
    write to the destination; this stage neither creates the serving
    directory nor repairs its permissions, it only reports the failure.
    A destination left exactly as it was before the run is a failure,
    even after a zero exit.
    """

    name = StageName.PUBLISH
    label = "Compression"
    error_class = CompressionError

    def __init__(self, config: PipelineConfig, invoker: Invoker) -> None:
        super().__init__(config, invoker)
        self._previous: FileSignature | None = None

    @property
    def artifact(self) -> Path:
        return self.config.destination_path

    def check_preconditions(self) -> None:
        self._require_file(self.config.component_path, "Component artifact not found")
        self._previous = _signature(self.config.resolve(self.artifact))

    def invocation(self) -> Invocation:
        return self._invocation(
            self.config.tools.cargo,
            "run",
            "--package",
            self.config.tools.encoder_package,
            "--release",
            "--",
            self.config.component_path,
            self.config.destination_path,
        )

    def verify(self, result: InvocationResult) -> str:
        destination = self._require_file(self.artifact, "Encoder produced no artifact at")
        size = destination.stat().st_size
        if size == 0:
            raise CompressionError(
                f"Encoder produced an empty artifact at {self.artifact}",
                exit_status=result.exit_status,
                output=result.output,
            )
        if self._previous is not None and _signature(destination) == self._previous:
            self._log.error("artifact_not_replaced", path=str(destination))
            raise CompressionError(
                f"Encoder did not replace the existing artifact at {self.artifact}",
                exit_status=result.exit_status,
                output=result.output,
            )
        return f"Published {self.artifact} ({size} bytes)"
