"""Compiler invoker stage."""

from __future__ import annotations

from pathlib import Path

from levo_build.errors import CompileError
from levo_build.invoker import Invocation, InvocationResult
from levo_build.models import StageName
from levo_build.stages.base import BaseStage


class CompileStage(BaseStage):
    """Build the source tree into a binary module with cargo.

    Runs ``cargo build --target <triple> --release`` (or ``--profile <name>``
    for other profiles) and expects exactly one module at
    ``<target_dir>/<triple>/<profile_dir>/<module_name>.wasm``.
    """

    name = StageName.COMPILE
    label = "Compilation"
    error_class = CompileError

    @property
    def artifact(self) -> Path:
        return self.config.binary_module_path

    def invocation(self) -> Invocation:
        profile_args = (
            ["--release"] if self.config.profile == "release" else ["--profile", self.config.profile]
        )
        return self._invocation(
            self.config.tools.cargo,
            "build",
            "--target",
            self.config.target_triple,
            *profile_args,
        )

    def verify(self, result: InvocationResult) -> str:
        # A zero exit that leaves no module means the naming convention or
        # module_name does not match what cargo produced.
        self._require_file(self.artifact, "Compiler produced no binary module at")
        return f"Compiled {self.artifact}"
