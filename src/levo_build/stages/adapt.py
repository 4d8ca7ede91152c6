"""Component adapter stage."""

from __future__ import annotations

from pathlib import Path

from levo_build.errors import AdaptationError, MissingDependencyError
from levo_build.invoker import Invocation, InvocationResult
from levo_build.models import StageName
from levo_build.stages.base import BaseStage

# Preamble of a core WebAssembly module: magic bytes, then version 1.
# Components share the magic but carry a different version/layer word.
WASM_MAGIC = b"\x00asm"
CORE_MODULE_VERSION = b"\x01\x00\x00\x00"


class AdaptStage(BaseStage):
    """Wrap the binary module into a component with ``wasm-tools component new``.

    The adapter shim supplies the legacy system-call imports the module was
    compiled against. Its absence is a broken environment and raises
    MissingDependencyError before anything is spawned.
    """

    name = StageName.ADAPT
    label = "Component adaptation"
    error_class = AdaptationError

    @property
    def artifact(self) -> Path:
        return self.config.component_path

    def check_preconditions(self) -> None:
        adapter = self.config.resolve(self.config.adapter_path)
        if not adapter.is_file():
            self._log.error("adapter_missing", path=str(adapter))
            raise MissingDependencyError(
                "Adapter artifact not found", path=self.config.adapter_path
            )

        try:
            with adapter.open("rb") as f:
                preamble = f.read(8)
        except OSError as e:
            raise MissingDependencyError(
                "Adapter artifact is unreadable",
                path=self.config.adapter_path,
                internal_details=str(e),
            ) from e
        if preamble != WASM_MAGIC + CORE_MODULE_VERSION:
            self._log.error("adapter_invalid", path=str(adapter), preamble=preamble.hex())
            raise MissingDependencyError(
                "Adapter artifact is not a core WebAssembly module",
                path=self.config.adapter_path,
            )

        self._require_file(self.config.binary_module_path, "Binary module not found")

    def invocation(self) -> Invocation:
        return self._invocation(
            self.config.tools.wasm_tools,
            "component",
            "new",
            self.config.binary_module_path,
            "-o",
            self.config.component_path,
            "--adapt",
            self.config.adapter_path,
        )

    def verify(self, result: InvocationResult) -> str:
        self._require_file(self.artifact, "Adapter produced no component at")
        return f"Adapted component {self.artifact}"
