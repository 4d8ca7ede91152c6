"""Interface introspector stage."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from rich.console import Console

from levo_build.errors import IntrospectionError
from levo_build.interface import ComponentInterface, parse_wit
from levo_build.invoker import Invocation, InvocationResult
from levo_build.models import StageName
from levo_build.stages.base import BaseStage

if TYPE_CHECKING:
    from levo_build.config import PipelineConfig
    from levo_build.invoker import Invoker


class IntrospectStage(BaseStage):
    """Print the component's WIT interface with ``wasm-tools component wit``.

    This is a read-only sanity check on the adapter's output. The
    description is parsed before anything is printed, so a malformed
    component yields an IntrospectionError and no partial description.

    Attributes:
        console: Diagnostic console the description is written to
        interface: Parsed interface, set after a successful run
    """

    name = StageName.INTROSPECT
    label = "Interface introspection"
    error_class = IntrospectionError

    def __init__(
        self,
        config: PipelineConfig,
        invoker: Invoker,
        console: Console | None = None,
        component: Path | None = None,
    ) -> None:
        """Initialize the stage.

        Args:
            config: Pipeline configuration
            invoker: Invoker used to run wasm-tools
            console: Diagnostic console (stderr when not provided)
            component: Component to inspect instead of the configured one
        """
        super().__init__(config, invoker)
        self.console = console if console is not None else Console(stderr=True)
        self.component = component if component is not None else config.component_path
        self.interface: ComponentInterface | None = None

    def check_preconditions(self) -> None:
        self._require_file(self.component, "Component artifact not found")

    def invocation(self) -> Invocation:
        return self._invocation(self.config.tools.wasm_tools, "component", "wit", self.component)

    def verify(self, result: InvocationResult) -> str:
        try:
            interface = parse_wit(result.stdout)
        except ValueError as e:
            raise IntrospectionError(
                f"Malformed component {self.component}: {e}",
                exit_status=result.exit_status,
                output=result.output,
            ) from e

        self.console.out(result.stdout.rstrip("\n"), highlight=False)
        self.interface = interface
        self._log.info(
            "interface_introspected",
            world=interface.world,
            exports=interface.export_names,
            imports=len(interface.imports),
        )
        return (
            f"World '{interface.world}': {len(interface.exports)} export(s), "
            f"{len(interface.imports)} import(s)"
        )
