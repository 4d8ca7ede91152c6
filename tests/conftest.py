"""Shared pytest fixtures for levo-build tests.

Provides a throwaway copy of the levo repository layout and a fake
invoker that simulates cargo, wasm-tools and the brotli encoder by
writing the files those tools would write.
"""

from __future__ import annotations

import sys
import zlib
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

import pytest
import structlog
from click.testing import CliRunner

from levo_build.config import PipelineConfig
from levo_build.invoker import InvocationResult

CORE_MODULE_PREAMBLE = b"\x00asm\x01\x00\x00\x00"
COMPONENT_PREAMBLE = b"\x00asm\x0d\x00\x01\x00"

READ_FILE_WIT = """\
package root:component;

world root {
  import wasi:cli/environment@0.2.0;
  import wasi:io/streams@0.2.0;
  import wasi:filesystem/types@0.2.0;

  export read-file: func(path: string) -> string;
}
"""


@pytest.fixture(autouse=True)
def configure_structlog_for_tests() -> None:
    """Configure structlog to output to stdout for test capture.

    The CLI reconfigures structlog to write to the CliRunner's stderr;
    resetting here keeps later tests from writing to a closed stream.
    """
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(0),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,
    )


@dataclass
class Call:
    """One recorded invocation."""

    stage: str
    command: str
    args: list[str]
    cwd: Path


@dataclass
class Failure:
    """Injected failure for one stage."""

    exit_status: int
    stderr: str = ""
    stdout: str = ""


@dataclass
class FakeInvoker:
    """Invoker that simulates the external tools.

    Each tool writes what the real one would: cargo build writes the
    binary module, ``component new`` wraps module and adapter into a
    component, ``component wit`` prints ``wit``, and the encoder writes a
    compressed copy of its input (zlib stands in for brotli).

    Attributes:
        calls: Every invocation in order.
        wit: Text the introspection tool prints.
        failures: Injected failures keyed by stage name.
    """

    calls: list[Call] = field(default_factory=list)
    wit: str = READ_FILE_WIT
    failures: dict[str, Failure] = field(default_factory=dict)
    skip_side_effects: set[str] = field(default_factory=set)

    def fail(self, stage: str, exit_status: int = 1, stderr: str = "", stdout: str = "") -> None:
        """Make ``stage`` exit with ``exit_status`` without side effects."""
        self.failures[stage] = Failure(exit_status=exit_status, stderr=stderr, stdout=stdout)

    def silent(self, stage: str) -> None:
        """Make ``stage`` exit 0 without writing its artifact."""
        self.skip_side_effects.add(stage)

    @property
    def stages(self) -> list[str]:
        """Stage names in invocation order."""
        return [call.stage for call in self.calls]

    @staticmethod
    def stage_for(command: str, args: Sequence[str]) -> str:
        if args[:1] == ["build"]:
            return "compile"
        if args[:2] == ["component", "new"]:
            return "adapt"
        if args[:2] == ["component", "wit"]:
            return "introspect"
        if args[:1] == ["run"]:
            return "publish"
        raise AssertionError(f"unexpected invocation: {command} {args}")

    def run(self, command: str, args: Sequence[str], cwd: Path) -> InvocationResult:
        args = list(args)
        stage = self.stage_for(command, args)
        self.calls.append(Call(stage=stage, command=command, args=args, cwd=cwd))

        failure = self.failures.get(stage)
        if failure is not None:
            return InvocationResult(
                exit_status=failure.exit_status,
                stdout=failure.stdout,
                stderr=failure.stderr,
            )

        if stage in self.skip_side_effects:
            return InvocationResult(exit_status=0)

        handler: Callable[[list[str], Path], InvocationResult] = getattr(self, f"_{stage}")
        return handler(args, cwd)

    def _compile(self, args: list[str], cwd: Path) -> InvocationResult:
        triple = args[args.index("--target") + 1]
        profile = "release" if "--release" in args else args[args.index("--profile") + 1]
        profile_dir = "debug" if profile == "dev" else profile
        module = cwd / "../../target" / triple / profile_dir / "test_rust_read_file.wasm"
        module.parent.mkdir(parents=True, exist_ok=True)
        module.write_bytes(CORE_MODULE_PREAMBLE + b"read-file module")
        return InvocationResult(exit_status=0, stderr="    Finished release [optimized] target(s)\n")

    def _adapt(self, args: list[str], cwd: Path) -> InvocationResult:
        module = cwd / args[2]
        output = cwd / args[args.index("-o") + 1]
        adapter = cwd / args[args.index("--adapt") + 1]
        output.write_bytes(COMPONENT_PREAMBLE + module.read_bytes() + adapter.read_bytes())
        return InvocationResult(exit_status=0)

    def _introspect(self, args: list[str], cwd: Path) -> InvocationResult:
        return InvocationResult(exit_status=0, stdout=self.wit)

    def _publish(self, args: list[str], cwd: Path) -> InvocationResult:
        source, destination = cwd / args[-2], cwd / args[-1]
        if not destination.parent.is_dir():
            return InvocationResult(
                exit_status=101,
                stderr=f"Error: No such file or directory: {args[-1]}\n",
            )
        # Write-then-rename, so every publish yields a new file
        staging = destination.with_name(destination.name + ".partial")
        staging.write_bytes(zlib.compress(source.read_bytes()))
        staging.replace(destination)
        return InvocationResult(exit_status=0)


@dataclass
class Workspace:
    """Paths of a fake levo checkout."""

    root: Path
    source: Path
    adapter: Path
    serving_dir: Path

    @property
    def binary_module(self) -> Path:
        return self.root / "target/wasm32-wasi/release/test_rust_read_file.wasm"

    @property
    def component(self) -> Path:
        return self.source / "my-component.wasm"

    @property
    def published(self) -> Path:
        return self.serving_dir / "read-file.wasm"


@pytest.fixture
def workspace(tmp_path: Path) -> Workspace:
    """Create the levo repository layout the default configuration expects.

    Layout::

        levo/
          clients/
            rust-test-read-file/          <- source tree
            wasi_snapshot_preview1.reactor.wasm
          levo-server/public/             <- serving directory
    """
    root = tmp_path / "levo"
    source = root / "clients" / "rust-test-read-file"
    source.mkdir(parents=True)
    (source / "Cargo.toml").write_text('[package]\nname = "test-rust-read-file"\n')

    adapter = root / "clients" / "wasi_snapshot_preview1.reactor.wasm"
    adapter.write_bytes(CORE_MODULE_PREAMBLE + b"preview1 reactor adapter")

    serving_dir = root / "levo-server" / "public"
    serving_dir.mkdir(parents=True)

    return Workspace(root=root, source=source, adapter=adapter, serving_dir=serving_dir)


@pytest.fixture
def pipeline_config(workspace: Workspace) -> PipelineConfig:
    """Default configuration pointed at the fake workspace."""
    return PipelineConfig(source_path=workspace.source)


@pytest.fixture
def fake_invoker() -> FakeInvoker:
    """Fresh fake invoker."""
    return FakeInvoker()


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click test runner."""
    return CliRunner()
