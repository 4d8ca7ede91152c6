"""External process invocation.

Stages never spawn processes themselves; they go through an ``Invoker``
so their logic can be exercised with a fake that simulates the tools.
"""

from __future__ import annotations

import shlex
import subprocess
import time
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol, runtime_checkable

import structlog
from pydantic import BaseModel, ConfigDict, Field

logger = structlog.get_logger(__name__)

# Exit status a POSIX shell reports for a command it cannot find
EXIT_COMMAND_NOT_FOUND = 127
# Exit status a POSIX shell reports for a command it cannot execute
EXIT_COMMAND_NOT_EXECUTABLE = 126


class Invocation(BaseModel):
    """A single external command line.

    Attributes:
        command: Executable to run.
        args: Arguments passed to the executable.
        cwd: Working directory for the process.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    command: str = Field(..., min_length=1, description="Executable")
    args: tuple[str, ...] = Field(default=(), description="Arguments")
    cwd: Path = Field(default=Path("."), description="Working directory")

    @property
    def argv(self) -> list[str]:
        """Full argument vector."""
        return [self.command, *self.args]

    def display(self) -> str:
        """Shell-quoted command line for logs and dry runs."""
        return shlex.join(self.argv)


class InvocationResult(BaseModel):
    """Outcome of an external process.

    Attributes:
        exit_status: Process exit status (0 means success).
        stdout: Captured standard output.
        stderr: Captured standard error.
        duration_ms: Wall time of the process in milliseconds.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    exit_status: int = Field(..., description="Exit status")
    stdout: str = Field(default="", description="Captured standard output")
    stderr: str = Field(default="", description="Captured standard error")
    duration_ms: int = Field(default=0, ge=0, description="Duration in milliseconds")

    @property
    def succeeded(self) -> bool:
        """True when the process exited with status 0."""
        return self.exit_status == 0

    @property
    def output(self) -> str:
        """Combined diagnostic output, stderr first."""
        parts = [part.rstrip("\n") for part in (self.stderr, self.stdout) if part.strip()]
        return "\n".join(parts)


@runtime_checkable
class Invoker(Protocol):
    """Capability for running an external command to completion."""

    def run(self, command: str, args: Sequence[str], cwd: Path) -> InvocationResult:
        """Run ``command`` with ``args`` in ``cwd`` and wait for it to exit."""
        ...


class SubprocessInvoker:
    """Invoker backed by :func:`subprocess.run`.

    Output is decoded as UTF-8 with undecodable bytes replaced. A missing
    or non-executable program is reported with the shell's conventional
    exit status instead of raising, so the calling stage turns it into its
    own error type.

    Example:
        >>> invoker = SubprocessInvoker()
        >>> result = invoker.run("cargo", ["--version"], Path("."))
        >>> result.succeeded
        True
    """

    def __init__(self, env: dict[str, str] | None = None) -> None:
        """Initialize the invoker.

        Args:
            env: Environment for child processes (inherits when None).
        """
        self.env = env
        self._log = logger.bind(component="subprocess_invoker")

    def run(self, command: str, args: Sequence[str], cwd: Path) -> InvocationResult:
        """Run a command and capture its output.

        Args:
            command: Executable to run.
            args: Arguments for the executable.
            cwd: Working directory.

        Returns:
            InvocationResult with exit status and captured output.
        """
        argv = [command, *args]
        self._log.debug("process_started", argv=argv, cwd=str(cwd))
        start_time = time.monotonic()

        try:
            completed = subprocess.run(
                argv,
                cwd=cwd,
                env=self.env,
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                check=False,
            )
        except FileNotFoundError as e:
            self._log.warning("process_not_found", command=command, error=str(e))
            return InvocationResult(
                exit_status=EXIT_COMMAND_NOT_FOUND,
                stderr=f"{e.filename or command}: {e.strerror or e}",
                duration_ms=int((time.monotonic() - start_time) * 1000),
            )
        except PermissionError as e:
            self._log.warning("process_not_executable", command=command, error=str(e))
            return InvocationResult(
                exit_status=EXIT_COMMAND_NOT_EXECUTABLE,
                stderr=f"{e.filename or command}: {e.strerror or e}",
                duration_ms=int((time.monotonic() - start_time) * 1000),
            )

        duration_ms = int((time.monotonic() - start_time) * 1000)
        self._log.debug(
            "process_exited",
            command=command,
            exit_status=completed.returncode,
            duration_ms=duration_ms,
        )
        return InvocationResult(
            exit_status=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
            duration_ms=duration_ms,
        )
