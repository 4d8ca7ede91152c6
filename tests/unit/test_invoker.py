"""Unit tests for external process invocation."""

from __future__ import annotations

import sys
from pathlib import Path

from levo_build.invoker import (
    EXIT_COMMAND_NOT_FOUND,
    Invocation,
    InvocationResult,
    Invoker,
    SubprocessInvoker,
)


class TestInvocation:
    def test_argv_and_display(self) -> None:
        invocation = Invocation(
            command="wasm-tools",
            args=("component", "new", "module.wasm", "-o", "my component.wasm"),
        )

        assert invocation.argv == [
            "wasm-tools",
            "component",
            "new",
            "module.wasm",
            "-o",
            "my component.wasm",
        ]
        assert invocation.display() == (
            "wasm-tools component new module.wasm -o 'my component.wasm'"
        )

    def test_default_cwd(self) -> None:
        assert Invocation(command="cargo").cwd == Path(".")


class TestInvocationResult:
    def test_succeeded(self) -> None:
        assert InvocationResult(exit_status=0).succeeded
        assert not InvocationResult(exit_status=101).succeeded

    def test_output_combines_stderr_and_stdout(self) -> None:
        result = InvocationResult(exit_status=1, stdout="out\n", stderr="err\n")
        assert result.output == "err\nout"

    def test_output_skips_blank_streams(self) -> None:
        result = InvocationResult(exit_status=1, stdout="  \n", stderr="error[E0425]\n")
        assert result.output == "error[E0425]"


class TestSubprocessInvoker:
    def test_satisfies_protocol(self) -> None:
        assert isinstance(SubprocessInvoker(), Invoker)

    def test_captures_output(self, tmp_path: Path) -> None:
        result = SubprocessInvoker().run(
            sys.executable,
            ["-c", "import sys; print('hello'); print('warn', file=sys.stderr)"],
            tmp_path,
        )

        assert result.exit_status == 0
        assert result.stdout.strip() == "hello"
        assert result.stderr.strip() == "warn"

    def test_reports_exit_status(self, tmp_path: Path) -> None:
        result = SubprocessInvoker().run(sys.executable, ["-c", "raise SystemExit(101)"], tmp_path)
        assert result.exit_status == 101
        assert not result.succeeded

    def test_undecodable_output_is_replaced(self, tmp_path: Path) -> None:
        result = SubprocessInvoker().run(
            sys.executable,
            [
                "-c",
                "import sys; sys.stderr.buffer.write(b'error in caf\\xe9.rs\\n'); sys.exit(101)",
            ],
            tmp_path,
        )

        assert result.exit_status == 101
        assert result.stderr.strip() == "error in caf\ufffd.rs"

    def test_runs_in_cwd(self, tmp_path: Path) -> None:
        result = SubprocessInvoker().run(
            sys.executable, ["-c", "import os; print(os.getcwd())"], tmp_path
        )
        assert Path(result.stdout.strip()).resolve() == tmp_path.resolve()

    def test_missing_command(self, tmp_path: Path) -> None:
        result = SubprocessInvoker().run("levo-build-no-such-tool", ["--version"], tmp_path)

        assert result.exit_status == EXIT_COMMAND_NOT_FOUND
        assert "levo-build-no-such-tool" in result.stderr
