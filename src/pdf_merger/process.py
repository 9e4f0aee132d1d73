"""Child-process execution for the external PDF binary."""

from __future__ import annotations

import logging
import shlex
import subprocess
from dataclasses import dataclass, field
from typing import Callable, Sequence

__all__ = ["CommandRunner", "ExecutionResult", "run_command"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExecutionResult:
    """Exit status and captured output of one command execution."""

    exit_code: int
    stdout: str
    stderr: str
    command: list[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0

    @property
    def command_line(self) -> str:
        return shlex.join(self.command)


CommandRunner = Callable[[Sequence[str]], ExecutionResult]


def run_command(command: Sequence[str]) -> ExecutionResult:
    """Run an argument vector synchronously and capture its output.

    No shell is involved and no timeout is applied: the call blocks until
    the child exits. Spawn failures are normalised to the exit codes a shell
    would report (127 not found, 126 not executable or not a valid binary)
    so callers handle them like any other failed run.
    """
    argv = [str(part) for part in command]
    logger.debug("Executing: %s", shlex.join(argv))
    try:
        completed = subprocess.run(
            argv,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
        )
    except FileNotFoundError:
        return ExecutionResult(
            exit_code=127,
            stdout="",
            stderr=f"{argv[0]}: executable not found on PATH",
            command=argv,
        )
    except PermissionError:
        return ExecutionResult(
            exit_code=126,
            stdout="",
            stderr=f"{argv[0]}: permission denied",
            command=argv,
        )
    except OSError as exc:
        return ExecutionResult(
            exit_code=126,
            stdout="",
            stderr=f"{argv[0]}: {exc.strerror or exc}",
            command=argv,
        )
    return ExecutionResult(
        exit_code=completed.returncode,
        stdout=completed.stdout or "",
        stderr=completed.stderr or "",
        command=argv,
    )
