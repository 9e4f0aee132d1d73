"""Exception hierarchy for PDF merging."""

from __future__ import annotations

import shlex
from typing import Sequence


class MergerError(Exception):
    """Base exception for merger errors."""
    pass


class InvalidArgumentError(MergerError, ValueError):
    """The merge request cannot be honoured as given.

    Raised when the output path already exists but is not a regular file,
    or when no input documents were supplied.
    """


class PreconditionFailedError(MergerError):
    """Output file already exists and overwriting was not requested."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"The output file '{path}' already exists.")


class MergerIOError(MergerError, OSError):
    """A filesystem operation required by the merge failed."""

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        super().__init__(message)


class ProcessFailureError(MergerError, RuntimeError):
    """The external binary exited non-zero and reported an error.

    Carries everything needed to diagnose the failed invocation: the exit
    status, both captured streams and the command that was executed.
    """

    def __init__(
        self,
        exit_code: int,
        stdout: str,
        stderr: str,
        command: Sequence[str],
    ):
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr
        self.command = list(command)
        super().__init__(
            f"The exit status code '{exit_code}' says something went wrong:\n"
            f'stderr: "{stderr}"\n'
            f'stdout: "{stdout}"\n'
            f"command: {self.command_line}."
        )

    @property
    def command_line(self) -> str:
        """Shell-quoted rendering of the executed command."""
        return shlex.join(self.command)


class MergerConfigError(MergerError, RuntimeError):
    """Raised when merger configuration is invalid."""
