"""Merge PDF documents by delegating to Ghostscript.

The :class:`Merger` runs one straight-line sequence per call:

1. Prepare the output location (refuse directories and links, honour the
   overwrite flag, create missing parent directories)
2. Build the argument vector for the external binary
3. Execute it and capture exit status, stdout and stderr
4. Validate the exit status and the produced file

Files the merger fabricates itself (see :meth:`Merger.get_output`) are kept
in a registry and removed on :meth:`Merger.remove_temporary_files`, on
context-manager exit, when the instance is garbage collected, and at
interpreter exit, whichever comes first. Removal is idempotent.
"""

from __future__ import annotations

import logging
import os
import shlex
import tempfile
import weakref
from typing import Iterable, Sequence

from ulid import ULID

from .errors import (
    InvalidArgumentError,
    MergerIOError,
    PreconditionFailedError,
    ProcessFailureError,
)
from .filesystem import FileSystem, LocalFileSystem, StrPath
from .process import CommandRunner, ExecutionResult, run_command

__all__ = [
    "DEFAULT_BINARY",
    "GHOSTSCRIPT_OPTIONS",
    "Merger",
    "TEMPORARY_FILE_PREFIX",
]

logger = logging.getLogger(__name__)

DEFAULT_BINARY = "gs"

# Batch mode, no pause between pages, quiet, PDF writer device.
GHOSTSCRIPT_OPTIONS: tuple[str, ...] = (
    "-dBATCH",
    "-dNOPAUSE",
    "-q",
    "-sDEVICE=pdfwrite",
)
OUTPUT_FILE_OPTION = "-sOutputFile="

TEMPORARY_FILE_PREFIX = "pdf_merger"


def _remove_files(filesystem: FileSystem, paths: list[str]) -> None:
    # Must not reference the Merger: weakref.finalize calls this after the
    # instance is gone.
    for path in paths:
        if not filesystem.exists(path):
            continue
        if filesystem.unlink(path):
            logger.debug("Removed temporary file %s", path)
        else:
            logger.warning("Could not remove temporary file %s", path)


class Merger:
    """Merge PDF files into one document with an external binary.

    Args:
        binary: Executable name (resolved on PATH) or path. Defaults to ``gs``.
        temporary_folder: Directory for files created by :meth:`get_output`.
            ``None`` means the platform temp directory.
        filesystem: Filesystem capability; the real disk by default.
        runner: Callable executing an argument vector; defaults to
            :func:`pdf_merger.process.run_command`.
    """

    def __init__(
        self,
        binary: str = DEFAULT_BINARY,
        temporary_folder: StrPath | None = None,
        *,
        filesystem: FileSystem | None = None,
        runner: CommandRunner | None = None,
    ) -> None:
        self.binary = binary
        self._temporary_folder = os.fspath(temporary_folder) if temporary_folder is not None else None
        self._filesystem = filesystem if filesystem is not None else LocalFileSystem()
        self._runner = runner if runner is not None else run_command
        self.temporary_files: list[str] = []
        self._finalizer = weakref.finalize(
            self, _remove_files, self._filesystem, self.temporary_files
        )

    def __enter__(self) -> "Merger":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        """Remove every temporary file created so far."""
        self.remove_temporary_files()

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    def merge(
        self,
        output: StrPath,
        inputs: Iterable[StrPath],
        overwrite: bool = False,
    ) -> None:
        """Merge ``inputs`` (in order) into the PDF at ``output``.

        Raises:
            InvalidArgumentError: output exists and is not a regular file,
                or ``inputs`` is empty.
            PreconditionFailedError: output exists and ``overwrite`` is False.
            MergerIOError: output could not be prepared, or the binary did
                not produce a non-empty file.
            ProcessFailureError: the binary exited non-zero with stderr output.
        """
        output_path = os.fspath(output)
        input_paths = [os.fspath(path) for path in inputs]
        if not input_paths:
            raise InvalidArgumentError("At least one input file is required to merge.")

        self._prepare_output(output_path, overwrite)

        command = self.build_command(output_path, input_paths)
        result = self._execute(command)

        self._check_process_status(result, command)
        self._check_output(output_path, command)

    def get_output(self, inputs: Iterable[StrPath], overwrite: bool = False) -> bytes:
        """Merge ``inputs`` into a temporary file and return its contents.

        The temporary file stays registered and is removed on cleanup.
        """
        output = self.create_temporary_file()
        self.merge(output, inputs, overwrite)
        return self._filesystem.read_bytes(output)

    def build_command(self, output: StrPath, inputs: Sequence[StrPath]) -> list[str]:
        """Return the argument vector merging ``inputs`` into ``output``."""
        return [
            self._resolve_binary(),
            *GHOSTSCRIPT_OPTIONS,
            f"{OUTPUT_FILE_OPTION}{os.fspath(output)}",
            *(os.fspath(path) for path in inputs),
        ]

    def create_temporary_file(self) -> str:
        """Reserve a unique file name in the temporary folder.

        The folder is created if missing. The file itself is not created;
        only its name is registered for later removal.
        """
        folder = self.temporary_folder.rstrip(os.sep) or os.sep

        if not self._filesystem.is_dir(folder):
            if not self._filesystem.mkdir(folder) and not self._filesystem.is_dir(folder):
                raise MergerIOError(f"Unable to create directory: {folder}", folder)
        elif not self._filesystem.is_writable(folder):
            raise MergerIOError(f"Unable to write in directory: {folder}", folder)

        filename = os.path.join(folder, f"{TEMPORARY_FILE_PREFIX}{ULID()}.pdf")
        self.temporary_files.append(filename)
        logger.debug("Registered temporary file %s", filename)
        return filename

    def remove_temporary_files(self) -> None:
        """Delete all registered temporary files that still exist."""
        _remove_files(self._filesystem, self.temporary_files)

    @property
    def temporary_folder(self) -> str:
        """Folder for temporary files; the platform temp dir unless overridden."""
        if self._temporary_folder is None:
            return tempfile.gettempdir()
        return self._temporary_folder

    @temporary_folder.setter
    def temporary_folder(self, value: StrPath | None) -> None:
        self._temporary_folder = os.fspath(value) if value is not None else None

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _prepare_output(self, filename: str, overwrite: bool) -> None:
        fs = self._filesystem
        directory = os.path.dirname(filename) or os.curdir

        if fs.exists(filename):
            if not fs.is_file(filename):
                raise InvalidArgumentError(
                    f"The output file '{filename}' already exists and it is a "
                    f"{self._describe_non_file(filename)}."
                )
            if not overwrite:
                raise PreconditionFailedError(filename)
            if not fs.unlink(filename):
                raise MergerIOError(
                    f"Could not delete already existing output file '{filename}'.",
                    filename,
                )
            logger.debug("Deleted existing output file %s", filename)
        elif not fs.is_dir(directory) and not fs.mkdir(directory):
            raise MergerIOError(
                f"The output file's directory '{directory}' could not be created.",
                directory,
            )

    def _describe_non_file(self, filename: str) -> str:
        if self._filesystem.is_link(filename):
            return "link"
        if self._filesystem.is_dir(filename):
            return "directory"
        return "special file"

    def _resolve_binary(self) -> str:
        """Use the binary as a path when it names an executable file.

        Anything else is passed through untouched so the OS resolves it on
        PATH.
        """
        if os.path.isfile(self.binary) and os.access(self.binary, os.X_OK):
            return os.path.abspath(self.binary)
        return self.binary

    def _execute(self, command: list[str]) -> ExecutionResult:
        return self._runner(command)

    @staticmethod
    def _check_process_status(result: ExecutionResult, command: list[str]) -> None:
        # A non-zero exit only counts as a failure when something was written
        # to stderr.
        if not result.succeeded and result.stderr != "":
            raise ProcessFailureError(
                exit_code=result.exit_code,
                stdout=result.stdout,
                stderr=result.stderr,
                command=command,
            )
        if not result.succeeded:
            logger.warning(
                "%s exited with status %d without error output; validating output file",
                command[0],
                result.exit_code,
            )

    def _check_output(self, output: str, command: list[str]) -> None:
        if not self._filesystem.exists(output):
            raise MergerIOError(
                f"The file '{output}' was not created (command: {shlex.join(command)}).",
                output,
            )
        if self._filesystem.size(output) == 0:
            raise MergerIOError(
                f"The file '{output}' was created but is empty (command: {shlex.join(command)}).",
                output,
            )
