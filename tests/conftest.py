from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Sequence

import pytest

from pdf_merger.filesystem import InMemoryFileSystem
from pdf_merger.merger import OUTPUT_FILE_OPTION
from pdf_merger.process import ExecutionResult

FAKE_PDF = b"%PDF-1.7\n% merged by fake runner\n%%EOF\n"


def output_path_from(command: Sequence[str]) -> str:
    for arg in command:
        if arg.startswith(OUTPUT_FILE_OPTION):
            return arg[len(OUTPUT_FILE_OPTION):]
    raise AssertionError(f"No output option in {command!r}")


@dataclass
class FakeRunner:
    """Stands in for Ghostscript: records commands and writes the output file.

    ``writer`` receives (path, data); pass ``None`` as ``content`` to write
    nothing at all.
    """

    writer: Callable[[str, bytes], None]
    exit_code: int = 0
    stdout: str = ""
    stderr: str = ""
    content: bytes | None = FAKE_PDF
    calls: list[list[str]] = field(default_factory=list)

    def __call__(self, command: Sequence[str]) -> ExecutionResult:
        argv = list(command)
        self.calls.append(argv)
        if self.content is not None:
            self.writer(output_path_from(argv), self.content)
        return ExecutionResult(
            exit_code=self.exit_code,
            stdout=self.stdout,
            stderr=self.stderr,
            command=argv,
        )


def _write_disk(path: str, data: bytes) -> None:
    Path(path).write_bytes(data)


@pytest.fixture()
def disk_runner() -> FakeRunner:
    """Fake runner writing to the real filesystem."""
    return FakeRunner(writer=_write_disk)


@pytest.fixture()
def memory_fs() -> InMemoryFileSystem:
    return InMemoryFileSystem(directories={"/tmp", "/data"})


@pytest.fixture()
def memory_runner(memory_fs: InMemoryFileSystem) -> FakeRunner:
    """Fake runner writing into the in-memory filesystem."""
    return FakeRunner(writer=memory_fs.write_bytes)
