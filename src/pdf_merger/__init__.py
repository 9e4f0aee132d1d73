"""
PDF Merger
==========

Merge PDF documents into a single file by delegating to Ghostscript.

Usage:
    from pdf_merger import Merger

    with Merger() as merger:
        merger.merge("out.pdf", ["a.pdf", "b.pdf"])
        data = merger.get_output(["a.pdf", "b.pdf"])
"""

from __future__ import annotations

from .config import MergerConfig, create_merger, load_merger_config, save_merger_config
from .errors import (
    InvalidArgumentError,
    MergerConfigError,
    MergerError,
    MergerIOError,
    PreconditionFailedError,
    ProcessFailureError,
)
from .filesystem import FileSystem, InMemoryFileSystem, LocalFileSystem
from .merger import DEFAULT_BINARY, Merger
from .process import ExecutionResult, run_command

__version__ = "1.0.0"

__all__ = [
    # Orchestrator
    "DEFAULT_BINARY",
    "Merger",
    # Configuration
    "MergerConfig",
    "create_merger",
    "load_merger_config",
    "save_merger_config",
    # Collaborators
    "ExecutionResult",
    "FileSystem",
    "InMemoryFileSystem",
    "LocalFileSystem",
    "run_command",
    # Exceptions
    "InvalidArgumentError",
    "MergerConfigError",
    "MergerError",
    "MergerIOError",
    "PreconditionFailedError",
    "ProcessFailureError",
]
