"""Tests for the pdf-merger command line."""

from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from pdf_merger import cli as cli_module
from pdf_merger.cli import app
from pdf_merger.config import BINARY_ENV_VAR, TEMPORARY_FOLDER_ENV_VAR
from pdf_merger.merger import Merger

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated(tmp_path: Path, monkeypatch):
    monkeypatch.delenv(BINARY_ENV_VAR, raising=False)
    monkeypatch.delenv(TEMPORARY_FOLDER_ENV_VAR, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def fake_merger(monkeypatch, disk_runner):
    """Route every Merger built by the CLI through the fake runner."""
    created: list[Merger] = []

    def factory(binary, temporary_folder=None):
        merger = Merger(binary, temporary_folder, runner=disk_runner)
        created.append(merger)
        return merger

    monkeypatch.setattr(cli_module, "Merger", factory)
    return created


@pytest.fixture
def inputs(tmp_path: Path) -> list[Path]:
    paths = [tmp_path / "a.pdf", tmp_path / "b.pdf"]
    for path in paths:
        path.write_bytes(b"%PDF-1.4\n")
    return paths


def test_help_lists_commands():
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "merge" in result.stdout
    assert "config" in result.stdout


def test_merge_to_file(tmp_path, inputs, fake_merger, disk_runner):
    result = runner.invoke(app, ["merge", "-o", "out.pdf", "a.pdf", "b.pdf"])

    assert result.exit_code == 0, result.output
    assert "Merged 2 file(s)" in result.stdout
    assert (tmp_path / "out.pdf").read_bytes() == disk_runner.content
    assert disk_runner.calls[0][-2:] == ["a.pdf", "b.pdf"]


def test_merge_to_stdout(tmp_path, inputs, fake_merger, disk_runner):
    result = runner.invoke(
        app, ["merge", "--temporary-folder", str(tmp_path / "tmp"), "a.pdf", "b.pdf"]
    )

    assert result.exit_code == 0, result.output
    assert result.stdout_bytes == disk_runner.content
    # Temporary file removed when the command finishes
    assert fake_merger[0].temporary_files
    assert not Path(fake_merger[0].temporary_files[0]).exists()


def test_existing_output_requires_overwrite(tmp_path, inputs, fake_merger):
    (tmp_path / "out.pdf").write_bytes(b"original")

    result = runner.invoke(app, ["merge", "-o", "out.pdf", "a.pdf"])

    assert result.exit_code == 1
    assert "already exists" in result.output
    assert (tmp_path / "out.pdf").read_bytes() == b"original"

    result = runner.invoke(app, ["merge", "-o", "out.pdf", "--overwrite", "a.pdf"])
    assert result.exit_code == 0, result.output


def test_process_failure_reports_stderr(inputs, fake_merger, disk_runner):
    disk_runner.exit_code = 1
    disk_runner.stderr = "Error: corrupt file"
    disk_runner.content = None

    result = runner.invoke(app, ["merge", "-o", "out.pdf", "a.pdf"])

    assert result.exit_code == 1
    assert "exited with status 1" in result.output
    assert "Error: corrupt file" in result.output


def test_binary_option_overrides_config(tmp_path, inputs, fake_merger, disk_runner):
    config = tmp_path / ".pdf-merger" / "config.yaml"
    config.parent.mkdir()
    config.write_text("pdf_merger:\n  binary: gs-from-file\n", encoding="utf-8")

    result = runner.invoke(app, ["merge", "-o", "out.pdf", "--binary", "gs-cli", "a.pdf"])

    assert result.exit_code == 0, result.output
    assert disk_runner.calls[0][0] == "gs-cli"


def test_binary_from_config_file(tmp_path, inputs, fake_merger, disk_runner):
    config = tmp_path / "custom.yaml"
    config.write_text("pdf_merger:\n  binary: gs-from-file\n", encoding="utf-8")

    result = runner.invoke(app, ["merge", "-o", "out.pdf", "--config", str(config), "a.pdf"])

    assert result.exit_code == 0, result.output
    assert disk_runner.calls[0][0] == "gs-from-file"


def test_malformed_config_exits_with_error(tmp_path, inputs, fake_merger):
    config = tmp_path / "broken.yaml"
    config.write_text("pdf_merger: [unclosed\n", encoding="utf-8")

    result = runner.invoke(app, ["merge", "-o", "out.pdf", "--config", str(config), "a.pdf"])

    assert result.exit_code == 1
    assert "Failed to parse" in result.output
    assert fake_merger == []


def test_missing_binary_fails(inputs):
    result = runner.invoke(
        app, ["merge", "-o", "out.pdf", "--binary", "pdf-merger-no-such-binary", "a.pdf"]
    )

    assert result.exit_code == 1
    assert "exited with status 127" in result.output


def test_config_command_shows_defaults():
    result = runner.invoke(app, ["config"])

    assert result.exit_code == 0, result.output
    assert "binary" in result.stdout
    assert "gs" in result.stdout
    assert "default" in result.stdout


def test_config_command_shows_env_origin(monkeypatch):
    monkeypatch.setenv(BINARY_ENV_VAR, "gs-env")

    result = runner.invoke(app, ["config"])

    assert result.exit_code == 0, result.output
    assert "gs-env" in result.stdout
    assert "env" in result.stdout
