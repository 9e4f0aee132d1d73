"""Merger configuration stored in .pdf-merger/config.yaml.

Two settings exist: the external ``binary`` (default ``gs``) and an optional
``temporary_folder``. Values are read from the ``pdf_merger`` section of the
YAML file and may be overridden by ``PDF_MERGER_BINARY`` and
``PDF_MERGER_TEMPORARY_FOLDER``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

from ruamel.yaml import YAML

from .errors import MergerConfigError
from .merger import DEFAULT_BINARY, Merger

__all__ = [
    "BINARY_ENV_VAR",
    "CONFIG_SECTION",
    "MergerConfig",
    "TEMPORARY_FOLDER_ENV_VAR",
    "create_merger",
    "default_config_path",
    "load_merger_config",
    "save_merger_config",
]

CONFIG_SECTION = "pdf_merger"
BINARY_ENV_VAR = "PDF_MERGER_BINARY"
TEMPORARY_FOLDER_ENV_VAR = "PDF_MERGER_TEMPORARY_FOLDER"


@dataclass(slots=True)
class MergerConfig:
    """Resolved merger settings.

    ``origins`` records where each setting came from (``default``, ``file``
    or ``env``) for display purposes.
    """

    binary: str = DEFAULT_BINARY
    temporary_folder: Path | None = None
    origins: dict[str, str] = field(
        default_factory=lambda: {"binary": "default", "temporary_folder": "default"}
    )

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {"binary": self.binary}
        if self.temporary_folder is not None:
            payload["temporary_folder"] = str(self.temporary_folder)
        return payload

    @classmethod
    def from_dict(cls, data: Mapping[str, object] | None) -> "MergerConfig":
        config = cls()
        if not isinstance(data, Mapping):
            return config

        binary = data.get("binary")
        if binary is not None:
            if not isinstance(binary, str) or not binary.strip():
                raise MergerConfigError("'binary' must be a non-empty string")
            config.binary = binary.strip()
            config.origins["binary"] = "file"

        folder = data.get("temporary_folder")
        if folder is not None:
            if not isinstance(folder, str) or not folder.strip():
                raise MergerConfigError("'temporary_folder' must be a non-empty string")
            config.temporary_folder = Path(folder.strip()).expanduser()
            config.origins["temporary_folder"] = "file"

        return config

    def apply_environment(self, environ: Mapping[str, str] | None = None) -> "MergerConfig":
        """Override settings from environment variables (non-empty values only)."""
        env = os.environ if environ is None else environ

        binary = env.get(BINARY_ENV_VAR, "").strip()
        if binary:
            self.binary = binary
            self.origins["binary"] = "env"

        folder = env.get(TEMPORARY_FOLDER_ENV_VAR, "").strip()
        if folder:
            self.temporary_folder = Path(folder).expanduser()
            self.origins["temporary_folder"] = "env"

        return self


def default_config_path(base: Path | None = None) -> Path:
    return (base or Path.cwd()) / ".pdf-merger" / "config.yaml"


def _read_payload(config_path: Path) -> object:
    yaml = YAML()
    try:
        with config_path.open("r", encoding="utf-8") as handle:
            return yaml.load(handle) or {}
    except Exception as exc:
        raise MergerConfigError(f"Failed to parse {config_path}: {exc}") from exc


def load_merger_config(
    config_path: Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> MergerConfig:
    """Load merger config from YAML, then apply environment overrides."""
    path = config_path or default_config_path()
    config = MergerConfig()

    if path.exists():
        payload = _read_payload(path)
        if not isinstance(payload, Mapping):
            raise MergerConfigError(f"{path} must contain a mapping at the top level")
        section = payload.get(CONFIG_SECTION)
        if section is not None and not isinstance(section, Mapping):
            raise MergerConfigError(f"'{CONFIG_SECTION}' in {path} must be a mapping")
        config = MergerConfig.from_dict(section)

    return config.apply_environment(environ)


def save_merger_config(config_path: Path, config: MergerConfig) -> None:
    """Persist the merger section into the YAML file, preserving other sections."""
    config_path.parent.mkdir(parents=True, exist_ok=True)

    yaml = YAML()
    yaml.preserve_quotes = True

    payload: object = {}
    if config_path.exists():
        payload = _read_payload(config_path)
    if not isinstance(payload, dict):
        payload = {}

    payload[CONFIG_SECTION] = config.to_dict()

    with config_path.open("w", encoding="utf-8") as handle:
        yaml.dump(payload, handle)


def create_merger(config: MergerConfig | None = None) -> Merger:
    """Build a Merger from configuration (loaded from disk when omitted)."""
    resolved = config if config is not None else load_merger_config()
    return Merger(resolved.binary, resolved.temporary_folder)
