"""
Configuration loading.

Settings live in the `[visapprove]` table of a TOML file (visapprove.toml
by default). Every key is optional; a missing file yields the defaults.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

from .approvals.discovery import DEFAULT_IMAGE_EXTENSIONS
from .approvals.ledger import DEFAULT_SOURCE


DEFAULT_CONFIG_FILE = "visapprove.toml"

_REPORT_DIR = Path(".testivai/visual-regression/report")


@dataclass(frozen=True)
class Config:
    approvals_path: Path = _REPORT_DIR / "approvals.json"
    report_path: Path = _REPORT_DIR / "report.json"
    diff_directory: Path = _REPORT_DIR / "diff"
    commit_message: str = "Update visual regression approvals"
    image_extensions: tuple[str, ...] = DEFAULT_IMAGE_EXTENSIONS
    baseline_executable: str = "testivai"
    source: str = DEFAULT_SOURCE

    @property
    def audit_log_path(self) -> Path:
        return self.approvals_path.parent / "adjudications.log"

    def with_overrides(self, **overrides: Any) -> Config:
        """Return a copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


_PATH_KEYS = {"approvals_path", "report_path", "diff_directory"}
_STR_KEYS = {"commit_message", "baseline_executable", "source"}


def _parse_table(table: dict[str, Any], base_dir: Path) -> dict[str, Any]:
    known = {f.name for f in fields(Config)}
    unknown = sorted(set(table) - known)
    if unknown:
        raise ValueError(f"Unknown config keys: {', '.join(unknown)}")

    values: dict[str, Any] = {}
    for key, raw in table.items():
        if key in _PATH_KEYS:
            if not isinstance(raw, str) or not raw.strip():
                raise ValueError(f"{key} must be a non-empty string")
            path = Path(raw)
            values[key] = path if path.is_absolute() else base_dir / path
        elif key in _STR_KEYS:
            if not isinstance(raw, str) or not raw.strip():
                raise ValueError(f"{key} must be a non-empty string")
            values[key] = raw
        elif key == "image_extensions":
            if not isinstance(raw, list) or not all(isinstance(x, str) and x for x in raw):
                raise ValueError("image_extensions must be a list of non-empty strings")
            values[key] = tuple(x if x.startswith(".") else f".{x}" for x in raw)
    return values


def load_config(path: str | Path | None = None) -> Config:
    """
    Load configuration from TOML.

    Relative paths in the file resolve against the file's directory.

    Args:
        path: Config file (defaults to ./visapprove.toml)

    Returns:
        Config with file values over defaults

    Raises:
        ValueError: If the TOML is malformed or a value has the wrong type
    """
    config_path = Path(path) if path is not None else Path(DEFAULT_CONFIG_FILE)
    if not config_path.exists():
        return Config()

    with open(config_path, "rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"Failed to parse config TOML: {e}") from e

    table = data.get("visapprove", {})
    if not isinstance(table, dict):
        raise ValueError("[visapprove] must be a table")

    return Config(**_parse_table(table, config_path.parent))
