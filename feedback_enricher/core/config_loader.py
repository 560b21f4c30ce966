"""Configuration loader utilities.

Updates:
    v0.1.0 - 2026-09-14 - YAML loader for the feedback enricher config directory.
"""

from __future__ import annotations

import functools
import os
from pathlib import Path
from typing import Any, Dict

import yaml

CONFIG_PATH_ENV = "FEEDBACK_CONFIG_PATH"


class ConfigLoader:
    """Loads YAML configuration files from the project's config directory."""

    def __init__(self, base_path: Path | None = None) -> None:
        """Configure the loader with the base directory location.

        Args:
            base_path (Path | None): Custom configuration directory if provided.

        Raises:
            FileNotFoundError: If the resolved configuration path does not exist.
        """

        self._base_path = (
            base_path or Path(os.environ.get(CONFIG_PATH_ENV, "config"))
        ).resolve()
        if not self._base_path.is_dir():
            raise FileNotFoundError(f"Config directory not found: {self._base_path}")

    @property
    def base_path(self) -> Path:
        return self._base_path

    def _resolve(self, name: str) -> Path:
        candidate = self._base_path / name
        if candidate.suffix not in {".yaml", ".yml"}:
            candidate = candidate.with_suffix(".yaml")
        if not candidate.exists():
            raise FileNotFoundError(f"Config file not found: {candidate}")
        return candidate

    @functools.lru_cache(maxsize=None)
    def load(self, name: str) -> Dict[str, Any]:
        """Load and cache a configuration file as a dictionary.

        Args:
            name (str): Logical configuration name to load.

        Returns:
            dict[str, Any]: Parsed YAML content from disk.

        Raises:
            ValueError: If the file does not contain a mapping.
        """

        path = self._resolve(name)
        with path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping.")
        return data

    def load_optional(self, name: str) -> Dict[str, Any]:
        """Load a configuration file, returning an empty mapping when it is absent."""

        try:
            return self.load(name)
        except FileNotFoundError:
            return {}
