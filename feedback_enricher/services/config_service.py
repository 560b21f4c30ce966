"""Configuration service for the feedback enricher.

Updates:
    v0.1.0 - 2026-09-14 - Artifact model configuration and provider registry.
    v0.2.0 - 2026-09-30 - Added enrichment deadline settings with per-kind overrides.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from ..core.config_loader import ConfigLoader
from ..core.models import ArtifactKind

DEFAULT_DEADLINE_SECONDS = 3.0
DEFAULT_MIN_RESPONSE_CHARS = 12
DEFAULT_REQUEST_TIMEOUT_SECONDS = 10.0
DEFAULT_SQLITE_PATH = "./data/feedback.db"


@dataclass(slots=True, frozen=True)
class ArtifactModelConfig:
    """Model parameters for one artifact kind."""

    kind: ArtifactKind
    model: str
    temperature: float | None = None
    provider: str | None = None
    max_tokens: int | None = None


def _no_overrides() -> dict[ArtifactKind, float]:
    return {}


@dataclass(slots=True, frozen=True)
class EnrichmentSettings:
    """Runtime policy for the enrichment orchestrator."""

    external_enabled: bool = True
    deadline_seconds: float = DEFAULT_DEADLINE_SECONDS
    deadlines: Mapping[ArtifactKind, float] = field(default_factory=_no_overrides)
    min_response_chars: int = DEFAULT_MIN_RESPONSE_CHARS
    request_timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT_SECONDS

    def deadline_for(self, kind: ArtifactKind) -> float:
        return self.deadlines.get(kind, self.deadline_seconds)


class ConfigService:
    """Loads and exposes configuration for enrichment components."""

    def __init__(self, config_path: Path | None = None) -> None:
        """Initialize configuration caches.

        Args:
            config_path (Path | None): Optional override for the configuration directory.
        """

        self._loader = ConfigLoader(base_path=config_path)
        self._settings = self._loader.load("settings")
        self._database = self._loader.load_optional("database")
        self._models = self._loader.load("models")
        self._providers = self._loader.load_optional("providers")

    @property
    def config_path(self) -> Path:
        return self._loader.base_path

    @property
    def app_metadata(self) -> dict[str, Any]:
        """Return general application metadata."""
        return _section(self._settings, "app")

    @property
    def logging_config(self) -> dict[str, Any]:
        """Return logging configuration settings."""
        return _section(self._settings, "logging")

    @property
    def database_config(self) -> dict[str, Any]:
        """Return database configuration values."""
        section = _section(self._database, "database")
        section.setdefault("sqlite_path", DEFAULT_SQLITE_PATH)
        return section

    @property
    def providers(self) -> dict[str, Any]:
        """Return provider configuration registry with environment references expanded."""
        provider_section = self._providers.get("providers", {})
        if not isinstance(provider_section, dict):
            return {}
        return {
            name: self._expand_env_values(config)
            for name, config in provider_section.items()
        }

    @property
    def enrichment_settings(self) -> EnrichmentSettings:
        """Return the enrichment policy.

        Returns:
            EnrichmentSettings: Deadlines, quality threshold and enablement flag.

        Raises:
            ValueError: If a deadline, timeout or threshold is not positive, or a
                per-kind deadline names an unknown artifact.
        """

        section = _section(self._settings, "enrichment")
        deadline = _positive_float(
            section.get("deadline_seconds", DEFAULT_DEADLINE_SECONDS), "deadline_seconds"
        )

        raw_overrides = section.get("deadlines") or {}
        if not isinstance(raw_overrides, dict):
            raise ValueError("enrichment.deadlines must be a mapping of artifact to seconds.")
        overrides: dict[ArtifactKind, float] = {}
        for name, value in raw_overrides.items():
            try:
                kind = ArtifactKind(str(name))
            except ValueError as exc:
                raise ValueError(f"Unknown artifact in enrichment.deadlines: {name}") from exc
            overrides[kind] = _positive_float(value, f"deadlines.{name}")

        min_chars = section.get("min_response_chars", DEFAULT_MIN_RESPONSE_CHARS)
        if not isinstance(min_chars, int) or isinstance(min_chars, bool) or min_chars < 1:
            raise ValueError("enrichment.min_response_chars must be a positive integer.")

        return EnrichmentSettings(
            external_enabled=bool(section.get("external_enabled", True)),
            deadline_seconds=deadline,
            deadlines=overrides,
            min_response_chars=min_chars,
            request_timeout_seconds=_positive_float(
                section.get("request_timeout_seconds", DEFAULT_REQUEST_TIMEOUT_SECONDS),
                "request_timeout_seconds",
            ),
        )

    def get_artifact_model_config(self, kind: ArtifactKind) -> ArtifactModelConfig:
        """Return model configuration for the requested artifact.

        Args:
            kind (ArtifactKind): Artifact whose model settings are needed.

        Returns:
            ArtifactModelConfig: Artifact-specific model settings merged with defaults.

        Raises:
            KeyError: If the artifact has no configuration and no default model exists.
            ValueError: If the resolved model name is empty.
        """

        artifacts = self._models.get("artifacts", {})
        defaults = self._models.get("defaults", {})
        data = artifacts.get(kind.value) if isinstance(artifacts, dict) else None
        if data is None:
            if "model" not in defaults:
                raise KeyError(f"Model config not found for artifact '{kind.value}'")
            data = {}
        if not isinstance(data, dict):
            raise ValueError(f"Model config for '{kind.value}' must be a mapping.")

        model = data.get("model", defaults.get("model"))
        if not isinstance(model, str) or not model.strip():
            raise ValueError(
                f"Model config for '{kind.value}' requires a non-empty 'model' value."
            )

        return ArtifactModelConfig(
            kind=kind,
            model=model.strip(),
            temperature=data.get("temperature", defaults.get("temperature")),
            provider=data.get("provider", defaults.get("provider")),
            max_tokens=data.get("max_tokens", defaults.get("max_tokens")),
        )

    def iter_artifact_configs(self) -> dict[ArtifactKind, ArtifactModelConfig]:
        """Return model configuration for every artifact kind."""

        return {kind: self.get_artifact_model_config(kind) for kind in ArtifactKind}

    @staticmethod
    def _expand_env_values(value: Any, *, current_key: str | None = None) -> Any:
        if isinstance(value, dict):
            return {
                key: ConfigService._expand_env_values(entry, current_key=key)
                for key, entry in value.items()
            }
        if isinstance(value, list):
            return [
                ConfigService._expand_env_values(item, current_key=current_key)
                for item in value
            ]
        if isinstance(value, str) and current_key != "api_key_env":
            return os.path.expandvars(value)
        return value


def _section(source: dict[str, Any], name: str) -> dict[str, Any]:
    section = source.get(name, {})
    return dict(section) if isinstance(section, dict) else {}


def _positive_float(value: Any, name: str) -> float:
    if isinstance(value, bool):
        raise ValueError(f"enrichment.{name} must be a positive number.")
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"enrichment.{name} must be a positive number.") from exc
    if number <= 0:
        raise ValueError(f"enrichment.{name} must be a positive number.")
    return number
