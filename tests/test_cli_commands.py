from __future__ import annotations

import sqlite3
from typing import Any, Dict

import pytest
from typer.testing import CliRunner

import feedback_enricher.cli as cli
from feedback_enricher.core.dispatcher import WorkflowInputError
from feedback_enricher.core.models import ArtifactKind
from feedback_enricher.services.config_service import (
    ArtifactModelConfig,
    EnrichmentSettings,
)
from tests.helpers.cli import RecordingDispatcher, patch_dispatcher, sample_record

runner = CliRunner()


class StubConfigService:
    def __init__(self, *, broken: bool = False) -> None:
        self._broken = broken
        self.enrichment_settings = EnrichmentSettings(
            deadline_seconds=2.5, deadlines={ArtifactKind.ACTIONS: 1.0}
        )

    def iter_artifact_configs(self) -> Dict[ArtifactKind, ArtifactModelConfig]:
        if self._broken:
            raise KeyError("No model configured for artifact 'summary'.")
        return {
            kind: ArtifactModelConfig(
                kind=kind, model="groq/llama-3.1-8b-instant", temperature=0.7, provider="groq"
            )
            for kind in ArtifactKind
        }


def test_submit_renders_generated_artifacts(monkeypatch: pytest.MonkeyPatch) -> None:
    dispatcher = RecordingDispatcher({"submit_feedback": lambda ctx: {"feedback": sample_record()}})
    patch_dispatcher(monkeypatch, dispatcher)

    result = runner.invoke(cli.app, ["submit", "5", "Amazing food"])

    assert result.exit_code == 0, result.output
    assert dispatcher.calls == [("submit_feedback", {"rating": 5, "review": "Amazing food"})]
    assert "Feedback #7" in result.output
    assert "Thank you for the perfect 5-star rating!" in result.output
    assert "Share the positive food feedback" in result.output


def test_submit_without_review(monkeypatch: pytest.MonkeyPatch) -> None:
    dispatcher = RecordingDispatcher(
        {"submit_feedback": lambda ctx: {"feedback": sample_record(review="", rating=1)}}
    )
    patch_dispatcher(monkeypatch, dispatcher)

    result = runner.invoke(cli.app, ["submit", "1"])

    assert result.exit_code == 0, result.output
    assert dispatcher.calls[0][1] == {"rating": 1, "review": ""}
    assert "(no comment)" in result.output


def test_submit_invalid_rating_is_a_usage_error(monkeypatch: pytest.MonkeyPatch) -> None:
    def reject(context: Dict[str, Any]) -> Dict[str, Any]:
        raise WorkflowInputError("submit_feedback", "Rating must be between 1 and 5")

    patch_dispatcher(monkeypatch, RecordingDispatcher({"submit_feedback": reject}))

    result = runner.invoke(cli.app, ["submit", "9", "Too good"])

    assert result.exit_code == 2


def test_storage_errors_exit_with_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    def locked(context: Dict[str, Any]) -> Dict[str, Any]:
        raise sqlite3.OperationalError("database is locked")

    patch_dispatcher(monkeypatch, RecordingDispatcher({"list_feedback": locked}))

    result = runner.invoke(cli.app, ["list"])

    assert result.exit_code == 1
    assert "database is locked" in result.output


def test_list_passes_filters(monkeypatch: pytest.MonkeyPatch) -> None:
    dispatcher = RecordingDispatcher(
        {"list_feedback": lambda ctx: {"feedback": [sample_record()], "count": 1}}
    )
    patch_dispatcher(monkeypatch, dispatcher)

    result = runner.invoke(cli.app, ["list", "--rating", "5", "--limit", "3", "--sort", "ASC"])

    assert result.exit_code == 0, result.output
    assert dispatcher.calls == [("list_feedback", {"rating": 5, "limit": 3, "sort": "asc"})]
    assert "Excellent 5-star experience." in result.output


def test_list_rejects_unknown_sort(monkeypatch: pytest.MonkeyPatch) -> None:
    dispatcher = RecordingDispatcher()
    patch_dispatcher(monkeypatch, dispatcher)

    result = runner.invoke(cli.app, ["list", "--sort", "sideways"])

    assert result.exit_code == 2
    assert dispatcher.calls == []


def test_list_empty_store(monkeypatch: pytest.MonkeyPatch) -> None:
    patch_dispatcher(
        monkeypatch, RecordingDispatcher({"list_feedback": lambda ctx: {"feedback": [], "count": 0}})
    )

    result = runner.invoke(cli.app, ["list"])

    assert result.exit_code == 0
    assert "No feedback recorded yet." in result.output


def test_stats_renders_distribution(monkeypatch: pytest.MonkeyPatch) -> None:
    analytics = {
        "total": 3,
        "avg_rating": 3.67,
        "by_rating": [{"rating": 5, "count": 2}, {"rating": 1, "count": 1}],
        "recent": 1,
    }
    dispatcher = RecordingDispatcher({"feedback_analytics": lambda ctx: {"analytics": analytics}})
    patch_dispatcher(monkeypatch, dispatcher)

    result = runner.invoke(cli.app, ["stats"])

    assert result.exit_code == 0, result.output
    assert dispatcher.calls == [("feedback_analytics", {"rating": None})]
    assert "3.67" in result.output
    assert "Rating distribution" in result.output


@pytest.mark.parametrize(
    ("probe", "expected"),
    [
        (
            {"external_available": True, "external_enabled": True, "origin": "external", "text": "Hi"},
            "External generation is working.",
        ),
        (
            {"external_available": False, "external_enabled": True, "origin": "heuristic", "text": "Hi"},
            "heuristic fallback in use",
        ),
        (
            {"external_available": False, "external_enabled": False, "origin": "heuristic", "text": "Hi"},
            "External generation is disabled",
        ),
    ],
)
def test_check_ai_reports_status(
    monkeypatch: pytest.MonkeyPatch, probe: Dict[str, Any], expected: str
) -> None:
    patch_dispatcher(monkeypatch, RecordingDispatcher({"check_generation": lambda ctx: {"probe": probe}}))

    result = runner.invoke(cli.app, ["check-ai"])

    assert result.exit_code == 0, result.output
    assert expected in result.output


def test_settings_lists_artifact_models(monkeypatch: pytest.MonkeyPatch) -> None:
    patch_dispatcher(monkeypatch, RecordingDispatcher(), StubConfigService())

    result = runner.invoke(cli.app, ["settings"])

    assert result.exit_code == 0, result.output
    assert "groq/llama-3.1-8b-instant" in result.output
    assert "actions=1s" in result.output


def test_settings_reports_invalid_configuration(monkeypatch: pytest.MonkeyPatch) -> None:
    patch_dispatcher(monkeypatch, RecordingDispatcher(), StubConfigService(broken=True))

    result = runner.invoke(cli.app, ["settings"])

    assert result.exit_code == 1
    assert "Invalid configuration" in result.output


def test_log_level_override_is_applied(monkeypatch: pytest.MonkeyPatch) -> None:
    levels: list[str] = []
    patch_dispatcher(
        monkeypatch, RecordingDispatcher({"check_generation": lambda ctx: {"probe": {"text": "x"}}})
    )
    monkeypatch.setattr(cli, "set_runtime_level", levels.append)

    result = runner.invoke(cli.app, ["check-ai", "--log-level", "debug"])

    assert result.exit_code == 0, result.output
    assert levels == ["debug"]


def test_invalid_log_level_is_a_usage_error(monkeypatch: pytest.MonkeyPatch) -> None:
    def reject(level: str) -> None:
        raise ValueError(f"Invalid log level: {level}")

    patch_dispatcher(monkeypatch, RecordingDispatcher())
    monkeypatch.setattr(cli, "set_runtime_level", reject)

    result = runner.invoke(cli.app, ["stats", "--log-level", "loud"])

    assert result.exit_code == 2
