from __future__ import annotations

from pathlib import Path
from typing import Any, Iterator

import pytest
from typer.testing import CliRunner

import feedback_enricher.cli as cli
from feedback_enricher.cli import runtime
from feedback_enricher.core.llm_gateway import LLMGateway
from tests.helpers.config import write_config


@pytest.fixture(autouse=True)
def reset_runtime(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.setattr(runtime, "configure_logging", lambda *args, **kwargs: None)
    cli.set_runtime(None)
    yield
    cli.set_runtime(None)


@pytest.fixture()
def offline_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    directory = tmp_path / "config"
    write_config(
        directory,
        sqlite_path=tmp_path / "feedback.db",
        enrichment="enrichment:\n  external_enabled: false\n",
    )
    monkeypatch.setenv("FEEDBACK_CONFIG_PATH", str(directory))
    return directory


def test_initialize_runtime_registers_workflows(config_dir: Path, prompts_dir: Path) -> None:
    dispatcher, config_service = runtime.initialize_runtime()

    assert dispatcher.available == [
        "check_generation",
        "feedback_analytics",
        "list_feedback",
        "submit_feedback",
    ]
    assert config_service.config_path == config_dir.resolve()
    service = dispatcher.workflows["submit_feedback"].feedback_service
    assert service._enricher.external_enabled


def test_initialize_runtime_skips_gateway_when_disabled(
    offline_config: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    class ExplodingGateway(LLMGateway):
        def __init__(self, *args: Any, **kwargs: Any) -> None:  # pragma: no cover
            raise AssertionError("gateway must not be built")

    monkeypatch.setattr(cli, "LLMGateway", ExplodingGateway)

    dispatcher, _ = runtime.initialize_runtime()

    service = dispatcher.workflows["check_generation"].feedback_service
    assert not service._enricher.external_enabled


def test_get_runtime_is_cached(offline_config: Path) -> None:
    first = cli.get_runtime()

    assert cli.get_runtime() is first
    assert cli.get_dispatcher() is first[0]
    assert cli.get_config() is first[1]


def test_offline_cli_session(offline_config: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(cli.app, ["submit", "1", "The staff were rude"])
    assert result.exit_code == 0, result.output
    assert "Feedback #1" in result.output
    assert "heuristic" in result.output

    result = runner.invoke(cli.app, ["submit", "5"])
    assert result.exit_code == 0, result.output

    result = runner.invoke(cli.app, ["list", "--rating", "1"])
    assert result.exit_code == 0, result.output
    assert "The staff were rude" in result.output

    result = runner.invoke(cli.app, ["stats"])
    assert result.exit_code == 0, result.output
    assert "Average rating:" in result.output
    assert "3.0" in result.output

    result = runner.invoke(cli.app, ["check-ai"])
    assert result.exit_code == 0, result.output
    assert "disabled" in result.output

    result = runner.invoke(cli.app, ["settings"])
    assert result.exit_code == 0, result.output
    assert "disabled" in result.output

    result = runner.invoke(cli.app, ["submit", "0", "Nope"])
    assert result.exit_code == 2
