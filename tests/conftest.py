from pathlib import Path
import sys

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from tests.helpers.config import write_config, write_prompts  # noqa: E402


@pytest.fixture()
def config_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    directory = tmp_path / "config"
    write_config(directory, sqlite_path=tmp_path / "feedback.db")
    monkeypatch.setenv("FEEDBACK_CONFIG_PATH", str(directory))
    monkeypatch.setenv("GROQ_KEY", "secret")
    return directory


@pytest.fixture()
def prompts_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    directory = tmp_path / "prompts"
    write_prompts(directory)
    monkeypatch.setenv("FEEDBACK_PROMPTS_PATH", str(directory))
    return directory


@pytest.fixture(autouse=True)
def _fixed_console_width(monkeypatch: pytest.MonkeyPatch) -> None:
    """Render CLI output at a fixed width so tests don't depend on the terminal."""

    from feedback_enricher.cli.io import console

    monkeypatch.setattr(console, "_width", 200)
