"""Feedback enricher CLI package."""

from __future__ import annotations

import logging

import typer

from feedback_enricher.cli.commands.feedback import (
    check_ai,
    list_feedback,
    settings,
    stats,
    submit,
)
from feedback_enricher.cli.io import console
from feedback_enricher.cli.runtime import (
    get_config,
    get_dispatcher,
    get_runtime,
    initialize_runtime,
    set_runtime,
    set_runtime_level,
)
from feedback_enricher.core.dispatcher import Dispatcher
from feedback_enricher.core.enrichment import EnrichmentOrchestrator
from feedback_enricher.core.llm_gateway import LLMGateway
from feedback_enricher.core.logging_setup import configure_logging
from feedback_enricher.db.feedback_repository import FeedbackRepository
from feedback_enricher.db.sqlite_client import SQLiteClient
from feedback_enricher.services.config_service import ConfigService
from feedback_enricher.services.feedback_service import FeedbackService
from feedback_enricher.services.prompt_service import PromptService

logger = logging.getLogger(__name__)

app = typer.Typer(add_completion=False, help="Star-rated feedback with AI-generated follow-up.")

app.command()(submit)
app.command("list")(list_feedback)
app.command()(stats)
app.command("check-ai")(check_ai)
app.command()(settings)


def main() -> None:
    """CLI entry point."""

    app()


__all__: list[str] = [
    "app",
    "main",
    "console",
    "logger",
    "get_config",
    "get_dispatcher",
    "get_runtime",
    "initialize_runtime",
    "set_runtime",
    "set_runtime_level",
    "submit",
    "list_feedback",
    "stats",
    "check_ai",
    "settings",
    # Classes re-exported so tests can substitute them
    "ConfigService",
    "configure_logging",
    "Dispatcher",
    "EnrichmentOrchestrator",
    "FeedbackRepository",
    "FeedbackService",
    "LLMGateway",
    "PromptService",
    "SQLiteClient",
]
