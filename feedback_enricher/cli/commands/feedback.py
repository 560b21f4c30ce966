"""Feedback commands for the feedback enricher CLI."""

from __future__ import annotations

import logging
import sqlite3
import sys
from typing import Any, Optional

import typer

from feedback_enricher.cli.io import console
from feedback_enricher.cli.renderers import (
    render_analytics,
    render_feedback_record,
    render_feedback_table,
    render_probe,
    render_settings,
)
from feedback_enricher.cli.utils import apply_log_override
from feedback_enricher.core.dispatcher import WorkflowInputError

logger = logging.getLogger(__name__)

_LOG_LEVEL_HELP = "Override logging level for this invocation (e.g., DEBUG, INFO)."


def _cli() -> Any:
    return sys.modules["feedback_enricher.cli"]


def _execute(workflow: str, context: dict[str, Any]) -> dict[str, Any]:
    try:
        return _cli().get_dispatcher().execute(workflow, context)
    except WorkflowInputError as exc:
        raise typer.BadParameter(str(exc)) from exc
    except sqlite3.Error as exc:
        console.print(f"[red]Storage error: {exc}[/]")
        raise typer.Exit(code=1) from exc


def submit(
    rating: int = typer.Argument(..., help="Star rating between 1 and 5."),
    review: str = typer.Argument("", help="Optional free-text review."),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", "-l", help=_LOG_LEVEL_HELP
    ),
) -> None:
    """Submit feedback and display the generated response, summary and actions."""

    apply_log_override(log_level)
    result = _execute("submit_feedback", {"rating": rating, "review": review})
    render_feedback_record(result["feedback"])


def list_feedback(
    rating: Optional[int] = typer.Option(
        None, "--rating", "-r", min=1, max=5, help="Only show feedback with this rating."
    ),
    limit: Optional[int] = typer.Option(
        None, "--limit", "-n", min=0, help="Maximum number of entries (0 = all)."
    ),
    sort: str = typer.Option("desc", "--sort", help="Sort by creation time: asc or desc."),
    raw: bool = typer.Option(False, "--raw", help="Emit raw JSON instead of a table."),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", "-l", help=_LOG_LEVEL_HELP
    ),
) -> None:
    """List stored feedback."""

    apply_log_override(log_level)
    if sort.lower() not in {"asc", "desc"}:
        raise typer.BadParameter("Sort must be 'asc' or 'desc'.")
    result = _execute(
        "list_feedback", {"rating": rating, "limit": limit, "sort": sort.lower()}
    )
    if raw:
        console.print_json(data=result)
        return
    render_feedback_table(result["feedback"])


def stats(
    rating: Optional[int] = typer.Option(
        None, "--rating", "-r", min=1, max=5, help="Restrict totals to one rating."
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", "-l", help=_LOG_LEVEL_HELP
    ),
) -> None:
    """Show feedback totals, average rating and distribution."""

    apply_log_override(log_level)
    result = _execute("feedback_analytics", {"rating": rating})
    render_analytics(result["analytics"], rating=rating)


def check_ai(
    log_level: Optional[str] = typer.Option(
        None, "--log-level", "-l", help=_LOG_LEVEL_HELP
    ),
) -> None:
    """Check whether the external generation endpoint responds."""

    apply_log_override(log_level)
    result = _execute("check_generation", {})
    render_probe(result["probe"])


def settings(
    log_level: Optional[str] = typer.Option(
        None, "--log-level", "-l", help=_LOG_LEVEL_HELP
    ),
) -> None:
    """Show enrichment settings and artifact model configuration."""

    apply_log_override(log_level)
    config_service = _cli().get_config()
    try:
        models = config_service.iter_artifact_configs()
        enrichment = config_service.enrichment_settings
    except (KeyError, ValueError) as exc:
        console.print(f"[red]Invalid configuration: {exc}[/]")
        raise typer.Exit(code=1) from exc
    render_settings(enrichment, models)
