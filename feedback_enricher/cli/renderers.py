"""Rich renderers for CLI outputs."""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from rich.panel import Panel
from rich.table import Table

from feedback_enricher.cli.io import console
from feedback_enricher.core.models import ArtifactKind
from feedback_enricher.services.config_service import ArtifactModelConfig, EnrichmentSettings

_ARTIFACT_COLUMNS = {
    ArtifactKind.RESPONSE: ("ai_response", "Response"),
    ArtifactKind.SUMMARY: ("ai_summary", "Summary"),
    ArtifactKind.ACTIONS: ("ai_actions", "Recommended actions"),
}


def _stars(rating: Any) -> str:
    if isinstance(rating, int) and 1 <= rating <= 5:
        return "★" * rating + "☆" * (5 - rating)
    return str(rating)


def render_feedback_record(record: Mapping[str, Any]) -> None:
    """Display a stored submission together with its generated artifacts."""

    origins = record.get("origins") or {}
    lines = [f"[bold]Rating:[/] {_stars(record.get('rating'))}"]
    review = record.get("review") or ""
    lines.append(f"[bold]Review:[/] {review or '[dim](no comment)[/]'}")

    for kind, (column, label) in _ARTIFACT_COLUMNS.items():
        origin = origins.get(kind.value)
        suffix = f" [dim]({origin})[/]" if origin else ""
        lines.append(f"\n[bold]{label}:[/]{suffix}\n{record.get(column) or ''}")

    title = f"Feedback #{record['id']}" if record.get("id") is not None else "Feedback"
    console.print(Panel("\n".join(lines), title=title))


def render_feedback_table(rows: Sequence[Mapping[str, Any]]) -> None:
    """Render stored feedback as a table."""

    if not rows:
        console.print(Panel("No feedback recorded yet.", title="Feedback"))
        return

    table = Table(title=f"Feedback ({len(rows)})", show_lines=True)
    table.add_column("ID", justify="right")
    table.add_column("Rating")
    table.add_column("Review", overflow="fold")
    table.add_column("Summary", overflow="fold")
    table.add_column("Created")
    for row in rows:
        table.add_row(
            str(row.get("id", "")),
            _stars(row.get("rating")),
            row.get("review") or "",
            row.get("ai_summary") or "",
            row.get("created_at") or "",
        )
    console.print(table)


def render_analytics(analytics: Mapping[str, Any], *, rating: int | None = None) -> None:
    """Render totals and the rating distribution."""

    scope = f" (rating {rating})" if rating is not None else ""
    lines = [
        f"[bold]Total feedback{scope}:[/] {analytics.get('total', 0)}",
        f"[bold]Average rating:[/] {analytics.get('avg_rating', 0)}",
        f"[bold]Last 24 hours:[/] {analytics.get('recent', 0)}",
    ]
    console.print(Panel("\n".join(lines), title="Analytics"))

    distribution = analytics.get("by_rating") or []
    if distribution:
        table = Table(title="Rating distribution")
        table.add_column("Rating")
        table.add_column("Count", justify="right")
        for entry in distribution:
            table.add_row(_stars(entry.get("rating")), str(entry.get("count", 0)))
        console.print(table)


def render_probe(probe: Mapping[str, Any]) -> None:
    """Render the result of an external generation probe."""

    if probe.get("external_available"):
        status = "[green]External generation is working.[/]"
    elif not probe.get("external_enabled", True):
        status = "[yellow]External generation is disabled; heuristic responses in use.[/]"
    else:
        status = "[yellow]External generation unavailable; heuristic fallback in use.[/]"
    console.print(
        Panel(
            f"{status}\n\n[bold]Sample response ({probe.get('origin')}):[/]\n{probe.get('text', '')}",
            title="AI check",
        )
    )


def render_settings(
    settings: EnrichmentSettings, models: Mapping[ArtifactKind, ArtifactModelConfig]
) -> None:
    """Render enrichment policy and artifact model configuration."""

    overrides = ", ".join(
        f"{kind.value}={seconds:g}s" for kind, seconds in settings.deadlines.items()
    )
    lines = [
        f"[bold]External generation:[/] {'enabled' if settings.external_enabled else 'disabled'}",
        f"[bold]Deadline:[/] {settings.deadline_seconds:g}s"
        + (f" (overrides: {overrides})" if overrides else ""),
        f"[bold]Minimum response length:[/] {settings.min_response_chars} characters",
        f"[bold]Provider timeout:[/] {settings.request_timeout_seconds:g}s",
    ]
    console.print(Panel("\n".join(lines), title="Enrichment"))

    table = Table(title="Artifact models")
    table.add_column("Artifact")
    table.add_column("Model")
    table.add_column("Provider")
    table.add_column("Temperature", justify="right")
    table.add_column("Max tokens", justify="right")
    for kind, config in models.items():
        table.add_row(
            kind.value,
            config.model,
            config.provider or "-",
            "-" if config.temperature is None else f"{config.temperature:g}",
            "-" if config.max_tokens is None else str(config.max_tokens),
        )
    console.print(table)
