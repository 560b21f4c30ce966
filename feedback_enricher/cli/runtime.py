"""Runtime wiring for the feedback enricher CLI."""

from __future__ import annotations

import logging
from typing import Any

from feedback_enricher.core.dispatcher import Dispatcher
from feedback_enricher.core.enrichment import EnrichmentOrchestrator
from feedback_enricher.core.llm_gateway import LLMGateway
from feedback_enricher.core.logging_setup import configure_logging, set_runtime_level
from feedback_enricher.db.feedback_repository import FeedbackRepository
from feedback_enricher.db.sqlite_client import SQLiteClient
from feedback_enricher.services.config_service import ConfigService
from feedback_enricher.services.feedback_service import FeedbackService
from feedback_enricher.services.prompt_service import PromptService
from feedback_enricher.workflows.check_generation import CheckGenerationWorkflow
from feedback_enricher.workflows.feedback_analytics import FeedbackAnalyticsWorkflow
from feedback_enricher.workflows.list_feedback import ListFeedbackWorkflow
from feedback_enricher.workflows.submit_feedback import SubmitFeedbackWorkflow

logger = logging.getLogger(__name__)

_RUNTIME_CACHE: tuple[Dispatcher, ConfigService] | None = None

_DEFAULT_CONFIG_SERVICE = ConfigService
_DEFAULT_SQLITE_CLIENT = SQLiteClient
_DEFAULT_PROMPT_SERVICE = PromptService
_DEFAULT_LLM_GATEWAY = LLMGateway
_DEFAULT_ENRICHMENT_ORCHESTRATOR = EnrichmentOrchestrator
_DEFAULT_FEEDBACK_REPOSITORY = FeedbackRepository
_DEFAULT_FEEDBACK_SERVICE = FeedbackService


def initialize_runtime() -> tuple[Dispatcher, ConfigService]:
    """Build the service graph from configuration and register workflows."""

    config_service_cls = _resolve_dependency("ConfigService", _DEFAULT_CONFIG_SERVICE)
    config_service = config_service_cls()
    configure_logging(
        config_service.logging_config,
        service=config_service.app_metadata.get("name"),
    )
    logger.debug("Runtime initialization starting.")

    sqlite_cls = _resolve_dependency("SQLiteClient", _DEFAULT_SQLITE_CLIENT)
    sqlite_client = sqlite_cls(config_service.database_config["sqlite_path"])
    sqlite_client.initialize_schema()

    settings = config_service.enrichment_settings
    client = None
    if settings.external_enabled:
        prompt_service_cls = _resolve_dependency("PromptService", _DEFAULT_PROMPT_SERVICE)
        gateway_cls = _resolve_dependency("LLMGateway", _DEFAULT_LLM_GATEWAY)
        client = gateway_cls(
            config_service=config_service, prompt_service=prompt_service_cls()
        )
    else:
        logger.info("External generation disabled; using heuristic artifacts only.")

    enricher_cls = _resolve_dependency(
        "EnrichmentOrchestrator", _DEFAULT_ENRICHMENT_ORCHESTRATOR
    )
    enricher = enricher_cls(client, settings)
    repository_cls = _resolve_dependency("FeedbackRepository", _DEFAULT_FEEDBACK_REPOSITORY)
    repository = repository_cls(sqlite_client=sqlite_client)
    service_cls = _resolve_dependency("FeedbackService", _DEFAULT_FEEDBACK_SERVICE)
    feedback_service = service_cls(enricher=enricher, repository=repository)

    dispatcher = Dispatcher()
    for workflow in (
        SubmitFeedbackWorkflow(feedback_service=feedback_service),
        ListFeedbackWorkflow(feedback_service=feedback_service),
        FeedbackAnalyticsWorkflow(feedback_service=feedback_service),
        CheckGenerationWorkflow(feedback_service=feedback_service),
    ):
        dispatcher.register(workflow)
    return dispatcher, config_service


def get_runtime() -> tuple[Dispatcher, ConfigService]:
    """Return the lazily-initialized dispatcher and configuration."""

    global _RUNTIME_CACHE
    if _RUNTIME_CACHE is None:
        _RUNTIME_CACHE = initialize_runtime()
    return _RUNTIME_CACHE


def set_runtime(runtime: tuple[Dispatcher, ConfigService] | None) -> None:
    """Replace (or clear, with ``None``) the cached runtime tuple."""

    global _RUNTIME_CACHE
    _RUNTIME_CACHE = runtime


def get_dispatcher() -> Dispatcher:
    dispatcher, _ = get_runtime()
    return dispatcher


def get_config() -> ConfigService:
    _, config_service = get_runtime()
    return config_service


def _resolve_dependency(name: str, default: Any) -> Any:
    """Return a dependency, preferring overrides on the cli package."""

    from sys import modules

    cli_module = modules.get("feedback_enricher.cli")
    if cli_module is not None and hasattr(cli_module, name):
        return getattr(cli_module, name)
    return default


__all__ = [
    "get_config",
    "get_dispatcher",
    "get_runtime",
    "initialize_runtime",
    "set_runtime",
    "set_runtime_level",
]
