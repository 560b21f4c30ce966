"""Workflow dispatch with structured duration logging.

Updates:
    v0.1.0 - 2026-09-14 - Dispatcher for feedback workflows.
    v0.1.1 - 2026-10-18 - Invalid workflow input raised as WorkflowInputError.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from time import perf_counter
from typing import Any, Protocol


class WorkflowInputError(ValueError):
    """Raised when a workflow rejects the context it was given."""

    def __init__(self, workflow: str, message: str) -> None:
        super().__init__(message)
        self.workflow = workflow


class Workflow(Protocol):
    """Protocol describing the workflow contract."""

    name: str

    def run(self, context: dict[str, Any]) -> dict[str, Any]:
        """Execute the workflow and return a response.

        Args:
            context (dict[str, Any]): Input data required by the workflow.

        Returns:
            dict[str, Any]: Workflow-specific result payload.
        """

        ...


def _no_workflows() -> dict[str, Workflow]:
    return {}


@dataclass(slots=True)
class Dispatcher:
    workflows: dict[str, Workflow] = field(default_factory=_no_workflows)

    _logger = logging.getLogger(__name__)

    @property
    def available(self) -> list[str]:
        return sorted(self.workflows)

    def execute(self, workflow_name: str, context: dict[str, Any]) -> dict[str, Any]:
        """Run a registered workflow with the supplied context.

        Args:
            workflow_name (str): Name of the workflow to execute.
            context (dict[str, Any]): Payload passed to the workflow.

        Returns:
            dict[str, Any]: Output produced by the workflow.

        Raises:
            KeyError: If the workflow name is unknown.
            WorkflowInputError: If the workflow rejects ``context`` with a ``ValueError``.
        """

        workflow = self.workflows.get(workflow_name)
        if not workflow:
            raise KeyError(f"Workflow '{workflow_name}' is not registered.")
        started = perf_counter()
        try:
            result = workflow.run(context)
        except ValueError as exc:
            self._logger.warning(
                "workflow_rejected",
                extra={
                    "workflow": workflow_name,
                    "duration_ms": _elapsed_ms(started),
                    "error": str(exc),
                },
            )
            raise WorkflowInputError(workflow_name, str(exc)) from exc
        except Exception as exc:
            self._logger.error(
                "workflow_failed",
                extra={
                    "workflow": workflow_name,
                    "duration_ms": _elapsed_ms(started),
                    "error": str(exc),
                },
                exc_info=True,
            )
            raise

        self._logger.info(
            "workflow_completed",
            extra={
                "workflow": workflow_name,
                "duration_ms": _elapsed_ms(started),
                "context_keys": sorted(context.keys()),
            },
        )
        return result

    def register(self, workflow: Workflow) -> None:
        """Register a workflow implementation with the dispatcher."""

        self.workflows[workflow.name] = workflow


def _elapsed_ms(started: float) -> float:
    return round((perf_counter() - started) * 1000, 2)
