"""Feedback submission workflow.

Updates:
    v0.1.0 - 2026-09-14 - Initial submission workflow.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..services.feedback_service import FeedbackService


@dataclass
class SubmitFeedbackWorkflow:
    feedback_service: FeedbackService
    name: str = "submit_feedback"

    def run(self, context: dict[str, Any]) -> dict[str, Any]:
        """Enrich and store the submission described by ``context``.

        Args:
            context (dict[str, Any]): ``rating`` and optional ``review``.

        Returns:
            dict[str, Any]: Stored feedback record under ``feedback``.
        """

        record = self.feedback_service.submit(
            context.get("rating"), context.get("review") or ""
        )
        return {"feedback": record}
