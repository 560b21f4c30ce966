"""Feedback listing workflow."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..services.feedback_service import FeedbackService


@dataclass
class ListFeedbackWorkflow:
    feedback_service: FeedbackService
    name: str = "list_feedback"

    def run(self, context: dict[str, Any]) -> dict[str, Any]:
        rows = self.feedback_service.list_feedback(
            rating=context.get("rating"),
            limit=context.get("limit"),
            sort=context.get("sort", "desc"),
        )
        return {"feedback": rows, "count": len(rows)}
