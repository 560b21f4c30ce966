"""Feedback analytics workflow."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..services.feedback_service import FeedbackService


@dataclass
class FeedbackAnalyticsWorkflow:
    feedback_service: FeedbackService
    name: str = "feedback_analytics"

    def run(self, context: dict[str, Any]) -> dict[str, Any]:
        return {"analytics": self.feedback_service.analytics(rating=context.get("rating"))}
