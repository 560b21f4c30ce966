"""External generation health probe.

Updates:
    v0.1.0 - 2026-09-30 - Report whether the completion endpoint is usable.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..services.feedback_service import FeedbackService


@dataclass
class CheckGenerationWorkflow:
    feedback_service: FeedbackService
    name: str = "check_generation"

    def run(self, context: dict[str, Any]) -> dict[str, Any]:
        """Probe the external endpoint; ``context`` is unused."""

        return {"probe": self.feedback_service.check_generation()}
