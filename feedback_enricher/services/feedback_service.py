"""Feedback submission, retrieval and analytics.

Updates:
    v0.1.0 - 2026-09-14 - Submit feedback through the enrichment pipeline and persist it.
    v0.2.0 - 2026-09-30 - Listing filters, analytics and external generation probe.
    v0.2.1 - 2026-10-18 - Probe returns within the deadline even if the provider call blocks.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from ..core.enrichment import EnrichmentOrchestrator, run_bounded
from ..core.models import ArtifactKind, ArtifactOrigin, FeedbackInput
from ..db.feedback_repository import FeedbackRepository, utc_timestamp

logger = logging.getLogger(__name__)

PROBE_FEEDBACK = FeedbackInput(
    rating=5, review="Test review to check if AI is working perfectly!"
)


def validate_rating(rating: Any) -> int:
    """Return ``rating`` as an int in 1-5.

    Raises:
        ValueError: If the rating is missing, non-numeric or out of range.
    """

    if isinstance(rating, bool) or rating is None:
        raise ValueError("Rating must be between 1 and 5")
    try:
        value = int(rating)
    except (TypeError, ValueError) as exc:
        raise ValueError("Rating must be between 1 and 5") from exc
    if value != rating and not (isinstance(rating, str) and rating.strip() == str(value)):
        raise ValueError("Rating must be between 1 and 5")
    if not 1 <= value <= 5:
        raise ValueError("Rating must be between 1 and 5")
    return value


class FeedbackService:
    """Coordinates enrichment and persistence of customer feedback."""

    def __init__(
        self,
        enricher: EnrichmentOrchestrator,
        repository: FeedbackRepository,
    ) -> None:
        """Initialize dependencies for feedback processing.

        Args:
            enricher (EnrichmentOrchestrator): Produces response, summary and actions.
            repository (FeedbackRepository): Persistent storage for feedback records.
        """

        self._enricher = enricher
        self._repository = repository

    def submit(self, rating: Any, review: str | None = None) -> dict[str, Any]:
        """Validate, enrich and store one feedback submission.

        Args:
            rating (Any): Star rating supplied by the customer.
            review (str | None): Optional free-text review.

        Returns:
            dict[str, Any]: Stored record including generated artifacts and their origins.

        Raises:
            ValueError: If the rating is not an integer between 1 and 5.
        """

        feedback = FeedbackInput(rating=validate_rating(rating), review=(review or "").strip())
        enriched = self._enricher.enrich_sync(feedback)
        created_at = utc_timestamp()
        feedback_id = self._repository.insert(enriched, created_at=created_at)
        logger.info(
            "feedback_stored",
            extra={"feedback_id": feedback_id, "rating": feedback.rating},
        )
        return {
            "id": feedback_id,
            **enriched.as_record(),
            "created_at": created_at,
            "origins": {kind.value: origin.value for kind, origin in enriched.origins.items()},
        }

    def list_feedback(
        self,
        *,
        rating: Optional[int] = None,
        limit: Optional[int] = None,
        sort: str = "desc",
    ) -> list[dict[str, Any]]:
        if rating is not None:
            rating = validate_rating(rating)
        return self._repository.fetch(rating=rating, limit=limit, sort=sort)

    def analytics(self, *, rating: Optional[int] = None) -> dict[str, Any]:
        if rating is not None:
            rating = validate_rating(rating)
        return self._repository.analytics(rating=rating)

    def check_generation(self) -> dict[str, Any]:
        """Probe external generation with a sample five-star review.

        Returns:
            dict[str, Any]: ``external_available``, ``origin`` and ``text`` of the probe.
        """

        result = run_bounded(
            self._enricher.resolve_artifact(ArtifactKind.RESPONSE, PROBE_FEEDBACK)
        )
        available = result.origin is ArtifactOrigin.EXTERNAL
        if not available:
            logger.warning(
                "external_generation_unavailable",
                extra={"external_enabled": self._enricher.external_enabled},
            )
        return {
            "external_available": available,
            "external_enabled": self._enricher.external_enabled,
            "origin": result.origin.value,
            "text": result.text,
        }
