"""Domain types for feedback enrichment.

Updates:
    v0.1.0 - 2026-09-14 - Initial feedback, artifact and enrichment records.
    v0.2.0 - 2026-10-02 - Track artifact origins on enriched feedback.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping


class ArtifactKind(str, Enum):
    """Artifacts generated for each feedback submission."""

    RESPONSE = "response"
    SUMMARY = "summary"
    ACTIONS = "actions"


class ArtifactOrigin(str, Enum):
    """Where an artifact's text came from."""

    EXTERNAL = "external"
    HEURISTIC = "heuristic"


@dataclass(slots=True, frozen=True)
class FeedbackInput:
    """A star rating with an optional free-text review."""

    rating: int
    review: str = ""

    def __post_init__(self) -> None:
        if self.review is None:
            object.__setattr__(self, "review", "")

    @property
    def has_review(self) -> bool:
        return bool(self.review.strip())


@dataclass(slots=True, frozen=True)
class ArtifactResult:
    """Text produced for one artifact kind."""

    kind: ArtifactKind
    text: str
    origin: ArtifactOrigin

    def __post_init__(self) -> None:
        if not isinstance(self.text, str) or not self.text.strip():
            raise ValueError(f"Artifact '{self.kind.value}' requires non-empty text.")


def _empty_origins() -> dict[ArtifactKind, ArtifactOrigin]:
    return {}


@dataclass(slots=True, frozen=True)
class EnrichedFeedback:
    """Feedback together with its three generated artifacts."""

    input: FeedbackInput
    response: str
    summary: str
    actions: str
    origins: Mapping[ArtifactKind, ArtifactOrigin] = field(
        default_factory=_empty_origins, compare=False
    )

    def __post_init__(self) -> None:
        for kind in ArtifactKind:
            value = getattr(self, kind.value)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(
                    f"Enriched feedback requires non-empty '{kind.value}' text."
                )

    @classmethod
    def from_results(
        cls, feedback: FeedbackInput, results: Iterable[ArtifactResult]
    ) -> "EnrichedFeedback":
        """Assemble enriched feedback from per-kind results.

        Args:
            feedback (FeedbackInput): Submission the artifacts belong to.
            results (Iterable[ArtifactResult]): One result per artifact kind, in any order.

        Returns:
            EnrichedFeedback: Record with fields assigned by artifact kind.

        Raises:
            ValueError: If an artifact kind is missing or duplicated.
        """

        by_kind: dict[ArtifactKind, ArtifactResult] = {}
        for result in results:
            if result.kind in by_kind:
                raise ValueError(f"Duplicate artifact result for '{result.kind.value}'.")
            by_kind[result.kind] = result

        missing = [kind.value for kind in ArtifactKind if kind not in by_kind]
        if missing:
            raise ValueError(f"Missing artifact results: {', '.join(missing)}")

        return cls(
            input=feedback,
            response=by_kind[ArtifactKind.RESPONSE].text,
            summary=by_kind[ArtifactKind.SUMMARY].text,
            actions=by_kind[ArtifactKind.ACTIONS].text,
            origins={kind: result.origin for kind, result in by_kind.items()},
        )

    def origin_of(self, kind: ArtifactKind) -> ArtifactOrigin | None:
        return self.origins.get(kind)

    def as_record(self) -> dict[str, Any]:
        """Return the column mapping used by the feedback repository."""

        return {
            "rating": self.input.rating,
            "review": self.input.review,
            "ai_response": self.response,
            "ai_summary": self.summary,
            "ai_actions": self.actions,
        }
