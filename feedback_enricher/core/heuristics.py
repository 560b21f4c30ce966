"""Rule-based artifact generation used when external generation is unavailable.

The responder is deterministic: the output depends only on the rating, the
review text and the artifact kind. Rating tiers select the tone and the
default templates, and an ordered keyword table supplies topic-specific
fragments. The first rule whose keyword appears in the review and whose tone
matches the tier wins.

Updates:
    v0.1.0 - 2026-09-14 - Initial tiered templates.
    v0.2.0 - 2026-09-28 - Moved keyword handling into ordered rule tables.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Sequence

from .models import ArtifactKind


class Tone(str, Enum):
    APOLOGETIC = "apologetic"
    NEUTRAL = "neutral"
    APPRECIATIVE = "appreciative"


_CRITICAL = frozenset({Tone.APOLOGETIC, Tone.NEUTRAL})
_POSITIVE = frozenset({Tone.APPRECIATIVE})
_ANY = frozenset(Tone)


@dataclass(slots=True, frozen=True)
class KeywordRule:
    """Maps a review keyword, within a tone context, to a template fragment."""

    keyword: str
    tones: frozenset[Tone]
    fragment: tuple[str, ...]

    def matches(self, review: str, tone: Tone) -> bool:
        if tone not in self.tones:
            return False
        return re.search(rf"\b{re.escape(self.keyword)}", review, re.IGNORECASE) is not None


@dataclass(slots=True, frozen=True)
class TierTemplates:
    """Static templates for one rating tier."""

    tone: Tone
    opening: str
    acknowledgment: str
    acknowledgment_no_review: str
    summary: str
    comment_clause: str
    actions: tuple[str, ...]


TIERS: dict[int, TierTemplates] = {
    5: TierTemplates(
        tone=Tone.APPRECIATIVE,
        opening="Thank you for the perfect 5-star rating!",
        acknowledgment="We're thrilled you took the time to share such kind words.",
        acknowledgment_no_review="We appreciate your excellent feedback!",
        summary="Excellent {rating}-star feedback",
        comment_clause=" with enthusiastic comments",
        actions=(
            "Celebrate the positive feedback with the entire team",
            "Continue the excellent standards",
        ),
    ),
    4: TierTemplates(
        tone=Tone.APPRECIATIVE,
        opening="Thank you for your 4-star rating!",
        acknowledgment="We're glad you enjoyed your experience and appreciate your comments.",
        acknowledgment_no_review="We value your input and will use it to improve.",
        summary="Positive {rating}-star feedback",
        comment_clause=" with constructive suggestions",
        actions=(
            "Review the feedback for enhancement opportunities",
            "Maintain current good practices",
        ),
    ),
    3: TierTemplates(
        tone=Tone.NEUTRAL,
        opening="Thank you for your 3-star feedback.",
        acknowledgment="We appreciate your honest comments and will consider them for improvement.",
        acknowledgment_no_review="We value your rating and will use it to enhance our services.",
        summary="Average {rating}-star experience",
        comment_clause=" with balanced feedback",
        actions=(
            "Analyze the feedback for common themes",
            "Identify specific areas for improvement",
            "Consider implementing the suggestions",
        ),
    ),
    2: TierTemplates(
        tone=Tone.APOLOGETIC,
        opening="Thank you for your 2-star feedback, and we apologize for the issues you experienced.",
        acknowledgment="We will look into the concerns you raised and address them.",
        acknowledgment_no_review="We will review our service and address what fell short.",
        summary="Below average {rating}-star feedback",
        comment_clause=" highlighting areas needing attention",
        actions=(
            "Investigate the specific issues raised",
            "Implement corrective actions",
        ),
    ),
    1: TierTemplates(
        tone=Tone.APOLOGETIC,
        opening="We sincerely apologize for your disappointing 1-star experience.",
        acknowledgment="Thank you for bringing this to our attention; we take it seriously and will investigate.",
        acknowledgment_no_review="We take all feedback seriously and will work to improve.",
        summary="Poor {rating}-star experience",
        comment_clause=" requiring immediate investigation",
        actions=(
            "Review the incident details thoroughly",
            "Contact the customer if possible",
            "Implement corrective measures to prevent recurrence",
        ),
    ),
}

DEFAULT_TIER = TierTemplates(
    tone=Tone.NEUTRAL,
    opening="Thank you for your feedback!",
    acknowledgment="We appreciate you taking the time to share your experience.",
    acknowledgment_no_review="We appreciate you taking the time to rate your experience.",
    summary="Feedback received",
    comment_clause=" with comments",
    actions=("Review the feedback for actionable insights",),
)

# Problems first, then topics, then general sentiment.
RESPONSE_RULES: tuple[KeywordRule, ...] = (
    KeywordRule("rude", _CRITICAL, (
        "We're sorry for how you were treated and will address it with our staff.",
    )),
    KeywordRule("slow", _CRITICAL, (
        "We're sorry about the wait and are reviewing our service times.",
    )),
    KeywordRule("clean", _CRITICAL, (
        "We're sorry about the cleanliness issues and are reviewing our cleaning routine.",
    )),
    KeywordRule("clean", _POSITIVE, (
        "We're glad you noticed the care our team puts into keeping things clean.",
    )),
    KeywordRule("food", _POSITIVE, (
        "We're delighted you enjoyed the food and will pass your compliments to the kitchen.",
    )),
    KeywordRule("food", _CRITICAL, (
        "We've shared your comments about the food with our kitchen team.",
    )),
    KeywordRule("service", _POSITIVE, (
        "We're thrilled our team's service stood out for you.",
    )),
    KeywordRule("service", _CRITICAL, (
        "We've shared your comments about our service with the team.",
    )),
    KeywordRule("quality", _ANY, (
        "Your comments on quality help us hold ourselves to a higher standard.",
    )),
    KeywordRule("love", _POSITIVE, ("We're thrilled you loved your experience!",)),
    KeywordRule("amazing", _POSITIVE, ("We're thrilled you loved your experience!",)),
    KeywordRule("good", _POSITIVE, (
        "We're glad you enjoyed your experience and appreciate your feedback.",
    )),
    KeywordRule("like", _POSITIVE, (
        "We're glad you enjoyed your experience and appreciate your feedback.",
    )),
)

ACTION_RULES: tuple[KeywordRule, ...] = (
    KeywordRule("rude", _CRITICAL, (
        "Review customer service training",
        "Implement empathy training",
    )),
    KeywordRule("slow", _CRITICAL, (
        "Review service timing procedures",
        "Train staff on efficiency",
    )),
    KeywordRule("clean", _CRITICAL, (
        "Conduct a cleanliness audit",
        "Implement an enhanced cleaning schedule",
    )),
    KeywordRule("clean", _POSITIVE, (
        "Recognize the cleaning staff for their work",
        "Keep the current cleaning standards",
    )),
    KeywordRule("food", _POSITIVE, (
        "Share the positive food feedback with the kitchen team",
        "Maintain recipe quality",
    )),
    KeywordRule("food", _CRITICAL, (
        "Review food preparation and quality checks",
        "Follow up with the kitchen team on the issue raised",
    )),
    KeywordRule("service", _POSITIVE, (
        "Recognize the service team for outstanding work",
        "Share this as a best practice example",
    )),
    KeywordRule("service", _CRITICAL, (
        "Analyze service delivery for improvements",
        "Train staff on the concerns raised",
    )),
    KeywordRule("quality", _ANY, (
        "Review product quality control",
        "Implement customer suggestions",
    )),
)


def resolve_tier(rating: Any) -> int | None:
    """Return the rating tier (1-5) or ``None`` when the rating is unusable."""

    if isinstance(rating, bool):
        return None
    if isinstance(rating, str) and rating.strip().isdigit():
        rating = int(rating.strip())
    if isinstance(rating, int) and 1 <= rating <= 5:
        return rating
    return None


class HeuristicResponder:
    """Generates artifact text from static templates and keyword rules."""

    def __init__(
        self,
        *,
        tiers: dict[int, TierTemplates] | None = None,
        default_tier: TierTemplates = DEFAULT_TIER,
        response_rules: Sequence[KeywordRule] = RESPONSE_RULES,
        action_rules: Sequence[KeywordRule] = ACTION_RULES,
    ) -> None:
        self._tiers = tiers if tiers is not None else TIERS
        self._default_tier = default_tier
        self._response_rules = tuple(response_rules)
        self._action_rules = tuple(action_rules)

    def generate(self, rating: Any, review: str | None, kind: ArtifactKind) -> str:
        """Produce artifact text for a rating and review.

        Args:
            rating (Any): Star rating; values outside 1-5 use the default templates.
            review (str | None): Free-text review, possibly empty.
            kind (ArtifactKind): Artifact to generate.

        Returns:
            str: Non-empty artifact text.
        """

        tier = resolve_tier(rating)
        templates = self._tiers.get(tier, self._default_tier) if tier else self._default_tier
        text = (review or "").strip()

        if kind is ArtifactKind.RESPONSE:
            return self._response(templates, text)
        if kind is ArtifactKind.SUMMARY:
            return self._summary(templates, tier, text)
        return self._actions(templates, text)

    def _response(self, templates: TierTemplates, review: str) -> str:
        rule = _first_match(self._response_rules, review, templates.tone)
        if rule is not None:
            acknowledgment = rule.fragment[0]
        elif review:
            acknowledgment = templates.acknowledgment
        else:
            acknowledgment = templates.acknowledgment_no_review
        return f"{templates.opening} {acknowledgment}"

    @staticmethod
    def _summary(templates: TierTemplates, tier: int | None, review: str) -> str:
        summary = templates.summary.format(rating=tier)
        if review:
            summary += templates.comment_clause
        return f"{summary}."

    def _actions(self, templates: TierTemplates, review: str) -> str:
        rule = _first_match(self._action_rules, review, templates.tone)
        lines = rule.fragment if rule is not None else templates.actions
        return "\n".join(f"{index}. {line}" for index, line in enumerate(lines[:3], start=1))


def _first_match(
    rules: Sequence[KeywordRule], review: str, tone: Tone
) -> KeywordRule | None:
    if not review:
        return None
    for rule in rules:
        if rule.matches(review, tone):
            return rule
    return None


_DEFAULT_RESPONDER = HeuristicResponder()


def generate(rating: Any, review: str | None, kind: ArtifactKind) -> str:
    """Generate artifact text with the built-in template set."""

    return _DEFAULT_RESPONDER.generate(rating, review, kind)
