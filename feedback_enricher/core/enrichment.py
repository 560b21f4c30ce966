"""Concurrent enrichment of feedback with external and heuristic artifacts.

Every artifact kind is resolved independently: the external request runs as
its own task and is raced against a deadline. Failures and expiries fall back
to the heuristic responder. Each artifact writes to a single-assignment slot,
so a result arriving after the fallback was chosen is discarded.

Updates:
    v0.1.0 - 2026-09-21 - Concurrent fan-out with per-artifact deadlines.
    v0.2.0 - 2026-10-02 - Single-assignment slots guard against late results.
    v0.2.1 - 2026-10-18 - Synchronous callers no longer wait on abandoned executor work.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from time import perf_counter
from typing import Any, Callable, Coroutine, Protocol, TypeVar

from ..services.config_service import EnrichmentSettings
from .heuristics import generate as heuristic_generate
from .llm_gateway import LowQualityError, ServiceError, TransportError
from .models import (
    ArtifactKind,
    ArtifactOrigin,
    ArtifactResult,
    EnrichedFeedback,
    FeedbackInput,
)

logger = logging.getLogger(__name__)

HeuristicFn = Callable[[Any, str, ArtifactKind], str]

T = TypeVar("T")

# Time allowed for cancelled tasks to unwind before the private loop is closed.
CANCEL_GRACE_SECONDS = 0.05


class GenerationClient(Protocol):
    async def request(self, kind: ArtifactKind, feedback: FeedbackInput) -> str:
        ...


class DeadlineExceeded(Exception):
    """Raised internally when an artifact request outlives its deadline."""

    reason = "deadline_exceeded"

    def __init__(self, kind: ArtifactKind, deadline_seconds: float) -> None:
        super().__init__(
            f"No {kind.value} artifact within {deadline_seconds:g}s deadline."
        )
        self.kind = kind
        self.deadline_seconds = deadline_seconds


def run_bounded(coro: Coroutine[Any, Any, T]) -> T:
    """Run ``coro`` to completion on a private event loop.

    Unlike :func:`asyncio.run`, leftover tasks are cancelled and given only
    :data:`CANCEL_GRACE_SECONDS` to unwind, and the default executor is shut
    down without joining its threads. A provider call still blocking a worker
    thread after its deadline therefore cannot hold up the caller.

    Args:
        coro (Coroutine): Coroutine to drive.

    Returns:
        T: The coroutine's result.
    """

    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        try:
            _cancel_leftover_tasks(loop)
            loop.run_until_complete(loop.shutdown_asyncgens())
        finally:
            loop.close()


def _cancel_leftover_tasks(loop: asyncio.AbstractEventLoop) -> None:
    pending = [task for task in asyncio.all_tasks(loop) if not task.done()]
    if not pending:
        return
    for task in pending:
        task.cancel()
    _, still_running = loop.run_until_complete(
        asyncio.wait(pending, timeout=CANCEL_GRACE_SECONDS)
    )
    if still_running:
        logger.debug("Abandoning %d task(s) that ignored cancellation.", len(still_running))


class ArtifactSlot:
    """Holds the result for one artifact; only the first fill is kept."""

    __slots__ = ("kind", "_result")

    def __init__(self, kind: ArtifactKind) -> None:
        self.kind = kind
        self._result: ArtifactResult | None = None

    @property
    def filled(self) -> bool:
        return self._result is not None

    @property
    def result(self) -> ArtifactResult:
        if self._result is None:
            raise RuntimeError(f"Artifact slot '{self.kind.value}' is empty.")
        return self._result

    def fill(self, result: ArtifactResult) -> bool:
        """Store ``result`` unless the slot already holds one.

        Returns:
            bool: ``True`` when the result was accepted.
        """

        if result.kind is not self.kind:
            raise ValueError(
                f"Cannot store {result.kind.value} result in {self.kind.value} slot."
            )
        if self._result is not None:
            return False
        self._result = result
        return True


class EnrichmentOrchestrator:
    """Builds enriched feedback, never failing because of the external service."""

    def __init__(
        self,
        client: GenerationClient | None,
        settings: EnrichmentSettings | None = None,
        *,
        heuristic: HeuristicFn = heuristic_generate,
    ) -> None:
        """Configure the orchestrator.

        Args:
            client (GenerationClient | None): External generation client, or ``None``
                to use only heuristic artifacts.
            settings (EnrichmentSettings | None): Deadline policy; defaults apply when omitted.
            heuristic (HeuristicFn): Fallback generator for failed or late artifacts.
        """

        self._client = client
        self._settings = settings or EnrichmentSettings()
        self._heuristic = heuristic

    @property
    def external_enabled(self) -> bool:
        return self._client is not None

    async def enrich(self, feedback: FeedbackInput) -> EnrichedFeedback:
        """Generate all three artifacts for a submission.

        Args:
            feedback (FeedbackInput): Validated rating and review.

        Returns:
            EnrichedFeedback: Response, summary and actions, each non-empty.
        """

        started = perf_counter()
        results = await asyncio.gather(
            *(self.resolve_artifact(kind, feedback) for kind in ArtifactKind)
        )
        enriched = EnrichedFeedback.from_results(feedback, results)
        logger.info(
            "feedback_enriched",
            extra={
                "rating": feedback.rating,
                "origins": {kind.value: origin.value for kind, origin in enriched.origins.items()},
                "duration_ms": round((perf_counter() - started) * 1000, 2),
            },
        )
        return enriched

    def enrich_sync(self, feedback: FeedbackInput) -> EnrichedFeedback:
        """Run :meth:`enrich` for synchronous callers, returning within the deadline."""

        return run_bounded(self.enrich(feedback))

    async def resolve_artifact(
        self, kind: ArtifactKind, feedback: FeedbackInput
    ) -> ArtifactResult:
        """Resolve one artifact within its deadline.

        Args:
            kind (ArtifactKind): Artifact to resolve.
            feedback (FeedbackInput): Submission being enriched.

        Returns:
            ArtifactResult: External text when available in time, otherwise heuristic text.
        """

        slot = ArtifactSlot(kind)
        if self._client is None:
            slot.fill(self._heuristic_result(kind, feedback))
            return slot.result

        deadline = self._settings.deadline_for(kind)
        task = asyncio.ensure_future(self._client.request(kind, feedback))
        try:
            done, _ = await asyncio.wait({task}, timeout=deadline)
        except asyncio.CancelledError:
            task.cancel()
            raise

        if done:
            self._settle(slot, feedback, task)
        else:
            self._fall_back(slot, feedback, DeadlineExceeded(kind, deadline))
            task.add_done_callback(functools.partial(self._settle, slot, feedback))
            task.cancel()
        return slot.result

    def _settle(
        self, slot: ArtifactSlot, feedback: FeedbackInput, task: "asyncio.Future[str]"
    ) -> None:
        if task.cancelled():
            if not slot.filled:
                self._fall_back(
                    slot,
                    feedback,
                    TransportError(f"{slot.kind.value} request was cancelled.", kind=slot.kind),
                )
            return
        error = task.exception()
        if error is None:
            text = task.result()
            try:
                result = ArtifactResult(
                    slot.kind,
                    text.strip() if isinstance(text, str) else text,
                    ArtifactOrigin.EXTERNAL,
                )
            except (TypeError, ValueError, AttributeError):
                error = LowQualityError(
                    f"Client returned unusable {slot.kind.value} text.", kind=slot.kind
                )
            else:
                if not slot.fill(result):
                    logger.info(
                        "artifact_late_result_discarded", extra={"artifact": slot.kind.value}
                    )
                return
        if slot.filled:
            logger.debug(
                "Ignoring late failure for artifact=%s: %s", slot.kind.value, error
            )
            return
        self._fall_back(slot, feedback, error)

    def _fall_back(
        self, slot: ArtifactSlot, feedback: FeedbackInput, error: BaseException
    ) -> None:
        if isinstance(error, (ServiceError, DeadlineExceeded)):
            reason = getattr(error.reason, "value", error.reason)
            logger.warning(
                "artifact_fallback",
                extra={"artifact": slot.kind.value, "reason": reason, "error": str(error)},
            )
        else:
            logger.error(
                "artifact_fallback",
                extra={"artifact": slot.kind.value, "reason": "unexpected_error"},
                exc_info=error,
            )
        slot.fill(self._heuristic_result(slot.kind, feedback))

    def _heuristic_result(self, kind: ArtifactKind, feedback: FeedbackInput) -> ArtifactResult:
        text = self._heuristic(feedback.rating, feedback.review, kind)
        return ArtifactResult(kind, text, ArtifactOrigin.HEURISTIC)
