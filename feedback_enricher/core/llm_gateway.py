"""LLM gateway producing feedback artifacts through an external completion endpoint.

Updates:
    v0.1.0 - 2026-09-14 - Async single-shot completions per artifact kind.
    v0.2.0 - 2026-09-21 - Classified failures into ServiceError reasons.
    v0.2.1 - 2026-10-02 - Dropped internal retries; fallback policy lives in the orchestrator.
"""

from __future__ import annotations

import logging
from enum import Enum
from os import environ
from time import perf_counter
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Sequence, TYPE_CHECKING, cast

from ..services.config_service import ArtifactModelConfig, ConfigService
from ..services.prompt_service import PromptService
from .models import ArtifactKind, FeedbackInput

try:
    import litellm
    from litellm import acompletion as _litellm_acompletion  # pyright: ignore[reportUnknownVariableType]
    from litellm.exceptions import APIConnectionError, Timeout as ProviderTimeout
except ImportError as exc:  # pragma: no cover - guidance for missing dependency
    raise RuntimeError(
        "litellm is required for LLMGateway. Install via `pip install litellm`."
    ) from exc
else:
    litellm.drop_params = True

if TYPE_CHECKING:
    from typing import Protocol

    class CompletionCallable(Protocol):
        def __call__(
            self,
            *,
            messages: List[Dict[str, str]],
            **kwargs: Any,
        ) -> Awaitable[Any]:
            ...
else:
    CompletionCallable = Callable[..., Any]

acompletion = _litellm_acompletion

logger = logging.getLogger(__name__)

NO_REVIEW_PLACEHOLDER = "No comment provided"

LENGTH_TARGETS: dict[ArtifactKind, str] = {
    ArtifactKind.RESPONSE: "about 40 words",
    ArtifactKind.SUMMARY: "one sentence of about 15 words",
    ArtifactKind.ACTIONS: "1-2 numbered recommendations",
}

DEFAULT_MAX_TOKENS: dict[ArtifactKind, int] = {
    ArtifactKind.RESPONSE: 100,
    ArtifactKind.SUMMARY: 60,
    ArtifactKind.ACTIONS: 120,
}

DEFAULT_TEMPERATURE = 0.7


class ServiceErrorReason(str, Enum):
    TRANSPORT = "transport"
    BAD_STATUS = "bad_status"
    MALFORMED_RESPONSE = "malformed_response"
    LOW_QUALITY = "low_quality"
    CONFIGURATION = "configuration"


class ServiceError(RuntimeError):
    """Raised when the external endpoint cannot provide a usable artifact."""

    reason: ServiceErrorReason = ServiceErrorReason.TRANSPORT

    def __init__(self, message: str, *, kind: ArtifactKind | None = None) -> None:
        super().__init__(message)
        self.kind = kind


class TransportError(ServiceError):
    reason = ServiceErrorReason.TRANSPORT


class BadStatusError(ServiceError):
    reason = ServiceErrorReason.BAD_STATUS

    def __init__(
        self, message: str, *, status_code: int, kind: ArtifactKind | None = None
    ) -> None:
        super().__init__(message, kind=kind)
        self.status_code = status_code


class MalformedResponseError(ServiceError):
    reason = ServiceErrorReason.MALFORMED_RESPONSE


class LowQualityError(ServiceError):
    reason = ServiceErrorReason.LOW_QUALITY


class ConfigurationError(ServiceError):
    reason = ServiceErrorReason.CONFIGURATION


def tone_for(rating: int) -> str:
    """Return the tone instruction used for customer-facing responses."""

    if rating >= 4:
        return "warm and appreciative"
    if rating <= 2:
        return "empathetic and apologetic"
    return "courteous and balanced"


class LLMGateway:
    """Issues one completion request per artifact and validates the result."""

    SYSTEM_PROMPT = "system"

    def __init__(
        self,
        config_service: ConfigService,
        prompt_service: PromptService,
        *,
        min_response_chars: int | None = None,
        timeout_seconds: float | None = None,
    ) -> None:
        """Store configuration dependencies for completion dispatch.

        Args:
            config_service (ConfigService): Source of artifact model and provider settings.
            prompt_service (PromptService): Registry of artifact prompt templates.
            min_response_chars (int | None): Shortest acceptable artifact text.
            timeout_seconds (float | None): Provider-level request timeout.
        """

        settings = config_service.enrichment_settings
        self._config_service = config_service
        self._prompts = prompt_service
        self._min_chars = (
            min_response_chars
            if min_response_chars is not None
            else settings.min_response_chars
        )
        self._timeout = (
            timeout_seconds
            if timeout_seconds is not None
            else settings.request_timeout_seconds
        )

    async def request(self, kind: ArtifactKind, feedback: FeedbackInput) -> str:
        """Generate one artifact through the external endpoint.

        Args:
            kind (ArtifactKind): Artifact to generate.
            feedback (FeedbackInput): Rating and review embedded in the prompt.

        Returns:
            str: Trimmed artifact text.

        Raises:
            ServiceError: On transport, status, payload, quality or configuration failures.
        """

        started = perf_counter()
        model: str | None = None
        try:
            config = self._artifact_config(kind)
            model = config.model
            messages = self._build_messages(kind, feedback)
            params = self._build_params(kind, config)
            response = await self._complete(kind, messages, params)
            text = self._extract_text_content(kind, self._normalise_response(kind, response))
            text = self._check_quality(kind, text)
        except ServiceError as exc:
            logger.warning(
                "artifact_request_failed",
                extra={
                    "artifact": kind.value,
                    "model": model,
                    "reason": exc.reason.value,
                    "duration_ms": _elapsed_ms(started),
                    "error": str(exc),
                },
            )
            raise

        logger.info(
            "artifact_request_succeeded",
            extra={
                "artifact": kind.value,
                "model": model,
                "duration_ms": _elapsed_ms(started),
                "chars": len(text),
            },
        )
        return text

    def _artifact_config(self, kind: ArtifactKind) -> ArtifactModelConfig:
        try:
            return self._config_service.get_artifact_model_config(kind)
        except (KeyError, ValueError) as exc:
            raise ConfigurationError(str(exc), kind=kind) from exc

    async def _complete(
        self,
        kind: ArtifactKind,
        messages: List[Dict[str, str]],
        params: Dict[str, Any],
    ) -> Any:
        completion_fn = cast(CompletionCallable, acompletion)
        logger.debug(
            "Requesting artifact=%s model=%s", kind.value, params.get("model")
        )
        try:
            return await completion_fn(messages=messages, **params)
        except (APIConnectionError, ProviderTimeout, ConnectionError, TimeoutError) as exc:
            raise TransportError(
                f"Could not reach completion endpoint for '{kind.value}': {exc}", kind=kind
            ) from exc
        except Exception as exc:
            status_code = getattr(exc, "status_code", None)
            if isinstance(status_code, int):
                raise BadStatusError(
                    f"Completion endpoint returned status {status_code} for '{kind.value}': {exc}",
                    status_code=status_code,
                    kind=kind,
                ) from exc
            raise TransportError(
                f"Completion request failed for '{kind.value}': {exc}", kind=kind
            ) from exc

    def _build_messages(
        self, kind: ArtifactKind, feedback: FeedbackInput
    ) -> List[Dict[str, str]]:
        """Construct the chat completion message payload.

        Args:
            kind (ArtifactKind): Artifact whose template is rendered.
            feedback (FeedbackInput): Submission embedded into the prompt.

        Returns:
            list[dict[str, str]]: Message records following the chat schema.
        """

        values = {
            "rating": feedback.rating,
            "review": feedback.review.strip() or NO_REVIEW_PLACEHOLDER,
            "tone": tone_for(feedback.rating),
            "target": LENGTH_TARGETS[kind],
        }
        try:
            prompt = self._prompts.render(kind.value, **values)
            system_prompt = (
                self._prompts.render(self.SYSTEM_PROMPT, **values)
                if self._prompts.has_prompt(self.SYSTEM_PROMPT)
                else None
            )
        except (KeyError, FileNotFoundError) as exc:
            raise ConfigurationError(
                f"Prompt template unavailable for '{kind.value}': {exc}", kind=kind
            ) from exc

        messages: List[Dict[str, str]] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})
        return messages

    def _build_params(
        self, kind: ArtifactKind, config: ArtifactModelConfig
    ) -> Dict[str, Any]:
        """Build request parameters merged with provider settings.

        Args:
            kind (ArtifactKind): Artifact being generated.
            config (ArtifactModelConfig): Artifact-specific model settings.

        Returns:
            dict[str, Any]: Completed parameter payload for the provider call.

        Raises:
            ConfigurationError: If a configured provider is missing its API key.
        """

        params: Dict[str, Any] = {
            "model": config.model,
            "temperature": (
                config.temperature if config.temperature is not None else DEFAULT_TEMPERATURE
            ),
            "max_tokens": config.max_tokens or DEFAULT_MAX_TOKENS[kind],
            "timeout": self._timeout,
        }

        provider_name = config.provider
        if provider_name:
            provider_config = dict(self._config_service.providers.get(provider_name, {}))
            api_key_env = provider_config.pop("api_key_env", None)
            litellm_provider = provider_config.pop("litellm_provider", None)
            params.update(provider_config)
            if api_key_env:
                api_key = environ.get(api_key_env)
                if not api_key:
                    raise ConfigurationError(
                        f"Environment variable '{api_key_env}' required for provider '{provider_name}'.",
                        kind=kind,
                    )
                params.setdefault("api_key", api_key)
            params.setdefault("custom_llm_provider", litellm_provider or provider_name)

        return params

    def _normalise_response(self, kind: ArtifactKind, raw_response: Any) -> Mapping[str, Any]:
        if isinstance(raw_response, Mapping):
            return cast(Mapping[str, Any], raw_response)
        for attribute in ("model_dump", "dict"):
            method = getattr(raw_response, attribute, None)
            if callable(method):
                candidate = method()
                if isinstance(candidate, Mapping):
                    return cast(Mapping[str, Any], candidate)
        raise MalformedResponseError(
            f"Unexpected completion response type: {type(raw_response).__name__}",
            kind=kind,
        )

    def _extract_text_content(self, kind: ArtifactKind, response: Mapping[str, Any]) -> str:
        choices = response.get("choices")
        if not isinstance(choices, Sequence) or isinstance(choices, str) or not choices:
            raise MalformedResponseError(
                "Completion response did not include any choices.", kind=kind
            )
        first_choice = choices[0]
        if not isinstance(first_choice, Mapping):
            raise MalformedResponseError("Completion choice is not an object.", kind=kind)
        message_value = first_choice.get("message")
        if not isinstance(message_value, Mapping):
            raise MalformedResponseError(
                "Completion response missing message object.", kind=kind
            )
        content = message_value.get("content")
        if not isinstance(content, str):
            raise MalformedResponseError(
                "Completion response content is not textual.", kind=kind
            )
        return content

    def _check_quality(self, kind: ArtifactKind, text: str) -> str:
        trimmed = text.strip()
        if len(trimmed) < self._min_chars:
            raise LowQualityError(
                f"Generated {kind.value} has {len(trimmed)} characters; "
                f"at least {self._min_chars} required.",
                kind=kind,
            )
        return trimmed


def _elapsed_ms(started: float) -> float:
    return round((perf_counter() - started) * 1000, 2)
