"""Shared test doubles for feedback_enricher.cli tests."""

from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, Optional

import feedback_enricher.cli as cli

Handler = Callable[[Dict[str, Any]], Dict[str, Any]]


class RecordingDispatcher:
    """Dispatcher double that records calls and returns canned payloads."""

    def __init__(self, handlers: Optional[Mapping[str, Handler]] = None) -> None:
        self._handlers: Dict[str, Handler] = dict(handlers or {})
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def execute(self, workflow: str, context: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append((workflow, context))
        handler = self._handlers.get(workflow)
        if handler is None:
            raise KeyError(workflow)
        return handler(context)


def sample_record(**overrides: Any) -> Dict[str, Any]:
    record = {
        "id": 7,
        "rating": 5,
        "review": "Amazing food",
        "ai_response": "Thank you for the perfect 5-star rating!",
        "ai_summary": "Excellent 5-star experience.",
        "ai_actions": "1. Share the positive food feedback with the kitchen team",
        "created_at": "2026-10-01T12:00:00Z",
        "origins": {"response": "external", "summary": "heuristic", "actions": "heuristic"},
    }
    record.update(overrides)
    return record


def patch_dispatcher(monkeypatch: Any, dispatcher: Any, config: Any = None) -> None:
    """Route CLI commands to ``dispatcher`` without building the runtime."""

    monkeypatch.setattr(cli, "get_dispatcher", lambda: dispatcher)
    monkeypatch.setattr(cli, "get_config", lambda: config)
    monkeypatch.setattr(cli, "set_runtime_level", lambda level: None)


__all__ = ["RecordingDispatcher", "patch_dispatcher", "sample_record"]
