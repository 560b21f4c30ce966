from __future__ import annotations

from pathlib import Path

ENRICHMENT_YAML = (
    "enrichment:\n"
    "  external_enabled: true\n"
    "  deadline_seconds: 0.5\n"
    "  min_response_chars: 12\n"
    "  request_timeout_seconds: 5\n"
)


def write_config(
    base_dir: Path,
    *,
    sqlite_path: Path | str = ":memory:",
    enrichment: str = ENRICHMENT_YAML,
) -> None:
    base_dir.mkdir(parents=True, exist_ok=True)
    (base_dir / "settings.yaml").write_text(
        "app: {name: test}\nlogging: {level: DEBUG}\n" + enrichment,
        encoding="utf-8",
    )
    (base_dir / "database.yaml").write_text(
        f"database: {{sqlite_path: '{sqlite_path}'}}\n", encoding="utf-8"
    )
    (base_dir / "models.yaml").write_text(
        (
            "defaults: {provider: groq, temperature: 0.7}\n"
            "artifacts:\n"
            "  response: {model: 'groq/llama-3.1-8b-instant', max_tokens: 100}\n"
            "  summary: {model: 'groq/llama-3.1-8b-instant', max_tokens: 60}\n"
            "  actions: {model: 'groq/llama-3.1-8b-instant', temperature: 0.4}\n"
        ),
        encoding="utf-8",
    )
    (base_dir / "providers.yaml").write_text(
        (
            "providers:\n"
            "  groq:\n"
            "    api_base: 'https://api.groq.example/openai/v1'\n"
            "    api_key_env: 'GROQ_KEY'\n"
            "    litellm_provider: 'groq'\n"
        ),
        encoding="utf-8",
    )


def write_prompts(base_dir: Path) -> None:
    base_dir.mkdir(parents=True, exist_ok=True)
    (base_dir / "registry.yaml").write_text(
        "system: system.txt\nresponse: response.txt\nsummary: summary.txt\nactions: actions.txt\n",
        encoding="utf-8",
    )
    (base_dir / "system.txt").write_text("You answer customer feedback.", encoding="utf-8")
    (base_dir / "response.txt").write_text(
        'Reply to this {rating}-star feedback: "{review}". Tone: {tone}. Length: {target}.',
        encoding="utf-8",
    )
    (base_dir / "summary.txt").write_text(
        'Summarize "{review}" ({rating}/5) in {target}.', encoding="utf-8"
    )
    (base_dir / "actions.txt").write_text(
        'Suggest {target} for this {rating}-star feedback: "{review}".', encoding="utf-8"
    )
