"""Chat-completions client used to generate monthly plans."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Mapping

import requests
from flask import current_app

from .errors import ConfigurationError, GeneratorFailure
from .format_detector import detect_format

SYSTEM_PROMPT = (
    "You are a planning assistant. Respond with a single JSON object and no "
    "surrounding prose."
)


@dataclass
class GeneratorOutput:
    content: str
    format: str
    model: str | None = None
    usage: dict = field(default_factory=dict)


@dataclass
class PlanGeneratorClient:
    api_key: str
    api_base: str
    model: str
    temperature: float = 0.7
    max_tokens: int = 4000
    connect_timeout: float = 15
    read_timeout: float = 120

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def generate(self, prompt: str) -> GeneratorOutput:
        """Send one prompt and return the raw completion text.

        No retries: a timeout, transport error, non-2xx status or empty
        completion surfaces as GeneratorFailure so the caller can refund quota.
        """

        if not self.api_key:
            raise ConfigurationError("OPENROUTER_API_KEY / AI_API_KEY is not configured")

        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        try:
            response = requests.post(
                f"{self.api_base.rstrip('/')}/chat/completions",
                headers=headers,
                data=json.dumps(payload),
                timeout=(self.connect_timeout, self.read_timeout),
            )
            response.raise_for_status()
            body = response.json()
        except requests.Timeout as exc:
            raise GeneratorFailure(f"Generator timed out: {exc}") from exc
        except requests.RequestException as exc:
            raise GeneratorFailure(f"Generator request failed: {exc}") from exc
        except ValueError as exc:
            raise GeneratorFailure("Generator returned a non-JSON body") from exc

        content = _first_message_content(body)
        if not isinstance(content, str) or not content.strip():
            raise GeneratorFailure("Generator returned empty content")
        return GeneratorOutput(
            content=content,
            format=detect_format(content),
            model=body.get("model") or self.model,
            usage=body.get("usage") or {},
        )

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "PlanGeneratorClient":
        return cls(
            api_key=config.get("OPENROUTER_API_KEY") or config.get("AI_API_KEY", ""),
            api_base=config.get("AI_API_BASE", "https://openrouter.ai/api/v1"),
            model=config.get("AI_MODEL_NAME", "openai/gpt-4o-mini"),
            temperature=float(config.get("AI_TEMPERATURE", 0.7)),
            max_tokens=int(config.get("AI_MAX_TOKENS", 4000)),
            connect_timeout=float(config.get("AI_CONNECT_TIMEOUT_SEC", 15)),
            read_timeout=float(config.get("AI_READ_TIMEOUT_SEC", 120)),
        )


def _first_message_content(body: Any) -> Any:
    if not isinstance(body, dict):
        return None
    choices = body.get("choices") or []
    if not choices or not isinstance(choices[0], dict):
        return None
    message = choices[0].get("message") or {}
    return message.get("content") if isinstance(message, dict) else None


def init_generator_client(app) -> None:
    app.extensions["plan_generator"] = PlanGeneratorClient.from_config(app.config)


def get_generator_client():
    app = current_app
    client = app.extensions.get("plan_generator")
    if client is None:
        client = PlanGeneratorClient.from_config(app.config)
        app.extensions["plan_generator"] = client
    return client


def is_configured(client) -> bool:
    flag = getattr(client, "is_configured", True)
    return bool(flag() if callable(flag) else flag)
