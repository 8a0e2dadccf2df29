from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from .errors import ServiceUnavailable, UpstreamError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SamplingParams:
    temperature: float = 0.3
    max_tokens: int = 500
    top_p: float = 0.9


CHAT_SAMPLING = SamplingParams(temperature=0.3, max_tokens=500, top_p=0.9)
DISEASE_INFO_SAMPLING = SamplingParams(temperature=0.2, max_tokens=2048, top_p=0.95)


def _error_log_field(response: httpx.Response) -> str:
    """Short provider error reason for server logs only; never sent to callers."""
    try:
        err = response.json().get("error")
    except (ValueError, AttributeError):
        err = None
    if isinstance(err, dict):
        err = err.get("code") or err.get("type") or err.get("message")
    reason = str(err or response.reason_phrase or "unknown")
    return reason[:120]


def coerce_completion_text(response_json: Any) -> str:
    if not isinstance(response_json, dict):
        return ""
    choices = response_json.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return ""
    message = choices[0].get("message") or {}
    content = message.get("content") if isinstance(message, dict) else None
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts: list[str] = []
        for item in content:
            if isinstance(item, dict):
                text_value = item.get("text")
                if isinstance(text_value, str):
                    parts.append(text_value)
        return "\n".join(parts)
    return ""


class CompletionProvider:
    """OpenAI-compatible chat completion client (Groq by default).

    Holds one pooled ``httpx.Client`` for the life of the process. Calls are
    never retried: a failed call to a paid API is surfaced immediately.
    """

    def __init__(
        self,
        *,
        api_key: str | None,
        base_url: str,
        model: str,
        timeout_seconds: float = 25.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._api_key = (api_key or "").strip()
        self.base_url = base_url.rstrip("/")
        self.model = model
        self._client = httpx.Client(
            timeout=httpx.Timeout(timeout_seconds, connect=8.0),
            transport=transport,
        )

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    def complete(
        self,
        messages: list[dict[str, str]],
        params: SamplingParams = CHAT_SAMPLING,
    ) -> str:
        """Return the first completion's text, or "" when the provider sent none."""
        if not self.configured:
            raise ServiceUnavailable("AI service not configured")
        payload = {
            "model": self.model,
            "messages": messages,
            "temperature": params.temperature,
            "max_tokens": params.max_tokens,
            "top_p": params.top_p,
        }
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        try:
            response = self._client.post(f"{self.base_url}/chat/completions", headers=headers, json=payload)
        except httpx.TimeoutException as exc:
            logger.warning("completion provider timed out (model=%s)", self.model)
            raise UpstreamError() from exc
        except httpx.HTTPError as exc:
            logger.warning("completion provider unreachable: %s", exc.__class__.__name__)
            raise UpstreamError() from exc
        if response.status_code >= 400:
            logger.warning(
                "completion provider error status=%s reason=%s",
                response.status_code,
                _error_log_field(response),
            )
            raise UpstreamError()
        try:
            completion_payload = response.json()
        except ValueError as exc:
            logger.warning("completion provider returned invalid JSON")
            raise UpstreamError() from exc
        return coerce_completion_text(completion_payload)

    def close(self) -> None:
        self._client.close()
