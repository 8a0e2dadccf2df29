from __future__ import annotations

import json
import logging
import re
from typing import Any

from healthsync_core.errors import ChatPipelineError, InvalidInput, ServiceUnavailable, UpstreamError
from healthsync_core.prompts import render_disease_info_prompt
from healthsync_core.provider import DISEASE_INFO_SAMPLING, CompletionProvider

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?\n?")


class DiseaseInfoParseError(ChatPipelineError):
    status_code = 500
    default_message = "Failed to parse AI response"


def strip_code_fences(raw_text: str) -> str:
    text = (raw_text or "").strip()
    if text.startswith("```"):
        text = _FENCE_RE.sub("", text)
    return text.strip()


def extract_json_object(raw_text: str) -> dict[str, Any] | None:
    """Return the first JSON object in the model output, ignoring prose around it."""
    text = strip_code_fences(raw_text)
    decoder = json.JSONDecoder()
    start = text.find("{")
    while start != -1:
        try:
            payload, _end = decoder.raw_decode(text, start)
        except json.JSONDecodeError:
            payload = None
        if isinstance(payload, dict):
            return payload
        start = text.find("{", start + 1)
    return None


class DiseaseInfoService:
    def __init__(self, provider: CompletionProvider) -> None:
        self.provider = provider

    def lookup(self, *, icd_code: Any, disease_name: Any) -> dict[str, Any]:
        icd = icd_code.strip() if isinstance(icd_code, str) else ""
        name = disease_name.strip() if isinstance(disease_name, str) else ""
        if not icd and not name:
            raise InvalidInput("Disease name or ICD code is required")
        if not self.provider.configured:
            raise ServiceUnavailable("AI service not configured")

        prompt = render_disease_info_prompt(name or None, icd or None)
        try:
            generated = self.provider.complete([{"role": "user", "content": prompt}], DISEASE_INFO_SAMPLING)
        except UpstreamError as exc:
            raise UpstreamError("Failed to generate disease information") from exc

        info = extract_json_object(generated)
        if info is None:
            logger.warning("disease info response was not JSON (icd=%s, chars=%d)", icd or "-", len(generated or ""))
            raise DiseaseInfoParseError()
        return info
