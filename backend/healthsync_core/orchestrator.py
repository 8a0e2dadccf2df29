from __future__ import annotations

import logging
from typing import Any, Protocol

from records.database import StoreUnavailableError

from .errors import ChatPipelineError, Forbidden, InternalError, InvalidInput, NotFound, ServiceUnavailable
from .identity import TokenVerifier
from .models import MAX_QUESTION_LENGTH, ChatAnswer, ChatQuery, PatientRecord
from .policy import AuthorizationPolicy, CreatorLineagePolicy
from .prompts import FALLBACK_ANSWER, MEDICAL_DISCLAIMER, build_patient_context, render_system_prompt
from .provider import CHAT_SAMPLING, SamplingParams

logger = logging.getLogger(__name__)


class PatientLookup(Protocol):
    def get(self, patient_id: str) -> PatientRecord | None: ...


class Completion(Protocol):
    @property
    def configured(self) -> bool: ...

    def complete(self, messages: list[dict[str, str]], params: SamplingParams = ...) -> str: ...


def validate_chat_query(patient_id: Any, question: Any) -> ChatQuery:
    if not patient_id or not isinstance(patient_id, str) or not patient_id.strip():
        raise InvalidInput("Patient ID is required")
    if not isinstance(question, str) or not question.strip():
        raise InvalidInput("Question is required")
    trimmed = question.strip()
    if len(trimmed) > MAX_QUESTION_LENGTH:
        raise InvalidInput(f"Question is too long (max {MAX_QUESTION_LENGTH} characters)")
    return ChatQuery(patient_id=patient_id.strip(), question=trimmed)


class PatientChatOrchestrator:
    """Authenticated patient chat: verify, validate, authorize, prompt, call, shape.

    Every step either returns or raises a ``ChatPipelineError``; nothing is
    retried and nothing is kept between calls.
    """

    def __init__(
        self,
        *,
        verifier: TokenVerifier,
        patients: PatientLookup,
        provider: Completion,
        policy: AuthorizationPolicy | None = None,
        sampling: SamplingParams = CHAT_SAMPLING,
    ) -> None:
        self.verifier = verifier
        self.patients = patients
        self.provider = provider
        self.policy = policy or CreatorLineagePolicy()
        self.sampling = sampling

    def handle(self, token: str | None, patient_id: Any, question: Any) -> ChatAnswer:
        try:
            return self._handle(token, patient_id, question)
        except ChatPipelineError:
            raise
        except Exception as exc:
            logger.exception("patient chat failed unexpectedly")
            raise InternalError() from exc

    def _handle(self, token: str | None, patient_id: Any, question: Any) -> ChatAnswer:
        identity = self.verifier.verify(token)
        query = validate_chat_query(patient_id, question)

        if not self.provider.configured:
            raise ServiceUnavailable("AI service not configured")

        try:
            record = self.patients.get(query.patient_id)
        except StoreUnavailableError as exc:
            logger.error("patient store unavailable: %s", exc)
            raise ServiceUnavailable("Database unavailable") from exc
        if record is None:
            raise NotFound("Patient not found")

        decision = self.policy.evaluate(identity, record)
        if not decision.allowed:
            logger.info("patient chat denied patient=%s code=%s", record.patient_id, decision.code)
            raise Forbidden(decision.message)

        messages = self.build_messages(record, query.question)
        text = self.provider.complete(messages, self.sampling)
        answer = (text or "").strip() or FALLBACK_ANSWER
        logger.info("patient chat answered patient=%s access=%s", record.patient_id, decision.code)
        return ChatAnswer(answer=answer, disclaimer=MEDICAL_DISCLAIMER)

    @staticmethod
    def build_messages(record: PatientRecord, question: str) -> list[dict[str, str]]:
        system_prompt = render_system_prompt(build_patient_context(record))
        return [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": question},
        ]
