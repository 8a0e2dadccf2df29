from __future__ import annotations

import pytest

from healthsync_core import (
    Forbidden,
    InvalidInput,
    NotFound,
    PatientChatOrchestrator,
    ServiceUnavailable,
    TokenVerifier,
    UpstreamError,
)
from healthsync_core.models import DiagnosisEntry, PatientRecord
from healthsync_core.prompts import MEDICAL_DISCLAIMER
from records import StoreUnavailableError
from token_utils import TEST_JWT_SECRET, mint_token


class FakePatients:
    def __init__(self, *records: PatientRecord, down: bool = False) -> None:
        self.records = {record.patient_id: record for record in records}
        self.down = down
        self.lookups: list[str] = []

    def get(self, patient_id: str) -> PatientRecord | None:
        self.lookups.append(patient_id)
        if self.down:
            raise StoreUnavailableError("connection refused")
        return self.records.get(patient_id)


class FakeProvider:
    def __init__(self, reply: str = "Answer.", configured: bool = True, error: Exception | None = None) -> None:
        self.reply = reply
        self.configured = configured
        self.error = error
        self.calls: list[list[dict[str, str]]] = []

    def complete(self, messages, params=None):
        self.calls.append(messages)
        if self.error is not None:
            raise self.error
        return self.reply


PATIENT = PatientRecord(
    patient_id="pat_1",
    created_by="u1",
    name="Ada Example",
    age=30,
    diagnosis=(DiagnosisEntry(disease="Migraine", icd11="8A80", created_by="u2"),),
)


def _orchestrator(patients=None, provider=None):
    return PatientChatOrchestrator(
        verifier=TokenVerifier(TEST_JWT_SECRET),
        patients=patients or FakePatients(PATIENT),
        provider=provider or FakeProvider(),
    )


def test_happy_path_returns_trimmed_answer_and_disclaimer():
    provider = FakeProvider(reply="\n Migraine is a headache disorder. \n")
    result = _orchestrator(provider=provider).handle(mint_token({"id": "u2"}), "pat_1", "  What is migraine?  ")
    assert result.answer == "Migraine is a headache disorder."
    assert result.disclaimer == MEDICAL_DISCLAIMER
    assert result.as_envelope()["success"] is True
    assert provider.calls[0][1] == {"role": "user", "content": "What is migraine?"}


def test_validation_runs_before_any_external_call():
    patients = FakePatients(PATIENT)
    provider = FakeProvider()
    with pytest.raises(InvalidInput):
        _orchestrator(patients, provider).handle(mint_token({"id": "u1"}), "", "hello")
    assert patients.lookups == []
    assert provider.calls == []


def test_denied_identity_never_reaches_provider():
    provider = FakeProvider()
    with pytest.raises(Forbidden):
        _orchestrator(provider=provider).handle(mint_token({"id": "u3"}), "pat_1", "hello")
    assert provider.calls == []


def test_not_found_and_store_outage():
    with pytest.raises(NotFound):
        _orchestrator().handle(mint_token({"id": "u1"}), "pat_2", "hello")
    with pytest.raises(ServiceUnavailable) as excinfo:
        _orchestrator(FakePatients(down=True)).handle(mint_token({"id": "u1"}), "pat_1", "hello")
    assert excinfo.value.message == "Database unavailable"


def test_unconfigured_provider_short_circuits():
    patients = FakePatients(PATIENT)
    with pytest.raises(ServiceUnavailable) as excinfo:
        _orchestrator(patients, FakeProvider(configured=False)).handle(mint_token({"id": "u1"}), "pat_1", "hello")
    assert excinfo.value.message == "AI service not configured"
    assert patients.lookups == []


def test_upstream_error_propagates_once():
    provider = FakeProvider(error=UpstreamError())
    with pytest.raises(UpstreamError):
        _orchestrator(provider=provider).handle(mint_token({"id": "u1"}), "pat_1", "hello")
    assert len(provider.calls) == 1


def test_build_messages_separates_system_and_user():
    messages = PatientChatOrchestrator.build_messages(PATIENT, "Explain 8A80")
    assert [message["role"] for message in messages] == ["system", "user"]
    assert "Migraine (ICD-11: 8A80)" in messages[0]["content"]
    assert "Ada" not in messages[0]["content"]
