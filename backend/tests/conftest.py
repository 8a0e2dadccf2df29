from __future__ import annotations

import importlib
import sys
from pathlib import Path
from typing import Any, Callable

import pytest
from fastapi.testclient import TestClient

BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from healthsync_core.models import DiagnosisEntry  # noqa: E402
from token_utils import TEST_JWT_SECRET, mint_token  # noqa: E402


@pytest.fixture
def backend_module(tmp_path, monkeypatch):
    db_path = tmp_path / "healthsync-test.sqlite"
    monkeypatch.setenv("HEALTHSYNC_DB_PATH", str(db_path))
    monkeypatch.setenv("JWT_SECRET", TEST_JWT_SECRET)
    monkeypatch.setenv("GROQ_API_KEY", "test-groq-key")
    monkeypatch.setenv("SERPAPI_KEY", "test-serpapi-key")

    if "main" in sys.modules:
        module = importlib.reload(sys.modules["main"])
    else:
        module = importlib.import_module("main")
    return module


@pytest.fixture
def client(backend_module):
    with TestClient(backend_module.app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers() -> Callable[[str], dict[str, str]]:
    def _make(user_id: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {mint_token({'id': user_id})}"}

    return _make


@pytest.fixture
def seed_patient(backend_module) -> Callable[..., str]:
    def _seed(
        *,
        created_by: str | None,
        name: str = "Jane Roe",
        age: int | None = 54,
        diagnosis: list[dict[str, Any]] | None = None,
    ) -> str:
        record = backend_module.container.patients.create(
            name=name,
            age=age,
            icd11="BA00",
            created_by=created_by,
            diagnosis=[DiagnosisEntry.from_document(entry) for entry in diagnosis or []],
        )
        return record.patient_id

    return _seed


class FakeCompletion:
    def __init__(self, reply: str = "An educational answer.") -> None:
        self.reply = reply
        self.calls: list[dict[str, Any]] = []

    def __call__(self, messages, params=None):
        self.calls.append({"messages": messages, "params": params})
        return self.reply


@pytest.fixture
def fake_completion(backend_module, monkeypatch) -> FakeCompletion:
    fake = FakeCompletion()
    monkeypatch.setattr(backend_module.container.provider, "complete", fake)
    return fake
