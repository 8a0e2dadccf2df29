from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


MAX_QUESTION_LENGTH = 1000


@dataclass(frozen=True)
class Identity:
    subject: str
    email: str | None = None

    @classmethod
    def from_claims(cls, claims: dict[str, Any]) -> "Identity | None":
        raw_id = claims.get("id")
        raw_email = claims.get("email")
        email = str(raw_email).strip() if raw_email else None
        subject = str(raw_id).strip() if raw_id else email
        if not subject:
            return None
        return cls(subject=subject, email=email)


@dataclass(frozen=True)
class DiagnosisEntry:
    disease: str | None = None
    icd11: str | None = None
    notes: str | None = None
    created_by: str | None = None

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "DiagnosisEntry":
        return cls(
            disease=doc.get("disease") or None,
            icd11=doc.get("icd11") or None,
            notes=doc.get("notes") or None,
            created_by=doc.get("createdBy"),
        )

    def as_document(self) -> dict[str, Any]:
        return {
            "disease": self.disease,
            "icd11": self.icd11,
            "notes": self.notes,
            "createdBy": self.created_by,
        }


@dataclass(frozen=True)
class PatientRecord:
    patient_id: str
    created_by: str | None
    name: str | None = None
    age: int | None = None
    icd11: str | None = None
    created_at: str | None = None
    diagnosis: tuple[DiagnosisEntry, ...] = field(default_factory=tuple)

    @classmethod
    def from_document(cls, patient_id: str, doc: dict[str, Any]) -> "PatientRecord":
        raw_diagnosis = doc.get("diagnosis")
        entries = tuple(
            DiagnosisEntry.from_document(item)
            for item in (raw_diagnosis if isinstance(raw_diagnosis, list) else [])
            if isinstance(item, dict)
        )
        return cls(
            patient_id=patient_id,
            created_by=doc.get("createdBy"),
            name=doc.get("name"),
            age=_coerce_age(doc.get("age")),
            icd11=doc.get("icd11"),
            created_at=doc.get("createdAt"),
            diagnosis=entries,
        )

    def as_summary(self) -> dict[str, Any]:
        return {
            "id": self.patient_id,
            "name": self.name,
            "age": self.age,
            "icd11": self.icd11,
            "createdAt": self.created_at,
            "createdBy": self.created_by,
        }


@dataclass(frozen=True)
class ChatQuery:
    patient_id: str
    question: str


@dataclass(frozen=True)
class ChatAnswer:
    answer: str
    disclaimer: str

    def as_envelope(self) -> dict[str, Any]:
        return {"success": True, "answer": self.answer, "disclaimer": self.disclaimer}


def _coerce_age(value: Any) -> int | None:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        age = int(float(value))
    except (TypeError, ValueError):
        return None
    return age if age > 0 else None
