from __future__ import annotations

import json
import uuid
from datetime import datetime, timezone
from typing import Any

from healthsync_core.models import DiagnosisEntry, PatientRecord

from .database import SQLiteRecordDB


def _json_dumps(value: Any) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"))


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_patient_id() -> str:
    return f"pat_{uuid.uuid4().hex[:24]}"


class PatientStore:
    """Patient documents keyed by opaque id. The chat pipeline only reads them."""

    def __init__(self, db: SQLiteRecordDB) -> None:
        self._db = db

    def get(self, patient_id: str) -> PatientRecord | None:
        with self._db.connection() as conn:
            row = conn.execute(
                "SELECT id, record_json FROM patients WHERE id = ?",
                (patient_id,),
            ).fetchone()
        if row is None:
            return None
        return PatientRecord.from_document(row["id"], json.loads(row["record_json"]))

    def create(
        self,
        *,
        name: str,
        age: int | None,
        icd11: str | None,
        created_by: str | None,
        diagnosis: list[DiagnosisEntry] | None = None,
        patient_id: str | None = None,
    ) -> PatientRecord:
        record_id = patient_id or new_patient_id()
        created_at = _utc_now_iso()
        doc = {
            "name": name,
            "age": age,
            "icd11": icd11,
            "createdBy": created_by,
            "createdAt": created_at,
            "diagnosis": [entry.as_document() for entry in diagnosis or []],
        }
        with self._db.connection() as conn:
            conn.execute(
                """
                INSERT INTO patients (id, created_by, record_json, created_at)
                VALUES (?, ?, ?, ?)
                """,
                (record_id, created_by, _json_dumps(doc), created_at),
            )
        return PatientRecord.from_document(record_id, doc)

    def list_recent(self, limit: int = 50) -> list[PatientRecord]:
        with self._db.connection() as conn:
            rows = conn.execute(
                """
                SELECT id, record_json
                FROM patients
                ORDER BY created_at DESC, rowid DESC
                LIMIT ?
                """,
                (limit,),
            ).fetchall()
        return [PatientRecord.from_document(row["id"], json.loads(row["record_json"])) for row in rows]

    def close(self) -> None:
        self._db.close()
