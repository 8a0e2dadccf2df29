from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from .models import Identity, PatientRecord


@dataclass(frozen=True)
class PolicyDecision:
    allowed: bool
    code: str
    message: str


class AuthorizationPolicy(Protocol):
    def evaluate(self, identity: Identity, record: PatientRecord) -> PolicyDecision: ...

    def can_access(self, identity: Identity, record: PatientRecord) -> bool: ...


class CreatorLineagePolicy:
    """Strict allow-list: the record creator or the author of any attached diagnosis.

    A diagnosis author gets access to the whole record, including diagnoses
    written by other clinicians. There is no role, admin or organization grant.
    """

    def evaluate(self, identity: Identity, record: PatientRecord) -> PolicyDecision:
        if record.created_by is not None and record.created_by == identity.subject:
            return PolicyDecision(True, "record_creator", "allowed")
        if any(
            entry.created_by is not None and entry.created_by == identity.subject
            for entry in record.diagnosis
        ):
            return PolicyDecision(True, "diagnosis_author", "allowed")
        return PolicyDecision(False, "not_in_lineage", "Access denied to this patient")

    def can_access(self, identity: Identity, record: PatientRecord) -> bool:
        return self.evaluate(identity, record).allowed
