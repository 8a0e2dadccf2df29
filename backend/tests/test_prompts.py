from __future__ import annotations

from healthsync_core.models import DiagnosisEntry, PatientRecord
from healthsync_core.prompts import (
    AGE_NOT_SPECIFIED,
    NO_DIAGNOSES_MARKER,
    PROMPT_VERSION,
    RESPONSE_POLICY_CLAUSES,
    build_patient_context,
    render_disease_info_prompt,
    render_system_prompt,
)


def _record(**kwargs):
    defaults = {"patient_id": "pat_abc", "created_by": "u1", "name": "Ada Example"}
    defaults.update(kwargs)
    return PatientRecord(**defaults)


def test_rendered_prompt_contains_every_response_policy_clause():
    prompt = render_system_prompt(build_patient_context(_record(age=40)))
    assert len(RESPONSE_POLICY_CLAUSES) == 5
    for idx, clause in enumerate(RESPONSE_POLICY_CLAUSES, start=1):
        assert f"{idx}. {clause}" in prompt


def test_rendered_prompt_keeps_persona_and_constraint_lists():
    prompt = render_system_prompt(build_patient_context(_record()))
    assert "medical education assistant for healthcare professionals" in prompt
    assert "CRITICAL SAFETY CONSTRAINTS - YOU MUST NEVER:" in prompt
    assert "- Prescribe medication, dosages, or treatment plans" in prompt
    assert "- Answer questions about existing diagnoses" in prompt
    assert "{" not in prompt


def test_context_formats_entries_and_omits_missing_fields():
    record = _record(
        age=72,
        diagnosis=(
            DiagnosisEntry(disease="Type 2 diabetes mellitus", icd11="5A11", notes="diet controlled"),
            DiagnosisEntry(disease="Gout", notes="flare in 2023"),
            DiagnosisEntry(icd11="CA23"),
        ),
    )
    context = build_patient_context(record)
    assert context["age"] == "72 years old"
    assert context["diagnoses"].split("\n") == [
        "Type 2 diabetes mellitus (ICD-11: 5A11) - diet controlled",
        "Gout - flare in 2023",
        "(ICD-11: CA23)",
    ]


def test_context_markers_for_missing_age_and_diagnoses():
    context = build_patient_context(_record(age=None))
    assert context == {"age": AGE_NOT_SPECIFIED, "diagnoses": NO_DIAGNOSES_MARKER}


def test_context_never_carries_identifiers():
    record = _record(name="Ada Example", icd11="BA00", created_at="2024-01-01T00:00:00+00:00")
    rendered = render_system_prompt(build_patient_context(record))
    assert "Ada" not in rendered
    assert "pat_abc" not in rendered
    assert "2024-01-01" not in rendered


def test_braces_in_notes_are_rendered_verbatim():
    record = _record(diagnosis=(DiagnosisEntry(disease="Eczema", notes="uses {brand} cream"),))
    assert "Eczema - uses {brand} cream" in render_system_prompt(build_patient_context(record))


def test_disease_info_prompt_defaults():
    prompt = render_disease_info_prompt(None, "CA23")
    assert "Disease: Unknown" in prompt
    assert "ICD-11 Code: CA23" in prompt
    assert '"clinicalNotes"' in prompt


def test_prompt_version_is_set():
    assert PROMPT_VERSION
