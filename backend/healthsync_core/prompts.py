from __future__ import annotations

from .models import PatientRecord

PROMPT_VERSION = "2024-11-patient-chat-v1"

AGE_NOT_SPECIFIED = "age not specified"
NO_DIAGNOSES_MARKER = "No diagnoses recorded"

MEDICAL_DISCLAIMER = (
    "⚠️ MEDICAL DISCLAIMER: This information is for educational purposes only and does not "
    "constitute medical advice, diagnosis, or treatment. Always consult with qualified healthcare "
    "professionals for medical decisions."
)

FALLBACK_ANSWER = "I apologize, but I was unable to generate a response. Please try again."

RESPONSE_POLICY_CLAUSES = (
    "If asked to diagnose: Refuse politely and advise consulting a doctor",
    "If asked about prescriptions: Refuse and say only licensed providers can prescribe",
    "If emergency situation described: Immediately advise calling emergency services",
    'If uncertain: Say "I don\'t know" and advise consulting a healthcare professional',
    "Keep responses clear, concise, and under 300 words",
)

SAFETY_SYSTEM_PROMPT = """You are HealthSync AI, a medical education assistant for healthcare professionals.

CRITICAL SAFETY CONSTRAINTS - YOU MUST NEVER:
- Diagnose any medical condition
- Prescribe medication, dosages, or treatment plans
- Provide emergency medical advice
- Suggest specific medical procedures
- Replace professional medical judgment

YOUR ROLE IS ONLY TO:
- Explain medical concepts in simple terms
- Summarize patient history information
- Provide general health education
- Answer questions about existing diagnoses
- Guide users to appropriate resources

PATIENT CONTEXT:
Age: {age}
Existing Diagnoses: {diagnoses}

RESPONSE GUIDELINES:
{guidelines}
6. Always be empathetic and professional
7. Focus on education and explanation, not diagnosis or treatment

Remember: You are an educational tool, not a replacement for medical professionals."""

DISEASE_INFO_PROMPT = """You are a medical information system. Provide comprehensive, accurate medical information about the following disease in a structured format.

Disease: {disease}
ICD-11 Code: {icd_code}

Please provide the following information in JSON format:
{{
  "title": "Full medical name of the disease",
  "definition": "A concise 2-3 sentence definition of the disease",
  "longDefinition": "A detailed explanation of the disease (4-6 sentences)",
  "synonyms": ["alternative name 1", "alternative name 2", ...],
  "symptoms": ["symptom 1", "symptom 2", "symptom 3", ...],
  "causes": ["cause 1", "cause 2", ...],
  "riskFactors": ["risk factor 1", "risk factor 2", ...],
  "diagnosis": ["diagnostic method 1", "diagnostic method 2", ...],
  "treatment": ["treatment option 1", "treatment option 2", ...],
  "prevention": ["prevention method 1", "prevention method 2", ...],
  "prognosis": "Expected outcome and long-term outlook",
  "complications": ["complication 1", "complication 2", ...],
  "prevalence": "Information about how common the disease is",
  "clinicalNotes": ["important clinical note 1", "important clinical note 2", ...]
}}

Provide accurate, evidence-based medical information. Be comprehensive but concise. Return ONLY the JSON object, no additional text."""


def _diagnosis_line(disease: str | None, icd11: str | None, notes: str | None) -> str:
    parts: list[str] = []
    if disease:
        parts.append(disease)
    if icd11:
        parts.append(f"(ICD-11: {icd11})")
    if notes:
        parts.append(f"- {notes}")
    return " ".join(parts)


def build_patient_context(record: PatientRecord) -> dict[str, str]:
    """Minimal clinical summary for the model: age and diagnoses only, never identifiers."""
    age = f"{record.age} years old" if record.age else AGE_NOT_SPECIFIED
    if record.diagnosis:
        diagnoses = "\n".join(
            _diagnosis_line(entry.disease, entry.icd11, entry.notes) for entry in record.diagnosis
        )
    else:
        diagnoses = NO_DIAGNOSES_MARKER
    return {"age": age, "diagnoses": diagnoses}


def render_system_prompt(context: dict[str, str]) -> str:
    guidelines = "\n".join(f"{idx}. {clause}" for idx, clause in enumerate(RESPONSE_POLICY_CLAUSES, start=1))
    return SAFETY_SYSTEM_PROMPT.format(
        age=context["age"],
        diagnoses=context["diagnoses"],
        guidelines=guidelines,
    )


def render_disease_info_prompt(disease_name: str | None, icd_code: str | None) -> str:
    return DISEASE_INFO_PROMPT.format(
        disease=disease_name or "Unknown",
        icd_code=icd_code or "Not provided",
    )
