from .config import Settings
from .errors import (
    ChatPipelineError,
    Forbidden,
    InternalError,
    InvalidInput,
    NotFound,
    ServiceUnavailable,
    Unauthenticated,
    UpstreamError,
)
from .identity import TokenVerifier, bearer_token
from .models import ChatAnswer, ChatQuery, DiagnosisEntry, Identity, PatientRecord
from .orchestrator import PatientChatOrchestrator, validate_chat_query
from .policy import AuthorizationPolicy, CreatorLineagePolicy, PolicyDecision
from .provider import CHAT_SAMPLING, DISEASE_INFO_SAMPLING, CompletionProvider, SamplingParams

__all__ = [
    "CHAT_SAMPLING",
    "DISEASE_INFO_SAMPLING",
    "AuthorizationPolicy",
    "ChatAnswer",
    "ChatPipelineError",
    "ChatQuery",
    "CompletionProvider",
    "CreatorLineagePolicy",
    "DiagnosisEntry",
    "Forbidden",
    "Identity",
    "InternalError",
    "InvalidInput",
    "NotFound",
    "PatientChatOrchestrator",
    "PatientRecord",
    "PolicyDecision",
    "SamplingParams",
    "ServiceUnavailable",
    "Settings",
    "TokenVerifier",
    "Unauthenticated",
    "UpstreamError",
    "bearer_token",
    "validate_chat_query",
]
