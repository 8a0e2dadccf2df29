from __future__ import annotations


class ChatPipelineError(Exception):
    status_code = 500
    default_message = "Failed to process chat request"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def as_body(self) -> dict[str, str]:
        return {"error": self.message}


class Unauthenticated(ChatPipelineError):
    status_code = 401
    default_message = "Invalid authentication token"


class InvalidInput(ChatPipelineError):
    status_code = 400
    default_message = "Invalid request body"


class Forbidden(ChatPipelineError):
    status_code = 403
    default_message = "Access denied to this patient"


class NotFound(ChatPipelineError):
    status_code = 404
    default_message = "Patient not found"


class ServiceUnavailable(ChatPipelineError):
    status_code = 503
    default_message = "AI service not configured"


class UpstreamError(ChatPipelineError):
    status_code = 503
    default_message = "AI service temporarily unavailable"


class InternalError(ChatPipelineError):
    status_code = 500
    default_message = "Failed to process chat request"
