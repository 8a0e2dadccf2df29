from __future__ import annotations

import logging

import jwt

from .errors import Unauthenticated
from .models import Identity

logger = logging.getLogger(__name__)


def bearer_token(auth_header: str | None) -> str | None:
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    raw = auth_header.split(" ", 1)[1].strip()
    return raw or None


class TokenVerifier:
    """Verifies HMAC-signed bearer tokens issued by the login service.

    The canonical identity is the claim's ``id``, falling back to ``email``.
    """

    def __init__(self, secret: str, algorithms: tuple[str, ...] = ("HS256",)) -> None:
        self._secret = secret
        self._algorithms = list(algorithms)

    def verify(self, token: str | None) -> Identity:
        if not token:
            raise Unauthenticated("Missing authentication token")
        try:
            claims = jwt.decode(token, self._secret, algorithms=self._algorithms)
        except jwt.PyJWTError as exc:
            logger.info("token rejected: %s", exc.__class__.__name__)
            raise Unauthenticated("Invalid authentication token") from exc
        identity = Identity.from_claims(claims if isinstance(claims, dict) else {})
        if identity is None:
            raise Unauthenticated("Invalid authentication token")
        return identity

    def verify_header(self, auth_header: str | None) -> Identity:
        return self.verify(bearer_token(auth_header))
