from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

TEST_JWT_SECRET = "healthsync-test-signing-secret-0123456789abcdef0123456789abcdef0123"


def mint_token(claims: dict[str, Any], secret: str = TEST_JWT_SECRET, expires_in: timedelta | None = None) -> str:
    payload = dict(claims)
    payload["exp"] = datetime.now(timezone.utc) + (expires_in if expires_in is not None else timedelta(hours=1))
    return jwt.encode(payload, secret, algorithm="HS256")
