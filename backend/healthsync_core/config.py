from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

BACKEND_DIR = Path(__file__).resolve().parents[1]

ENV_FILES = (BACKEND_DIR.parent / ".env", BACKEND_DIR / ".env")

SETTINGS_KEYS = frozenset(
    {
        "JWT_SECRET",
        "JWT_ALGORITHMS",
        "GROQ_API_KEY",
        "GROQ_API_BASE_URL",
        "HEALTHSYNC_CHAT_MODEL",
        "HEALTHSYNC_CHAT_TIMEOUT_SECONDS",
        "SERPAPI_KEY",
        "HEALTHSYNC_DB_PATH",
        "HEALTHSYNC_LOG_LEVEL",
        "ALLOWED_ORIGINS",
    }
)


def read_env_file(path: Path) -> dict[str, str]:
    """Parse ``KEY=value`` lines, keeping only keys that ``Settings`` reads."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError:
        return {}
    values: dict[str, str] = {}
    for line in text.splitlines():
        key, sep, value = line.strip().partition("=")
        key = key.removeprefix("export ").strip()
        if not sep or key not in SETTINGS_KEYS:
            continue
        values[key] = value.strip().strip("'\"")
    return values


def bootstrap_local_env(paths: tuple[Path, ...] = ENV_FILES) -> None:
    # Real environment wins over .env; earlier files win over later ones.
    for path in paths:
        for key, value in read_env_file(path).items():
            os.environ.setdefault(key, value)


@dataclass(frozen=True)
class Settings:
    jwt_secret: str
    jwt_algorithms: tuple[str, ...]
    groq_api_key: str
    groq_base_url: str
    chat_model: str
    chat_timeout_seconds: float
    serpapi_key: str
    db_path: str
    log_level: str
    allowed_origins: tuple[str, ...]

    @classmethod
    def from_env(cls) -> "Settings":
        algorithms = tuple(
            alg.strip() for alg in os.getenv("JWT_ALGORITHMS", "HS256").split(",") if alg.strip()
        )
        origins = tuple(
            origin.strip()
            for origin in os.getenv("ALLOWED_ORIGINS", "http://localhost:3000").split(",")
            if origin.strip()
        )
        return cls(
            jwt_secret=os.getenv("JWT_SECRET") or "change-this-secret",
            jwt_algorithms=algorithms or ("HS256",),
            groq_api_key=(os.getenv("GROQ_API_KEY") or "").strip(),
            groq_base_url=os.getenv("GROQ_API_BASE_URL", "https://api.groq.com/openai/v1").rstrip("/"),
            chat_model=(os.getenv("HEALTHSYNC_CHAT_MODEL") or "llama-3.1-8b-instant").strip(),
            chat_timeout_seconds=float(os.getenv("HEALTHSYNC_CHAT_TIMEOUT_SECONDS", "25")),
            serpapi_key=(os.getenv("SERPAPI_KEY") or "").strip(),
            db_path=os.getenv("HEALTHSYNC_DB_PATH", str(BACKEND_DIR / "healthsync.sqlite")),
            log_level=(os.getenv("HEALTHSYNC_LOG_LEVEL") or "INFO").strip().upper(),
            allowed_origins=origins,
        )
