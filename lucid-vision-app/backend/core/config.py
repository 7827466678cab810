"""
Core configuration and settings for the Lucid Vision API

Tunable knobs for auth, CORS, provider calls and storage live here so that
magic numbers are not scattered through services. Values can be overridden
via env vars per environment.
"""

import os
from typing import List, Optional

# Auth (Supabase-style HS256 access tokens)
ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_AUDIENCE: Optional[str] = os.getenv("JWT_AUDIENCE") or None

# Enhanced CORS (locked-down)
TRUSTED_ORIGINS = [
    "http://localhost:8081",
    "http://localhost:19006",
    "exp://localhost:8081",
]


def get_environment() -> str:
    """Get current environment"""
    return os.getenv("ENVIRONMENT", "production")


def get_allowed_hosts() -> List[str]:
    """Get allowed hosts for trusted host middleware"""
    return os.getenv(
        "ALLOWED_HOSTS",
        "localhost,127.0.0.1,testserver"
    ).split(",")


def get_cors_origins() -> List[str]:
    raw = os.getenv("CORS_ORIGINS", "")
    extra = [o.strip() for o in raw.split(",") if o.strip()]
    return TRUSTED_ORIGINS + [o for o in extra if o not in TRUSTED_ORIGINS]


def is_production() -> bool:
    """Check if running in production"""
    return get_environment() == "production"


def get_jwt_secret() -> str:
    secret = os.getenv("JWT_SECRET_KEY", "")
    if not secret and is_production():
        raise RuntimeError("JWT_SECRET_KEY must be set in production")
    return secret or "development-secret-change-me"


# ────────────────────────────────────────────────────────────
#  Provider & Storage Defaults (env‑overridable)
# ────────────────────────────────────────────────────────────

def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)) or default)
    except Exception:
        return default


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)) or default)
    except Exception:
        return default


LLM_MODEL: str = os.getenv("LLM_MODEL", "gpt-4o-mini")

# HTTP timeout for every provider call; analyzer degrades, generation fails
LLM_TIMEOUT_SECONDS: float = _env_float("LLM_TIMEOUT_SECONDS", 30.0)

# Sampling settings per call site
ANALYSIS_TEMPERATURE: float = 0.3
QUESTION_TEMPERATURE: float = 0.7
QUESTION_MAX_TOKENS: int = 50
TITLE_TEMPERATURE: float = 0.7
TITLE_MAX_TOKENS: int = 100
SUMMARY_TEMPERATURE: float = 0.8
SUMMARY_MAX_TOKENS: int = 600
TAGLINE_TEMPERATURE: float = 0.8
TAGLINE_MAX_TOKENS: int = 40

# Vision records are kept for a year unless deleted
VISION_TTL_SECONDS: int = _env_int("VISION_TTL_SECONDS", 365 * 24 * 3600)
VISION_LIST_LIMIT: int = _env_int("VISION_LIST_LIMIT", 100)
