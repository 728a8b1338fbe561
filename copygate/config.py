"""
Copygate Configuration

Central settings loaded from environment variables.
Read by the hosting process only; the gating pipeline receives
everything it needs as explicit arguments.
"""

import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    """Immutable application settings."""

    # --- LLM Provider ---
    LLM_PROVIDER: str = os.getenv("COPYGATE_LLM_PROVIDER", "gemini")
    GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
    GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
    TEMPERATURE: float = float(os.getenv("COPYGATE_TEMPERATURE", "0.35"))

    # --- Ruleset ---
    RULESET_PATH: str = os.getenv("COPYGATE_RULESET_PATH", "data/ruleset.json")

    # --- Gating ---
    SUS_SALVAGE: bool = _env_flag("COPYGATE_SUS_SALVAGE")

    # --- Fact-check ---
    FACTCHECK_MODE: str = os.getenv("COPYGATE_FACTCHECK_MODE", "off")  # off | preview | auto
    FACTCHECK_API_KEY: str = (
        os.getenv("GOOGLE_FACT_CHECK_TOOLS_KEY")
        or os.getenv("FACT_CHECK_API_KEY", "")
    )
    FACTCHECK_MAX_CLAIMS: int = int(os.getenv("COPYGATE_FACTCHECK_MAX_CLAIMS", "5"))
    FACTCHECK_MIN_SENT_LEN: int = int(os.getenv("COPYGATE_FACTCHECK_MIN_SENT_LEN", "40"))
    FACTCHECK_MAX_SENT_LEN: int = int(os.getenv("COPYGATE_FACTCHECK_MAX_SENT_LEN", "240"))
    FACTCHECK_CACHE_TTL: int = int(os.getenv("COPYGATE_FACTCHECK_CACHE_TTL", "300"))
    FACTCHECK_CACHE_MAX: int = int(os.getenv("COPYGATE_FACTCHECK_CACHE_MAX", "200"))

    # --- Server ---
    HOST: str = os.getenv("COPYGATE_HOST", "0.0.0.0")
    PORT: int = int(os.getenv("COPYGATE_PORT", "8000"))

    # --- CORS ---
    CORS_ORIGINS: str = os.getenv("COPYGATE_CORS_ORIGINS", "*")


settings = Settings()
