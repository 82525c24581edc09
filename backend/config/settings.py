"""Centralized settings module — single source of truth for all config.

Secrets (cookie keys, Mongo credentials) are loaded exclusively from env vars.
Never committed, never logged. Redaction enforced via observability.redaction.
"""
from functools import lru_cache
from pathlib import Path
from typing import List, Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings

_ROOT = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    # ── Environment ──────────────────────────────────────────────
    ENV: Literal["dev", "staging", "prod"] = Field(default="dev")

    # ── MongoDB ──────────────────────────────────────────────────
    MONGO_URL: str = Field(default="mongodb://localhost:27017")
    DB_NAME: str = Field(default="mongostore_dev")
    SESSION_COLLECTION: str = Field(default="sessions")

    # ── Session store ────────────────────────────────────────────
    SESSION_NAME: str = Field(default="session")
    SESSION_MAX_AGE: int = Field(default=86400 * 30)  # 30 days
    SESSION_ENSURE_TTL: bool = Field(default=True)

    # Comma-separated hex keys, consumed pairwise as (hash key, block key).
    # Newest pair first; older pairs stay listed while cookies rotate out.
    SESSION_KEY_PAIRS: str = Field(default="")

    # ── Cookie options ───────────────────────────────────────────
    SESSION_COOKIE_PATH: str = Field(default="/")
    SESSION_COOKIE_DOMAIN: Optional[str] = Field(default=None)
    SESSION_COOKIE_SECURE: bool = Field(default=False)
    SESSION_COOKIE_HTTP_ONLY: bool = Field(default=True)
    SESSION_COOKIE_SAME_SITE: Optional[Literal["lax", "strict", "none"]] = Field(default="lax")

    # ── Observability ────────────────────────────────────────────
    LOG_LEVEL: str = Field(default="INFO")
    LOG_REDACTION_ENABLED: bool = Field(default=True)

    model_config = {
        "env_file": str(_ROOT / ".env"),
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    def key_pairs(self) -> List[bytes]:
        """Decode SESSION_KEY_PAIRS into raw key bytes (rotation order)."""
        return [
            bytes.fromhex(k.strip())
            for k in self.SESSION_KEY_PAIRS.split(",")
            if k.strip()
        ]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
