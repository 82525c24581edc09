"""Startup configuration validation guardrails."""

import logging


logger = logging.getLogger(__name__)

MIN_HASH_KEY_BYTES = 32
BLOCK_KEY_SIZES = (16, 24, 32)


def _require_key_pairs(settings) -> list:
    """Fail closed if no cookie keys are configured or they do not parse."""
    raw = settings.SESSION_KEY_PAIRS
    if not raw or not raw.strip():
        raise RuntimeError(
            "STARTUP FAILED — SESSION_KEY_PAIRS is required and cannot be empty. "
            "Set SESSION_KEY_PAIRS in backend/.env or container environment and restart the server."
        )
    try:
        return settings.key_pairs()
    except ValueError:
        raise RuntimeError("STARTUP FAILED — SESSION_KEY_PAIRS must be comma-separated hex keys")


def validate_startup_config(settings) -> None:
    """Centralized startup guardrails for required and warning-level config."""
    keys = _require_key_pairs(settings)

    for i, key in enumerate(keys):
        if i % 2 == 0:
            if len(key) < MIN_HASH_KEY_BYTES:
                raise RuntimeError(
                    f"STARTUP FAILED — hash key #{i // 2} must be at least "
                    f"{MIN_HASH_KEY_BYTES} bytes ({MIN_HASH_KEY_BYTES * 2} hex chars)"
                )
        elif len(key) not in BLOCK_KEY_SIZES:
            raise RuntimeError(
                f"STARTUP FAILED — block key #{i // 2} must be 16, 24 or 32 bytes"
            )

    if settings.SESSION_MAX_AGE < 0:
        raise RuntimeError("STARTUP FAILED — SESSION_MAX_AGE cannot be negative")

    if settings.ENV == "prod":
        # Session cookies must never travel over plaintext in production
        if not settings.SESSION_COOKIE_SECURE:
            raise RuntimeError(
                "STARTUP FAILED — SESSION_COOKIE_SECURE must be True in production."
            )
    elif settings.SESSION_COOKIE_SAME_SITE == "none" and not settings.SESSION_COOKIE_SECURE:
        # Browsers reject SameSite=None without Secure
        logger.warning("CONFIG WARNING: SESSION_COOKIE_SAME_SITE=none without SESSION_COOKIE_SECURE")

    if len(keys) % 2 == 1:
        logger.warning("CONFIG WARNING: last hash key has no block key, cookie values are signed, not encrypted")
    if settings.SESSION_ENSURE_TTL and settings.SESSION_MAX_AGE == 0:
        logger.warning("CONFIG WARNING: SESSION_ENSURE_TTL with SESSION_MAX_AGE=0 expires records immediately")
