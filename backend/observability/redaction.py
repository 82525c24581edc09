"""Secrets redaction engine for log output.

Patterns: MongoDB URIs, cookie headers, bearer tokens, key material,
raw session ids.
"""
import re
from typing import List, Tuple

# (pattern, replacement_label)
_PATTERNS: List[Tuple[re.Pattern, str]] = [
    # MongoDB URI with credentials
    (re.compile(r"mongodb(?:\+srv)?://[^\s]+"), "[REDACTED_MONGO_URI]"),
    # Cookie / Set-Cookie header values
    (re.compile(r"\b((?:set-)?cookie\s*:\s*)[^\r\n]+", re.IGNORECASE), r"\1[REDACTED_COOKIE]"),
    # Generic bearer token
    (re.compile(r"Bearer\s+[A-Za-z0-9_\-\.=]+", re.IGNORECASE), "[REDACTED_BEARER]"),
    # Key material and secrets
    (re.compile(r"(?:key_pairs|hash_key|block_key|token|secret|password)[\s:=]+[\"']?[A-Za-z0-9_\-\.=]{16,}[\"']?", re.IGNORECASE), "[REDACTED_SECRET]"),
    # Raw session ids (unpadded base32 over 32 bytes)
    (re.compile(r"\b[A-Z2-7]{52}\b"), "[REDACTED_SESSION_ID]"),
]


def redact(text: str) -> str:
    """Apply all redaction patterns to text."""
    result = text
    for pattern, replacement in _PATTERNS:
        result = pattern.sub(replacement, result)
    return result


def redact_dict(data: dict, sensitive_keys: set | None = None) -> dict:
    """Redact values of sensitive keys in a dictionary."""
    if sensitive_keys is None:
        sensitive_keys = {
            "token", "password", "secret", "cookie", "set-cookie",
            "data", "hash_key", "block_key", "session_key_pairs",
        }
    result = {}
    for k, v in data.items():
        if k.lower() in sensitive_keys:
            result[k] = "[REDACTED]"
        elif isinstance(v, dict):
            result[k] = redact_dict(v, sensitive_keys)
        elif isinstance(v, str):
            result[k] = redact(v)
        else:
            result[k] = v
    return result
