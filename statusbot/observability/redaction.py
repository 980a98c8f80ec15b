"""Redaction helpers to keep portal passwords and API tokens out of logs.

This is not a DLP system. It covers the values this service actually
handles: decrypted credentials, bearer tokens and password-like pairs.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

_REPLACEMENT = "[REDACTED]"
_TRUNC_SUFFIX = "…(truncated)"

_SENSITIVE_VALUE_RES: list[re.Pattern[str]] = [
    re.compile(r"\bBearer\s+[A-Za-z0-9._\-]+\b", flags=re.IGNORECASE),
    re.compile(r"\b(?:password|passwd|pwd)\s*[:=]\s*\S+", flags=re.IGNORECASE),
    re.compile(r"\b(?:access_token|token)\s*[:=]\s*\S+", flags=re.IGNORECASE),
]


def mask_secret(value: str | None, *, keep: int = 2) -> str:
    """Mask a secret for display, keeping only its first characters."""
    if not value:
        return ""
    if len(value) <= keep:
        return "*" * len(value)
    return value[:keep] + "*" * (len(value) - keep)


def redact_text(
    text: str,
    *,
    secrets: Iterable[str] = (),
    max_chars: int = 4000,
) -> str:
    """Redact known secrets and secret-looking substrings, then truncate.

    Args:
        text: Text to scrub.
        secrets: Literal values (e.g. a decrypted password) to remove.
        max_chars: Truncation bound; 0 disables truncation.
    """
    if not text:
        return text

    out = text
    for secret in secrets:
        if secret:
            out = out.replace(secret, _REPLACEMENT)
    for rx in _SENSITIVE_VALUE_RES:
        out = rx.sub(_REPLACEMENT, out)

    if max_chars and len(out) > max_chars:
        out = out[:max_chars] + _TRUNC_SUFFIX
    return out
