"""Redaction helpers for structured log payloads."""

from __future__ import annotations

import re
from typing import Any, Optional

REDACTED = "***REDACTED***"

_CREDENTIAL_KEYS = ("authorization", "token", "secret", "password", "cookie")
_PAYLOAD_KEYS = ("content", "body", "raw", "payload")
_CREDENTIAL_PATTERNS = (
    re.compile(r"(?i)(bearer\s+)[^\s,;]+"),
    re.compile(r"(?i)(token\s+)(gh[pousr]_|github_pat_)[^\s,;]+"),
    re.compile(r"(?i)(token\s*[=:]\s*)[^\s,;]+"),
    re.compile(r"(?i)(access_token=)[^&\s]+"),
)


def sanitize_for_log(value: Any, *, key: Optional[str] = None) -> Any:
    """Return a copy of `value` that is safe to attach to a log record."""

    if isinstance(value, dict):
        cleaned: dict[str, Any] = {}
        for raw_key, raw_value in value.items():
            field = str(raw_key)
            if _matches(field, _CREDENTIAL_KEYS):
                cleaned[field] = REDACTED
            else:
                cleaned[field] = sanitize_for_log(raw_value, key=field)
        return cleaned

    if isinstance(value, (list, tuple, set)):
        return [sanitize_for_log(item, key=key) for item in value]

    if isinstance(value, str):
        text = _redact_credentials(value)
        if key and _matches(key, _PAYLOAD_KEYS):
            return _summarize_payload(text)
        return text

    return value


def sanitize_log_extra(**kwargs: Any) -> dict[str, Any]:
    """Build an `extra=` mapping for logger calls."""

    return {key: sanitize_for_log(value, key=key) for key, value in kwargs.items()}


def _matches(field: str, keywords: tuple[str, ...]) -> bool:
    lowered = field.lower()
    return any(keyword in lowered for keyword in keywords)


def _summarize_payload(raw: str) -> str:
    if not raw.strip():
        return ""
    return f"<payload ({len(raw)} chars)>"


def _redact_credentials(raw: str) -> str:
    for pattern in _CREDENTIAL_PATTERNS:
        raw = pattern.sub(rf"\1{REDACTED}", raw)
    return raw
