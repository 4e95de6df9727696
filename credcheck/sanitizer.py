#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2025-present John Mille <john@ews-network.net>

"""Redaction of AWS credential values in log output."""

from __future__ import annotations

import re
import threading


# Pairs such as 'aws_secret_access_key': 'abcd...' in botocore error messages
_KEY_VALUE_PATTERN = re.compile(
    r"'(aws_access_key_id|aws_secret_access_key|aws_session_token|"
    r"access_key|secret_key|session_token|token)':\s*'([^']+)'",
    re.IGNORECASE,
)


def mask(value: str) -> str:
    """Keep the first 4 characters of a value, mask the rest."""
    if len(value) <= 4:
        return "****"
    return value[:4] + "****"


class CredentialValueSanitizer:
    """Registry of resolved credential values redacted wherever they appear.

    The credentials provider registers the access key id, secret key and
    session token it resolved from the profile, so that anything logged
    afterwards (including exception text) never carries them verbatim.
    """

    def __init__(self):
        self._values: set[str] = set()
        self._lock = threading.RLock()

    def register(self, value: str | None) -> None:
        """Register a sensitive value. Values shorter than 4 chars are ignored."""
        if value and isinstance(value, str) and len(value) >= 4:
            with self._lock:
                self._values.add(value)

    def unregister(self, value: str | None) -> None:
        if value:
            with self._lock:
                self._values.discard(value)

    def sanitize(self, text: str) -> str:
        if not text or not isinstance(text, str):
            return text

        with self._lock:
            # Longest first so a token containing a key is masked as a whole
            for value in sorted(self._values, key=len, reverse=True):
                if value in text:
                    text = text.replace(value, mask(value))
        return text

    def clear(self) -> None:
        with self._lock:
            self._values.clear()


# Global sanitizer instance - one per process
_SANITIZER = CredentialValueSanitizer()


def register_sensitive_value(value: str | None) -> None:
    """Register a sensitive value for sanitization globally."""
    _SANITIZER.register(value)


def unregister_sensitive_value(value: str | None) -> None:
    """Unregister a sensitive value globally."""
    _SANITIZER.unregister(value)


def sanitize_string(text: str) -> str:
    """Sanitize a string by replacing registered sensitive values.

    This is the main public API for sanitizing strings in logs.

    Args:
        text: The text to sanitize

    Returns:
        Sanitized text with sensitive values redacted
    """
    return _SANITIZER.sanitize(text)


def sanitize_exception_message(message: str) -> str:
    """Sanitize an exception message that might contain credential values.

    Registered values are redacted first, then quoted key/value pairs with a
    credential-looking key are masked.

    Args:
        message: Exception message string

    Returns:
        Sanitized message
    """
    sanitized = _SANITIZER.sanitize(message)

    def replacer(match: re.Match) -> str:
        return f"'{match.group(1)}': '{mask(match.group(2))}'"

    return _KEY_VALUE_PATTERN.sub(replacer, sanitized)
