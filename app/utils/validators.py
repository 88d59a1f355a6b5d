"""Pure shape/format checks for user-supplied strings.

Every function here is total and side-effect free; handlers call them as
admission gates before touching the credential store.
"""

from __future__ import annotations

import re

API_KEY_PREFIX = "api_"
API_KEY_MIN_LENGTH = 20
API_KEY_MAX_LENGTH = 200

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 100

PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_LENGTH = 128

_UUID_RE = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}",
    re.IGNORECASE,
)
_USERNAME_RE = re.compile(r"[A-Za-z0-9@._-]+")


def is_valid_uuid(value: str) -> bool:
    """Check for the canonical 8-4-4-4-12 hexadecimal grouping.

    Examples:
        >>> is_valid_uuid("123e4567-e89b-12d3-a456-426614174000")
        True
        >>> is_valid_uuid("123e4567e89b12d3a456426614174000")
        False
    """
    return bool(_UUID_RE.fullmatch(value))


def sanitize_string(value: str, max_length: int) -> str:
    """Trim surrounding whitespace, then truncate to ``max_length`` UTF-16 code units.

    Lengths are counted the way browsers count them, so a character outside
    the Basic Multilingual Plane (e.g. an emoji) uses two units. A surrogate
    pair cut in half by the limit is dropped.

    Args:
        value: Raw user input.
        max_length: Maximum length of the returned string, in UTF-16 code units.

    Returns:
        str: The normalized string (possibly empty).
    """
    stripped = value.strip()
    encoded = stripped.encode("utf-16-le", "surrogatepass")
    if len(encoded) <= max_length * 2:
        return stripped
    return encoded[: max_length * 2].decode("utf-16-le", "ignore")


def is_valid_api_key_format(value: str) -> bool:
    """Check that a key starts with ``api_`` and is 20-200 characters long."""
    return (
        value.startswith(API_KEY_PREFIX)
        and API_KEY_MIN_LENGTH <= len(value) <= API_KEY_MAX_LENGTH
    )


def is_valid_username(value: str) -> bool:
    """Check length 3-100 and a charset of ASCII letters, digits and ``@._-``."""
    return (
        USERNAME_MIN_LENGTH <= len(value) <= USERNAME_MAX_LENGTH
        and bool(_USERNAME_RE.fullmatch(value))
    )


def is_valid_password(value: str) -> bool:
    return PASSWORD_MIN_LENGTH <= len(value) <= PASSWORD_MAX_LENGTH
