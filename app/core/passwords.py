"""Password hashing with bcrypt.

Verification relies on bcrypt.checkpw for timing safety; there is no custom
comparator here. bcrypt only reads the first 72 bytes of a secret, and
recent releases refuse longer input outright, so both hashing and checking
truncate explicitly to keep 128-character passwords usable.
"""

from __future__ import annotations

import bcrypt

_BCRYPT_MAX_BYTES = 72


def _secret_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(password: str, *, rounds: int = 10) -> str:
    """Return a salted bcrypt hash for ``password``.

    Args:
        password: Plaintext password, already validated for length.
        rounds: bcrypt cost factor.

    Returns:
        str: The ``$2b$...`` hash, safe to store.
    """
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(_secret_bytes(password), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check ``password`` against a stored hash; malformed hashes never match."""
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(_secret_bytes(password), password_hash.encode("utf-8"))
    except ValueError:
        return False
