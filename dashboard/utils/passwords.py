# dashboard/utils/passwords.py
from __future__ import annotations

from werkzeug.security import check_password_hash, generate_password_hash


MIN_PASSWORD_LENGTH = 6


def hash_password(plain_password: str) -> str:
    """
    Hash a plaintext password using Werkzeug's scrypt (memory-hard KDF).
    """
    if not isinstance(plain_password, str) or not plain_password.strip():
        raise ValueError("Password must be a non-empty string.")
    return generate_password_hash(plain_password, method="scrypt")


def verify_password(password_hash: str, plain_password: str) -> bool:
    """Verify plaintext password against stored hash."""
    if not password_hash or not plain_password:
        return False
    return check_password_hash(password_hash, plain_password)
