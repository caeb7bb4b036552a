"""
Password handling.

Stored passwords are opaque strings compared exactly, unless hashing is
enabled in settings; then new passwords are stored as bcrypt hashes and
legacy plaintext records still verify.
"""

from typing import Optional

import bcrypt

BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")


def hash_password(password: str) -> str:
    """Hash a password using bcrypt"""
    salt = bcrypt.gensalt(rounds=12)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def is_hashed(stored: Optional[str]) -> bool:
    return bool(stored) and stored.startswith(BCRYPT_PREFIXES)


def verify_password(password: Optional[str], stored: Optional[str]) -> bool:
    """Check a password against a stored bcrypt hash or plaintext value"""
    if password is None or stored is None:
        return False
    if is_hashed(stored):
        try:
            return bcrypt.checkpw(password.encode("utf-8"), stored.encode("utf-8"))
        except ValueError:
            return False
    return password == stored


def prepare_password(password: Optional[str], hash_passwords: bool) -> Optional[str]:
    """Value to persist for a newly set password"""
    if password is None or not hash_passwords or is_hashed(password):
        return password
    return hash_password(password)
