"""
Password hashing for every role (participants, organizers and admins).
"""

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

ph = PasswordHasher()


def hash_password(plain: str) -> str:
    if not plain:
        raise ValueError("Password must not be empty")
    return ph.hash(plain)


def verify_password(password_hash: str, plain: str) -> bool:
    """
    Check a plaintext password against a stored Argon2 hash.

    Returns False on mismatch, on empty input, and on a stored value that
    is not a valid Argon2 hash.
    """
    if not password_hash or not plain:
        return False
    try:
        return ph.verify(password_hash, plain)
    except (VerificationError, InvalidHashError):
        return False
