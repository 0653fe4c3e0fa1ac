from __future__ import annotations

import hashlib
import hmac
import secrets
from datetime import date

"""Initial credential derivation and hashing.

The initial password of an imported employee is ``<employee code>@<yyyy-mm-dd>``
built from the joining date. It is surfaced once in the row outcome so HR can
hand it over, and only its salted PBKDF2 hash is written to storage.
"""

__all__ = [
    "CredentialGenerationError",
    "generate_password",
    "hash_password",
    "verify_password",
]

DEFAULT_ITERATIONS = 100_000

# 上流で None が文字列化された形跡
_CONTAMINATION_MARKERS = ("undefined", "null")


class CredentialGenerationError(Exception):
    """Raised when the derived password is malformed."""


def generate_password(employee_code: str, joining_date: date) -> str:
    """Derive the deterministic initial password for an employee.

    >>> generate_password("E100", date(2023, 6, 1))
    'E100@2023-06-01'
    """
    if joining_date is None:
        raise CredentialGenerationError(f"Invalid password generated: {employee_code}@None")
    password = f"{employee_code}@{joining_date.isoformat()}"
    if not employee_code or any(marker in password for marker in _CONTAMINATION_MARKERS):
        raise CredentialGenerationError(f"Invalid password generated: {password}")
    return password


def hash_password(password: str, iterations: int = DEFAULT_ITERATIONS) -> str:
    """Return ``<iterations>$<salt>$<hexdigest>`` for storage."""
    salt = secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), iterations)
    return f"{iterations}${salt}${digest.hex()}"


def verify_password(password: str, stored: str) -> bool:
    try:
        iterations, salt, expected = stored.split("$", 2)
        digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), int(iterations))
    except ValueError:
        return False
    return hmac.compare_digest(digest.hex(), expected)
