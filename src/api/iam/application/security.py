"""Security utilities for credentials and bearer tokens.

Passwords are hashed with bcrypt. Session and invitation tokens are random
url-safe strings whose SHA-256 digest is stored instead of the token, so a
database leak does not yield usable tokens while lookups stay indexable.
"""

import hashlib
import hmac
import secrets
from functools import lru_cache

import bcrypt

TOKEN_BYTES = 32
TEMPORARY_PASSWORD_BYTES = 18


def generate_token() -> str:
    """Generate a url-safe token from 32 bytes of secure random data.

    Returns:
        Base64url encoded token without padding (43 characters)
    """
    return secrets.token_urlsafe(TOKEN_BYTES)


def hash_token(token: str) -> str:
    """Return the SHA-256 hex digest used to store and look up a token."""
    return hashlib.sha256(token.encode()).hexdigest()


def token_matches(token: str, token_hash: str) -> bool:
    """Compare a raw token with a stored digest in constant time."""
    return hmac.compare_digest(hash_token(token), token_hash)


def generate_temporary_password() -> str:
    """Generate a high-entropy temporary password."""
    return secrets.token_urlsafe(TEMPORARY_PASSWORD_BYTES)


def hash_password(password: str, rounds: int = 12) -> str:
    """Hash a password using bcrypt.

    Args:
        password: The plaintext password to hash
        rounds: bcrypt work factor

    Returns:
        The bcrypt hash as a string
    """
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=rounds)).decode()


@lru_cache(maxsize=None)
def dummy_password_hash(rounds: int = 12) -> str:
    """Hash checked when there is no real one, at the same bcrypt cost."""
    return bcrypt.hashpw(
        b"not-a-real-password", bcrypt.gensalt(rounds=rounds)
    ).decode()


def verify_password(
    password: str, password_hash: str | None, rounds: int = 12
) -> bool:
    """Verify a password against its hash using constant-time comparison.

    When there is no hash to check against (unknown e-mail, or a principal
    without a password) a dummy hash is still checked so that the response
    time does not reveal which case occurred.

    Args:
        password: The plaintext password to verify
        password_hash: The bcrypt hash to verify against, if any
        rounds: bcrypt work factor of the dummy hash; match the cost
            stored hashes are created with

    Returns:
        True if the password matches the hash, False otherwise
    """
    candidate = password_hash or dummy_password_hash(rounds)
    try:
        matched = bcrypt.checkpw(password.encode(), candidate.encode())
    except ValueError:
        # Malformed hash, or a password longer than bcrypt accepts
        return False
    return matched and password_hash is not None
