"""
Security Utilities.

Password hashing, credential field validators, and input sanitization.

Two password schemes are supported:

    legacy  - SHA-256 over password + one static salt shared by every user.
              Deterministic and weak (no per-user salt, no work factor).
              Kept so that existing persisted hashes keep verifying.
    bcrypt  - Per-user random salt with an adaptive cost factor.

verify_password() recognises either format, so a store can switch schemes
and re-hash lazily on the next successful login.
"""

import hashlib
import hmac
import re
import secrets

import bcrypt

from noteflow.core.logging import get_logger

logger = get_logger(__name__)

LEGACY_SALT = "noteflow-salt-2024"

SCHEME_LEGACY = "legacy"
SCHEME_BCRYPT = "bcrypt"

_BCRYPT_PREFIX = "$2"

_EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
_USERNAME_PATTERN = re.compile(r"[a-zA-Z0-9_]{3,20}")
_PASSWORD_PATTERN = re.compile(r"(?=.*[a-z])(?=.*[A-Z])(?=.*\d)[a-zA-Z\d]{8,}")

_HTML_ESCAPES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&#x27;"),
    ("/", "&#x2F;"),
)


def hash_password(password: str) -> str:
    """Hash a password with the legacy static-salt SHA-256 scheme."""
    return hashlib.sha256((password + LEGACY_SALT).encode("utf-8")).hexdigest()


def hash_password_bcrypt(password: str, rounds: int = 12) -> str:
    """Hash a password using bcrypt with a fresh random salt."""
    password_bytes = password.encode("utf-8")
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password_bytes, salt).decode("utf-8")


def hash_password_with(password: str, scheme: str, rounds: int = 12) -> str:
    """Hash a password with the named scheme."""
    if scheme == SCHEME_BCRYPT:
        return hash_password_bcrypt(password, rounds=rounds)
    if scheme == SCHEME_LEGACY:
        return hash_password(password)
    raise ValueError(f"Unknown password scheme: {scheme}")


def hash_scheme(hashed_password: str) -> str:
    """Return the scheme a stored hash was produced with."""
    if hashed_password.startswith(_BCRYPT_PREFIX):
        return SCHEME_BCRYPT
    return SCHEME_LEGACY


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a stored hash of either scheme."""
    if hash_scheme(hashed_password) == SCHEME_BCRYPT:
        try:
            return bcrypt.checkpw(
                plain_password.encode("utf-8"),
                hashed_password.encode("utf-8"),
            )
        except ValueError:
            logger.warning("Malformed bcrypt hash rejected")
            return False
    return hmac.compare_digest(hash_password(plain_password), hashed_password)


def needs_rehash(hashed_password: str, scheme: str) -> bool:
    """Check whether a stored hash should be re-computed with ``scheme``."""
    return hash_scheme(hashed_password) != scheme


def generate_session_token() -> str:
    """Generate a random URL-safe session identifier."""
    return secrets.token_urlsafe(32)


def sanitize_input(value: str) -> str:
    """HTML-entity-escape ``& < > " ' /``. Ampersands are escaped first."""
    for char, entity in _HTML_ESCAPES:
        value = value.replace(char, entity)
    return value


def validate_email(email: str) -> bool:
    """Simple ``local@domain.tld`` shape check."""
    return _EMAIL_PATTERN.fullmatch(email) is not None


def validate_username(username: str) -> bool:
    """3-20 characters: letters, digits, underscore."""
    return _USERNAME_PATTERN.fullmatch(username) is not None


def validate_password(password: str) -> bool:
    """
    At least 8 letters or digits, with one lowercase letter,
    one uppercase letter, and one digit.
    """
    return _PASSWORD_PATTERN.fullmatch(password) is not None
