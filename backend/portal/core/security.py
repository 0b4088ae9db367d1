"""Security utilities for tokens and producer authentication."""

import base64
import hashlib
import re
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt

from portal.core.config import settings

# Per-shoot access token: 128 bits as 32 lowercase hex characters
ACCESS_TOKEN_PATTERN = re.compile(r"^[a-f0-9]{32}$")

# Share link token: 256 bits, unpadded base64url (43 characters)
SHARE_TOKEN_BYTES = 32
SHARE_TOKEN_PATTERN = re.compile(r"^[A-Za-z0-9_-]{43}$")


def generate_secure_token() -> str:
    """Generate a per-shoot access token from the OS CSPRNG."""
    return secrets.token_hex(16)


def is_valid_token_format(token: str | None) -> bool:
    """Check a per-shoot access token is exactly 32 lowercase hex characters."""
    if not token or not isinstance(token, str):
        return False
    return ACCESS_TOKEN_PATTERN.fullmatch(token) is not None


def access_tokens_match(presented: str | None, stored: str | None) -> bool:
    """Constant-time comparison of a presented access token with the stored one.

    Malformed input is rejected before any comparison.
    """
    if not is_valid_token_format(presented) or not stored:
        return False
    return secrets.compare_digest(presented, stored)


def generate_share_token() -> str:
    """Generate a 256-bit share link token, base64url encoded without padding."""
    raw = secrets.token_bytes(SHARE_TOKEN_BYTES)
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def is_valid_share_token_format(token: str | None) -> bool:
    if not token or not isinstance(token, str):
        return False
    return SHARE_TOKEN_PATTERN.fullmatch(token) is not None


def hash_share_token(token: str) -> str:
    """SHA-256 hex digest of a share token; only the digest is ever stored."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def create_access_token(
    subject: str,
    expires_delta: timedelta | None = None,
    additional_claims: dict[str, Any] | None = None,
) -> str:
    """Create a producer JWT. The subject is the producer's e-mail address."""
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(
            minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
        )

    to_encode = {
        "exp": expire,
        "sub": subject.strip().lower(),
        "email": subject.strip().lower(),
        "type": "access",
    }
    if additional_claims:
        to_encode.update(additional_claims)

    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> dict[str, Any] | None:
    """Decode and validate a producer JWT."""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None


def is_allowed_admin_email(email: str | None) -> bool:
    """Check a producer e-mail against ADMIN_EMAIL_ALLOWLIST.

    An empty allow-list admits nobody.
    """
    if not email:
        return False
    allowlist = settings.admin_emails
    if not allowlist:
        return False
    return email.strip().lower() in allowlist
