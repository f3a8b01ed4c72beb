"""
Authentication utilities: JWT bearer token issuance and verification
"""

import logging
import math
from datetime import datetime, timedelta
from typing import Optional

import jwt
from pydantic import ValidationError

from models.user import Identity
from utils.shared_utils import ensure_utc, utcnow

logger = logging.getLogger(__name__)

# JWT configuration
ALGORITHM = "HS256"
DEFAULT_TOKEN_TTL = timedelta(days=7)
REQUIRED_CLAIMS = ["uid", "email", "iat", "exp"]


def create_jwt(
    uid: str,
    email: str,
    secret_key: Optional[str],
    ttl: timedelta = DEFAULT_TOKEN_TTL,
    now: Optional[datetime] = None,
) -> str:
    """
    Create a signed token for a user.

    Claims are uid, email, iat and exp (integer seconds, exp rounded up);
    decode_jwt requires all four. The same secret, claims and issue time
    always produce the same token.
    """
    if not secret_key:
        raise ValueError("JWT_SECRET_KEY is not set. Cannot create JWT token.")
    if ttl <= timedelta(0):
        raise ValueError("Token TTL must be positive")

    issued_at = ensure_utc(now) or utcnow()
    payload = {
        "uid": uid,
        "email": email,
        "iat": int(issued_at.timestamp()),
        # Rounded up so the token never expires before issued_at + ttl
        "exp": math.ceil((issued_at + ttl).timestamp()),
    }
    return jwt.encode(payload, secret_key, algorithm=ALGORITHM)


def decode_jwt(token: str, secret_key: Optional[str], now: Optional[datetime] = None) -> Optional[dict]:
    """
    Decode a JWT token. Returns None if invalid.

    Expiry is checked against `now` (defaults to the current time): a token is
    rejected once now >= exp.
    """
    if not secret_key:
        raise ValueError("JWT_SECRET_KEY is not set. Cannot decode JWT token.")

    try:
        payload = jwt.decode(
            token,
            secret_key,
            algorithms=[ALGORITHM],
            # exp is checked below against the injected clock
            options={"verify_exp": False, "verify_iat": False, "require": REQUIRED_CLAIMS},
        )
    except jwt.InvalidTokenError as e:
        logger.warning(f"JWT verification failed: {e}")
        return None

    exp = payload.get("exp")
    if isinstance(exp, bool) or not isinstance(exp, (int, float)):
        logger.warning("JWT verification failed: non-numeric exp claim")
        return None

    current = ensure_utc(now) or utcnow()
    if current.timestamp() >= exp:
        logger.warning("JWT verification failed: token expired")
        return None

    return payload


def verify_token(token: str, secret_key: Optional[str], now: Optional[datetime] = None) -> Optional[Identity]:
    """Verify a token and return the Identity it carries, or None."""
    payload = decode_jwt(token, secret_key, now=now)
    if payload is None:
        return None

    try:
        return Identity(uid=payload["uid"], email=payload["email"])
    except ValidationError:
        logger.warning("JWT verification failed: invalid identity claims")
        return None
