"""
YourTales Backend - Credentials & Tokens
=========================================

What:  Password hashing, one-time codes and bearer token signing.
Who:   UserService (register, login, password flows) and the auth dependency.

Password storage format:
    argon2id PHC string ("$argon2id$v=19$m=...,t=...,p=...$<salt>$<hash>")
    produced by argon2-cffi. Cost parameters travel with the hash, so
    changing them only affects passwords set afterwards.

Tokens:
    HS256 JWT signed with JWT_SECRET. Claims: sub (user id as string),
    role, iat, exp (JWT_EXPIRE_DAYS after issue).
"""

import hmac
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

from yourtales.config import settings

PWD = PasswordHasher()
OTP_DIGITS = 5


# ── Passwords ─────────────────────────────────────────────────────────────
def hash_password(password: str) -> str:
    return PWD.hash(password)


def verify_password(password: str, stored_hash: Optional[str]) -> bool:
    """Check a password against a stored argon2 hash. Malformed hashes never match."""
    if not stored_hash:
        return False
    try:
        return bool(PWD.verify(stored_hash, password))
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


# ── One-time codes ────────────────────────────────────────────────────────
def generate_otp() -> str:
    """Random 5-digit code, 10000-99999."""
    return str(10 ** (OTP_DIGITS - 1) + secrets.randbelow(9 * 10 ** (OTP_DIGITS - 1)))


def otp_expiry(now: Optional[datetime] = None) -> datetime:
    now = now or datetime.now(timezone.utc)
    return now + timedelta(minutes=settings.otp_ttl_minutes)


def otp_matches(
    submitted: str,
    stored: Optional[str],
    expires_at: Optional[datetime],
    now: Optional[datetime] = None,
) -> bool:
    """
    True when the submitted code equals the outstanding one and has not expired.

    SQLite hands timestamps back without tzinfo; they were written as UTC.
    """
    if not stored or not submitted:
        return False
    if not hmac.compare_digest(submitted.strip().encode("utf-8"), stored.encode("utf-8")):
        return False
    if expires_at is None:
        return True
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    return now <= expires_at


# ── Bearer tokens ─────────────────────────────────────────────────────────
def create_access_token(user_id: int, role: str, now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "role": role,
        "iat": now,
        "exp": now + timedelta(days=settings.jwt_expire_days),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Verifies signature and expiry and returns the claims.

    Raises:
        jwt.InvalidTokenError: bad signature, expired, malformed, or no subject
    """
    claims = jwt.decode(
        token,
        settings.jwt_secret,
        algorithms=[settings.jwt_algorithm],
        options={"require": ["exp", "sub"]},
    )
    return claims
