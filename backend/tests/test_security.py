"""
YourTales Backend - Credential & Token Tests
=============================================

What we test:
    ✅ Password hashes verify, reject wrong passwords, and never store plaintext
    ✅ Malformed stored hashes never match
    ✅ OTPs are 5 digits and expire
    ✅ Tokens round-trip their claims and reject tampering and expiry
"""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from yourtales.config import settings
from yourtales.security import (
    create_access_token,
    decode_access_token,
    generate_otp,
    hash_password,
    otp_expiry,
    otp_matches,
    verify_password,
)


class TestPasswords:

    def test_hash_verifies_and_hides_password(self):
        stored = hash_password("correct horse")
        assert "correct horse" not in stored
        assert stored.startswith("$argon2id$")
        assert verify_password("correct horse", stored)

    def test_wrong_password_rejected(self):
        stored = hash_password("correct horse")
        assert not verify_password("battery staple", stored)

    def test_same_password_gets_different_salts(self):
        assert hash_password("pw") != hash_password("pw")

    @pytest.mark.parametrize(
        "stored",
        [None, "", "plaintext", "md5$1$a$b", "pbkdf2_sha256$1000$c2FsdA==$ZGlnZXN0", "$argon2id$garbage"],
    )
    def test_malformed_hash_never_matches(self, stored):
        assert not verify_password("pw", stored)


class TestOtp:

    def test_generate_otp_is_five_digits(self):
        for _ in range(50):
            otp = generate_otp()
            assert len(otp) == 5
            assert otp.isdigit()
            assert otp[0] != "0"

    def test_matching_unexpired_code(self):
        assert otp_matches("12345", "12345", otp_expiry())

    def test_wrong_code(self):
        assert not otp_matches("54321", "12345", otp_expiry())

    def test_no_outstanding_code(self):
        assert not otp_matches("12345", None, None)

    def test_expired_code(self):
        expired = datetime.now(timezone.utc) - timedelta(seconds=1)
        assert not otp_matches("12345", "12345", expired)

    def test_naive_expiry_is_treated_as_utc(self):
        # SQLite returns timestamps without tzinfo
        future = (datetime.now(timezone.utc) + timedelta(minutes=5)).replace(tzinfo=None)
        past = (datetime.now(timezone.utc) - timedelta(minutes=5)).replace(tzinfo=None)
        assert otp_matches("12345", "12345", future)
        assert not otp_matches("12345", "12345", past)

    def test_expiry_uses_configured_ttl(self):
        now = datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert otp_expiry(now) == now + timedelta(minutes=settings.otp_ttl_minutes)


class TestTokens:

    def test_claims_round_trip(self):
        token = create_access_token(42, "AUTHOR")
        claims = decode_access_token(token)
        assert claims["sub"] == "42"
        assert claims["role"] == "AUTHOR"

    def test_token_expires_after_configured_days(self):
        now = datetime.now(timezone.utc)
        claims = decode_access_token(create_access_token(1, "READER", now=now))
        assert claims["exp"] - claims["iat"] == settings.jwt_expire_days * 86400

    def test_expired_token_rejected(self):
        issued = datetime.now(timezone.utc) - timedelta(days=settings.jwt_expire_days + 1)
        token = create_access_token(1, "READER", now=issued)
        with pytest.raises(jwt.ExpiredSignatureError):
            decode_access_token(token)

    def test_token_signed_with_other_secret_rejected(self):
        forged = jwt.encode(
            {"sub": "1", "role": "ADMIN", "exp": datetime.now(timezone.utc) + timedelta(days=1)},
            "some-other-secret-that-is-long-enough-for-hs256",
            algorithm="HS256",
        )
        with pytest.raises(jwt.InvalidSignatureError):
            decode_access_token(forged)

    def test_token_without_subject_rejected(self):
        token = jwt.encode(
            {"role": "READER", "exp": datetime.now(timezone.utc) + timedelta(days=1)},
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
        )
        with pytest.raises(jwt.MissingRequiredClaimError):
            decode_access_token(token)
