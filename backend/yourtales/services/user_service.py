"""
YourTales Backend - User Service (Accounts & Authentication)
=============================================================

What:  Registration, OTP verification, login and password management, plus
       the signed-in user's own profile.
Who:   Called by routes/users.py.

Account lifecycle:
    register ──▶ unverified (OTP emailed) ──verify-otp──▶ verified ──login──▶ token

    Password reset reuses the same otp_code / otp_expires_at columns:
    forgot-password issues a fresh code, verify-reset-otp only checks it,
    reset-password checks and consumes it.

Emails are stored and looked up stripped and lower-cased.

Methods that issue a code return it next to the response so the route can
hand it to EmailService as a background task.
"""

import logging
from typing import Tuple

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from yourtales.exceptions import (
    AccountNotVerifiedError,
    AuthenticationError,
    DatabaseError,
    NotFoundError,
    ValidationError,
    YourTalesError,
)
from yourtales.models.enums import UserRole
from yourtales.models.user import User
from yourtales.schemas.common import MessageResponse
from yourtales.schemas.user import (
    LoginResponse,
    LoginUser,
    ProfileResponse,
    ProfileUpdateRequest,
    RegisterRequest,
    RegisterResponse,
    UserListResponse,
    UserProfile,
    UserPublic,
)
from yourtales.security import (
    create_access_token,
    generate_otp,
    hash_password,
    otp_expiry,
    otp_matches,
    verify_password,
)

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserService:
    """
    Business logic for accounts.

    Error Handling Strategy:
        Rule violations raise the matching YourTalesError subclass.
        Anything unexpected is logged and wrapped in DatabaseError so the
        client never sees SQL details.
    """

    # ══════════════════════════════════════════════════════════════════════
    # Registration & verification
    # ══════════════════════════════════════════════════════════════════════

    async def register(
        self, db: AsyncSession, payload: RegisterRequest
    ) -> Tuple[RegisterResponse, str]:
        email = normalize_email(payload.email)
        try:
            if await self._find_by_email(db, email) is not None:
                raise ValidationError("Email already in use", field="email")

            otp = generate_otp()
            user = User(
                full_name=payload.full_name.strip(),
                email=email,
                password_hash=hash_password(payload.password),
                role=payload.role or UserRole.READER,
                otp_code=otp,
                otp_expires_at=otp_expiry(),
                otp_verified=False,
            )
            db.add(user)
            await db.flush()
            logger.info("Registered user %s (role=%s)", user.id, user.role.value)

            return (
                RegisterResponse(
                    message="User registered successfully. Please verify your OTP.",
                    user_id=user.id,
                ),
                otp,
            )
        except YourTalesError:
            raise
        except IntegrityError:
            # Concurrent registration with the same email won the race
            raise ValidationError("Email already in use", field="email")
        except Exception as e:
            logger.error("Database error registering user: %s", str(e), exc_info=True)
            raise DatabaseError(context={"error_type": type(e).__name__})

    async def verify_otp(self, db: AsyncSession, email: str, otp: str) -> MessageResponse:
        user = await self._get_by_email(db, email)
        if user.otp_verified:
            return MessageResponse(message="User is already verified.")
        if not otp_matches(otp, user.otp_code, user.otp_expires_at):
            raise ValidationError("Invalid or expired OTP.", field="otp")

        user.otp_verified = True
        user.otp_code = None
        user.otp_expires_at = None
        await db.flush()
        logger.info("User %s verified", user.id)
        return MessageResponse(message="Account verified successfully. You may now login.")

    # ══════════════════════════════════════════════════════════════════════
    # Login
    # ══════════════════════════════════════════════════════════════════════

    async def login(self, db: AsyncSession, email: str, password: str) -> LoginResponse:
        user = await self._find_by_email(db, normalize_email(email))
        if user is None:
            raise AuthenticationError("Invalid email or password")
        if not user.otp_verified:
            raise AccountNotVerifiedError()
        if not verify_password(password, user.password_hash):
            logger.info("Failed login for user %s", user.id)
            raise AuthenticationError("Invalid email or password")

        token = create_access_token(user.id, user.role.value)
        logger.info("User %s logged in", user.id)
        return LoginResponse(
            message="Login successful",
            token=token,
            user=LoginUser.model_validate(user),
        )

    # ══════════════════════════════════════════════════════════════════════
    # Password reset (unauthenticated)
    # ══════════════════════════════════════════════════════════════════════

    async def forgot_password(
        self, db: AsyncSession, email: str
    ) -> Tuple[MessageResponse, str]:
        user = await self._get_by_email(db, email)
        otp = generate_otp()
        user.otp_code = otp
        user.otp_expires_at = otp_expiry()
        await db.flush()
        logger.info("Issued password reset code for user %s", user.id)
        return MessageResponse(message="Password reset OTP sent to your email."), otp

    async def verify_reset_otp(self, db: AsyncSession, email: str, otp: str) -> MessageResponse:
        user = await self._get_by_email(db, email)
        if not otp_matches(otp, user.otp_code, user.otp_expires_at):
            raise ValidationError("Invalid or expired OTP.", field="otp")
        return MessageResponse(
            message="OTP verified successfully. You can now reset your password."
        )

    async def reset_password(
        self, db: AsyncSession, email: str, otp: str, new_password: str
    ) -> MessageResponse:
        user = await self._get_by_email(db, email)
        if not otp_matches(otp, user.otp_code, user.otp_expires_at):
            raise ValidationError("Invalid or expired OTP.", field="otp")

        user.password_hash = hash_password(new_password)
        user.otp_code = None
        user.otp_expires_at = None
        await db.flush()
        logger.info("Password reset for user %s", user.id)
        return MessageResponse(
            message="Password reset successful. You can now login with your new password."
        )

    # ══════════════════════════════════════════════════════════════════════
    # Signed-in user
    # ══════════════════════════════════════════════════════════════════════

    def get_profile(self, user: User) -> ProfileResponse:
        return ProfileResponse(user=UserProfile.model_validate(user))

    async def list_users(self, db: AsyncSession) -> UserListResponse:
        try:
            result = await db.execute(select(User).order_by(User.id))
            return UserListResponse(
                users=[UserPublic.model_validate(u) for u in result.scalars().all()]
            )
        except Exception as e:
            logger.error("Database error listing users: %s", str(e), exc_info=True)
            raise DatabaseError(message="Could not retrieve users. Please try again.")

    async def update_profile(
        self, db: AsyncSession, user: User, payload: ProfileUpdateRequest
    ) -> ProfileResponse:
        changes = payload.model_dump(exclude_unset=True)
        if changes.get("full_name") is None:
            # Name is mandatory; an explicit null leaves it unchanged
            changes.pop("full_name", None)
        for field, value in changes.items():
            setattr(user, field, value)
        await db.flush()
        await db.refresh(user)
        logger.info("User %s updated profile fields: %s", user.id, sorted(changes))
        return ProfileResponse(message="Profile updated", user=UserProfile.model_validate(user))

    async def update_password(
        self, db: AsyncSession, user: User, current_password: str, new_password: str
    ) -> MessageResponse:
        if not verify_password(current_password, user.password_hash):
            raise AuthenticationError("Invalid current password")
        user.password_hash = hash_password(new_password)
        await db.flush()
        logger.info("User %s changed password", user.id)
        return MessageResponse(message="Password updated successfully")

    async def delete_account(self, db: AsyncSession, user: User) -> MessageResponse:
        """Delete the caller; manuscripts, comments, reviews and notifications cascade."""
        try:
            await db.execute(delete(User).where(User.id == user.id))
            logger.info("Deleted user %s", user.id)
            return MessageResponse(message="User deleted successfully")
        except Exception as e:
            logger.error("Database error deleting user %s: %s", user.id, str(e), exc_info=True)
            raise DatabaseError(context={"user_id": user.id})

    # ── Lookups ───────────────────────────────────────────────────────────
    async def _find_by_email(self, db: AsyncSession, email: str):
        result = await db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def _get_by_email(self, db: AsyncSession, email: str) -> User:
        user = await self._find_by_email(db, normalize_email(email))
        if user is None:
            raise NotFoundError(resource="user")
        return user


# ── Singleton Instance ────────────────────────────────────────────────────
user_service = UserService()
