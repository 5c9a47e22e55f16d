"""
YourTales Backend - User & Auth Schemas
========================================

What:  Request bodies for registration, OTP and password flows, and the
       public user shapes returned by the API.

Security:
    No response model here has a password_hash, otp_code or otp_expires_at
    field, so those columns can never be serialized even if a service hands
    an ORM User straight to FastAPI.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import EmailStr, Field, field_validator

from yourtales.models.enums import UserRole
from yourtales.schemas.common import CamelModel


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class RegisterRequest(CamelModel):
    full_name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)
    role: Optional[UserRole] = Field(
        default=None, description="READER or AUTHOR; READER when omitted"
    )

    @field_validator("role")
    @classmethod
    def validate_self_service_role(cls, v: Optional[UserRole]) -> Optional[UserRole]:
        """EDITOR comes from accepting an invitation and ADMIN is never self-assigned."""
        if v not in (None, UserRole.READER, UserRole.AUTHOR):
            raise ValueError("role must be READER or AUTHOR")
        return v


class VerifyOtpRequest(CamelModel):
    email: EmailStr
    otp: str = Field(min_length=1, max_length=10)


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)


class ForgotPasswordRequest(CamelModel):
    email: EmailStr


class ResetPasswordRequest(CamelModel):
    email: EmailStr
    otp: str = Field(min_length=1, max_length=10)
    new_password: str = Field(min_length=1, max_length=128)


class UpdatePasswordRequest(CamelModel):
    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=1, max_length=128)


class ProfileUpdateRequest(CamelModel):
    """PATCH body; only the keys actually sent are applied."""
    full_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    bio: Optional[str] = None
    avatar_url: Optional[str] = Field(default=None, max_length=1024)


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class UserSummary(CamelModel):
    """Author byline shown on public listings, comments and reviews."""
    id: int
    full_name: str
    avatar_url: Optional[str] = None


class UserContact(UserSummary):
    """Byline plus email, shown to people working on a manuscript."""
    email: str


class UserPublic(UserContact):
    """Entry of GET /api/users/allUsers."""
    role: UserRole


class UserProfile(UserPublic):
    """Full profile of the signed-in user."""
    bio: Optional[str] = None
    created_at: datetime


class RegisterResponse(CamelModel):
    message: str
    user_id: int


class LoginUser(CamelModel):
    id: int
    full_name: str
    email: str
    role: UserRole


class LoginResponse(CamelModel):
    message: str = "Login successful"
    token: str = Field(description="Bearer token for the Authorization header")
    user: LoginUser


class ProfileResponse(CamelModel):
    message: Optional[str] = None
    user: UserProfile


class UserListResponse(CamelModel):
    users: List[UserPublic]
