"""
YourTales Backend - User Routes
================================

What:  Account endpoints under /api/users.

Route Inventory:
    POST   /register          public   create account, email OTP          201
    POST   /verify-otp        public   confirm account with OTP
    POST   /login             public   exchange credentials for a token
    POST   /forgot-password   public   email a password reset OTP
    POST   /verify-reset-otp  public   check a reset OTP without using it
    POST   /reset-password    public   set a new password with the OTP
    GET    /myProfile         bearer   caller's profile
    GET    /allUsers          bearer   every user's public summary
    PATCH  /updateMe          bearer   edit fullName, bio, avatarUrl
    POST   /update-password   bearer   change password (needs current one)
    DELETE /deleteMe          bearer   delete the caller's account

OTP emails are queued with BackgroundTasks and sent after the response.
"""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from yourtales.database import get_db_session
from yourtales.dependencies import get_current_user
from yourtales.models.user import User
from yourtales.schemas.common import ErrorResponse, MessageResponse
from yourtales.schemas.user import (
    ForgotPasswordRequest,
    LoginRequest,
    LoginResponse,
    ProfileResponse,
    ProfileUpdateRequest,
    RegisterRequest,
    RegisterResponse,
    ResetPasswordRequest,
    UpdatePasswordRequest,
    UserListResponse,
    VerifyOtpRequest,
)
from yourtales.services.email_service import email_service
from yourtales.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["Users"])

AUTH_RESPONSES = {401: {"description": "Missing or invalid token", "model": ErrorResponse}}


# ── Public ────────────────────────────────────────────────────────────────
@router.post(
    "/register",
    status_code=201,
    response_model=RegisterResponse,
    responses={400: {"description": "Email already in use", "model": ErrorResponse}},
    summary="Register a new account",
)
async def register(
    payload: RegisterRequest,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db_session),
) -> RegisterResponse:
    response, otp = await user_service.register(db, payload)
    background_tasks.add_task(email_service.send_otp_email, payload.email, otp, "verify")
    return response


@router.post(
    "/verify-otp",
    response_model=MessageResponse,
    responses={
        400: {"description": "Invalid or expired OTP", "model": ErrorResponse},
        404: {"description": "Unknown email", "model": ErrorResponse},
    },
    summary="Verify a new account with its OTP",
)
async def verify_otp(
    payload: VerifyOtpRequest, db: AsyncSession = Depends(get_db_session)
) -> MessageResponse:
    return await user_service.verify_otp(db, payload.email, payload.otp)


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        401: {"description": "Invalid email or password", "model": ErrorResponse},
        403: {"description": "Account not verified", "model": ErrorResponse},
    },
    summary="Log in and receive a bearer token",
)
async def login(
    payload: LoginRequest, db: AsyncSession = Depends(get_db_session)
) -> LoginResponse:
    return await user_service.login(db, payload.email, payload.password)


@router.post(
    "/forgot-password",
    response_model=MessageResponse,
    responses={404: {"description": "Unknown email", "model": ErrorResponse}},
    summary="Email a password reset OTP",
)
async def forgot_password(
    payload: ForgotPasswordRequest,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    response, otp = await user_service.forgot_password(db, payload.email)
    background_tasks.add_task(email_service.send_otp_email, payload.email, otp, "reset")
    return response


@router.post(
    "/verify-reset-otp",
    response_model=MessageResponse,
    responses={
        400: {"description": "Invalid or expired OTP", "model": ErrorResponse},
        404: {"description": "Unknown email", "model": ErrorResponse},
    },
    summary="Check a password reset OTP",
)
async def verify_reset_otp(
    payload: VerifyOtpRequest, db: AsyncSession = Depends(get_db_session)
) -> MessageResponse:
    return await user_service.verify_reset_otp(db, payload.email, payload.otp)


@router.post(
    "/reset-password",
    response_model=MessageResponse,
    responses={
        400: {"description": "Invalid or expired OTP", "model": ErrorResponse},
        404: {"description": "Unknown email", "model": ErrorResponse},
    },
    summary="Set a new password using a reset OTP",
)
async def reset_password(
    payload: ResetPasswordRequest, db: AsyncSession = Depends(get_db_session)
) -> MessageResponse:
    return await user_service.reset_password(
        db, payload.email, payload.otp, payload.new_password
    )


# ── Authenticated ─────────────────────────────────────────────────────────
@router.get(
    "/myProfile",
    response_model=ProfileResponse,
    responses=AUTH_RESPONSES,
    summary="Profile of the signed-in user",
)
async def my_profile(current_user: User = Depends(get_current_user)) -> ProfileResponse:
    return user_service.get_profile(current_user)


@router.get(
    "/allUsers",
    response_model=UserListResponse,
    responses=AUTH_RESPONSES,
    summary="List all users",
)
async def all_users(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> UserListResponse:
    return await user_service.list_users(db)


@router.patch(
    "/updateMe",
    response_model=ProfileResponse,
    responses=AUTH_RESPONSES,
    summary="Edit the signed-in user's profile",
)
async def update_me(
    payload: ProfileUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ProfileResponse:
    return await user_service.update_profile(db, current_user, payload)


@router.post(
    "/update-password",
    response_model=MessageResponse,
    responses=AUTH_RESPONSES,
    summary="Change password",
)
async def update_password(
    payload: UpdatePasswordRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    return await user_service.update_password(
        db, current_user, payload.current_password, payload.new_password
    )


@router.delete(
    "/deleteMe",
    response_model=MessageResponse,
    responses=AUTH_RESPONSES,
    summary="Delete the signed-in user's account",
)
async def delete_me(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    return await user_service.delete_account(db, current_user)
