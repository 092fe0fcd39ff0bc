"""
Bookstore Backend — Auth Route Handlers
=========================================

What:  POST /auth/register, POST /auth/login, GET /auth/me.
"""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore.database import get_db_session
from bookstore.dependencies import get_current_user_id
from bookstore.schemas.auth import (
    LoginRequest,
    RegisteredUser,
    RegisterRequest,
    TokenResponse,
    UserProfile,
)
from bookstore.schemas.common import ApiResponse, ErrorResponse
from bookstore.services.auth_service import auth_service

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post(
    "/register",
    status_code=201,
    response_model=ApiResponse[RegisteredUser],
    responses={400: {"description": "Missing fields or email taken", "model": ErrorResponse}},
    summary="Register a new user",
)
async def register(
    payload: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[RegisteredUser]:
    user = await auth_service.register(db, payload)
    return ApiResponse(message="User registered successfully", data=user)


@router.post(
    "/login",
    response_model=ApiResponse[TokenResponse],
    responses={401: {"description": "Invalid credentials", "model": ErrorResponse}},
    summary="Exchange email and password for an access token",
)
async def login(
    payload: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[TokenResponse]:
    token = await auth_service.login(db, payload)
    return ApiResponse(message="Login successfully", data=token)


@router.get(
    "/me",
    response_model=ApiResponse[UserProfile],
    responses={
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        404: {"description": "User no longer exists", "model": ErrorResponse},
    },
    summary="Current user's profile",
)
async def me(
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[UserProfile]:
    profile = await auth_service.get_profile(db, user_id)
    return ApiResponse(message="Get me successfully", data=profile)
