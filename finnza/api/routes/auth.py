"""Auth Routes — login and password recovery (public)."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from finnza.config import Settings, get_settings
from finnza.infrastructure.database import get_db
from finnza.schemas.auth import (
    ForgotPasswordRequest, LoginRequest, LoginResponse, MessageResponse,
    ResetPasswordRequest,
)
from finnza.schemas.user import UserResponse
from finnza.services.auth_service import AuthService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    token, user = await AuthService(db, settings).login(body.email, body.password)
    return LoginResponse(token=token, user=UserResponse.from_user(user))


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(
    body: ForgotPasswordRequest,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    await AuthService(db, settings).forgot_password(body.email)
    return MessageResponse(
        message="Se o email estiver cadastrado, as instruções foram enviadas",
    )


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    body: ResetPasswordRequest,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    await AuthService(db, settings).reset_password(body.token, body.new_password)
    return MessageResponse(message="Senha redefinida com sucesso")
