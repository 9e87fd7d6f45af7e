from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from todo_app.database import get_db
from todo_app.dependencies import get_auth_service
from todo_app.schemas.auth import (
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    RegisterResponse,
    ResendRequest,
    VerifyRequest,
)
from todo_app.services.auth_service import AuthService

router = APIRouter()


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    data: RegisterRequest,
    db: AsyncSession = Depends(get_db),
    service: AuthService = Depends(get_auth_service),
):
    return await service.register(db, data)


@router.post("/verify", response_model=MessageResponse)
async def verify_email(
    data: VerifyRequest,
    db: AsyncSession = Depends(get_db),
    service: AuthService = Depends(get_auth_service),
):
    return await service.verify(db, data)


@router.post("/resend-verification", response_model=MessageResponse)
async def resend_verification(
    data: ResendRequest,
    db: AsyncSession = Depends(get_db),
    service: AuthService = Depends(get_auth_service),
):
    return await service.resend(db, data)


@router.post("/login", response_model=LoginResponse)
async def login(
    data: LoginRequest,
    db: AsyncSession = Depends(get_db),
    service: AuthService = Depends(get_auth_service),
):
    return await service.login(db, data)
