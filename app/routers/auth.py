"""
/auth 端点 - 登录、注销与认证状态
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.dependencies.auth import get_session_backend, get_session_token
from config.settings import settings
from db.session import get_db
from models.requests import LoginRequest
from models.responses import AuthStatusResponse, ErrorResponse, LoginResponse, UserResponse
from services.session_service import SessionBackend
from services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={401: {"model": ErrorResponse}},
)
async def login(
    payload: LoginRequest,
    response: Response,
    sessions: SessionBackend = Depends(get_session_backend),
    db: AsyncSession = Depends(get_db),
) -> LoginResponse:
    """
    用户名密码登录

    成功后创建会话，令牌同时写入 Cookie 并在响应体中返回
    """
    user = await user_service.authenticate(db, payload.username, payload.password)
    token, session = await sessions.set(user.id)

    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.session_expiration_hours * 3600,
        httponly=True,
        samesite="lax",
        secure=not settings.debug,
    )

    logger.info(f"User {user.username} logged in")
    return LoginResponse(
        user=UserResponse.model_validate(user),
        token=token,
        expires_at=session.expires_at,
    )


@router.post("/logout")
async def logout(
    response: Response,
    token: Optional[str] = Depends(get_session_token),
    sessions: SessionBackend = Depends(get_session_backend),
) -> dict:
    """注销当前会话"""
    await sessions.clear(token)
    response.delete_cookie(settings.session_cookie_name)
    return {"success": True}


@router.get("/status", response_model=AuthStatusResponse)
async def get_status(
    token: Optional[str] = Depends(get_session_token),
    sessions: SessionBackend = Depends(get_session_backend),
    db: AsyncSession = Depends(get_db),
) -> AuthStatusResponse:
    """查询认证状态（未登录时不报错）"""
    session = await sessions.get(token)
    if session is None:
        return AuthStatusResponse(authenticated=False)

    user = await user_service.get_user(db, session.user_id)
    if user is None or not user.enabled:
        return AuthStatusResponse(authenticated=False)

    return AuthStatusResponse(authenticated=True, user=UserResponse.model_validate(user))
