"""
/users 端点 - 用户管理
"""
import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.dependencies.auth import require_permission
from db.models import User
from db.session import get_db
from models.requests import CreateUserRequest, UpdateUserRequest
from models.responses import UserResponse
from models.roles import Permission
from services.exceptions import BadRequestError
from services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("", response_model=List[UserResponse])
async def list_users(
    user: User = Depends(require_permission(Permission.READ_USERS)),
    db: AsyncSession = Depends(get_db)
) -> List[User]:
    """列出所有用户"""
    return await user_service.list_users(db)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    user: User = Depends(require_permission(Permission.READ_USERS)),
    db: AsyncSession = Depends(get_db)
) -> User:
    return await user_service.require_user(db, user_id)


@router.post("", response_model=UserResponse)
async def create_user(
    payload: CreateUserRequest,
    user: User = Depends(require_permission(Permission.WRITE_USERS)),
    db: AsyncSession = Depends(get_db)
) -> User:
    """创建用户"""
    created = await user_service.create_user(db, payload)
    logger.info(f"User {user.id} created user {created.id}")
    return created


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    payload: UpdateUserRequest,
    user: User = Depends(require_permission(Permission.WRITE_USERS)),
    db: AsyncSession = Depends(get_db)
) -> User:
    """更新用户"""
    return await user_service.update_user(db, user_id, payload)


@router.delete("/{user_id}")
async def delete_user(
    user_id: str,
    user: User = Depends(require_permission(Permission.DELETE_USERS)),
    db: AsyncSession = Depends(get_db)
) -> dict:
    """
    删除用户

    不允许删除自己
    """
    if user.id == user_id:
        raise BadRequestError("cannot delete the current user")

    await user_service.delete_user(db, user_id)
    logger.info(f"User {user.id} deleted user {user_id}")
    return {"success": True}
