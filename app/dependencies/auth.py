"""
认证和授权依赖
"""
import logging
from typing import Optional

from fastapi import Depends, Query, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from db.models import User
from db.session import get_db
from models.roles import Permission
from models.s3_policy import S3Action
from services.acl_service import acl_service
from services.exceptions import UnauthorizedError
from services.garage_client import GarageClient, get_garage_client
from services.key_permission_service import key_permission_service
from services.session_service import DatabaseSessionBackend, SessionBackend
from services.user_service import user_service

logger = logging.getLogger(__name__)

# Bearer 令牌可选，浏览器默认使用 Cookie
security = HTTPBearer(auto_error=False)


def get_session_backend(db: AsyncSession = Depends(get_db)) -> SessionBackend:
    """依赖注入：会话实现"""
    return DatabaseSessionBackend(db)


def get_session_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[str]:
    """从 Cookie 或 Authorization 头读取会话令牌"""
    token = request.cookies.get(settings.session_cookie_name)
    if token:
        return token
    if credentials is not None:
        return credentials.credentials
    return None


async def get_current_user(
    token: Optional[str] = Depends(get_session_token),
    sessions: SessionBackend = Depends(get_session_backend),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    解析当前用户

    Raises:
        UnauthorizedError: 没有会话、会话无效，或用户已删除/禁用（此时会话被清除）
    """
    session = await sessions.get(token)
    if session is None:
        raise UnauthorizedError()

    user = await user_service.get_user(db, session.user_id)
    if user is None or not user.enabled:
        logger.warning(f"Session {session.session_id} refers to missing or disabled user {session.user_id}")
        await sessions.clear(token)
        raise UnauthorizedError()

    logger.debug(f"Authenticated user: {user.id}")
    return user


def require_permission(permission: Permission):
    """
    创建一个依赖，要求用户角色具有指定权限（粗粒度路径）

    Args:
        permission: 所需权限

    Returns:
        依赖函数
    """
    async def permission_checker(user: User = Depends(get_current_user)) -> User:
        acl_service.check_permission(user, permission)
        return user

    return permission_checker


def require_s3_action(action: S3Action):
    """
    创建一个依赖，要求请求的 S3 操作被允许（细粒度路径）

    资源由路径参数 bucket_id / object_key 组成；
    请求可以通过 access_key_id 查询参数指定要按哪个访问密钥的策略判定

    Args:
        action: 端点对应的 S3 操作

    Returns:
        依赖函数
    """
    async def s3_action_checker(
        request: Request,
        access_key_id: Optional[str] = Query(None, description="按该访问密钥的策略判定"),
        user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db),
        garage: GarageClient = Depends(get_garage_client),
    ) -> User:
        bucket_id = request.path_params.get("bucket_id", "")
        object_key = request.path_params.get("object_key")
        resource = f"{bucket_id}/{object_key}" if object_key else bucket_id

        key_permissions = None
        if access_key_id:
            key_permissions = await key_permission_service.get_key_permissions(
                db, garage, bucket_id, access_key_id
            )

        acl_service.check_s3_action(user, action, resource, key_permissions)
        return user

    return s3_action_checker
