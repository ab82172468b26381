"""
用户服务

负责操作员账号的增删改查（持久化到数据库）
"""
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from db.models import User
from models.requests import CreateUserRequest, UpdateUserRequest
from models.roles import Role
from services.exceptions import BadRequestError, NotFoundError, UnauthorizedError
from services.passwords import hash_password, verify_password

logger = logging.getLogger(__name__)


class UserService:
    """用户服务"""

    async def get_user(self, db: AsyncSession, user_id: str) -> Optional[User]:
        """按 ID 获取用户，不存在返回 None"""
        return await db.get(User, user_id)

    async def require_user(self, db: AsyncSession, user_id: str) -> User:
        """
        按 ID 获取用户

        Raises:
            NotFoundError: 用户不存在
        """
        user = await self.get_user(db, user_id)
        if user is None:
            raise NotFoundError("user not found", details={"user_id": user_id})
        return user

    async def get_user_by_username(self, db: AsyncSession, username: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def list_users(self, db: AsyncSession) -> list[User]:
        result = await db.execute(select(User).order_by(User.created_at, User.username))
        return list(result.scalars().all())

    async def create_user(self, db: AsyncSession, payload: CreateUserRequest) -> User:
        """
        创建用户

        Raises:
            BadRequestError: 用户名或邮箱已存在
        """
        stmt = select(User).where(
            or_(User.username == payload.username, User.email == payload.email)
        )
        existing = (await db.execute(stmt)).scalars().first()
        if existing is not None:
            if existing.username == payload.username:
                raise BadRequestError("username already exists")
            raise BadRequestError("email already exists")

        user = User(
            username=payload.username,
            email=payload.email,
            password_hash=hash_password(payload.password),
            role=payload.role.value,
            tenant_id=payload.tenant_id,
            enabled=payload.enabled,
        )
        db.add(user)
        await db.commit()
        await db.refresh(user)

        logger.info(f"Created user: id={user.id}, username={user.username}, role={user.role}")
        return user

    async def update_user(self, db: AsyncSession, user_id: str, payload: UpdateUserRequest) -> User:
        """更新用户（只更新请求中提供的字段）"""
        user = await self.require_user(db, user_id)

        if payload.username is not None and payload.username != user.username:
            if await self.get_user_by_username(db, payload.username) is not None:
                raise BadRequestError("username already exists")
            user.username = payload.username
        if payload.email is not None:
            user.email = payload.email
        if payload.password is not None:
            user.password_hash = hash_password(payload.password)
        if payload.role is not None:
            user.role = payload.role.value
        if payload.tenant_id is not None:
            user.tenant_id = payload.tenant_id or None
        if payload.enabled is not None:
            user.enabled = payload.enabled

        user.updated_at = datetime.utcnow()
        await db.commit()
        await db.refresh(user)

        logger.info(f"Updated user: id={user.id}")
        return user

    async def delete_user(self, db: AsyncSession, user_id: str) -> None:
        user = await self.require_user(db, user_id)
        await db.delete(user)
        await db.commit()
        logger.info(f"Deleted user: id={user_id}")

    async def count_users_for_tenant(self, db: AsyncSession, tenant_id: str) -> int:
        result = await db.execute(select(User.id).where(User.tenant_id == tenant_id))
        return len(result.all())

    async def authenticate(self, db: AsyncSession, username: str, password: str) -> User:
        """
        校验用户名密码

        Raises:
            UnauthorizedError: 凭证无效或账号被禁用
        """
        user = await self.get_user_by_username(db, username)
        if user is None or not verify_password(password, user.password_hash):
            logger.warning(f"Failed login attempt for username={username}")
            raise UnauthorizedError("invalid credentials")

        if not user.enabled:
            logger.warning(f"Login rejected for disabled user: {username}")
            raise UnauthorizedError("user account is disabled")

        user.last_login = datetime.utcnow()
        await db.commit()
        await db.refresh(user)
        return user

    async def ensure_default_admin(self, db: AsyncSession) -> Optional[User]:
        """数据库中没有任何用户时创建默认管理员"""
        result = await db.execute(select(User.id).limit(1))
        if result.first() is not None:
            return None

        admin = await self.create_user(db, CreateUserRequest(
            username=settings.default_admin_username,
            email=f"{settings.default_admin_username}@localhost",
            password=settings.default_admin_password,
            role=Role.ADMIN,
            enabled=True,
        ))
        logger.warning(
            f"Created default admin user '{admin.username}'. "
            "IMPORTANT: Change this password after first login!"
        )
        return admin


# 全局单例
user_service = UserService()
