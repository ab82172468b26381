"""
会话服务

授权逻辑只依赖抽象的 get / set / clear 能力，具体的会话传输方式可以替换。
默认实现：会话记录保存在数据库，客户端持有签名的 JWT（Cookie 或 Bearer）
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from db.models import Session

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionData:
    """已解析的会话"""
    session_id: str
    user_id: str
    expires_at: datetime


class SessionBackend(ABC):
    """会话能力抽象"""

    @abstractmethod
    async def get(self, token: Optional[str]) -> Optional[SessionData]:
        """解析令牌对应的会话；无效、过期或不存在返回 None"""

    @abstractmethod
    async def set(self, user_id: str) -> tuple[str, SessionData]:
        """为用户创建会话，返回 (令牌, 会话)"""

    @abstractmethod
    async def clear(self, token: Optional[str]) -> None:
        """使令牌对应的会话失效"""


class DatabaseSessionBackend(SessionBackend):
    """数据库 + JWT 会话实现"""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    def _encode(self, session: Session) -> str:
        payload = {
            "sub": session.user_id,
            "sid": session.id,
            "aud": settings.jwt_audience,
            "exp": session.expires_at,
        }
        return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)

    def _decode(self, token: str, verify_exp: bool = True) -> Optional[dict]:
        try:
            return jwt.decode(
                token,
                settings.jwt_secret_key,
                algorithms=[settings.jwt_algorithm],
                audience=settings.jwt_audience,
                options={"verify_exp": verify_exp},
            )
        except JWTError as e:
            logger.debug(f"Session token rejected: {e}")
            return None

    async def get(self, token: Optional[str]) -> Optional[SessionData]:
        if not token:
            return None

        payload = self._decode(token)
        if payload is None:
            return None

        session = await self.db.get(Session, payload.get("sid"))
        if session is None or session.user_id != payload.get("sub"):
            return None

        if datetime.utcnow() > session.expires_at:
            logger.debug(f"Session expired: {session.id}")
            return None

        return SessionData(
            session_id=session.id,
            user_id=session.user_id,
            expires_at=session.expires_at,
        )

    async def set(self, user_id: str) -> tuple[str, SessionData]:
        session = Session(
            user_id=user_id,
            expires_at=datetime.utcnow() + timedelta(hours=settings.session_expiration_hours),
        )
        self.db.add(session)
        await self.db.commit()
        await self.db.refresh(session)

        logger.info(f"Created session {session.id} for user {user_id}")
        data = SessionData(session_id=session.id, user_id=user_id, expires_at=session.expires_at)
        return self._encode(session), data

    async def clear(self, token: Optional[str]) -> None:
        if not token:
            return

        # 过期令牌同样需要能注销
        payload = self._decode(token, verify_exp=False)
        if payload is None:
            return

        session = await self.db.get(Session, payload.get("sid"))
        if session is not None:
            await self.db.delete(session)
            # 立即提交：调用方随后通常会抛出 401，请求级事务会被回滚
            await self.db.commit()
            logger.info(f"Cleared session {session.id}")
