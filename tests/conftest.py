"""
Pytest 配置和 fixtures
"""
import asyncio
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.main import create_app
from db.session import get_db, init_models
from models.requests import CreateUserRequest
from models.roles import Role
from models.s3_policy import LegacyPermissions
from services.exceptions import NotFoundError
from services.garage_client import GarageClient, get_garage_client
from services.rate_limiter import SlidingWindowRateLimiter
from services.user_service import user_service

# 用户名 -> 角色
TEST_USERS = {
    "admin": Role.ADMIN,
    "alice": Role.USER,
    "reader": Role.READONLY,
    "manager": Role.TENANT_ADMIN,
}


class FakeGarageClient(GarageClient):
    """内存中的 Garage，只实现网关用到的两个接口"""

    def __init__(self) -> None:
        super().__init__(base_url="http://garage.test", admin_token="test-token")
        self.buckets: Dict[str, Dict[str, Any]] = {}
        self.allow_calls: List[Dict[str, Any]] = []

    def add_bucket(self, bucket_id: str, object_lock: Optional[Dict[str, Any]] = None) -> None:
        self.buckets[bucket_id] = {"id": bucket_id, "keys": []}
        if object_lock is not None:
            self.buckets[bucket_id]["objectLockConfiguration"] = object_lock

    def add_key(
        self,
        bucket_id: str,
        access_key_id: str,
        name: str = "",
        read: bool = False,
        write: bool = False,
        owner: bool = False,
    ) -> None:
        self.buckets[bucket_id]["keys"].append({
            "accessKeyId": access_key_id,
            "name": name,
            "permissions": {"read": read, "write": write, "owner": owner},
        })

    async def get_bucket_info(self, bucket_id: str) -> Dict[str, Any]:
        bucket = self.buckets.get(bucket_id)
        if bucket is None:
            raise NotFoundError("Garage resource not found: /v2/GetBucketInfo")
        return bucket

    async def allow_bucket_key(
        self,
        bucket_id: str,
        access_key_id: str,
        permissions: LegacyPermissions,
    ) -> Any:
        self.allow_calls.append({
            "bucket_id": bucket_id,
            "access_key_id": access_key_id,
            "permissions": permissions.model_dump(),
        })
        for key in self.buckets[bucket_id]["keys"]:
            if key["accessKeyId"] == access_key_id:
                key["permissions"] = permissions.model_dump()
        return self.buckets[bucket_id]


@pytest.fixture
def db_engine(tmp_path):
    """每个测试独立的 SQLite 文件数据库"""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        poolclass=NullPool,
    )
    asyncio.run(init_models(engine))
    yield engine
    asyncio.run(engine.dispose())


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def test_password():
    """测试用户的统一密码"""
    return "correct horse battery staple"


@pytest.fixture
def users(session_factory, test_password) -> Dict[str, str]:
    """创建测试用户，返回 用户名 -> 用户 ID"""
    async def seed() -> Dict[str, str]:
        created = {}
        async with session_factory() as db:
            for username, role in TEST_USERS.items():
                user = await user_service.create_user(db, CreateUserRequest(
                    username=username,
                    email=f"{username}@example.com",
                    password=test_password,
                    role=role,
                ))
                created[username] = user.id
        return created

    return asyncio.run(seed())


@pytest.fixture
def garage():
    """模拟的 Garage：bucket-1 上挂两个访问密钥"""
    fake = FakeGarageClient()
    fake.add_bucket("bucket-1", object_lock={"objectLockEnabled": True})
    fake.add_key("bucket-1", "GK-reader", name="reader-key", read=True)
    fake.add_key("bucket-1", "GK-writer", name="writer-key", read=True, write=True)
    return fake


@pytest.fixture
def rate_limiter():
    return SlidingWindowRateLimiter(limit=1000, window_seconds=60.0)


@pytest.fixture
def app(session_factory, garage, rate_limiter):
    """测试应用：替换数据库会话与 Garage 客户端"""
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    application = create_app(rate_limiter=rate_limiter)
    application.dependency_overrides[get_db] = override_get_db
    application.dependency_overrides[get_garage_client] = lambda: garage
    return application


@pytest.fixture
def client(app):
    """测试客户端（不进入 lifespan，避免连接默认数据库）"""
    return TestClient(app)


@pytest.fixture
def login(client, users, test_password):
    """
    登录并返回认证请求头

    登录后清掉 Cookie，保证后续请求只通过 Authorization 头认证
    """
    def _login(username: str) -> Dict[str, str]:
        response = client.post(
            "/auth/login",
            json={"username": username, "password": test_password},
        )
        assert response.status_code == 200, response.text
        client.cookies.clear()
        return {"Authorization": f"Bearer {response.json()['token']}"}

    return _login


@pytest.fixture
def admin_headers(login):
    return login("admin")


@pytest.fixture
def user_headers(login):
    return login("alice")


@pytest.fixture
def readonly_headers(login):
    return login("reader")
