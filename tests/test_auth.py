"""
认证和授权测试
"""
import asyncio

from fastapi import status
from sqlalchemy import select

from db.models import Session, User


def test_health_check_no_auth(client):
    """健康检查端点不需要认证"""
    response = client.get("/health")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["status"] == "healthy"


def test_security_headers(client):
    response = client.get("/")
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"


def test_login_success(client, users, test_password):
    response = client.post("/auth/login", json={"username": "alice", "password": test_password})
    assert response.status_code == status.HTTP_200_OK

    data = response.json()
    assert data["user"]["username"] == "alice"
    assert data["user"]["role"] == "user"
    assert "password_hash" not in data["user"]
    assert data["token"]
    assert "garage_admin_session" in response.headers["set-cookie"]


def test_login_wrong_password(client, users):
    response = client.post("/auth/login", json={"username": "alice", "password": "nope"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["error_code"] == "UNAUTHORIZED"


def test_login_unknown_user(client, users, test_password):
    response = client.post("/auth/login", json={"username": "mallory", "password": test_password})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_status_without_session(client):
    """未登录时查询状态不报错"""
    response = client.get("/auth/status")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["authenticated"] is False


def test_status_with_session(client, user_headers):
    response = client.get("/auth/status", headers=user_headers)
    assert response.json()["authenticated"] is True
    assert response.json()["user"]["username"] == "alice"


def test_protected_endpoint_without_token(client):
    """没有 token 应该返回 401"""
    response = client.get("/s3/policies/presets")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_protected_endpoint_with_invalid_token(client):
    """无效 token 应该返回 401"""
    headers = {"Authorization": "Bearer invalid-token"}
    response = client.get("/s3/policies/presets", headers=headers)
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_cookie_is_accepted(client, users, login):
    headers = login("alice")
    token = headers["Authorization"].split(" ", 1)[1]

    response = client.get(
        "/s3/policies/presets",
        headers={"Cookie": f"garage_admin_session={token}"},
    )
    assert response.status_code == status.HTTP_200_OK


def test_logout_invalidates_session(client, user_headers):
    response = client.post("/auth/logout", headers=user_headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"success": True}

    response = client.get("/s3/policies/presets", headers=user_headers)
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_logout_without_session(client):
    response = client.post("/auth/logout")
    assert response.status_code == status.HTTP_200_OK


def test_disabled_user_loses_session(client, users, user_headers, session_factory, test_password):
    """用户被禁用后，已有会话在下一次请求时被清除"""
    async def disable_and_count_sessions(username: str) -> int:
        async with session_factory() as db:
            user = await db.get(User, users[username])
            user.enabled = False
            await db.commit()
        return await count_sessions(username)

    async def count_sessions(username: str) -> int:
        async with session_factory() as db:
            result = await db.execute(select(Session).where(Session.user_id == users[username]))
            return len(result.all())

    assert asyncio.run(disable_and_count_sessions("alice")) == 1

    response = client.get("/s3/policies/presets", headers=user_headers)
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert asyncio.run(count_sessions("alice")) == 0

    # 被禁用的用户也无法重新登录
    response = client.post("/auth/login", json={"username": "alice", "password": test_password})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_coarse_permission_denied(client, readonly_headers):
    """只读角色没有 write_keys"""
    response = client.put(
        "/buckets/bucket-1/keys/GK-reader/permissions",
        json={"legacy_mode": True, "legacy": {"read": True}},
        headers=readonly_headers,
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN
    body = response.json()
    assert body["error_code"] == "FORBIDDEN"
    assert body["details"] == {"required_permission": "write_keys"}
