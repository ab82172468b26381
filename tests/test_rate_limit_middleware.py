"""
限流中间件测试
"""
import pytest
from fastapi import status

from services.rate_limiter import SlidingWindowRateLimiter


@pytest.fixture
def rate_limiter():
    """覆盖默认限流器：每分钟 3 次"""
    return SlidingWindowRateLimiter(limit=3, window_seconds=60.0)


def test_rejects_with_retry_after(client):
    for _ in range(3):
        assert client.get("/health").status_code == status.HTTP_200_OK

    response = client.get("/health")
    assert response.status_code == status.HTTP_429_TOO_MANY_REQUESTS
    assert response.headers["Retry-After"] == "60"
    assert response.json()["error_code"] == "RATE_LIMITED"
    assert response.json()["details"] == {"retry_after": 60}


def test_clients_keyed_by_forwarded_for(client):
    for _ in range(3):
        client.get("/health", headers={"X-Forwarded-For": "203.0.113.1"})

    blocked = client.get("/health", headers={"X-Forwarded-For": "203.0.113.1"})
    assert blocked.status_code == status.HTTP_429_TOO_MANY_REQUESTS

    other = client.get("/health", headers={"X-Forwarded-For": "203.0.113.2, 10.0.0.1"})
    assert other.status_code == status.HTTP_200_OK


def test_login_is_rate_limited(client, users, test_password):
    for _ in range(3):
        client.post("/auth/login", json={"username": "alice", "password": "wrong"})

    response = client.post("/auth/login", json={"username": "alice", "password": test_password})
    assert response.status_code == status.HTTP_429_TOO_MANY_REQUESTS


def test_limiter_belongs_to_app(app, rate_limiter):
    assert app.state.rate_limiter is rate_limiter


def test_rejection_carries_cors_and_security_headers(client):
    """429 也经过 CORS 与安全头中间件，浏览器可以读取 Retry-After"""
    origin = "http://localhost:5173"
    for _ in range(3):
        client.get("/health", headers={"Origin": origin})

    response = client.get("/health", headers={"Origin": origin})
    assert response.status_code == status.HTTP_429_TOO_MANY_REQUESTS
    assert response.headers["access-control-allow-origin"] == origin
    assert "Retry-After" in response.headers["access-control-expose-headers"]
    assert response.headers["X-Content-Type-Options"] == "nosniff"
