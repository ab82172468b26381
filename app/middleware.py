"""
HTTP 中间件：限流与安全响应头
"""
import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from models.responses import ErrorResponse
from services.exceptions import RateLimitedError
from services.rate_limiter import SlidingWindowRateLimiter, client_key

logger = logging.getLogger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    对所有请求统一限流

    限流器从 app.state.rate_limiter 读取，由应用创建并持有
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        limiter: SlidingWindowRateLimiter = request.app.state.rate_limiter

        remote_addr = None
        if request.client is not None:
            remote_addr = f"{request.client.host}:{request.client.port}"
        key = client_key(request.headers, remote_addr)

        if not limiter.allow(key):
            logger.warning(f"Rate limit exceeded for client {key}: {request.method} {request.url.path}")
            error = RateLimitedError(retry_after=limiter.retry_after)
            return JSONResponse(
                status_code=error.status_code,
                content=ErrorResponse(
                    error_code=error.error_code,
                    message=error.message,
                    details=error.details,
                ).model_dump(),
                headers=error.headers,
            )

        return await call_next(request)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """为每个响应添加安全相关的响应头"""

    HEADERS = {
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "DENY",
        "X-XSS-Protection": "1; mode=block",
        "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
        "Referrer-Policy": "strict-origin-when-cross-origin",
    }

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)
        for name, value in self.HEADERS.items():
            response.headers.setdefault(name, value)
        return response
