"""
网关错误类型

所有业务错误都继承 GatewayError，由 app.main 中注册的异常处理器统一渲染为 ErrorResponse
"""
from typing import Any, Dict, List, Optional


class GatewayError(Exception):
    """网关错误基类"""

    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details
        self.headers = headers


class UnauthorizedError(GatewayError):
    """缺少会话、会话无效或会话对应的用户已失效"""
    status_code = 401
    error_code = "UNAUTHORIZED"

    def __init__(self, message: str = "unauthorized", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class ForbiddenError(GatewayError):
    """已认证但权限不足"""
    status_code = 403
    error_code = "FORBIDDEN"

    def __init__(self, message: str = "forbidden", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class BadRequestError(GatewayError):
    """请求参数不合法"""
    status_code = 400
    error_code = "BAD_REQUEST"


class PolicyValidationError(BadRequestError):
    """策略结构不合法，总是携带具体的违规列表"""
    error_code = "VALIDATION_ERROR"

    def __init__(self, errors: List[str], message: str = "Policy validation failed") -> None:
        super().__init__(message, details={"errors": list(errors)})
        self.errors = list(errors)


class NotFoundError(GatewayError):
    """资源不存在"""
    status_code = 404
    error_code = "NOT_FOUND"


class PresetNotFoundError(NotFoundError):
    """未知的预置策略名称"""

    def __init__(self, name: str) -> None:
        super().__init__(f"unknown preset policy: {name}", details={"policy_name": name})
        self.name = name


class RateLimitedError(GatewayError):
    """请求过于频繁"""
    status_code = 429
    error_code = "RATE_LIMITED"

    def __init__(self, retry_after: int, message: str = "Too many requests") -> None:
        super().__init__(
            message,
            details={"retry_after": retry_after},
            headers={"Retry-After": str(retry_after)},
        )
        self.retry_after = retry_after


class UpstreamError(GatewayError):
    """Garage 管理 API 调用失败"""
    status_code = 500
    error_code = "UPSTREAM_ERROR"
