"""
Garage Admin Gateway - Main Application

Garage 对象存储管理界面的后端网关
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config.settings import settings
from db.session import AsyncSessionLocal, init_models
from models.responses import ErrorResponse
from services.exceptions import BadRequestError, GatewayError, PolicyValidationError
from services.rate_limiter import SlidingWindowRateLimiter
from services.user_service import user_service
from app.middleware import RateLimitMiddleware, SecurityHeadersMiddleware
from app.routers import auth, users, tenants, s3_permissions, object_locking

# 配置日志
logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format=settings.log_format
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    # 启动
    logger.info("Starting Garage Admin Gateway...")

    await init_models()
    async with AsyncSessionLocal() as db:
        await user_service.ensure_default_admin(db)

    # 启动限流器清理守护任务
    cleanup_task = asyncio.create_task(app.state.rate_limiter.start_cleanup_daemon())

    logger.info(f"Garage Admin Gateway started on {settings.host}:{settings.port}")

    yield

    # 关闭
    logger.info("Shutting down Garage Admin Gateway...")
    cleanup_task.cancel()
    logger.info("Garage Admin Gateway stopped")


async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    """领域异常统一渲染为 ErrorResponse"""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error_code=exc.error_code,
            message=exc.message,
            details=exc.details,
        ).model_dump(),
        headers=exc.headers,
    )


def _is_policy_request(request: Request) -> bool:
    path = request.url.path
    return path.startswith("/s3/policies/") or path.endswith("/permissions")


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    请求体/参数解析失败统一返回 400

    策略相关端点使用 VALIDATION_ERROR，其余端点使用 BAD_REQUEST；
    两者都在 details.errors 中逐条列出违规项
    """
    errors = []
    for item in exc.errors():
        loc = [str(part) for part in item.get("loc", ()) if part != "body"]
        location = ".".join(loc) or "body"
        errors.append(f"{location}: {item.get('msg', 'invalid value')}")

    if _is_policy_request(request):
        error = PolicyValidationError(errors)
    else:
        error = BadRequestError("Invalid request", details={"errors": errors})

    logger.info(f"Request validation failed on {request.method} {request.url.path}: {errors}")
    return await gateway_error_handler(request, error)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error_code="INTERNAL_ERROR",
            message="Internal server error",
        ).model_dump(),
    )


def create_app(rate_limiter: Optional[SlidingWindowRateLimiter] = None) -> FastAPI:
    """
    创建 FastAPI 应用

    Args:
        rate_limiter: 自定义限流器（测试用），默认按配置创建
    """
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Garage 管理后台的认证、授权与访问控制网关",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )

    app.state.rate_limiter = rate_limiter or SlidingWindowRateLimiter(
        limit=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )

    # 中间件（后添加的在外层：CORS 与安全头也覆盖限流返回的 429）
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Retry-After"],
    )

    app.add_exception_handler(GatewayError, gateway_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # 注册路由
    app.include_router(auth.router)
    app.include_router(users.router)
    app.include_router(tenants.router)
    app.include_router(s3_permissions.router)
    app.include_router(object_locking.router)

    @app.get("/", tags=["System"])
    async def root():
        """根路径 - 系统信息"""
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "status": "running"
        }

    @app.get("/health", tags=["System"])
    async def health_check():
        """健康检查"""
        return {
            "status": "healthy",
            "version": settings.app_version
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
