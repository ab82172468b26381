"""
应用配置
"""
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """应用配置"""

    # 应用基础配置
    app_name: str = "Garage Admin Gateway"
    app_version: str = "1.1.0"
    debug: bool = False

    # 服务器配置
    host: str = "0.0.0.0"
    port: int = 3909

    # 会话令牌配置（JWT 签名）
    jwt_secret_key: str = "your-secret-key-change-in-production"
    jwt_algorithm: str = "HS256"
    jwt_audience: str = "garage-admin"
    session_cookie_name: str = "garage_admin_session"
    session_expiration_hours: int = 24

    # 数据库配置
    database_url: str = "sqlite+aiosqlite:///./garage_admin.db"

    # 默认管理员（数据库中没有用户时创建）
    default_admin_username: str = "admin"
    default_admin_password: str = "admin"

    # Garage 管理 API 配置
    garage_admin_api: str = "http://localhost:3903"
    garage_admin_token: Optional[str] = None

    # HTTP 客户端配置
    http_timeout: int = 30  # 秒

    # 限流配置（每个客户端在窗口内允许的请求数）
    rate_limit_requests: int = 100
    rate_limit_window_seconds: float = 60.0

    # CORS 配置
    cors_allowed_origins: list[str] = ["http://localhost:5173", "http://127.0.0.1:5173"]

    # 日志配置
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


settings = Settings()
