"""
响应模型定义
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from models.s3_policy import LegacyPermissions, S3Policy


class UserResponse(BaseModel):
    """用户信息（不含密码哈希）"""
    id: str
    username: str
    email: str
    role: str
    tenant_id: Optional[str] = None
    enabled: bool
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TenantResponse(BaseModel):
    """租户信息"""
    id: str
    name: str
    description: str = ""
    enabled: bool
    max_buckets: int
    max_keys: int
    quota_bytes: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TenantStatsResponse(BaseModel):
    """租户统计"""
    tenant: TenantResponse
    bucket_count: int = 0
    key_count: int = 0
    total_size: int = 0
    user_count: int = 0


class LoginResponse(BaseModel):
    """登录响应"""
    user: UserResponse
    token: str
    expires_at: datetime


class AuthStatusResponse(BaseModel):
    """认证状态"""
    enabled: bool = True
    authenticated: bool
    user: Optional[UserResponse] = None


class PresetPolicyResponse(BaseModel):
    """预置策略（含说明与 JSON 文本）"""
    name: str
    description: str
    policy: S3Policy
    policy_json: str


class PolicyValidationResponse(BaseModel):
    """策略校验结果"""
    valid: bool
    errors: List[str] = Field(default_factory=list)
    message: Optional[str] = None
    legacy_equivalent: Optional[LegacyPermissions] = None


class KeyPermissionsResponse(BaseModel):
    """访问密钥当前权限"""
    access_key_id: str
    name: str = ""
    legacy_mode: bool
    legacy_permissions: LegacyPermissions
    s3_policy: Optional[S3Policy] = None
    policy_json: Optional[str] = None


class UpdateKeyPermissionsResponse(BaseModel):
    """访问密钥权限更新结果"""
    message: str
    access_key_id: str
    legacy_mode: bool
    policy_applied: bool
    legacy_permissions: LegacyPermissions


class ErrorResponse(BaseModel):
    """
    错误响应
    """
    error_code: str = Field(..., description="错误代码")
    message: str = Field(..., description="错误消息")
    details: Optional[Dict[str, Any]] = Field(None, description="错误详情")

    class Config:
        json_schema_extra = {
            "example": {
                "error_code": "VALIDATION_ERROR",
                "message": "Policy validation failed",
                "details": {
                    "errors": [
                        "Policy version is required",
                        "Policy must contain at least one statement"
                    ]
                }
            }
        }
