"""
请求模型定义
"""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from models.roles import Role
from models.s3_policy import LegacyPermissions, S3Policy


class LoginRequest(BaseModel):
    """登录请求体"""
    username: str = Field(..., description="用户名", examples=["admin"])
    password: str = Field(..., description="密码")


class CreateUserRequest(BaseModel):
    """创建用户请求体"""
    username: str = Field(..., min_length=1, description="用户名")
    email: str = Field(..., min_length=1, description="邮箱")
    password: str = Field(..., min_length=1, description="初始密码")
    role: Role = Field(Role.USER, description="角色")
    tenant_id: Optional[str] = Field(None, description="所属租户 ID")
    enabled: bool = Field(True, description="是否启用")


class UpdateUserRequest(BaseModel):
    """更新用户请求体（只更新提供的字段）"""
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[Role] = None
    tenant_id: Optional[str] = None
    enabled: Optional[bool] = None


class CreateTenantRequest(BaseModel):
    """创建租户请求体"""
    name: str = Field(..., min_length=1, description="租户名称")
    description: str = Field("", description="描述")
    enabled: bool = Field(True, description="是否启用")
    max_buckets: int = Field(0, ge=0, description="最大存储桶数")
    max_keys: int = Field(0, ge=0, description="最大访问密钥数")
    quota_bytes: Optional[int] = Field(None, ge=0, description="容量配额（字节）")


class UpdateTenantRequest(BaseModel):
    """更新租户请求体（只更新提供的字段）"""
    name: Optional[str] = None
    description: Optional[str] = None
    enabled: Optional[bool] = None
    max_buckets: Optional[int] = Field(None, ge=0)
    max_keys: Optional[int] = Field(None, ge=0)
    quota_bytes: Optional[int] = Field(None, ge=0)


class PolicyType(str, Enum):
    """密钥策略来源"""
    PRESET = "preset"
    CUSTOM = "custom"


class UpdateKeyPermissionsRequest(BaseModel):
    """
    更新访问密钥权限

    legacy_mode=True 时使用 legacy 字段；否则按 policy_type 选择预置或自定义策略
    """
    bucket_id: Optional[str] = Field(None, description="存储桶 ID（以路径参数为准）")
    access_key_id: Optional[str] = Field(None, description="访问密钥 ID（以路径参数为准）")
    policy_type: Optional[PolicyType] = Field(None, description="preset 或 custom")
    policy_name: Optional[str] = Field(None, description="预置策略名称")
    policy: Optional[S3Policy] = Field(None, description="自定义策略")
    legacy_mode: bool = Field(False, description="是否使用旧版权限")
    legacy: Optional[LegacyPermissions] = Field(None, description="旧版权限")

    class Config:
        json_schema_extra = {
            "example": {
                "policy_type": "preset",
                "policy_name": "ReadOnly",
                "legacy_mode": False
            }
        }


class RetentionMode(str, Enum):
    """对象保留模式"""
    COMPLIANCE = "COMPLIANCE"
    GOVERNANCE = "GOVERNANCE"


class LegalHoldStatus(str, Enum):
    """法律保留状态"""
    ON = "ON"
    OFF = "OFF"


class DefaultRetention(BaseModel):
    """存储桶默认保留规则（days 与 years 二选一）"""
    mode: str
    days: Optional[int] = None
    years: Optional[int] = None


class ObjectLockRule(BaseModel):
    default_retention: Optional[DefaultRetention] = None


class ObjectLockConfiguration(BaseModel):
    """存储桶对象锁定配置"""
    object_lock_enabled: bool = False
    rule: Optional[ObjectLockRule] = None


class PutBucketObjectLockConfigurationRequest(BaseModel):
    bucket_id: Optional[str] = None
    object_lock_configuration: Optional[ObjectLockConfiguration] = None


class ObjectRetention(BaseModel):
    """对象级保留设置"""
    mode: str
    retain_until_date: datetime


class PutObjectRetentionRequest(BaseModel):
    bucket_id: Optional[str] = None
    object_key: Optional[str] = None
    retention: Optional[ObjectRetention] = None


class ObjectLegalHold(BaseModel):
    status: str


class PutObjectLegalHoldRequest(BaseModel):
    bucket_id: Optional[str] = None
    object_key: Optional[str] = None
    legal_hold: Optional[ObjectLegalHold] = None
