"""数据模型"""
from .roles import Role, Permission, permissions_for, has_permission
from .s3_policy import S3Action, S3Effect, S3Condition, S3Statement, S3Policy, LegacyPermissions
from .requests import (
    LoginRequest,
    CreateUserRequest,
    UpdateUserRequest,
    CreateTenantRequest,
    UpdateTenantRequest,
    UpdateKeyPermissionsRequest,
)
from .responses import (
    UserResponse,
    TenantResponse,
    LoginResponse,
    AuthStatusResponse,
    KeyPermissionsResponse,
    PolicyValidationResponse,
    ErrorResponse,
)

__all__ = [
    "Role",
    "Permission",
    "permissions_for",
    "has_permission",
    "S3Action",
    "S3Effect",
    "S3Condition",
    "S3Statement",
    "S3Policy",
    "LegacyPermissions",
    "LoginRequest",
    "CreateUserRequest",
    "UpdateUserRequest",
    "CreateTenantRequest",
    "UpdateTenantRequest",
    "UpdateKeyPermissionsRequest",
    "UserResponse",
    "TenantResponse",
    "LoginResponse",
    "AuthStatusResponse",
    "KeyPermissionsResponse",
    "PolicyValidationResponse",
    "ErrorResponse",
]
