"""服务层"""
from .acl_service import AccessControlService, acl_service
from .garage_client import GarageClient, get_garage_client
from .key_permission_service import KeyPermissionService, KeyPermissions, key_permission_service
from .rate_limiter import SlidingWindowRateLimiter, client_key
from .session_service import SessionBackend, SessionData, DatabaseSessionBackend
from .tenant_service import TenantService, tenant_service
from .user_service import UserService, user_service

__all__ = [
    "AccessControlService",
    "acl_service",
    "GarageClient",
    "get_garage_client",
    "KeyPermissionService",
    "KeyPermissions",
    "key_permission_service",
    "SlidingWindowRateLimiter",
    "client_key",
    "SessionBackend",
    "SessionData",
    "DatabaseSessionBackend",
    "TenantService",
    "tenant_service",
    "UserService",
    "user_service",
]
