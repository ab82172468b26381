"""
角色与粗粒度权限表

每个角色对应一组固定的管理权限，未知角色没有任何权限
"""
from enum import Enum
from typing import Any, FrozenSet, Mapping


class Role(str, Enum):
    """用户角色"""
    ADMIN = "admin"
    USER = "user"
    READONLY = "readonly"
    TENANT_ADMIN = "tenant_admin"


class Permission(str, Enum):
    """粗粒度管理权限"""
    READ_BUCKETS = "read_buckets"
    WRITE_BUCKETS = "write_buckets"
    DELETE_BUCKETS = "delete_buckets"
    READ_KEYS = "read_keys"
    WRITE_KEYS = "write_keys"
    DELETE_KEYS = "delete_keys"
    READ_CLUSTER = "read_cluster"
    WRITE_CLUSTER = "write_cluster"
    READ_USERS = "read_users"
    WRITE_USERS = "write_users"
    DELETE_USERS = "delete_users"
    READ_TENANTS = "read_tenants"
    WRITE_TENANTS = "write_tenants"
    DELETE_TENANTS = "delete_tenants"
    SYSTEM_ADMIN = "system_admin"


ROLE_PERMISSIONS: Mapping[Role, FrozenSet[Permission]] = {
    Role.ADMIN: frozenset(Permission),
    Role.TENANT_ADMIN: frozenset({
        Permission.READ_BUCKETS, Permission.WRITE_BUCKETS, Permission.DELETE_BUCKETS,
        Permission.READ_KEYS, Permission.WRITE_KEYS, Permission.DELETE_KEYS,
        Permission.READ_USERS, Permission.WRITE_USERS, Permission.DELETE_USERS,
    }),
    Role.USER: frozenset({
        Permission.READ_BUCKETS, Permission.WRITE_BUCKETS,
        Permission.READ_KEYS, Permission.WRITE_KEYS,
    }),
    Role.READONLY: frozenset({
        Permission.READ_BUCKETS,
        Permission.READ_KEYS,
        Permission.READ_CLUSTER,
    }),
}


def permissions_for(role: Any) -> FrozenSet[Permission]:
    """
    返回角色对应的权限集合

    Args:
        role: 角色（Role 枚举或其字符串值）

    Returns:
        权限集合；未知角色返回空集合
    """
    try:
        return ROLE_PERMISSIONS.get(Role(role), frozenset())
    except ValueError:
        return frozenset()


def has_permission(user: Any, permission: Permission) -> bool:
    """检查用户（任何带 role 属性的对象）是否拥有指定权限"""
    return Permission(permission) in permissions_for(getattr(user, "role", None))
