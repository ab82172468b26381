"""
访问控制服务 (ACL Service)

授权关口的判定逻辑，与 HTTP 层无关：
- 粗粒度：角色权限表
- 细粒度：访问密钥上的 S3 策略
"""
import logging
from typing import Any, Optional, Union

from models.roles import Permission, Role, has_permission
from models.s3_policy import READ_ACTIONS, WRITE_ACTIONS, S3Action
from services.exceptions import ForbiddenError
from services.key_permission_service import KeyPermissions
from services.policy_evaluator import authorizes

logger = logging.getLogger(__name__)


class AccessControlService:
    """
    访问控制服务

    所有判定都是同步的纯计算；失败时抛出 ForbiddenError，不修改任何状态
    """

    def check_permission(self, user: Any, permission: Permission) -> None:
        """
        粗粒度检查

        Args:
            user: 当前用户（带 id / role 属性）
            permission: 所需权限

        Raises:
            ForbiddenError: 角色不具备该权限
        """
        if not has_permission(user, permission):
            logger.warning(f"User {user.id} (role={user.role}) lacks permission: {permission.value}")
            raise ForbiddenError(
                f"Insufficient permissions. Required permission: {permission.value}",
                details={"required_permission": permission.value},
            )

    def can_perform(
        self,
        user: Any,
        action: Union[S3Action, str],
        resource: str,
        key_permissions: Optional[KeyPermissions] = None,
    ) -> bool:
        """
        细粒度判定

        Args:
            user: 当前用户
            action: 请求对应的 S3 操作
            resource: 资源标识（"bucket" 或 "bucket/key"）
            key_permissions: 请求指定的访问密钥权限；为 None 时退回角色权限映射

        Returns:
            True 如果允许
        """
        action = S3Action(action)
        is_admin = getattr(user, "role", None) == Role.ADMIN.value

        if key_permissions is not None:
            if action in WRITE_ACTIONS and is_admin:
                return True
            return authorizes(key_permissions.effective_policy(), action, resource)

        # 未指定访问密钥：按操作类别映射到角色权限
        if action in READ_ACTIONS:
            return has_permission(user, Permission.READ_BUCKETS)
        if action in WRITE_ACTIONS:
            return has_permission(user, Permission.WRITE_BUCKETS) or is_admin
        return has_permission(user, Permission.WRITE_BUCKETS)

    def check_s3_action(
        self,
        user: Any,
        action: Union[S3Action, str],
        resource: str,
        key_permissions: Optional[KeyPermissions] = None,
    ) -> None:
        """
        细粒度检查

        Raises:
            ForbiddenError: 判定为拒绝
        """
        if not self.can_perform(user, action, resource, key_permissions):
            action_name = S3Action(action).value
            key_id = key_permissions.access_key_id if key_permissions else None
            logger.warning(
                f"User {user.id} denied {action_name} on {resource} (access_key={key_id})"
            )
            raise ForbiddenError(
                f"Action {action_name} is not allowed on {resource}",
                details={"action": action_name, "resource": resource, "access_key_id": key_id},
            )


# 全局单例
acl_service = AccessControlService()
