"""
策略判定

判定一个 S3 策略是否允许在某个资源上执行某个操作。

语义（与既有策略保持一致，不要"修正"）：
- 按声明顺序扫描语句，第一条匹配的 Allow 语句直接返回 True
- 匹配的 Deny 语句不会拦截任何请求，只是被跳过
- 资源只支持精确匹配或单个 "*"，不做前缀/层级匹配
- condition 不参与判定
"""
import logging
from typing import Union

from models.s3_policy import S3Action, S3Effect, S3Policy, S3Statement, WILDCARD_RESOURCE

logger = logging.getLogger(__name__)


def _matches_action(statement: S3Statement, action: str) -> bool:
    for stmt_action in statement.actions:
        if stmt_action == action or stmt_action == S3Action.ALL.value:
            return True
    return False


def _matches_resource(statement: S3Statement, resource: str) -> bool:
    for pattern in statement.resources:
        if pattern == WILDCARD_RESOURCE or pattern == resource:
            return True
    return False


def authorizes(policy: S3Policy, action: Union[S3Action, str], resource: str) -> bool:
    """
    检查策略是否允许 action 作用于 resource

    Args:
        policy: S3 策略
        action: S3 操作（枚举或其字符串值）
        resource: 资源标识，例如 "bucket" 或 "bucket/path/to/key"

    Returns:
        存在匹配的 Allow 语句时返回 True
    """
    action_name = action.value if isinstance(action, S3Action) else action

    for idx, statement in enumerate(policy.statements):
        if not _matches_action(statement, action_name):
            continue
        if not _matches_resource(statement, resource):
            continue

        if statement.effect == S3Effect.ALLOW.value:
            logger.debug(f"Statement {idx} allows {action_name} on {resource}")
            return True
        # Deny 语句不参与判定

    return False
