"""
策略结构校验

每一项检查独立报告，不短路；不检查 action 是否为已知的枚举值
"""
from typing import List

from models.s3_policy import S3Effect, S3Policy

_VALID_EFFECTS = (S3Effect.ALLOW.value, S3Effect.DENY.value)


def validate_policy(policy: S3Policy) -> List[str]:
    """
    校验策略结构

    Args:
        policy: 待校验的策略

    Returns:
        违规信息列表，空列表表示合法
    """
    errors: List[str] = []

    if not policy.version:
        errors.append("Policy version is required")

    if not policy.statements:
        errors.append("Policy must contain at least one statement")

    for i, statement in enumerate(policy.statements):
        if statement.effect not in _VALID_EFFECTS:
            errors.append(f"Statement {i}: Effect must be 'Allow' or 'Deny'")

        if not statement.actions:
            errors.append(f"Statement {i}: Must contain at least one action")

        if not statement.resources:
            errors.append(f"Statement {i}: Must contain at least one resource")

    return errors