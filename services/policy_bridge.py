"""
旧版权限与 S3 策略之间的转换

legacy -> policy 是确定的查表展开；policy -> legacy 有损：
任意策略都会被压缩到三个布尔值上，只有从 legacy 出发的往返是幂等的
"""
from models.s3_policy import LegacyPermissions, S3Action, S3Effect, S3Policy, S3Statement, WILDCARD_RESOURCE

POLICY_VERSION = "2012-10-17"
CONVERTED_POLICY_ID = "ConvertedLegacyPolicy"

READ_ACTIONS = (
    S3Action.GET_OBJECT,
    S3Action.LIST_BUCKET,
    S3Action.GET_BUCKET_LOCATION,
)

WRITE_ACTIONS = (
    S3Action.PUT_OBJECT,
    S3Action.DELETE_OBJECT,
    S3Action.ABORT_MULTIPART_UPLOAD,
    S3Action.LIST_MULTIPART_UPLOAD_PARTS,
)

OWNER_ACTIONS = (
    S3Action.GET_BUCKET_ACL,
    S3Action.PUT_BUCKET_ACL,
    S3Action.GET_BUCKET_POLICY,
    S3Action.PUT_BUCKET_POLICY,
    S3Action.DELETE_BUCKET_POLICY,
)

# 反向转换时只看这些操作
_READ_MARKERS = frozenset(a.value for a in READ_ACTIONS)
_WRITE_MARKERS = frozenset({S3Action.PUT_OBJECT.value, S3Action.DELETE_OBJECT.value})
_OWNER_MARKERS = frozenset({
    S3Action.GET_BUCKET_ACL.value,
    S3Action.PUT_BUCKET_ACL.value,
    S3Action.ALL.value,
})


def legacy_to_policy(permissions: LegacyPermissions) -> S3Policy:
    """
    将旧版权限展开为单条 Allow 语句的 S3 策略

    Args:
        permissions: 旧版权限

    Returns:
        作用于 "*" 的 S3 策略
    """
    actions: list[str] = []

    if permissions.read:
        actions.extend(a.value for a in READ_ACTIONS)
    if permissions.write:
        actions.extend(a.value for a in WRITE_ACTIONS)
    if permissions.owner:
        actions.extend(a.value for a in OWNER_ACTIONS)

    return S3Policy(
        version=POLICY_VERSION,
        id=CONVERTED_POLICY_ID,
        statements=[
            S3Statement(
                effect=S3Effect.ALLOW.value,
                actions=actions,
                resources=[WILDCARD_RESOURCE],
            )
        ],
    )


def policy_to_legacy(policy: S3Policy) -> LegacyPermissions:
    """
    将 S3 策略压缩为旧版权限（只看 Allow 语句）

    Args:
        policy: S3 策略

    Returns:
        旧版权限
    """
    permissions = LegacyPermissions()

    for statement in policy.statements:
        if statement.effect != S3Effect.ALLOW.value:
            continue

        for action in statement.actions:
            if action in _READ_MARKERS:
                permissions.read = True
            elif action in _WRITE_MARKERS:
                permissions.write = True
            elif action in _OWNER_MARKERS:
                permissions.owner = True

    return permissions
