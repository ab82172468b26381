"""
预置策略目录

目录在导入时构建一次；每次查询都返回深拷贝，调用方之间互不影响
"""
from types import MappingProxyType
from typing import Dict, Mapping

from models.s3_policy import S3Action, S3Effect, S3Policy, S3Statement, WILDCARD_RESOURCE
from services.exceptions import PresetNotFoundError
from services.policy_bridge import POLICY_VERSION


def _allow_all_resources(policy_id: str, *actions: S3Action) -> S3Policy:
    return S3Policy(
        version=POLICY_VERSION,
        id=policy_id,
        statements=[
            S3Statement(
                effect=S3Effect.ALLOW.value,
                actions=[a.value for a in actions],
                resources=[WILDCARD_RESOURCE],
            )
        ],
    )


_PRESETS: Mapping[str, S3Policy] = MappingProxyType({
    "ReadOnly": _allow_all_resources(
        "ReadOnlyPolicy",
        S3Action.GET_OBJECT,
        S3Action.LIST_BUCKET,
        S3Action.GET_BUCKET_LOCATION,
    ),
    "ReadWrite": _allow_all_resources(
        "ReadWritePolicy",
        S3Action.GET_OBJECT,
        S3Action.PUT_OBJECT,
        S3Action.DELETE_OBJECT,
        S3Action.LIST_BUCKET,
        S3Action.GET_BUCKET_LOCATION,
        S3Action.ABORT_MULTIPART_UPLOAD,
        S3Action.LIST_MULTIPART_UPLOAD_PARTS,
    ),
    "FullAccess": _allow_all_resources(
        "FullAccessPolicy",
        S3Action.ALL,
    ),
    "ObjectLockManager": _allow_all_resources(
        "ObjectLockManagerPolicy",
        S3Action.GET_OBJECT,
        S3Action.PUT_OBJECT,
        S3Action.GET_OBJECT_RETENTION,
        S3Action.PUT_OBJECT_RETENTION,
        S3Action.GET_OBJECT_LEGAL_HOLD,
        S3Action.PUT_OBJECT_LEGAL_HOLD,
        S3Action.LIST_BUCKET,
        S3Action.GET_BUCKET_OBJECT_LOCK_CONFIGURATION,
        S3Action.PUT_BUCKET_OBJECT_LOCK_CONFIGURATION,
    ),
})

_DESCRIPTIONS: Mapping[str, str] = MappingProxyType({
    "ReadOnly": "Allows read-only access to objects and bucket listing",
    "ReadWrite": "Allows read and write access to objects, including uploads and deletions",
    "FullAccess": "Grants full administrative access to all S3 operations",
    "ObjectLockManager": "Allows managing object retention and legal holds for compliance",
})


def get_preset_policies() -> Dict[str, S3Policy]:
    """返回所有预置策略（每次调用都是新的副本）"""
    return {name: policy.model_copy(deep=True) for name, policy in _PRESETS.items()}


def get_preset_policy(name: str) -> S3Policy:
    """
    按名称获取预置策略

    Raises:
        PresetNotFoundError: 名称未知
    """
    policy = _PRESETS.get(name)
    if policy is None:
        raise PresetNotFoundError(name)
    return policy.model_copy(deep=True)


def get_policy_description(name: str) -> str:
    """预置策略的说明文字"""
    return _DESCRIPTIONS.get(name, "Custom policy")
