"""
访问密钥权限服务

旧版权限以 Garage 为准；S3 策略保存在本地 key_policies 表。
两种形式可以同时存在，同一时刻只有一种生效（有 S3 策略时以策略为准）
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from db.models import KeyPolicy
from models.requests import PolicyType, UpdateKeyPermissionsRequest
from models.s3_policy import LegacyPermissions, S3Policy
from services.exceptions import BadRequestError, NotFoundError, PolicyValidationError
from services.garage_client import GarageClient
from services.policy_bridge import legacy_to_policy, policy_to_legacy
from services.policy_validator import validate_policy
from services.preset_policies import get_preset_policy

logger = logging.getLogger(__name__)


@dataclass
class KeyPermissions:
    """访问密钥在某个存储桶上的权限"""
    bucket_id: str
    access_key_id: str
    name: str
    legacy: LegacyPermissions
    s3_policy: Optional[S3Policy] = None

    @property
    def legacy_mode(self) -> bool:
        return self.s3_policy is None

    def effective_policy(self) -> S3Policy:
        """生效的策略：未设置 S3 策略时由旧版权限展开"""
        if self.s3_policy is not None:
            return self.s3_policy
        return legacy_to_policy(self.legacy)


@dataclass
class KeyPermissionsUpdate:
    """权限更新结果"""
    access_key_id: str
    legacy_mode: bool
    policy: Optional[S3Policy]
    legacy: LegacyPermissions


def _find_key(bucket: Dict[str, Any], access_key_id: str) -> Optional[Dict[str, Any]]:
    for key in bucket.get("keys") or []:
        if key.get("accessKeyId") == access_key_id:
            return key
    return None


class KeyPermissionService:
    """访问密钥权限服务"""

    async def _get_record(
        self, db: AsyncSession, bucket_id: str, access_key_id: str
    ) -> Optional[KeyPolicy]:
        stmt = select(KeyPolicy).where(
            KeyPolicy.bucket_id == bucket_id,
            KeyPolicy.access_key_id == access_key_id,
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_key_permissions(
        self,
        db: AsyncSession,
        garage: GarageClient,
        bucket_id: str,
        access_key_id: str,
    ) -> KeyPermissions:
        """
        读取访问密钥的当前权限

        Raises:
            NotFoundError: 存储桶不存在或密钥未授权到该存储桶
        """
        bucket = await garage.get_bucket_info(bucket_id)
        key = _find_key(bucket or {}, access_key_id)
        if key is None:
            raise NotFoundError("key not found", details={
                "bucket_id": bucket_id,
                "access_key_id": access_key_id,
            })

        legacy = LegacyPermissions.model_validate(key.get("permissions") or {})

        s3_policy: Optional[S3Policy] = None
        if key.get("s3Policy"):
            s3_policy = S3Policy.model_validate(key["s3Policy"])

        record = await self._get_record(db, bucket_id, access_key_id)
        if record is not None and record.policy_json:
            s3_policy = S3Policy.model_validate(record.policy_json)

        return KeyPermissions(
            bucket_id=bucket_id,
            access_key_id=access_key_id,
            name=key.get("name") or "",
            legacy=legacy,
            s3_policy=s3_policy,
        )

    def resolve_update(self, payload: UpdateKeyPermissionsRequest) -> tuple[Optional[S3Policy], LegacyPermissions]:
        """
        根据请求确定要应用的策略与旧版权限

        Returns:
            (S3 策略或 None, 写入 Garage 的旧版权限)

        Raises:
            BadRequestError: 请求字段缺失
            PresetNotFoundError: 预置策略名称未知
            PolicyValidationError: 自定义策略结构不合法
        """
        if payload.legacy_mode:
            if payload.legacy is None:
                raise BadRequestError("legacy permissions required when legacy_mode is true")
            return None, payload.legacy

        if payload.policy_type == PolicyType.PRESET:
            if not payload.policy_name:
                raise BadRequestError("policy_name required for preset policies")
            policy = get_preset_policy(payload.policy_name)
        elif payload.policy_type == PolicyType.CUSTOM:
            if payload.policy is None:
                raise BadRequestError("policy required for custom policies")
            errors = validate_policy(payload.policy)
            if errors:
                raise PolicyValidationError(errors)
            policy = payload.policy
        else:
            raise BadRequestError("policy_type must be 'preset' or 'custom' when legacy_mode is false")

        # Garage 只理解旧版权限，策略按桥接规则压缩后写入
        return policy, policy_to_legacy(policy)

    async def update_key_permissions(
        self,
        db: AsyncSession,
        garage: GarageClient,
        bucket_id: str,
        access_key_id: str,
        payload: UpdateKeyPermissionsRequest,
        updated_by: Optional[str] = None,
    ) -> KeyPermissionsUpdate:
        """应用新的访问密钥权限：先写 Garage，再记录本地策略"""
        policy, legacy = self.resolve_update(payload)

        await garage.allow_bucket_key(bucket_id, access_key_id, legacy)

        record = await self._get_record(db, bucket_id, access_key_id)
        if record is None:
            record = KeyPolicy(bucket_id=bucket_id, access_key_id=access_key_id)
            db.add(record)

        record.policy_json = policy.to_dict() if policy is not None else None
        record.legacy_read = legacy.read
        record.legacy_write = legacy.write
        record.legacy_owner = legacy.owner
        record.updated_by = updated_by
        await db.commit()

        logger.info(
            f"Key permissions updated: bucket={bucket_id}, key={access_key_id}, "
            f"legacy_mode={payload.legacy_mode}, policy_id={policy.id if policy else None}"
        )
        return KeyPermissionsUpdate(
            access_key_id=access_key_id,
            legacy_mode=payload.legacy_mode,
            policy=policy,
            legacy=legacy,
        )


# 全局单例
key_permission_service = KeyPermissionService()
