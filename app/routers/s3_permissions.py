"""
S3 权限端点 - 预置策略、策略校验、访问密钥权限
"""
import logging
from typing import Dict

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.dependencies.auth import require_permission
from db.models import User
from db.session import get_db
from models.requests import UpdateKeyPermissionsRequest
from models.responses import (
    ErrorResponse,
    KeyPermissionsResponse,
    PolicyValidationResponse,
    PresetPolicyResponse,
    UpdateKeyPermissionsResponse,
)
from models.roles import Permission
from models.s3_policy import S3Policy
from services.garage_client import GarageClient, get_garage_client
from services.key_permission_service import key_permission_service
from services.policy_bridge import policy_to_legacy
from services.policy_validator import validate_policy
from services.preset_policies import get_policy_description, get_preset_policies

logger = logging.getLogger(__name__)

router = APIRouter(tags=["S3 Permissions"])


@router.get("/s3/policies/presets", response_model=Dict[str, PresetPolicyResponse])
async def list_preset_policies(
    user: User = Depends(require_permission(Permission.READ_KEYS)),
) -> Dict[str, PresetPolicyResponse]:
    """列出所有预置策略"""
    return {
        name: PresetPolicyResponse(
            name=name,
            description=get_policy_description(name),
            policy=policy,
            policy_json=policy.to_json(),
        )
        for name, policy in get_preset_policies().items()
    }


@router.post("/s3/policies/validate", response_model=PolicyValidationResponse)
async def validate_s3_policy(
    policy: S3Policy,
    user: User = Depends(require_permission(Permission.READ_KEYS)),
) -> PolicyValidationResponse:
    """
    校验策略结构

    校验通过时同时返回对应的旧版权限
    """
    errors = validate_policy(policy)
    if errors:
        return PolicyValidationResponse(valid=False, errors=errors)

    return PolicyValidationResponse(
        valid=True,
        message="Policy is valid",
        legacy_equivalent=policy_to_legacy(policy),
    )


@router.get(
    "/buckets/{bucket_id}/keys/{access_key_id}/permissions",
    response_model=KeyPermissionsResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_key_permissions(
    bucket_id: str,
    access_key_id: str,
    user: User = Depends(require_permission(Permission.READ_KEYS)),
    db: AsyncSession = Depends(get_db),
    garage: GarageClient = Depends(get_garage_client),
) -> KeyPermissionsResponse:
    """读取访问密钥在存储桶上的权限"""
    permissions = await key_permission_service.get_key_permissions(
        db, garage, bucket_id, access_key_id
    )

    policy_json = None
    if permissions.s3_policy is not None:
        policy_json = permissions.s3_policy.to_json()

    return KeyPermissionsResponse(
        access_key_id=permissions.access_key_id,
        name=permissions.name,
        legacy_mode=permissions.legacy_mode,
        legacy_permissions=permissions.legacy,
        s3_policy=permissions.s3_policy,
        policy_json=policy_json,
    )


@router.put(
    "/buckets/{bucket_id}/keys/{access_key_id}/permissions",
    response_model=UpdateKeyPermissionsResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)
async def update_key_permissions(
    bucket_id: str,
    access_key_id: str,
    payload: UpdateKeyPermissionsRequest,
    user: User = Depends(require_permission(Permission.WRITE_KEYS)),
    db: AsyncSession = Depends(get_db),
    garage: GarageClient = Depends(get_garage_client),
) -> UpdateKeyPermissionsResponse:
    """
    更新访问密钥权限

    - legacy_mode=true: 直接写入 read / write / owner
    - policy_type=preset: 按名称使用预置策略
    - policy_type=custom: 使用请求中的策略（先做结构校验）

    S3 策略写入 Garage 前会被压缩为旧版权限
    """
    result = await key_permission_service.update_key_permissions(
        db, garage, bucket_id, access_key_id, payload, updated_by=user.id
    )

    return UpdateKeyPermissionsResponse(
        message="Key permissions updated successfully",
        access_key_id=result.access_key_id,
        legacy_mode=result.legacy_mode,
        policy_applied=result.policy is not None,
        legacy_permissions=result.legacy,
    )
