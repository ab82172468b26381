"""
对象锁定端点 - 存储桶锁定配置、对象保留、法律保留

Garage 尚未提供对象锁定的写接口，写操作只做校验并返回结果，不调用 Garage
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends

from app.dependencies.auth import require_permission, require_s3_action
from db.models import User
from models.requests import (
    LegalHoldStatus,
    ObjectLegalHold,
    PutBucketObjectLockConfigurationRequest,
    PutObjectLegalHoldRequest,
    PutObjectRetentionRequest,
    RetentionMode,
)
from models.responses import ErrorResponse
from models.roles import Permission
from models.s3_policy import S3Action
from services.exceptions import BadRequestError
from services.garage_client import GarageClient, get_garage_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/buckets/{bucket_id}", tags=["Object Locking"])

_RETENTION_MODES = {mode.value for mode in RetentionMode}
_LEGAL_HOLD_STATUSES = {status.value for status in LegalHoldStatus}


@router.get("/object-lock")
async def get_bucket_object_lock_configuration(
    bucket_id: str,
    user: User = Depends(require_permission(Permission.READ_BUCKETS)),
    garage: GarageClient = Depends(get_garage_client),
) -> Dict[str, Any]:
    """读取存储桶的对象锁定配置"""
    bucket = await garage.get_bucket_info(bucket_id) or {}
    configuration = bucket.get("objectLockConfiguration")

    return {
        "bucket_id": bucket_id,
        "object_lock_configuration": configuration,
        "object_lock_enabled": bool(configuration and configuration.get("objectLockEnabled")),
    }


@router.put("/object-lock", responses={400: {"model": ErrorResponse}})
async def put_bucket_object_lock_configuration(
    bucket_id: str,
    payload: PutBucketObjectLockConfigurationRequest,
    user: User = Depends(require_s3_action(S3Action.PUT_BUCKET_OBJECT_LOCK_CONFIGURATION)),
) -> Dict[str, Any]:
    """
    设置存储桶的对象锁定配置

    默认保留规则中 days 与 years 必须且只能指定一个
    """
    configuration = payload.object_lock_configuration
    if configuration is None:
        raise BadRequestError("object_lock_configuration is required")

    if configuration.rule is not None and configuration.rule.default_retention is not None:
        retention = configuration.rule.default_retention
        if retention.days is None and retention.years is None:
            raise BadRequestError("either days or years must be specified for default retention")
        if retention.days is not None and retention.years is not None:
            raise BadRequestError("cannot specify both days and years for default retention")

    logger.info(f"User {user.id} updated object lock configuration of bucket {bucket_id}")
    return {
        "message": "Object lock configuration updated successfully",
        "bucket_id": bucket_id,
        "object_lock_enabled": configuration.object_lock_enabled,
        "default_retention_enabled": configuration.rule is not None,
    }


@router.get("/objects/{object_key:path}/retention")
async def get_object_retention(
    bucket_id: str,
    object_key: str,
    user: User = Depends(require_s3_action(S3Action.GET_OBJECT_RETENTION)),
) -> Dict[str, Any]:
    # 对象元数据暂不可读
    return {
        "bucket_id": bucket_id,
        "object_key": object_key,
        "retention": None,
    }


@router.put("/objects/{object_key:path}/retention", responses={400: {"model": ErrorResponse}})
async def put_object_retention(
    bucket_id: str,
    object_key: str,
    payload: PutObjectRetentionRequest,
    user: User = Depends(require_s3_action(S3Action.PUT_OBJECT_RETENTION)),
) -> Dict[str, Any]:
    """
    设置对象保留

    保留期限必须晚于当前时间，模式为 COMPLIANCE 或 GOVERNANCE
    """
    retention = payload.retention
    if retention is None:
        raise BadRequestError("retention is required")

    retain_until = retention.retain_until_date
    if retain_until.tzinfo is None:
        retain_until = retain_until.replace(tzinfo=timezone.utc)
    if retain_until <= datetime.now(timezone.utc):
        raise BadRequestError("retention date must be in the future")

    if retention.mode not in _RETENTION_MODES:
        raise BadRequestError("invalid retention mode: must be COMPLIANCE or GOVERNANCE")

    logger.info(f"User {user.id} set retention {retention.mode} on {bucket_id}/{object_key}")
    return {
        "message": "Object retention updated successfully",
        "bucket_id": bucket_id,
        "object_key": object_key,
        "retention_mode": retention.mode,
        "retain_until_date": retention.retain_until_date,
    }


@router.get("/objects/{object_key:path}/legal-hold")
async def get_object_legal_hold(
    bucket_id: str,
    object_key: str,
    user: User = Depends(require_s3_action(S3Action.GET_OBJECT_LEGAL_HOLD)),
) -> Dict[str, Any]:
    """读取对象的法律保留状态（默认 OFF）"""
    return {
        "bucket_id": bucket_id,
        "object_key": object_key,
        "legal_hold": ObjectLegalHold(status=LegalHoldStatus.OFF.value),
    }


@router.put("/objects/{object_key:path}/legal-hold", responses={400: {"model": ErrorResponse}})
async def put_object_legal_hold(
    bucket_id: str,
    object_key: str,
    payload: PutObjectLegalHoldRequest,
    user: User = Depends(require_s3_action(S3Action.PUT_OBJECT_LEGAL_HOLD)),
) -> Dict[str, Any]:
    legal_hold = payload.legal_hold
    if legal_hold is None:
        raise BadRequestError("legal_hold is required")

    if legal_hold.status not in _LEGAL_HOLD_STATUSES:
        raise BadRequestError("invalid legal hold status: must be ON or OFF")

    logger.info(f"User {user.id} set legal hold {legal_hold.status} on {bucket_id}/{object_key}")
    return {
        "message": "Object legal hold updated successfully",
        "bucket_id": bucket_id,
        "object_key": object_key,
        "legal_hold_status": legal_hold.status,
    }
