"""
/tenants 端点 - 租户管理
"""
import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.dependencies.auth import require_permission
from db.models import Tenant, User
from db.session import get_db
from models.requests import CreateTenantRequest, UpdateTenantRequest
from models.responses import TenantResponse, TenantStatsResponse
from models.roles import Permission
from services.tenant_service import tenant_service
from services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tenants", tags=["Tenants"])


@router.get("", response_model=List[TenantResponse])
async def list_tenants(
    user: User = Depends(require_permission(Permission.READ_TENANTS)),
    db: AsyncSession = Depends(get_db)
) -> List[Tenant]:
    return await tenant_service.list_tenants(db)


@router.get("/{tenant_id}", response_model=TenantResponse)
async def get_tenant(
    tenant_id: str,
    user: User = Depends(require_permission(Permission.READ_TENANTS)),
    db: AsyncSession = Depends(get_db)
) -> Tenant:
    return await tenant_service.get_tenant(db, tenant_id)


@router.post("", response_model=TenantResponse)
async def create_tenant(
    payload: CreateTenantRequest,
    user: User = Depends(require_permission(Permission.WRITE_TENANTS)),
    db: AsyncSession = Depends(get_db)
) -> Tenant:
    """创建租户"""
    return await tenant_service.create_tenant(db, payload)


@router.put("/{tenant_id}", response_model=TenantResponse)
async def update_tenant(
    tenant_id: str,
    payload: UpdateTenantRequest,
    user: User = Depends(require_permission(Permission.WRITE_TENANTS)),
    db: AsyncSession = Depends(get_db)
) -> Tenant:
    return await tenant_service.update_tenant(db, tenant_id, payload)


@router.delete("/{tenant_id}")
async def delete_tenant(
    tenant_id: str,
    user: User = Depends(require_permission(Permission.DELETE_TENANTS)),
    db: AsyncSession = Depends(get_db)
) -> dict:
    await tenant_service.delete_tenant(db, tenant_id)
    logger.info(f"User {user.id} deleted tenant {tenant_id}")
    return {"success": True}


@router.get("/{tenant_id}/stats", response_model=TenantStatsResponse)
async def get_tenant_stats(
    tenant_id: str,
    user: User = Depends(require_permission(Permission.READ_TENANTS)),
    db: AsyncSession = Depends(get_db)
) -> TenantStatsResponse:
    """
    租户统计

    存储桶与密钥用量暂未从 Garage 汇总，只统计用户数
    """
    tenant = await tenant_service.get_tenant(db, tenant_id)
    user_count = await user_service.count_users_for_tenant(db, tenant_id)
    return TenantStatsResponse(
        tenant=TenantResponse.model_validate(tenant),
        user_count=user_count,
    )
