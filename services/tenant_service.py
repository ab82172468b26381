"""
租户服务
"""
import logging
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from db.models import Tenant, User
from models.requests import CreateTenantRequest, UpdateTenantRequest
from services.exceptions import BadRequestError, NotFoundError

logger = logging.getLogger(__name__)


class TenantService:
    """租户服务"""

    async def get_tenant(self, db: AsyncSession, tenant_id: str) -> Tenant:
        """
        按 ID 获取租户

        Raises:
            NotFoundError: 租户不存在
        """
        tenant = await db.get(Tenant, tenant_id)
        if tenant is None:
            raise NotFoundError("tenant not found", details={"tenant_id": tenant_id})
        return tenant

    async def list_tenants(self, db: AsyncSession) -> list[Tenant]:
        result = await db.execute(select(Tenant).order_by(Tenant.name))
        return list(result.scalars().all())

    async def _name_taken(self, db: AsyncSession, name: str) -> bool:
        result = await db.execute(select(Tenant.id).where(Tenant.name == name))
        return result.first() is not None

    async def create_tenant(self, db: AsyncSession, payload: CreateTenantRequest) -> Tenant:
        if await self._name_taken(db, payload.name):
            raise BadRequestError("tenant name already exists")

        tenant = Tenant(
            name=payload.name,
            description=payload.description,
            enabled=payload.enabled,
            max_buckets=payload.max_buckets,
            max_keys=payload.max_keys,
            quota_bytes=payload.quota_bytes,
        )
        db.add(tenant)
        await db.commit()
        await db.refresh(tenant)

        logger.info(f"Created tenant: id={tenant.id}, name={tenant.name}")
        return tenant

    async def update_tenant(self, db: AsyncSession, tenant_id: str, payload: UpdateTenantRequest) -> Tenant:
        tenant = await self.get_tenant(db, tenant_id)

        if payload.name is not None and payload.name != tenant.name:
            if await self._name_taken(db, payload.name):
                raise BadRequestError("tenant name already exists")
            tenant.name = payload.name

        # 其余字段按请求覆盖
        for field in ("description", "enabled", "max_buckets", "max_keys", "quota_bytes"):
            value = getattr(payload, field)
            if value is not None:
                setattr(tenant, field, value)

        tenant.updated_at = datetime.utcnow()
        await db.commit()
        await db.refresh(tenant)

        logger.info(f"Updated tenant: id={tenant.id}")
        return tenant

    async def delete_tenant(self, db: AsyncSession, tenant_id: str) -> None:
        tenant = await self.get_tenant(db, tenant_id)

        # 解除用户与租户的关联
        await db.execute(
            update(User).where(User.tenant_id == tenant_id).values(tenant_id=None)
        )
        await db.delete(tenant)
        await db.commit()
        logger.info(f"Deleted tenant: id={tenant_id}")


# 全局单例
tenant_service = TenantService()
