"""
Garage 管理 API 客户端

只封装访问控制相关的两个调用：查询存储桶信息、写入访问密钥权限
"""
import logging
from typing import Any, Dict, Optional

import httpx

from config.settings import settings
from models.s3_policy import LegacyPermissions
from services.exceptions import NotFoundError, UpstreamError

logger = logging.getLogger(__name__)


class GarageClient:
    """Garage 管理 API 客户端"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        admin_token: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Args:
            base_url: 管理 API 地址，例如 http://localhost:3903
            admin_token: 管理令牌
            timeout: 请求超时（秒）
            transport: 自定义 httpx transport（测试用）
        """
        self.base_url = (base_url or settings.garage_admin_api).rstrip("/")
        self.admin_token = admin_token if admin_token is not None else settings.garage_admin_token
        self.timeout = timeout or settings.http_timeout
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.admin_token:
            headers["Authorization"] = f"Bearer {self.admin_token}"
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, str]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.request(
                    method, url, params=params, json=json, headers=self._headers()
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            if status_code == 404:
                raise NotFoundError(f"Garage resource not found: {path}") from e
            logger.error(f"Garage API error: {method} {path} -> HTTP {status_code}")
            raise UpstreamError(f"Garage API returned HTTP {status_code}") from e
        except httpx.RequestError as e:
            logger.error(f"Failed to reach Garage API at {url}: {e}")
            raise UpstreamError(f"Failed to reach Garage API: {e}") from e

        if not response.content:
            return None
        return response.json()

    async def get_bucket_info(self, bucket_id: str) -> Dict[str, Any]:
        """
        获取存储桶信息（包含授权的访问密钥列表）

        Raises:
            NotFoundError: 存储桶不存在
        """
        return await self._request("GET", "/v2/GetBucketInfo", params={"id": bucket_id})

    async def allow_bucket_key(
        self,
        bucket_id: str,
        access_key_id: str,
        permissions: LegacyPermissions,
    ) -> Any:
        """
        写入访问密钥在存储桶上的旧版权限

        Garage 不支持完整的 S3 策略，只接收 read / write / owner
        """
        logger.info(
            f"Updating Garage key permissions: bucket={bucket_id}, key={access_key_id}, "
            f"read={permissions.read}, write={permissions.write}, owner={permissions.owner}"
        )
        return await self._request(
            "POST",
            "/v2/AllowBucketKey",
            params={"id": bucket_id, "accessKeyId": access_key_id},
            json={"permissions": permissions.model_dump()},
        )


def get_garage_client() -> GarageClient:
    """依赖注入：Garage 客户端"""
    return GarageClient()
