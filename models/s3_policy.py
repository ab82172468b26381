"""
S3 策略模型

类 IAM 的访问密钥策略：语句由 effect / actions / resources / condition 组成。
condition 只做结构解析，不参与任何运行时判定。
"""
import json
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional

from pydantic import BaseModel, Field, field_validator


class S3Action(str, Enum):
    """S3 API 操作"""
    # 对象级
    GET_OBJECT = "s3:GetObject"
    PUT_OBJECT = "s3:PutObject"
    DELETE_OBJECT = "s3:DeleteObject"
    GET_OBJECT_ACL = "s3:GetObjectAcl"
    PUT_OBJECT_ACL = "s3:PutObjectAcl"
    GET_OBJECT_VERSION = "s3:GetObjectVersion"
    DELETE_OBJECT_VERSION = "s3:DeleteObjectVersion"

    # 对象锁定
    PUT_OBJECT_LEGAL_HOLD = "s3:PutObjectLegalHold"
    GET_OBJECT_LEGAL_HOLD = "s3:GetObjectLegalHold"
    PUT_OBJECT_RETENTION = "s3:PutObjectRetention"
    GET_OBJECT_RETENTION = "s3:GetObjectRetention"
    BYPASS_GOVERNANCE_RETENTION = "s3:BypassGovernanceRetention"

    # 分片上传
    ABORT_MULTIPART_UPLOAD = "s3:AbortMultipartUpload"
    LIST_MULTIPART_UPLOAD_PARTS = "s3:ListMultipartUploadParts"

    # 存储桶级
    LIST_BUCKET = "s3:ListBucket"
    LIST_BUCKET_VERSIONS = "s3:ListBucketVersions"
    GET_BUCKET_LOCATION = "s3:GetBucketLocation"
    GET_BUCKET_ACL = "s3:GetBucketAcl"
    PUT_BUCKET_ACL = "s3:PutBucketAcl"
    GET_BUCKET_POLICY = "s3:GetBucketPolicy"
    PUT_BUCKET_POLICY = "s3:PutBucketPolicy"
    DELETE_BUCKET_POLICY = "s3:DeleteBucketPolicy"
    GET_BUCKET_VERSIONING = "s3:GetBucketVersioning"
    PUT_BUCKET_VERSIONING = "s3:PutBucketVersioning"
    GET_BUCKET_OBJECT_LOCK_CONFIGURATION = "s3:GetBucketObjectLockConfiguration"
    PUT_BUCKET_OBJECT_LOCK_CONFIGURATION = "s3:PutBucketObjectLockConfiguration"

    # 存储桶管理
    CREATE_BUCKET = "s3:CreateBucket"
    DELETE_BUCKET = "s3:DeleteBucket"

    # 列表
    LIST_ALL_MY_BUCKETS = "s3:ListAllMyBuckets"
    LIST_BUCKET_MULTIPART_UPLOADS = "s3:ListBucketMultipartUploads"

    # 通配
    ALL = "s3:*"


class S3Effect(str, Enum):
    """语句效果"""
    ALLOW = "Allow"
    DENY = "Deny"


WILDCARD_RESOURCE = "*"

# 写类操作：管理员角色无视策略内容直接放行
WRITE_ACTIONS: FrozenSet[S3Action] = frozenset({
    S3Action.PUT_OBJECT_RETENTION,
    S3Action.PUT_OBJECT_LEGAL_HOLD,
    S3Action.PUT_BUCKET_OBJECT_LOCK_CONFIGURATION,
})

# 读类操作：未指定访问密钥时映射为 read_buckets
READ_ACTIONS: FrozenSet[S3Action] = frozenset({
    S3Action.GET_OBJECT_RETENTION,
    S3Action.GET_OBJECT_LEGAL_HOLD,
    S3Action.GET_BUCKET_OBJECT_LOCK_CONFIGURATION,
    S3Action.LIST_BUCKET,
})


class S3Condition(BaseModel):
    """
    策略条件

    只保存，不求值
    """
    class Config:
        populate_by_name = True

    string_equals: Optional[Dict[str, Any]] = Field(None, alias="StringEquals")
    string_not_equals: Optional[Dict[str, Any]] = Field(None, alias="StringNotEquals")
    string_like: Optional[Dict[str, Any]] = Field(None, alias="StringLike")
    string_not_like: Optional[Dict[str, Any]] = Field(None, alias="StringNotLike")
    ip_address: Optional[Dict[str, Any]] = Field(None, alias="IpAddress")
    not_ip_address: Optional[Dict[str, Any]] = Field(None, alias="NotIpAddress")
    date_greater_than: Optional[Dict[str, Any]] = Field(None, alias="DateGreaterThan")
    date_less_than: Optional[Dict[str, Any]] = Field(None, alias="DateLessThan")


class S3Statement(BaseModel):
    """
    策略语句

    effect 与 actions 保留原始字符串，由校验器决定是否合法
    """
    id: Optional[str] = Field(None, description="语句 ID")
    effect: str = Field("", description="Allow 或 Deny")
    actions: List[str] = Field(default_factory=list, description="S3 操作列表")
    resources: List[str] = Field(default_factory=list, description="资源模式列表")
    condition: Optional[S3Condition] = Field(None, description="条件（不参与判定）")

    @field_validator("effect", mode="before")
    @classmethod
    def _plain_effect(cls, value: Any) -> Any:
        return value.value if isinstance(value, Enum) else value

    @field_validator("actions", mode="before")
    @classmethod
    def _plain_actions(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [a.value if isinstance(a, Enum) else a for a in value]
        return value


class S3Policy(BaseModel):
    """S3 IAM 风格策略"""
    version: str = Field("", description="策略版本", examples=["2012-10-17"])
    id: Optional[str] = Field(None, description="策略 ID")
    statements: List[S3Statement] = Field(default_factory=list, description="语句列表")

    class Config:
        json_schema_extra = {
            "example": {
                "version": "2012-10-17",
                "id": "ReadOnlyPolicy",
                "statements": [
                    {
                        "effect": "Allow",
                        "actions": ["s3:GetObject", "s3:ListBucket"],
                        "resources": ["*"]
                    }
                ]
            }
        }

    def to_dict(self) -> Dict[str, Any]:
        """序列化为 JSON 兼容的字典（省略空的可选字段）"""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_json(self) -> str:
        """序列化为缩进的 JSON 字符串"""
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_json(cls, data: str) -> "S3Policy":
        """从 JSON 字符串解析策略"""
        return cls.model_validate_json(data)


class LegacyPermissions(BaseModel):
    """旧版密钥权限（read / write / owner）"""
    read: bool = False
    write: bool = False
    owner: bool = False
