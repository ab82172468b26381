"""数据库模型定义"""
import uuid
from sqlalchemy import (
    Column, String, Integer, BigInteger, Boolean, DateTime,
    Index, JSON, ForeignKey
)
from sqlalchemy.sql import func
from db.base import Base


def generate_id() -> str:
    """生成不透明的记录 ID"""
    return uuid.uuid4().hex


class User(Base):
    """用户表 - 管理界面的操作员账号"""
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=generate_id)
    username = Column(String(128), nullable=False, unique=True, comment="用户名")
    email = Column(String(255), nullable=False, unique=True, comment="邮箱")
    password_hash = Column(String(255), nullable=False, comment="argon2 密码哈希")
    role = Column(String(32), nullable=False, default="user", comment="角色（admin, user, readonly, tenant_admin）")
    tenant_id = Column(String(32), ForeignKey("tenants.id", ondelete="SET NULL"), nullable=True, index=True, comment="所属租户")
    enabled = Column(Boolean, nullable=False, default=True, comment="是否启用")

    last_login = Column(DateTime, nullable=True, comment="最后登录时间")
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)


class Tenant(Base):
    """租户表"""
    __tablename__ = "tenants"

    id = Column(String(32), primary_key=True, default=generate_id)
    name = Column(String(128), nullable=False, unique=True, comment="租户名称")
    description = Column(String(512), nullable=False, default="", comment="描述")
    enabled = Column(Boolean, nullable=False, default=True)

    # 配额
    max_buckets = Column(Integer, nullable=False, default=0, comment="最大存储桶数")
    max_keys = Column(Integer, nullable=False, default=0, comment="最大访问密钥数")
    quota_bytes = Column(BigInteger, nullable=True, comment="容量配额（字节）")

    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)


class Session(Base):
    """登录会话表"""
    __tablename__ = "sessions"

    id = Column(String(32), primary_key=True, default=generate_id)
    user_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    expires_at = Column(DateTime, nullable=False, comment="过期时间")
    created_at = Column(DateTime, server_default=func.now(), nullable=False)


class KeyPolicy(Base):
    """访问密钥策略表 - Garage 只保存旧版权限，S3 策略保存在这里"""
    __tablename__ = "key_policies"

    id = Column(Integer, primary_key=True, autoincrement=True)
    bucket_id = Column(String(128), nullable=False, comment="存储桶 ID")
    access_key_id = Column(String(128), nullable=False, comment="访问密钥 ID")
    policy_json = Column(JSON, nullable=True, comment="S3 策略（为空表示旧版模式）")

    # 最近一次写入 Garage 的旧版权限
    legacy_read = Column(Boolean, nullable=False, default=False)
    legacy_write = Column(Boolean, nullable=False, default=False)
    legacy_owner = Column(Boolean, nullable=False, default=False)

    updated_by = Column(String(32), nullable=True, comment="最后修改人")
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        Index('idx_bucket_key', 'bucket_id', 'access_key_id', unique=True),
    )
