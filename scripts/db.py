"""数据库管理脚本"""
import asyncio
import sys
from pathlib import Path

# 将项目根目录添加到 Python 路径
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sqlalchemy.exc import SQLAlchemyError

from db.base import Base
from db.session import AsyncSessionLocal, engine, init_models
from services.user_service import user_service


async def _init_db() -> None:
    await init_models()
    async with AsyncSessionLocal() as db:
        admin = await user_service.ensure_default_admin(db)
    await engine.dispose()

    if admin is not None:
        print(f"👤 已创建默认管理员: {admin.username}")


async def _drop_db() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


def init_db():
    """初始化数据库 - 创建所有表并写入默认管理员"""
    print("🔧 初始化数据库...")
    try:
        asyncio.run(_init_db())
        print("✅ 数据库表创建成功！")
        print("\n📋 已创建的表：")
        for table in Base.metadata.sorted_tables:
            print(f"  - {table.name}")
    except SQLAlchemyError as e:
        print(f"❌ 数据库初始化失败: {e}")
        sys.exit(1)


def reset_db():
    """重置数据库 - 删除所有表后重新初始化"""
    print("🔧 重置数据库...")
    try:
        asyncio.run(_drop_db())
    except SQLAlchemyError as e:
        print(f"❌ 删除数据表失败: {e}")
        sys.exit(1)
    init_db()


if __name__ == "__main__":
    if len(sys.argv) > 1:
        action = sys.argv[1]
        if action == "init":
            init_db()
        elif action == "reset":
            reset_db()
        else:
            print(f"未知操作: {action}")
            print("可用操作: init, reset")
            sys.exit(1)
    else:
        print("用法: python scripts/db.py <action>")
        print("可用操作:")
        print("  init   - 初始化数据库（创建所有表、默认管理员）")
        print("  reset  - 重置数据库（删除所有表后重新初始化）")
