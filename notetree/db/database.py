"""
数据库连接和会话管理
"""
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base
from notetree.core.config import settings

# 创建Base类
Base = declarative_base()


def build_engine(url: str, isolation_level: str = None) -> AsyncEngine:
    """
    创建异步引擎

    SQLite 使用默认连接池，其余数据库按连接池参数创建。
    """
    options = {"echo": settings.DEBUG and settings.LOG_LEVEL.upper() == "DEBUG", "pool_pre_ping": True}
    if isolation_level:
        options["isolation_level"] = isolation_level
    if not url.startswith("sqlite"):
        options.update(pool_size=10, max_overflow=20)
    return create_async_engine(url, **options)


# 创建异步引擎
engine = build_engine(settings.DATABASE_URL, settings.DB_ISOLATION_LEVEL)

# 创建会话工厂
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def get_db() -> AsyncSession:
    """
    获取数据库会话依赖
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


async def init_db(bind: AsyncEngine = None) -> None:
    """
    创建所有表（开发环境使用）
    """
    import notetree.models  # noqa: F401  注册所有模型

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
