from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession

from tenant_portability.core.config import settings

engine = create_async_engine(
    settings.DATABASE_URL,
    # 在每次从连接池获取连接时，测试其连通性，防止拿到失效连接
    pool_pre_ping=True,
    pool_recycle=3600,
)

# 导入/导出以"每行一个事务"或"每个查询一个会话"的方式工作，
# 因此服务层依赖的是会话工厂，而不是单个请求级会话。
SessionLocal = async_sessionmaker(
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
    bind=engine,
    class_=AsyncSession
)

def get_session_factory() -> async_sessionmaker:
    """FastAPI dependency returning the shared session factory."""
    return SessionLocal
