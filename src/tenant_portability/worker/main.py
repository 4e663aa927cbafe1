# src/tenant_portability/worker/main.py

import logging
from arq.connections import RedisSettings
from tenant_portability.db.session import SessionLocal, engine
from tenant_portability.core.config import settings
from tenant_portability.core.storage.factory import get_storage_provider

TASK_FUNCTIONS = []
CRON_JOBS = []

logger = logging.getLogger(__name__)

def get_redis_settings():
    """统一的 Redis 配置获取函数"""
    return RedisSettings(
        host=settings.REDIS_HOST,
        port=settings.REDIS_PORT,
        password=settings.REDIS_PASSWORD,
        database=settings.REDIS_DB
    )

async def startup(ctx):
    """Worker 进程启动时，创建依赖工厂。"""
    logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    ctx['db_session_factory'] = SessionLocal
    ctx['storage'] = get_storage_provider()
    logger.info(f"ARQ Worker started up, storage provider: {ctx['storage'].name}")

async def shutdown(ctx):
    """Worker 进程关闭时，清理资源。"""
    await engine.dispose()
    logger.info("ARQ Worker shut down, database engine disposed.")

class WorkerSettings:
    """ARQ Worker 的主配置。"""
    functions = TASK_FUNCTIONS
    cron_jobs = CRON_JOBS
    on_startup = startup
    on_shutdown = shutdown
    # 从 settings.py 中读取 Redis 配置
    redis_settings = get_redis_settings()
