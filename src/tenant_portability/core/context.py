# src/tenant_portability/core/context.py

from pydantic import BaseModel, ConfigDict
from sqlalchemy.ext.asyncio import async_sessionmaker

from tenant_portability.core.storage.base import BaseStorageProvider

class AppContext(BaseModel):
    """
    Defines the typed context for service layer operations.
    Portability services hold no state of their own between calls; everything
    they touch is reachable from here.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    # 数据库会话工厂 (每个查询/每行写入各自开会话)
    session_factory: async_sessionmaker

    # 对象存储 (备份快照)
    storage: BaseStorageProvider
