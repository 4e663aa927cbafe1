# src/tenant_portability/api/dependencies/context.py

from fastapi import Depends
from sqlalchemy.ext.asyncio import async_sessionmaker
from tenant_portability.core.context import AppContext
from tenant_portability.core.storage.base import BaseStorageProvider
from tenant_portability.core.storage.factory import get_storage_provider
from tenant_portability.db.session import get_session_factory

def get_storage() -> BaseStorageProvider:
    return get_storage_provider()

async def get_app_context(
    session_factory: async_sessionmaker = Depends(get_session_factory),
    storage: BaseStorageProvider = Depends(get_storage),
) -> AppContext:
    """
    构建服务层使用的 AppContext。
    授权 (租户归属、管理员越权) 由上游网关完成，这里不做任何检查。
    """
    return AppContext(session_factory=session_factory, storage=storage)

AppContextDep = Depends(get_app_context)
