# src/tenant_portability/dao/tenant/tenant_dao.py

from typing import List
from sqlalchemy.ext.asyncio import AsyncSession
from tenant_portability.dao.base_dao import BaseDao
from tenant_portability.models import Tenant

class TenantDao(BaseDao[Tenant]):
    def __init__(self, db_session: AsyncSession):
        super().__init__(Tenant, db_session)

    async def list_ids(self) -> List[str]:
        return await self.pluck("id", order=[Tenant.id.asc()])
