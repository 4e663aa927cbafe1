# src/tenant_portability/dao/taxonomy/category_dao.py

from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from tenant_portability.dao.base_dao import BaseDao
from tenant_portability.models import Category

class CategoryDao(BaseDao[Category]):
    def __init__(self, db_session: AsyncSession):
        super().__init__(Category, db_session)

    async def list_by_tenant(self, tenant_id: str) -> List[Category]:
        return await self.get_list(where={"tenant_id": tenant_id}, order=[Category.id.asc()])

    async def get_by_slug(self, tenant_id: str, slug: str) -> Optional[Category]:
        return await self.get_one(where={"tenant_id": tenant_id, "slug": slug})
