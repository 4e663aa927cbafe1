# src/tenant_portability/dao/media/media_dao.py

from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from tenant_portability.dao.base_dao import BaseDao
from tenant_portability.models import Media

class MediaDao(BaseDao[Media]):
    def __init__(self, db_session: AsyncSession):
        super().__init__(Media, db_session)

    async def list_active_by_tenant(self, tenant_id: str) -> List[Media]:
        return await self.get_list(
            where={"tenant_id": tenant_id, "is_deleted": False},
            order=[Media.id.asc()]
        )

    async def get_by_slug(self, tenant_id: str, slug: str) -> Optional[Media]:
        return await self.get_one(where={"tenant_id": tenant_id, "slug": slug})
