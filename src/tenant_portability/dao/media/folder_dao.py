# src/tenant_portability/dao/media/folder_dao.py

from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from tenant_portability.dao.base_dao import BaseDao
from tenant_portability.models import MediaFolder

class MediaFolderDao(BaseDao[MediaFolder]):
    def __init__(self, db_session: AsyncSession):
        super().__init__(MediaFolder, db_session)

    async def list_active_by_tenant(self, tenant_id: str) -> List[MediaFolder]:
        return await self.get_list(
            where={"tenant_id": tenant_id, "is_deleted": False},
            order=[MediaFolder.id.asc()]
        )

    async def get_by_slug(self, tenant_id: str, slug: str) -> Optional[MediaFolder]:
        """包含已软删除的行：(tenant_id, slug) 唯一约束同样覆盖它们"""
        return await self.get_one(where={"tenant_id": tenant_id, "slug": slug})
