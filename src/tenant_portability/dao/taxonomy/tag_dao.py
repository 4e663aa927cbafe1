# src/tenant_portability/dao/taxonomy/tag_dao.py

from typing import List, Optional
from sqlalchemy import or_
from sqlalchemy.ext.asyncio import AsyncSession
from tenant_portability.dao.base_dao import BaseDao
from tenant_portability.models import Tag

class TagDao(BaseDao[Tag]):
    def __init__(self, db_session: AsyncSession):
        super().__init__(Tag, db_session)

    async def list_by_tenant(self, tenant_id: str) -> List[Tag]:
        """只导出租户自有标签，共享标签 (tenant_id 为空) 不属于任何租户。"""
        return await self.get_list(where={"tenant_id": tenant_id}, order=[Tag.id.asc()])

    async def get_visible_by_slug(self, tenant_id: str, slug: str) -> Optional[Tag]:
        """
        查找租户可见的标签：租户自有优先，其次是共享标签。
        """
        return await self.get_one(
            where=[Tag.slug == slug, or_(Tag.tenant_id == tenant_id, Tag.tenant_id.is_(None))],
            order=[Tag.tenant_id.is_(None).asc(), Tag.id.asc()]
        )
