# src/tenant_portability/dao/page/page_dao.py

from operator import attrgetter
from typing import List, Optional
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from tenant_portability.dao.base_dao import BaseDao
from tenant_portability.models import Page, PageLayout, PageVersion, PageComponent

class PageDao(BaseDao[Page]):
    def __init__(self, db_session: AsyncSession):
        super().__init__(Page, db_session)

    async def list_by_tenant(self, tenant_id: str) -> List[Page]:
        return await self.get_list(where={"tenant_id": tenant_id}, order=[Page.id.asc()])

    async def get_by_slug(self, tenant_id: str, slug: str) -> Optional[Page]:
        return await self.get_one(where={"tenant_id": tenant_id, "slug": slug})

class PageLayoutDao(BaseDao[PageLayout]):
    def __init__(self, db_session: AsyncSession):
        super().__init__(PageLayout, db_session)

    async def list_by_pages(self, page_ids: List[int]) -> List[PageLayout]:
        return await self.get_list_in(
            "page_id", page_ids,
            order=[PageLayout.page_id.asc(), PageLayout.language.asc()],
            sort_key=attrgetter("page_id", "language")
        )

    async def get_by_language(self, page_id: int, language: str) -> Optional[PageLayout]:
        return await self.get_one(where={"page_id": page_id, "language": language})

    async def clear_default(self, page_id: int) -> int:
        """取消页面当前的默认语言布局，保证每个页面至多一个默认布局。"""
        stmt = (
            update(PageLayout)
            .where(PageLayout.page_id == page_id, PageLayout.is_default.is_(True))
            .values(is_default=False)
        )
        result = await self.db_session.execute(stmt)
        return result.rowcount

class PageVersionDao(BaseDao[PageVersion]):
    def __init__(self, db_session: AsyncSession):
        super().__init__(PageVersion, db_session)

    async def list_by_pages(self, page_ids: List[int], tenant_id: str) -> List[PageVersion]:
        return await self.get_list_in(
            "page_id", page_ids, where=[("tenant_id", "==", tenant_id)],
            order=[PageVersion.id.asc()], sort_key=attrgetter("id")
        )

    async def get_by_number(self, page_id: int, version_number: int) -> Optional[PageVersion]:
        return await self.get_one(where={"page_id": page_id, "version_number": version_number})

class PageComponentDao(BaseDao[PageComponent]):
    def __init__(self, db_session: AsyncSession):
        super().__init__(PageComponent, db_session)

    async def list_by_pages(self, page_ids: List[int]) -> List[PageComponent]:
        return await self.get_list_in(
            "page_id", page_ids, order=[PageComponent.id.asc()], sort_key=attrgetter("id")
        )

    async def get_by_position(self, page_id: int, component_key: str, sort_order: int) -> Optional[PageComponent]:
        return await self.get_one(
            where={"page_id": page_id, "component_key": component_key, "sort_order": sort_order}
        )
