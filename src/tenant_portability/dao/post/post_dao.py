# src/tenant_portability/dao/post/post_dao.py

from operator import attrgetter
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from tenant_portability.dao.base_dao import BaseDao
from tenant_portability.models import Post, PostCategory, PostTag

class PostDao(BaseDao[Post]):
    def __init__(self, db_session: AsyncSession):
        super().__init__(Post, db_session)

    async def list_by_tenant(self, tenant_id: str) -> List[Post]:
        return await self.get_list(where={"tenant_id": tenant_id}, order=[Post.id.asc()])

    async def get_by_slug(self, tenant_id: str, slug: str) -> Optional[Post]:
        return await self.get_one(where={"tenant_id": tenant_id, "slug": slug})

class PostCategoryDao(BaseDao[PostCategory]):
    def __init__(self, db_session: AsyncSession):
        super().__init__(PostCategory, db_session)

    async def list_by_posts(self, post_ids: List[int]) -> List[PostCategory]:
        return await self.get_list_in(
            "post_id", post_ids,
            order=[PostCategory.post_id.asc(), PostCategory.category_id.asc()],
            sort_key=attrgetter("post_id", "category_id")
        )

class PostTagDao(BaseDao[PostTag]):
    def __init__(self, db_session: AsyncSession):
        super().__init__(PostTag, db_session)

    async def list_by_posts(self, post_ids: List[int]) -> List[PostTag]:
        return await self.get_list_in(
            "post_id", post_ids,
            order=[PostTag.post_id.asc(), PostTag.tag_id.asc()],
            sort_key=attrgetter("post_id", "tag_id")
        )
