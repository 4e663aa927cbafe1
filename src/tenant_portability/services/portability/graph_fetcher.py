# src/tenant_portability/services/portability/graph_fetcher.py

import asyncio
import logging
from typing import Any, Callable, Awaitable, List, Type

from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tenant_portability.dao.media.folder_dao import MediaFolderDao
from tenant_portability.dao.media.media_dao import MediaDao
from tenant_portability.dao.taxonomy.category_dao import CategoryDao
from tenant_portability.dao.taxonomy.tag_dao import TagDao
from tenant_portability.dao.page.page_dao import PageDao, PageLayoutDao, PageVersionDao, PageComponentDao
from tenant_portability.dao.post.post_dao import PostDao, PostCategoryDao, PostTagDao
from tenant_portability.schemas.portability.envelope import TenantGraph
from tenant_portability.schemas.portability.rows import (
    MediaFolderRow, MediaRow, CategoryRow, TagRow,
    PageRow, PageLayoutRow, PageVersionRow, PageComponentRow,
    PostRow, PostCategoryRow, PostTagRow,
)
from tenant_portability.services.base_service import BaseService
from tenant_portability.services.exceptions import DataAccessError

logger = logging.getLogger(__name__)

class GraphFetcher(BaseService):
    """
    读取一个租户的全部内容图。

    两阶段并发：
      1. 相互独立的顶层集合 (pages, posts, media, media_folders, categories, tags) 并发查询；
      2. 拿到 page/post ID 集合后，再并发查询其子集合 (layouts, versions, components, 关联行)。

    AsyncSession 不支持并发语句，所以每个查询使用独立会话。
    不做重试，重试策略属于调用方。
    """

    async def _load(
        self,
        query: Callable[[AsyncSession], Awaitable[List[Any]]],
        schema: Type[BaseModel],
        label: str,
    ) -> List[Any]:
        try:
            async with self.session_factory() as session:
                rows = await query(session)
                return [schema.model_validate(row) for row in rows]
        except (SQLAlchemyError, OSError) as e:
            raise DataAccessError(f"Failed to load {label}: {e}") from e

    async def fetch(self, tenant_id: str) -> TenantGraph:
        # --- Phase 1: 顶层集合 ---
        pages, posts, media, media_folders, categories, tags = await asyncio.gather(
            self._load(lambda s: PageDao(s).list_by_tenant(tenant_id), PageRow, "pages"),
            self._load(lambda s: PostDao(s).list_by_tenant(tenant_id), PostRow, "posts"),
            self._load(lambda s: MediaDao(s).list_active_by_tenant(tenant_id), MediaRow, "media"),
            self._load(lambda s: MediaFolderDao(s).list_active_by_tenant(tenant_id), MediaFolderRow, "media_folders"),
            self._load(lambda s: CategoryDao(s).list_by_tenant(tenant_id), CategoryRow, "categories"),
            self._load(lambda s: TagDao(s).list_by_tenant(tenant_id), TagRow, "tags"),
        )

        page_ids = [p.id for p in pages]
        post_ids = [p.id for p in posts]

        # --- Phase 2: 依赖 ID 集合的子集合 ---
        page_layouts, page_versions, page_components = [], [], []
        post_categories, post_tags = [], []

        dependents = []
        if page_ids:
            dependents += [
                self._load(lambda s: PageLayoutDao(s).list_by_pages(page_ids), PageLayoutRow, "page_layouts"),
                self._load(lambda s: PageVersionDao(s).list_by_pages(page_ids, tenant_id), PageVersionRow, "page_versions"),
                self._load(lambda s: PageComponentDao(s).list_by_pages(page_ids), PageComponentRow, "page_components"),
            ]
        if post_ids:
            dependents += [
                self._load(lambda s: PostCategoryDao(s).list_by_posts(post_ids), PostCategoryRow, "post_categories"),
                self._load(lambda s: PostTagDao(s).list_by_posts(post_ids), PostTagRow, "post_tags"),
            ]

        results = list(await asyncio.gather(*dependents))
        if page_ids:
            page_layouts, page_versions, page_components = results[:3]
            results = results[3:]
        if post_ids:
            post_categories, post_tags = results

        graph = TenantGraph(
            media_folders=media_folders,
            media=media,
            categories=categories,
            tags=tags,
            pages=pages,
            page_layouts=page_layouts,
            page_versions=page_versions,
            page_components=page_components,
            posts=posts,
            post_categories=post_categories,
            post_tags=post_tags,
        )
        logger.info(f"[Export] Fetched graph for tenant {tenant_id}: {graph.counts()}")
        return graph
