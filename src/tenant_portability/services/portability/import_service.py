# src/tenant_portability/services/portability/import_service.py

import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from pydantic import BaseModel, ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tenant_portability.core.config import settings
from tenant_portability.core.context import AppContext
from tenant_portability.dao.media.folder_dao import MediaFolderDao
from tenant_portability.dao.media.media_dao import MediaDao
from tenant_portability.dao.taxonomy.category_dao import CategoryDao
from tenant_portability.dao.taxonomy.tag_dao import TagDao
from tenant_portability.dao.page.page_dao import PageDao, PageLayoutDao, PageVersionDao, PageComponentDao
from tenant_portability.dao.post.post_dao import PostDao, PostCategoryDao, PostTagDao
from tenant_portability.models import (
    SoftDeleteMixin, MediaFolder, Media, Category, Tag,
    Page, PageLayout, PageVersion, PageComponent,
    Post, PostCategory, PostTag,
)
from tenant_portability.schemas.portability.envelope import COLLECTIONS, ROW_SCHEMAS, ImportResult
from tenant_portability.schemas.portability.rows import (
    MediaFolderRow, MediaRow, CategoryRow, TagRow,
    PageRow, PageLayoutRow, PageVersionRow, PageComponentRow,
    PostRow, PostCategoryRow, PostTagRow,
)
from tenant_portability.services.base_service import BaseService
from tenant_portability.services.exceptions import InvalidEnvelopeError
from tenant_portability.services.portability.reference_rewriter import ReferenceRewriter
from tenant_portability.services.portability.utils import parents_first

logger = logging.getLogger(__name__)

# 单行处理结果: (目标库中的 ID, 是否新建)；None 表示静默跳过
RowOutcome = Optional[Tuple[Optional[int], bool]]

class _ImportRun:
    """一次导入运行的可变状态：每类实体一张 oldId -> newId 映射表、统计与错误列表。"""

    def __init__(self, tenant_id: str):
        self.tenant_id = tenant_id
        self.remap: Dict[str, Dict[int, int]] = {name: {} for name in COLLECTIONS}
        self.stats: Dict[str, int] = {name: 0 for name in COLLECTIONS}
        self.errors: List[str] = []

    def fail(self, collection: str, old_id: Any, reason: str):
        message = f"{collection}[{old_id}]: {reason}"
        self.errors.append(message)
        logger.warning(f"[Import] tenant={self.tenant_id} {message}")

def _describe(e: Exception) -> str:
    if isinstance(e, ValidationError):
        return "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or 'row'}: {err['msg']}" for err in e.errors()
        )
    # IntegrityError 等带有驱动层原始异常
    return str(getattr(e, "orig", None) or e)

def _columns(row: BaseModel, exclude: set) -> Dict[str, Any]:
    # 空值交给模型/数据库默认值
    return row.model_dump(exclude=exclude, exclude_none=True)

async def _reactivate(session: AsyncSession, existing: SoftDeleteMixin) -> RowOutcome:
    """复用同 slug 的已有行；已软删除的行恢复为可用，并计入 stats。"""
    if not existing.is_deleted:
        return existing.id, False
    existing.is_deleted = False
    existing.deleted_at = None
    await session.flush()
    return existing.id, True

class ImportService(BaseService):
    """
    [Service Layer] Import Engine.

    按依赖顺序逐集合、逐行写入目标租户:
      MediaFolder -> Media -> Category -> Tag -> Page -> PageLayout -> PageVersion
      -> PageComponent -> Post -> PostCategory / PostTag

    每行使用独立会话与事务，单行失败只记录错误，不影响其它行。
    自然键已存在的行直接复用其 ID，因此重复导入是安全的。
    """

    def __init__(self, context: AppContext, legacy_token_scan: Optional[bool] = None):
        super().__init__(context)
        self.legacy_token_scan = settings.IMPORT_LEGACY_ID_SCAN if legacy_token_scan is None else legacy_token_scan

    async def import_tenant(self, target_tenant_id: str, payload: Any) -> ImportResult:
        if not isinstance(payload, dict):
            raise InvalidEnvelopeError("Import payload must be a JSON object.")
        if payload.get("version") is None:
            raise InvalidEnvelopeError("Import payload is missing the 'version' field.")

        run = _ImportRun(target_tenant_id)
        expected = settings.EXPORT_FORMAT_VERSION
        if payload["version"] != expected:
            # 版本不符只记录，仍尝试导入
            run.errors.append(f"Unsupported envelope version {payload['version']!r}; expected {expected}.")
            logger.warning(f"[Import] tenant={target_tenant_id} envelope version {payload['version']!r} != {expected}")

        rows = {name: self._validate_rows(run, name, payload.get(name)) for name in COLLECTIONS}

        folders = parents_first(rows["media_folders"], lambda r: r.id, lambda r: r.parent_folder_id)
        categories = parents_first(rows["categories"], lambda r: r.id, lambda r: r.parent_id)

        await self._apply(run, "media_folders", folders, self._upsert_folder)
        await self._apply(run, "media", rows["media"], self._upsert_media)

        # 媒体映射已完整，后续文档都按它改写
        rewriter = ReferenceRewriter(run.remap["media"], legacy_token_scan=self.legacy_token_scan)

        await self._apply(run, "categories", categories, self._upsert_category)
        await self._apply(run, "tags", rows["tags"], self._upsert_tag)
        await self._apply(run, "pages", rows["pages"], self._upsert_page)
        await self._apply(run, "page_layouts", rows["page_layouts"],
                          lambda s, r, row: self._upsert_layout(s, r, row, rewriter))
        await self._apply(run, "page_versions", rows["page_versions"],
                          lambda s, r, row: self._upsert_version(s, r, row, rewriter))
        await self._apply(run, "page_components", rows["page_components"],
                          lambda s, r, row: self._upsert_component(s, r, row, rewriter))
        await self._apply(run, "posts", rows["posts"],
                          lambda s, r, row: self._upsert_post(s, r, row, rewriter))
        await self._apply(run, "post_categories", rows["post_categories"], self._link_category)
        await self._apply(run, "post_tags", rows["post_tags"], self._link_tag)

        result = ImportResult(success=not run.errors, stats=run.stats, errors=run.errors)
        logger.info(
            f"[Import] tenant={target_tenant_id} finished: success={result.success} "
            f"created={run.stats} errors={len(run.errors)}"
        )
        return result

    # ==============================================================================
    # 1. 解析与调度
    # ==============================================================================

    def _validate_rows(self, run: _ImportRun, collection: str, raw_rows: Any) -> List[BaseModel]:
        if raw_rows is None:
            return []
        if not isinstance(raw_rows, list):
            run.fail(collection, "*", "collection must be a list")
            return []

        schema = ROW_SCHEMAS[collection]
        valid = []
        for raw in raw_rows:
            try:
                valid.append(schema.model_validate(raw))
            except ValidationError as e:
                old_id = raw.get("id") if isinstance(raw, dict) else None
                run.fail(collection, old_id, _describe(e))
        return valid

    async def _apply(
        self,
        run: _ImportRun,
        collection: str,
        rows: List[BaseModel],
        handler: Callable[[AsyncSession, _ImportRun, Any], Awaitable[RowOutcome]],
    ):
        """顺序处理一个集合：后一行可能依赖前一行写入的映射 (如父文件夹)。"""
        for row in rows:
            old_id = getattr(row, "id", None)
            try:
                async with self.session_factory() as session, session.begin():
                    outcome = await handler(session, run, row)
            except SQLAlchemyError as e:
                run.fail(collection, old_id, _describe(e))
                continue

            if outcome is None:
                continue
            new_id, created = outcome
            # 事务提交成功后才记录映射
            if old_id is not None and new_id is not None:
                run.remap[collection][old_id] = new_id
            if created:
                run.stats[collection] += 1

    # ==============================================================================
    # 2. 各实体的 upsert
    # ==============================================================================

    async def _upsert_folder(self, session: AsyncSession, run: _ImportRun, row: MediaFolderRow) -> RowOutcome:
        dao = MediaFolderDao(session)
        existing = await dao.get_by_slug(run.tenant_id, row.slug)
        if existing:
            return await _reactivate(session, existing)

        data = _columns(row, {"id", "tenant_id", "parent_folder_id", "created_at", "updated_at"})
        folder = MediaFolder(
            **data,
            tenant_id=run.tenant_id,
            # 映射缺失视为无父级
            parent_folder_id=run.remap["media_folders"].get(row.parent_folder_id),
        )
        await dao.add(folder)
        return folder.id, True

    async def _upsert_media(self, session: AsyncSession, run: _ImportRun, row: MediaRow) -> RowOutcome:
        dao = MediaDao(session)
        slug = row.slug or f"media-{row.id}"
        existing = await dao.get_by_slug(run.tenant_id, slug)
        if existing:
            return await _reactivate(session, existing)

        data = _columns(row, {"id", "tenant_id", "folder_id", "slug", "metadata", "created_at", "updated_at"})
        media = Media(
            **data,
            tenant_id=run.tenant_id,
            slug=slug,
            folder_id=run.remap["media_folders"].get(row.folder_id),
            meta=row.metadata,
        )
        await dao.add(media)
        return media.id, True

    async def _upsert_category(self, session: AsyncSession, run: _ImportRun, row: CategoryRow) -> RowOutcome:
        dao = CategoryDao(session)
        existing = await dao.get_by_slug(run.tenant_id, row.slug)
        if existing:
            return existing.id, False

        data = _columns(row, {"id", "tenant_id", "parent_id", "created_at", "updated_at"})
        category = Category(**data, tenant_id=run.tenant_id, parent_id=run.remap["categories"].get(row.parent_id))
        await dao.add(category)
        return category.id, True

    async def _upsert_tag(self, session: AsyncSession, run: _ImportRun, row: TagRow) -> RowOutcome:
        dao = TagDao(session)
        existing = await dao.get_visible_by_slug(run.tenant_id, row.slug)
        if existing:
            return existing.id, False

        tag = Tag(**_columns(row, {"id", "tenant_id", "created_at", "updated_at"}), tenant_id=run.tenant_id)
        await dao.add(tag)
        return tag.id, True

    async def _upsert_page(self, session: AsyncSession, run: _ImportRun, row: PageRow) -> RowOutcome:
        dao = PageDao(session)
        if row.slug:
            existing = await dao.get_by_slug(run.tenant_id, row.slug)
            if existing:
                return existing.id, False

        page = Page(**_columns(row, {"id", "tenant_id", "created_at", "updated_at"}), tenant_id=run.tenant_id)
        await dao.add(page)
        return page.id, True

    async def _upsert_layout(
        self, session: AsyncSession, run: _ImportRun, row: PageLayoutRow, rewriter: ReferenceRewriter
    ) -> RowOutcome:
        page_id = run.remap["pages"].get(row.page_id)
        if page_id is None:
            return None

        dao = PageLayoutDao(session)
        existing = await dao.get_by_language(page_id, row.language)
        if existing:
            return existing.id, False

        if row.is_default:
            # 同一事务内先取消旧的默认布局
            await dao.clear_default(page_id)

        data = _columns(row, {"id", "page_id", "layout_json", "updated_at"})
        layout = PageLayout(**data, page_id=page_id)
        if row.layout_json is not None:
            layout.layout_json = rewriter.rewrite(row.layout_json)
        await dao.add(layout)
        return layout.id, True

    async def _upsert_version(
        self, session: AsyncSession, run: _ImportRun, row: PageVersionRow, rewriter: ReferenceRewriter
    ) -> RowOutcome:
        page_id = run.remap["pages"].get(row.page_id)
        if page_id is None:
            return None

        dao = PageVersionDao(session)
        existing = await dao.get_by_number(page_id, row.version_number)
        if existing:
            return existing.id, False

        data = _columns(row, {"id", "page_id", "tenant_id", "layout_json"})
        version = PageVersion(
            **data,
            page_id=page_id,
            tenant_id=run.tenant_id,
            layout_json=rewriter.rewrite(row.layout_json),
        )
        await dao.add(version)
        return version.id, True

    async def _upsert_component(
        self, session: AsyncSession, run: _ImportRun, row: PageComponentRow, rewriter: ReferenceRewriter
    ) -> RowOutcome:
        page_id = run.remap["pages"].get(row.page_id)
        if page_id is None:
            return None

        dao = PageComponentDao(session)
        existing = await dao.get_by_position(page_id, row.component_key, row.sort_order)
        if existing:
            return existing.id, False

        component = PageComponent(**_columns(row, {"id", "page_id", "props", "updated_at"}), page_id=page_id)
        if row.props is not None:
            component.props = rewriter.rewrite(row.props)
        await dao.add(component)
        return component.id, True

    async def _upsert_post(
        self, session: AsyncSession, run: _ImportRun, row: PostRow, rewriter: ReferenceRewriter
    ) -> RowOutcome:
        dao = PostDao(session)
        if row.slug:
            existing = await dao.get_by_slug(run.tenant_id, row.slug)
            if existing:
                return existing.id, False

        data = _columns(row, {"id", "tenant_id", "featured_image_id", "content", "created_at", "updated_at"})
        post = Post(
            **data,
            tenant_id=run.tenant_id,
            featured_image_id=run.remap["media"].get(row.featured_image_id),
            content=rewriter.rewrite(row.content),
        )
        await dao.add(post)
        return post.id, True

    async def _link_category(self, session: AsyncSession, run: _ImportRun, row: PostCategoryRow) -> RowOutcome:
        post_id = run.remap["posts"].get(row.post_id)
        category_id = run.remap["categories"].get(row.category_id)
        if post_id is None or category_id is None:
            return None

        dao = PostCategoryDao(session)
        if await dao.exists({"post_id": post_id, "category_id": category_id}):
            return None, False
        await dao.add(PostCategory(post_id=post_id, category_id=category_id))
        return None, True

    async def _link_tag(self, session: AsyncSession, run: _ImportRun, row: PostTagRow) -> RowOutcome:
        post_id = run.remap["posts"].get(row.post_id)
        tag_id = run.remap["tags"].get(row.tag_id)
        if post_id is None or tag_id is None:
            return None

        dao = PostTagDao(session)
        if await dao.exists({"post_id": post_id, "tag_id": tag_id}):
            return None, False
        await dao.add(PostTag(post_id=post_id, tag_id=tag_id))
        return None, True
