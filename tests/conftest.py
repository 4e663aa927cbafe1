# tests/conftest.py

from typing import AsyncGenerator, Dict
import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import (
    create_async_engine,
    AsyncEngine,
    async_sessionmaker,
    AsyncSession,
)
from sqlalchemy.pool import NullPool

from tenant_portability.main import app
from tenant_portability.db.base import Base
from tenant_portability.db.session import get_session_factory
from tenant_portability.api.dependencies.context import get_storage
from tenant_portability.core.context import AppContext
from tenant_portability.core.storage.local import LocalStorageProvider
from tenant_portability.models import (
    Tenant, MediaFolder, Media, Category, Tag,
    Page, PageLayout, PageVersion, PageComponent,
    Post, PostCategory, PostTag,
)

# ==============================================================================
# 1. 数据库 Fixtures
# ==============================================================================

@pytest.fixture(scope="function")
async def test_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """
    每个测试一个全新的 SQLite 文件库。
    使用 NullPool 确保每个会话都是独立连接，Graph Fetcher 的并发查询才能同时进行。
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'portability.db'}", poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()

@pytest.fixture(scope="function")
def session_factory(test_engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        autocommit=False, autoflush=False, expire_on_commit=False, bind=test_engine, class_=AsyncSession
    )

@pytest.fixture(scope="function")
async def broken_session_factory(tmp_path) -> AsyncGenerator[async_sessionmaker, None]:
    """指向一个没有任何表的数据库，所有查询都会失败。"""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'empty.db'}", poolclass=NullPool)
    yield async_sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)
    await engine.dispose()

# ==============================================================================
# 2. 存储与上下文 Fixtures
# ==============================================================================

@pytest.fixture(scope="function")
def storage(tmp_path) -> LocalStorageProvider:
    return LocalStorageProvider(root=str(tmp_path / "storage"), public_domain="https://backups.test")

@pytest.fixture(scope="function")
def app_context(session_factory: async_sessionmaker, storage: LocalStorageProvider) -> AppContext:
    return AppContext(session_factory=session_factory, storage=storage)

@pytest.fixture(scope="function")
async def client(
    session_factory: async_sessionmaker,
    storage: LocalStorageProvider,
) -> AsyncGenerator[AsyncClient, None]:
    """
    只覆盖最底层的依赖 (会话工厂与存储)，让 FastAPI 的 DI 系统构建上层的 AppContext。
    """
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_storage] = lambda: storage

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()

# ==============================================================================
# 3. 数据构造辅助
# ==============================================================================

async def seed_tenant(session_factory: async_sessionmaker, tenant_id: str) -> Dict[str, int]:
    """
    构造一个包含所有实体类型的租户内容图，返回关键行的 ID。
    文档字段里嵌入了媒体 ID，用于验证导入时的引用改写。
    """
    async with session_factory() as session, session.begin():
        session.add(Tenant(id=tenant_id, name=tenant_id.title()))

        assets = MediaFolder(tenant_id=tenant_id, name="Assets", slug="assets", folder_path="/assets")
        session.add(assets)
        await session.flush()
        logos = MediaFolder(
            tenant_id=tenant_id, parent_folder_id=assets.id, name="Logos", slug="logos", folder_path="/assets/logos"
        )
        session.add(logos)
        await session.flush()

        hero = Media(
            tenant_id=tenant_id, folder_id=logos.id, filename="hero.png", slug="hero",
            url="/files/hero.png", relative_path="files/hero.png", mime_type="image/png",
            width=1200, height=630, meta={"exif": {"camera": "X100"}},
        )
        banner = Media(tenant_id=tenant_id, filename="banner.png", slug="banner",
                       url="https://cdn.x/banner.png", mime_type="image/png")
        trashed = Media(tenant_id=tenant_id, filename="old.png", slug="old", url="/files/old.png", is_deleted=True)
        news = Category(tenant_id=tenant_id, name="News", slug="news")
        tag = Tag(tenant_id=tenant_id, name="Python", slug="python")
        page = Page(tenant_id=tenant_id, page_name="Home", slug="home", status="published")
        session.add_all([hero, banner, trashed, news, tag, page])
        await session.flush()

        local_news = Category(tenant_id=tenant_id, parent_id=news.id, name="Local", slug="local-news")
        post = Post(
            tenant_id=tenant_id, title="Hello", slug="hello", status="published",
            featured_image_id=hero.id,
            content={"blocks": [
                {"type": "image", "mediaId": hero.id},
                {"type": "text", "text": "Ships in 3 days"},
            ]},
        )
        session.add_all([
            local_news,
            post,
            PageLayout(
                page_id=page.id, language="default", is_default=True,
                layout_json={"components": [{"type": "Hero", "props": {"mediaId": hero.id, "title": "Welcome"}}]},
            ),
            PageLayout(
                page_id=page.id, language="fr", is_default=False,
                layout_json={"components": [{"type": "Gallery", "props": {"images": [{"image_id": str(banner.id)}]}}]},
            ),
            PageVersion(
                page_id=page.id, tenant_id=tenant_id, version_number=1, page_name="Home", slug="home",
                layout_json={"components": [{"props": {"mediaId": hero.id}}]},
            ),
            PageComponent(page_id=page.id, component_key="hero", props={"imageId": hero.id, "height": 480}, sort_order=0),
        ])
        await session.flush()

        session.add_all([
            PostCategory(post_id=post.id, category_id=local_news.id),
            PostTag(post_id=post.id, tag_id=tag.id),
        ])

    return {
        "assets": assets.id, "logos": logos.id,
        "hero": hero.id, "banner": banner.id, "trashed": trashed.id,
        "news": news.id, "local_news": local_news.id, "tag": tag.id,
        "page": page.id, "post": post.id,
    }

async def count_rows(session_factory: async_sessionmaker, model, **where) -> int:
    async with session_factory() as session:
        stmt = select(func.count()).select_from(model).where(
            *[getattr(model, field) == value for field, value in where.items()]
        )
        return (await session.execute(stmt)).scalar_one()

async def fetch_one(session_factory: async_sessionmaker, model, **where):
    async with session_factory() as session:
        return (await session.execute(select(model).filter_by(**where))).scalars().one()

@pytest.fixture(scope="function")
async def seeded_tenant(session_factory: async_sessionmaker) -> Dict[str, int]:
    return await seed_tenant(session_factory, "tenant-a")
