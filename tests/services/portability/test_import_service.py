# tests/services/portability/test_import_service.py

import json
import pytest
from tenant_portability.core.config import settings
from tenant_portability.models import (
    MediaFolder, Media, Category, Tag, Page, PageLayout, PageVersion, PageComponent, Post, PostCategory, PostTag
)
from tenant_portability.services.exceptions import InvalidEnvelopeError
from tenant_portability.services.portability.export_service import ExportService
from tenant_portability.services.portability.import_service import ImportService
from conftest import count_rows, fetch_one

async def _export_document(app_context, tenant_id: str = "tenant-a") -> dict:
    return json.loads(await ExportService(app_context).export_to_json(tenant_id))

# ==============================================================================
# 1. Round Trip & Idempotence
# ==============================================================================

async def test_import_into_fresh_tenant_creates_every_row(app_context, seeded_tenant):
    document = await _export_document(app_context)

    result = await ImportService(app_context).import_tenant("tenant-b", document)

    assert result.success is True
    assert result.errors == []
    assert result.stats == document["counts"]

async def test_reimport_is_idempotent(app_context, session_factory, seeded_tenant):
    document = await _export_document(app_context)
    service = ImportService(app_context)

    first = await service.import_tenant("tenant-b", document)
    counts_after_first = {m.__name__: await count_rows(session_factory, m) for m in (Media, Page, Post, PageLayout)}
    second = await service.import_tenant("tenant-b", document)
    counts_after_second = {m.__name__: await count_rows(session_factory, m) for m in (Media, Page, Post, PageLayout)}

    assert first.success and second.success
    assert second.errors == []
    assert all(value == 0 for value in second.stats.values())
    assert counts_after_first == counts_after_second

# ==============================================================================
# 2. Reference Integrity
# ==============================================================================

async def test_embedded_media_ids_point_at_new_rows(app_context, session_factory, seeded_tenant):
    document = await _export_document(app_context)
    await ImportService(app_context).import_tenant("tenant-b", document)

    hero = await fetch_one(session_factory, Media, tenant_id="tenant-b", slug="hero")
    banner = await fetch_one(session_factory, Media, tenant_id="tenant-b", slug="banner")
    assert hero.id != seeded_tenant["hero"]

    post = await fetch_one(session_factory, Post, tenant_id="tenant-b", slug="hello")
    assert post.featured_image_id == hero.id
    assert post.content["blocks"][0]["mediaId"] == hero.id
    assert post.content["blocks"][1]["text"] == "Ships in 3 days"

    page = await fetch_one(session_factory, Page, tenant_id="tenant-b", slug="home")
    default_layout = await fetch_one(session_factory, PageLayout, page_id=page.id, language="default")
    fr_layout = await fetch_one(session_factory, PageLayout, page_id=page.id, language="fr")
    assert default_layout.layout_json["components"][0]["props"]["mediaId"] == hero.id
    assert fr_layout.layout_json["components"][0]["props"]["images"][0]["image_id"] == str(banner.id)

    version = await fetch_one(session_factory, PageVersion, page_id=page.id, version_number=1)
    assert version.tenant_id == "tenant-b"
    assert version.layout_json["components"][0]["props"]["mediaId"] == hero.id

    component = await fetch_one(session_factory, PageComponent, page_id=page.id)
    assert component.props == {"imageId": hero.id, "height": 480}

async def test_parent_references_are_remapped(app_context, session_factory, seeded_tenant):
    document = await _export_document(app_context)
    # 子文件夹排在父文件夹之前
    document["media_folders"].reverse()
    document["categories"].reverse()

    result = await ImportService(app_context).import_tenant("tenant-b", document)
    assert result.success is True

    assets = await fetch_one(session_factory, MediaFolder, tenant_id="tenant-b", slug="assets")
    logos = await fetch_one(session_factory, MediaFolder, tenant_id="tenant-b", slug="logos")
    hero = await fetch_one(session_factory, Media, tenant_id="tenant-b", slug="hero")
    assert logos.parent_folder_id == assets.id
    assert hero.folder_id == logos.id

    news = await fetch_one(session_factory, Category, tenant_id="tenant-b", slug="news")
    local_news = await fetch_one(session_factory, Category, tenant_id="tenant-b", slug="local-news")
    assert local_news.parent_id == news.id

    post = await fetch_one(session_factory, Post, tenant_id="tenant-b", slug="hello")
    link = await fetch_one(session_factory, PostCategory, post_id=post.id)
    assert link.category_id == local_news.id
    assert await count_rows(session_factory, PostTag, post_id=post.id) == 1

async def test_existing_category_is_reused(app_context, session_factory, seeded_tenant):
    async with session_factory() as session, session.begin():
        existing = Category(tenant_id="tenant-b", name="Existing News", slug="news")
        session.add(existing)

    document = await _export_document(app_context)
    result = await ImportService(app_context).import_tenant("tenant-b", document)

    assert result.success is True
    assert result.stats["categories"] == 1
    assert await count_rows(session_factory, Category, tenant_id="tenant-b", slug="news") == 1
    local_news = await fetch_one(session_factory, Category, tenant_id="tenant-b", slug="local-news")
    assert local_news.parent_id == existing.id

async def test_soft_deleted_rows_are_reactivated_and_remapped(app_context, session_factory, seeded_tenant):
    async with session_factory() as session, session.begin():
        trashed_folder = MediaFolder(tenant_id="tenant-b", name="Old Assets", slug="assets", is_deleted=True)
        trashed_hero = Media(tenant_id="tenant-b", filename="hero.png", slug="hero", url="/old.png", is_deleted=True)
        session.add_all([trashed_folder, trashed_hero])

    document = await _export_document(app_context)
    service = ImportService(app_context)
    result = await service.import_tenant("tenant-b", document)

    assert result.success is True
    assert result.errors == []
    # 恢复的行同样计入 stats
    assert result.stats["media_folders"] == 2
    assert result.stats["media"] == 2

    folder = await fetch_one(session_factory, MediaFolder, tenant_id="tenant-b", slug="assets")
    hero = await fetch_one(session_factory, Media, tenant_id="tenant-b", slug="hero")
    assert (folder.id, folder.is_deleted) == (trashed_folder.id, False)
    assert (hero.id, hero.is_deleted) == (trashed_hero.id, False)

    post = await fetch_one(session_factory, Post, tenant_id="tenant-b", slug="hello")
    assert post.featured_image_id == hero.id
    assert post.content["blocks"][0]["mediaId"] == hero.id
    page = await fetch_one(session_factory, Page, tenant_id="tenant-b", slug="home")
    component = await fetch_one(session_factory, PageComponent, page_id=page.id)
    assert component.props["imageId"] == hero.id

    rerun = await service.import_tenant("tenant-b", document)
    assert rerun.success is True
    assert all(value == 0 for value in rerun.stats.values())

async def test_shared_tag_is_reused(app_context, session_factory, seeded_tenant):
    async with session_factory() as session, session.begin():
        shared = Tag(tenant_id=None, name="Python", slug="python")
        session.add(shared)

    document = await _export_document(app_context)
    result = await ImportService(app_context).import_tenant("tenant-b", document)

    assert result.success is True
    assert result.stats["tags"] == 0
    assert result.stats["post_tags"] == 1
    assert await count_rows(session_factory, Tag, tenant_id="tenant-b") == 0
    post = await fetch_one(session_factory, Post, tenant_id="tenant-b", slug="hello")
    link = await fetch_one(session_factory, PostTag, post_id=post.id)
    assert link.tag_id == shared.id

# ==============================================================================
# 3. Failure Policy
# ==============================================================================

async def test_one_bad_page_does_not_abort_the_batch(app_context, session_factory):
    pages = [{"id": i, "page_name": f"Page {i}", "slug": f"page-{i}"} for i in range(1, 10)]
    # slug 为 NOT NULL 列
    pages.append({"id": 10, "page_name": "Broken", "slug": None})
    payload = {"version": settings.EXPORT_FORMAT_VERSION, "tenantId": "src", "pages": pages}

    result = await ImportService(app_context).import_tenant("tenant-b", payload)

    assert result.stats["pages"] == 9
    assert len(result.errors) == 1
    assert result.errors[0].startswith("pages[10]")
    assert result.success is False
    assert await count_rows(session_factory, Page, tenant_id="tenant-b") == 9

async def test_invalid_rows_are_reported_per_row(app_context):
    payload = {
        "version": settings.EXPORT_FORMAT_VERSION,
        "media": [{"slug": "no-id"}, {"id": 1, "slug": "ok", "url": "/a.png"}],
        "pages": [{"id": 1, "page_name": "Bad type", "slug": "bad", "page_type": "bogus"}],
        "tags": "not-a-list",
    }

    result = await ImportService(app_context).import_tenant("tenant-b", payload)

    assert result.stats["media"] == 1
    assert result.stats["pages"] == 0
    assert len(result.errors) == 3
    assert any(e.startswith("media[None]") for e in result.errors)
    assert any(e.startswith("pages[1]") for e in result.errors)
    assert any(e.startswith("tags[*]") for e in result.errors)

async def test_media_without_slug_gets_deterministic_slug(app_context, session_factory):
    payload = {"version": settings.EXPORT_FORMAT_VERSION, "media": [{"id": 42, "url": "/a.png"}]}
    service = ImportService(app_context)

    first = await service.import_tenant("tenant-b", payload)
    second = await service.import_tenant("tenant-b", payload)

    assert first.stats["media"] == 1
    assert second.stats["media"] == 0
    assert (await fetch_one(session_factory, Media, tenant_id="tenant-b")).slug == "media-42"

async def test_orphan_children_are_skipped_silently(app_context):
    payload = {
        "version": settings.EXPORT_FORMAT_VERSION,
        "page_layouts": [{"page_id": 999, "language": "default", "layout_json": {}}],
        "post_tags": [{"post_id": 1, "tag_id": 1}],
    }

    result = await ImportService(app_context).import_tenant("tenant-b", payload)

    assert result.success is True
    assert result.stats["page_layouts"] == 0
    assert result.stats["post_tags"] == 0

async def test_version_mismatch_is_recorded_but_import_proceeds(app_context):
    payload = {
        "version": settings.EXPORT_FORMAT_VERSION + 1,
        "categories": [{"id": 1, "name": "News", "slug": "news"}],
    }

    result = await ImportService(app_context).import_tenant("tenant-b", payload)

    assert result.success is False
    assert len(result.errors) == 1
    assert "version" in result.errors[0]
    assert result.stats["categories"] == 1

@pytest.mark.parametrize("payload", [[], "envelope", {"tenantId": "x", "pages": []}])
async def test_structurally_invalid_envelope_raises(app_context, payload):
    with pytest.raises(InvalidEnvelopeError):
        await ImportService(app_context).import_tenant("tenant-b", payload)

# ==============================================================================
# 4. Default Layout
# ==============================================================================

async def test_only_one_default_layout_per_page(app_context, session_factory):
    payload = {
        "version": settings.EXPORT_FORMAT_VERSION,
        "pages": [{"id": 1, "page_name": "Home", "slug": "home"}],
        "page_layouts": [
            {"page_id": 1, "language": "default", "is_default": True, "layout_json": {"components": []}},
            {"page_id": 1, "language": "fr", "is_default": True, "layout_json": {"components": []}},
        ],
    }

    result = await ImportService(app_context).import_tenant("tenant-b", payload)

    assert result.success is True
    page = await fetch_one(session_factory, Page, tenant_id="tenant-b", slug="home")
    assert await count_rows(session_factory, PageLayout, page_id=page.id) == 2
    default = await fetch_one(session_factory, PageLayout, page_id=page.id, is_default=True)
    assert default.language == "fr"

async def test_legacy_scan_rewrites_free_text(app_context, session_factory):
    payload = {
        "version": settings.EXPORT_FORMAT_VERSION,
        "media": [{"id": 5000, "slug": "legacy", "url": "/legacy.png"}],
        "posts": [{"id": 1, "title": "Old", "slug": "old", "content": "[gallery ids=5000]"}],
    }

    await ImportService(app_context, legacy_token_scan=True).import_tenant("tenant-b", payload)

    media = await fetch_one(session_factory, Media, tenant_id="tenant-b", slug="legacy")
    post = await fetch_one(session_factory, Post, tenant_id="tenant-b", slug="old")
    assert post.content == f"[gallery ids={media.id}]"
