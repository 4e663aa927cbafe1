# src/tenant_portability/schemas/portability/rows.py

from datetime import date, datetime
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field, AliasChoices

class RowBase(BaseModel):
    """
    信封中一行实体数据。读取 ORM 对象 (导出) 与解析信封字典 (导入) 共用同一模型。
    未知字段直接忽略，以兼容来自更新版本的导出文件。
    """
    model_config = ConfigDict(from_attributes=True, extra='ignore')

class MediaFolderRow(RowBase):
    id: int
    tenant_id: Optional[str] = None
    parent_folder_id: Optional[int] = None
    name: str
    slug: str
    description: Optional[str] = None
    folder_path: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class MediaRow(RowBase):
    id: int
    tenant_id: Optional[str] = None
    folder_id: Optional[int] = None
    filename: Optional[str] = None
    original_filename: Optional[str] = None
    slug: Optional[str] = None
    alt_text: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    url: Optional[str] = None
    relative_path: Optional[str] = None
    mime_type: Optional[str] = None
    file_extension: Optional[str] = None
    file_size: Optional[int] = None
    media_type: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    duration: Optional[float] = None
    # ORM 属性名为 meta，信封中的键为 metadata
    metadata: Optional[Any] = Field(None, validation_alias=AliasChoices("meta", "metadata"))
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class CategoryRow(RowBase):
    id: int
    tenant_id: Optional[str] = None
    parent_id: Optional[int] = None
    name: str
    slug: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class TagRow(RowBase):
    id: int
    tenant_id: Optional[str] = None
    name: str
    slug: str
    description: Optional[str] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class PageRow(RowBase):
    id: int
    tenant_id: Optional[str] = None
    page_name: str
    slug: Optional[str] = None
    status: str = 'draft'
    page_type: str = 'page'
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    seo_index: bool = True
    campaign_source: Optional[str] = None
    conversion_goal: Optional[str] = None
    legal_type: Optional[str] = None
    last_reviewed_date: Optional[date] = None
    version: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class PageLayoutRow(RowBase):
    id: Optional[int] = None
    page_id: int
    language: str = 'default'
    layout_json: Any = None
    is_default: bool = False
    version: int = 1
    updated_at: Optional[datetime] = None

class PageVersionRow(RowBase):
    id: Optional[int] = None
    page_id: int
    tenant_id: Optional[str] = None
    version_number: int
    page_name: Optional[str] = None
    slug: Optional[str] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    seo_index: Optional[bool] = None
    status: Optional[str] = None
    page_type: Optional[str] = None
    layout_json: Any = None
    comment: Optional[str] = None
    created_at: Optional[datetime] = None
    created_by: Optional[str] = None

class PageComponentRow(RowBase):
    id: Optional[int] = None
    page_id: int
    component_key: str
    props: Any = None
    sort_order: int = 0
    updated_at: Optional[datetime] = None

class PostRow(RowBase):
    id: int
    tenant_id: Optional[str] = None
    title: str
    slug: Optional[str] = None
    content: Any = None
    excerpt: Optional[str] = None
    status: str = 'draft'
    post_type: str = 'post'
    menu_order: int = 0
    featured_image_id: Optional[int] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    meta_keywords: Optional[str] = None
    canonical_url: Optional[str] = None
    robots_meta: Optional[str] = None
    og_title: Optional[str] = None
    og_description: Optional[str] = None
    og_image: Optional[str] = None
    twitter_title: Optional[str] = None
    twitter_description: Optional[str] = None
    twitter_image: Optional[str] = None
    published_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class PostCategoryRow(RowBase):
    post_id: int
    category_id: int

class PostTagRow(RowBase):
    post_id: int
    tag_id: int
