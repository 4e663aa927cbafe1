# src/tenant_portability/schemas/portability/envelope.py

from typing import Any, Dict, List
from pydantic import BaseModel, ConfigDict, Field

from .rows import (
    MediaFolderRow, MediaRow, CategoryRow, TagRow,
    PageRow, PageLayoutRow, PageVersionRow, PageComponentRow,
    PostRow, PostCategoryRow, PostTagRow,
)

# 信封中所有实体集合的键，同时也是 counts / stats 的键
COLLECTIONS = (
    "media_folders", "media",
    "categories", "tags",
    "pages", "page_layouts", "page_versions", "page_components",
    "posts", "post_categories", "post_tags",
)

ROW_SCHEMAS = {
    "media_folders": MediaFolderRow,
    "media": MediaRow,
    "categories": CategoryRow,
    "tags": TagRow,
    "pages": PageRow,
    "page_layouts": PageLayoutRow,
    "page_versions": PageVersionRow,
    "page_components": PageComponentRow,
    "posts": PostRow,
    "post_categories": PostCategoryRow,
    "post_tags": PostTagRow,
}

class TenantGraph(BaseModel):
    """
    一个租户的完整内容图，每个集合按主键升序排列。
    """
    media_folders: List[MediaFolderRow] = Field(default_factory=list)
    media: List[MediaRow] = Field(default_factory=list)
    categories: List[CategoryRow] = Field(default_factory=list)
    tags: List[TagRow] = Field(default_factory=list)
    pages: List[PageRow] = Field(default_factory=list)
    page_layouts: List[PageLayoutRow] = Field(default_factory=list)
    page_versions: List[PageVersionRow] = Field(default_factory=list)
    page_components: List[PageComponentRow] = Field(default_factory=list)
    posts: List[PostRow] = Field(default_factory=list)
    post_categories: List[PostCategoryRow] = Field(default_factory=list)
    post_tags: List[PostTagRow] = Field(default_factory=list)

    def counts(self) -> Dict[str, int]:
        return {name: len(getattr(self, name)) for name in COLLECTIONS}

class Envelope(BaseModel):
    """
    导出/导入使用的版本化 JSON 文档：头部信息 + 租户内容图。
    """
    model_config = ConfigDict(populate_by_name=True)

    version: int
    tenant_id: str = Field(..., alias="tenantId")
    exported_at: str = Field(..., alias="exportedAt")
    counts: Dict[str, int] = Field(default_factory=dict)
    graph: TenantGraph = Field(default_factory=TenantGraph)

    def header(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "tenantId": self.tenant_id,
            "exportedAt": self.exported_at,
            "counts": dict(self.counts),
        }

    def to_document(self) -> Dict[str, Any]:
        """序列化为线上格式：camelCase 头部 + 蛇形命名的实体集合。"""
        return {**self.header(), **self.graph.model_dump(mode="json")}

class ImportResult(BaseModel):
    success: bool
    stats: Dict[str, int]
    errors: List[str] = Field(default_factory=list)
