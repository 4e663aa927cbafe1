# tenant_portability/models/page.py

from sqlalchemy import (
    Column, Integer, String, Text, JSON, Boolean, ForeignKey, Date,
    DateTime, func, Index, UniqueConstraint, CheckConstraint, text
)
from sqlalchemy.orm import relationship
from tenant_portability.db.base import Base

class Page(Base):
    __tablename__ = 'pages'
    __table_args__ = (
        UniqueConstraint('tenant_id', 'slug', name='uq_pages_tenant_slug'),
        CheckConstraint("page_type IN ('page', 'landing', 'legal')", name='valid_page_type'),
    )

    id = Column(Integer, primary_key=True)
    tenant_id = Column(String(255), nullable=False, index=True)

    page_name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False)
    status = Column(String(50), nullable=False, default='draft')
    page_type = Column(String(50), nullable=False, default='page')

    # SEO
    meta_title = Column(String(255), nullable=True)
    meta_description = Column(Text, nullable=True)
    seo_index = Column(Boolean, nullable=False, default=True)

    # Landing / Legal 页面专用字段
    campaign_source = Column(String(100), nullable=True)
    conversion_goal = Column(String(255), nullable=True)
    legal_type = Column(String(100), nullable=True)
    last_reviewed_date = Column(Date, nullable=True)
    version = Column(String(20), nullable=True, default='1.0')

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    layouts = relationship("PageLayout", back_populates="page")

class PageLayout(Base):
    """
    页面布局文档 (组件树)，按语言区分。每个页面至多一个默认语言布局。
    """
    __tablename__ = 'page_layouts'
    __table_args__ = (
        UniqueConstraint('page_id', 'language', name='uq_page_layouts_page_language'),
        Index(
            'uq_page_layouts_default_per_page', 'page_id', unique=True,
            postgresql_where=text('is_default IS TRUE'),
            sqlite_where=text('is_default IS TRUE'),
        ),
    )

    id = Column(Integer, primary_key=True)
    page_id = Column(Integer, ForeignKey('pages.id', ondelete='CASCADE'), nullable=False, index=True)
    language = Column(String(20), nullable=False, default='default')
    layout_json = Column(JSON, nullable=False, default=lambda: {"components": []})
    is_default = Column(Boolean, nullable=False, default=False)
    version = Column(Integer, nullable=False, default=1)

    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    page = relationship("Page", back_populates="layouts")

class PageVersion(Base):
    """
    页面历史快照，(page_id, version_number) 唯一且不可变。
    """
    __tablename__ = 'page_versions'
    __table_args__ = (
        UniqueConstraint('page_id', 'version_number', name='uq_page_versions_page_number'),
    )

    id = Column(Integer, primary_key=True)
    page_id = Column(Integer, ForeignKey('pages.id', ondelete='CASCADE'), nullable=False, index=True)
    tenant_id = Column(String(255), nullable=False, index=True)
    version_number = Column(Integer, nullable=False)

    page_name = Column(String(255), nullable=True)
    slug = Column(String(255), nullable=True)
    meta_title = Column(String(255), nullable=True)
    meta_description = Column(Text, nullable=True)
    seo_index = Column(Boolean, nullable=True)
    status = Column(String(50), nullable=True)
    page_type = Column(String(50), nullable=True)
    layout_json = Column(JSON, nullable=True)
    comment = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    created_by = Column(String(255), nullable=True)

class PageComponent(Base):
    __tablename__ = 'page_components'

    id = Column(Integer, primary_key=True)
    page_id = Column(Integer, ForeignKey('pages.id', ondelete='CASCADE'), nullable=False, index=True)
    component_key = Column(String(100), nullable=False)
    props = Column(JSON, nullable=False, default=dict)
    sort_order = Column(Integer, nullable=False, default=0)

    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
