# tenant_portability/models/post.py

from sqlalchemy import (
    Column, Integer, String, Text, JSON, ForeignKey, DateTime, func, UniqueConstraint
)
from sqlalchemy.orm import relationship
from tenant_portability.db.base import Base

class Post(Base):
    __tablename__ = 'posts'
    __table_args__ = (
        UniqueConstraint('tenant_id', 'slug', name='uq_posts_tenant_slug'),
    )

    id = Column(Integer, primary_key=True)
    tenant_id = Column(String(255), nullable=False, index=True)

    title = Column(String(500), nullable=False)
    slug = Column(String(255), nullable=False)
    # 富文本文档 (JSON 结构或历史 HTML 字符串)
    content = Column(JSON, nullable=True)
    excerpt = Column(Text, nullable=True)
    status = Column(String(50), nullable=False, default='draft')
    post_type = Column(String(50), nullable=False, default='post')
    menu_order = Column(Integer, nullable=False, default=0)

    featured_image_id = Column(Integer, ForeignKey('media.id', ondelete='SET NULL'), nullable=True)

    # SEO
    meta_title = Column(String(255), nullable=True)
    meta_description = Column(Text, nullable=True)
    meta_keywords = Column(Text, nullable=True)
    canonical_url = Column(String(2048), nullable=True)
    robots_meta = Column(String(100), nullable=True, default='index,follow')
    og_title = Column(String(255), nullable=True)
    og_description = Column(Text, nullable=True)
    og_image = Column(String(2048), nullable=True)
    twitter_title = Column(String(255), nullable=True)
    twitter_description = Column(Text, nullable=True)
    twitter_image = Column(String(2048), nullable=True)

    published_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    featured_image = relationship("Media")

class PostCategory(Base):
    __tablename__ = 'post_categories'

    post_id = Column(Integer, ForeignKey('posts.id', ondelete='CASCADE'), primary_key=True)
    category_id = Column(Integer, ForeignKey('categories.id', ondelete='CASCADE'), primary_key=True)

class PostTag(Base):
    __tablename__ = 'post_tags'

    post_id = Column(Integer, ForeignKey('posts.id', ondelete='CASCADE'), primary_key=True)
    tag_id = Column(Integer, ForeignKey('tags.id', ondelete='CASCADE'), primary_key=True)
