# tenant_portability/models/taxonomy.py

from sqlalchemy import (
    Column, Integer, String, Text, ForeignKey, DateTime, func, UniqueConstraint
)
from sqlalchemy.orm import relationship
from tenant_portability.db.base import Base

class Category(Base):
    __tablename__ = 'categories'
    __table_args__ = (
        UniqueConstraint('tenant_id', 'slug', name='uq_categories_tenant_slug'),
    )

    id = Column(Integer, primary_key=True)
    tenant_id = Column(String(255), nullable=False, index=True)
    parent_id = Column(Integer, ForeignKey('categories.id', ondelete='SET NULL'), nullable=True, index=True)

    name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    parent = relationship("Category", remote_side=[id])

class Tag(Base):
    """
    标签。tenant_id 为空表示全平台共享标签。
    """
    __tablename__ = 'tags'
    __table_args__ = (
        UniqueConstraint('tenant_id', 'slug', name='uq_tags_tenant_slug'),
    )

    id = Column(Integer, primary_key=True)
    tenant_id = Column(String(255), nullable=True, index=True)

    name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    meta_title = Column(String(255), nullable=True)
    meta_description = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
