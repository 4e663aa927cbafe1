# tenant_portability/models/media.py

from sqlalchemy import (
    Column, Integer, String, Text, JSON, Boolean, ForeignKey,
    DateTime, func, BigInteger, Float, UniqueConstraint
)
from sqlalchemy.orm import relationship
from tenant_portability.db.base import Base

class SoftDeleteMixin:
    is_deleted = Column(Boolean, default=False, nullable=False, index=True)
    deleted_at = Column(DateTime(timezone=True), nullable=True)

class MediaFolder(Base, SoftDeleteMixin):
    """
    媒体文件夹 - 层级化管理租户媒体。
    """
    __tablename__ = 'media_folders'
    __table_args__ = (
        UniqueConstraint('tenant_id', 'slug', name='uq_media_folders_tenant_slug'),
    )

    id = Column(Integer, primary_key=True)
    tenant_id = Column(String(255), nullable=False, index=True)

    # 层级关系
    parent_folder_id = Column(Integer, ForeignKey('media_folders.id', ondelete='SET NULL'), nullable=True, index=True)

    name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    folder_path = Column(String(1024), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    parent = relationship("MediaFolder", remote_side=[id], back_populates="children")
    children = relationship("MediaFolder", back_populates="parent")
    media = relationship("Media", back_populates="folder")

class Media(Base, SoftDeleteMixin):
    """
    媒体元数据。二进制内容位于对象存储，这里只记录 URL 与描述信息。
    """
    __tablename__ = 'media'
    __table_args__ = (
        UniqueConstraint('tenant_id', 'slug', name='uq_media_tenant_slug'),
    )

    id = Column(Integer, primary_key=True)
    tenant_id = Column(String(255), nullable=False, index=True)
    folder_id = Column(Integer, ForeignKey('media_folders.id', ondelete='SET NULL'), nullable=True, index=True)

    filename = Column(String(255), nullable=True)
    original_filename = Column(String(255), nullable=True)
    slug = Column(String(255), nullable=False)
    alt_text = Column(String(500), nullable=True)
    title = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)

    # 物理信息
    url = Column(String(2048), nullable=False, default="")
    relative_path = Column(String(2048), nullable=True)

    mime_type = Column(String(100), nullable=True)
    file_extension = Column(String(20), nullable=True)
    file_size = Column(BigInteger, nullable=True)
    media_type = Column(String(50), nullable=True)

    # 尺寸
    width = Column(Integer, nullable=True)
    height = Column(Integer, nullable=True)
    duration = Column(Float, nullable=True)

    # 'metadata' 是 Declarative 的保留属性名
    meta = Column('metadata', JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    folder = relationship("MediaFolder", back_populates="media")
