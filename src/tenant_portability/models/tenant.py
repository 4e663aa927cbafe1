# tenant_portability/models/tenant.py

from sqlalchemy import Column, String, DateTime, func
from tenant_portability.db.base import Base

class Tenant(Base):
    """
    租户表。仅用于枚举需要备份的租户，业务数据通过 tenant_id 字符串关联。
    """
    __tablename__ = 'tenants'

    id = Column(String(255), primary_key=True)
    name = Column(String(255), nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
