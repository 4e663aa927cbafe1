# src/tenant_portability/schemas/portability/backup.py

from typing import List, Optional
from pydantic import BaseModel, Field

class BackupResult(BaseModel):
    tenant_id: str
    success: bool
    key: Optional[str] = None
    url: Optional[str] = None
    size: Optional[int] = None
    error: Optional[str] = None

class BackupSweepResult(BaseModel):
    success: bool
    results: List[BackupResult] = Field(default_factory=list)

class PruneResult(BaseModel):
    tenant_id: str
    deleted: int = 0
    failed: int = 0
    # 仅在定时任务批量清理时填充：列举快照本身失败
    error: Optional[str] = None
