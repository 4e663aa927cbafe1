# src/tenant_portability/worker/tasks/backup.py

import logging
from typing import Optional

from tenant_portability.core.config import settings
from tenant_portability.services.backup.backup_service import BackupService
from tenant_portability.worker.context import build_context_for_worker

logger = logging.getLogger(__name__)

async def backup_tenant_task(ctx: dict, tenant_id: str) -> dict:
    """
    ARQ Worker 任务：按需备份单个租户。
    """
    service = BackupService(build_context_for_worker(ctx))
    await service.require_tenant(tenant_id)
    result = await service.backup_one(tenant_id)
    return result.model_dump()

async def run_scheduled_backup_task(ctx: dict, retain_days: Optional[int] = None) -> dict:
    """
    定时任务：顺序备份所有租户，然后按保留期清理每个租户的旧快照。
    """
    retain_days = retain_days or settings.BACKUP_RETENTION_DAYS
    try:
        service = BackupService(build_context_for_worker(ctx))
        sweep = await service.backup_all()
        pruned = await service.prune_all(retain_days)
    except Exception as e:
        # 租户列表不可读等致命错误，交给 ARQ 记录为失败
        logger.error(f"FATAL: Task run_scheduled_backup_task failed. Error: {e}", exc_info=True)
        raise

    return {
        "success": sweep.success,
        "backed_up": sum(1 for r in sweep.results if r.success),
        "failed": [r.tenant_id for r in sweep.results if not r.success],
        "pruned": sum(p.deleted for p in pruned),
    }
