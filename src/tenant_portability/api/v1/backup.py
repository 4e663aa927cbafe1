# src/tenant_portability/api/v1/backup.py

from fastapi import APIRouter, Query
from tenant_portability.core.config import settings
from tenant_portability.core.context import AppContext
from tenant_portability.api.dependencies.context import AppContextDep
from tenant_portability.schemas.common import JsonResponse
from tenant_portability.schemas.portability.backup import BackupResult, BackupSweepResult, PruneResult
from tenant_portability.services.backup.backup_service import BackupService

router = APIRouter()

@router.post("", response_model=JsonResponse[BackupSweepResult], summary="Back Up All Tenants")
async def backup_all_tenants(context: AppContext = AppContextDep):
    service = BackupService(context)
    return JsonResponse(data=await service.backup_all())

@router.post("/tenants/{tenant_id}", response_model=JsonResponse[BackupResult], summary="Back Up Tenant")
async def backup_tenant(tenant_id: str, context: AppContext = AppContextDep):
    service = BackupService(context)
    await service.require_tenant(tenant_id)
    return JsonResponse(data=await service.backup_one(tenant_id))

@router.delete("/tenants/{tenant_id}", response_model=JsonResponse[PruneResult], summary="Prune Tenant Snapshots")
async def prune_tenant_backups(
    tenant_id: str,
    retain_days: int = Query(settings.BACKUP_RETENTION_DAYS, ge=1),
    context: AppContext = AppContextDep
):
    """
    删除早于保留期的快照。
    """
    service = BackupService(context)
    return JsonResponse(data=await service.prune_older_than(tenant_id, retain_days))
