# src/tenant_portability/api/v1/portability.py

import time
from typing import Any, Optional
from fastapi import APIRouter, Body, HTTPException, Query
from fastapi.responses import StreamingResponse
from tenant_portability.core.context import AppContext
from tenant_portability.api.dependencies.context import AppContextDep
from tenant_portability.schemas.common import JsonResponse
from tenant_portability.schemas.portability.envelope import ImportResult
from tenant_portability.services.portability.export_service import ExportService
from tenant_portability.services.portability.import_service import ImportService
from tenant_portability.services.exceptions import InvalidEnvelopeError

router = APIRouter()

# ==============================================================================
# Export / Import Endpoints
# ==============================================================================

@router.get("/tenants/{tenant_id}/export", summary="Export Tenant")
async def export_tenant(
    tenant_id: str,
    base_url: Optional[str] = Query(None, description="Origin used to absolutize relative media URLs."),
    context: AppContext = AppContextDep
):
    """
    以文件下载的形式流式输出租户信封。
    先完整读取内容图，读取失败时仍能返回正常的错误响应。
    """
    service = ExportService(context)
    envelope = await service.assemble(tenant_id, base_url)
    filename = f"tenant-export-{tenant_id}-{int(time.time() * 1000)}.json"
    return StreamingResponse(
        service.iter_chunks(envelope),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )

@router.post("/tenants/{tenant_id}/import", response_model=JsonResponse[ImportResult], summary="Import Tenant")
async def import_tenant(
    tenant_id: str,
    payload: Any = Body(...),
    context: AppContext = AppContextDep
):
    """
    导入信封到目标租户。行级错误体现在返回的 errors 中，不会导致请求失败。
    """
    service = ImportService(context)
    try:
        result = await service.import_tenant(tenant_id, payload)
    except InvalidEnvelopeError as e:
        raise HTTPException(status_code=400, detail=e.message)
    return JsonResponse(data=result)
