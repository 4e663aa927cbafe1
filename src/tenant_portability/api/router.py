# src/tenant_portability/api/router.py

from fastapi import APIRouter
from tenant_portability.api.v1 import portability
from tenant_portability.api.v1 import backup

# The main router for API v1
router = APIRouter(prefix="/api/v1")

router.include_router(
    portability.router,
    prefix="/portability",
    tags=["Tenant - Export & Import"]
)
router.include_router(
    backup.router,
    prefix="/backups",
    tags=["Tenant - Backups"]
)
