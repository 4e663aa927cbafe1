# src/tenant_portability/services/backup/backup_service.py

import json
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from tenant_portability.core.config import settings
from tenant_portability.core.context import AppContext
from tenant_portability.dao.tenant.tenant_dao import TenantDao
from tenant_portability.schemas.portability.backup import BackupResult, BackupSweepResult, PruneResult
from tenant_portability.services.base_service import BaseService
from tenant_portability.services.exceptions import (
    DataAccessError, InvalidEnvelopeError, NotFoundError, ServiceException, StorageError
)
from tenant_portability.services.portability.export_service import ExportService
from tenant_portability.services.portability.utils import backup_prefix, generate_backup_key

logger = logging.getLogger(__name__)

class BackupService(BaseService):
    """
    [Service Layer] Backup Orchestrator.
    每个租户每天一个快照：{BACKUP_PREFIX}/{tenant_id}/{YYYY-MM-DD}.json，同日重跑覆盖。
    """

    def __init__(self, context: AppContext):
        super().__init__(context)
        self.storage = context.storage
        self.exporter = ExportService(context)

    async def list_tenant_ids(self) -> List[str]:
        try:
            async with self.session_factory() as session:
                return await TenantDao(session).list_ids()
        except (SQLAlchemyError, OSError) as e:
            raise DataAccessError(f"Failed to list tenants: {e}") from e

    async def require_tenant(self, tenant_id: str):
        try:
            async with self.session_factory() as session:
                tenant = await TenantDao(session).get_by_pk(tenant_id)
        except (SQLAlchemyError, OSError) as e:
            raise DataAccessError(f"Failed to load tenant {tenant_id}: {e}") from e
        if tenant is None:
            raise NotFoundError(f"Tenant {tenant_id} not found.")
        return tenant

    async def load_snapshot(self, key: str) -> Any:
        """下载并解析一个快照，供还原使用。"""
        try:
            body = await self.storage.download_object(key)
        except FileNotFoundError:
            raise NotFoundError(f"Snapshot {key} not found.")
        try:
            return json.loads(body)
        except ValueError as e:
            raise InvalidEnvelopeError(f"Snapshot {key} is not valid JSON: {e}") from e

    async def backup_one(self, tenant_id: str, now: Optional[datetime] = None) -> BackupResult:
        """
        导出单个租户并写入对象存储。失败不抛出，体现在返回结果中。
        """
        now = now or datetime.now(timezone.utc)
        key = generate_backup_key(settings.BACKUP_PREFIX, tenant_id, now)
        try:
            body = await self.exporter.export_to_json(tenant_id)
            url = await self.storage.put_object(key, body, content_type="application/json")
        except Exception as e:
            logger.error(f"[Backup] Tenant {tenant_id} failed: {e}", exc_info=True)
            reason = e.message if isinstance(e, ServiceException) else str(e)
            return BackupResult(tenant_id=tenant_id, success=False, key=key, error=reason)

        logger.info(f"[Backup] Tenant {tenant_id} -> {key} ({len(body)} bytes)")
        return BackupResult(tenant_id=tenant_id, success=True, key=key, url=url, size=len(body))

    async def backup_all(self, now: Optional[datetime] = None) -> BackupSweepResult:
        """
        逐个租户顺序备份，限制同时占用的数据库连接与存储带宽。
        单个租户失败不影响其它租户。
        """
        results = []
        for tenant_id in await self.list_tenant_ids():
            results.append(await self.backup_one(tenant_id, now=now))

        sweep = BackupSweepResult(success=all(r.success for r in results), results=results)
        failed = [r.tenant_id for r in results if not r.success]
        logger.info(f"[Backup] Sweep finished: {len(results) - len(failed)}/{len(results)} succeeded, failed={failed}")
        return sweep

    async def prune_older_than(
        self, tenant_id: str, retain_days: int, now: Optional[datetime] = None
    ) -> PruneResult:
        """
        删除早于 now - retain_days 的快照。列举与删除之间新写入的快照不在本次考虑范围内。
        列举失败 (StorageError) 直接抛出。
        """
        if retain_days < 1:
            raise ServiceException(f"retain_days must be at least 1, got {retain_days}.")

        cutoff = (now or datetime.now(timezone.utc)) - timedelta(days=retain_days)
        snapshots = await self.storage.list_objects(backup_prefix(settings.BACKUP_PREFIX, tenant_id))

        result = PruneResult(tenant_id=tenant_id)
        for snapshot in snapshots:
            if snapshot.uploaded_at >= cutoff:
                continue
            if await self.storage.delete_object(snapshot.key):
                result.deleted += 1
            else:
                result.failed += 1
                logger.error(f"[Backup] Failed to delete snapshot {snapshot.key}")

        if result.deleted or result.failed:
            logger.info(f"[Backup] Pruned tenant {tenant_id}: deleted={result.deleted} failed={result.failed}")
        return result

    async def prune_all(self, retain_days: int, now: Optional[datetime] = None) -> List[PruneResult]:
        results = []
        for tenant_id in await self.list_tenant_ids():
            try:
                results.append(await self.prune_older_than(tenant_id, retain_days, now=now))
            except StorageError as e:
                logger.error(f"[Backup] Prune for tenant {tenant_id} failed: {e.message}")
                results.append(PruneResult(tenant_id=tenant_id, error=e.message))
        return results
