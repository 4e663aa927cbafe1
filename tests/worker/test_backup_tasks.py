# tests/worker/test_backup_tasks.py

import os
import pytest
from tenant_portability.core.config import settings
from tenant_portability.worker import CRON_JOBS, TASK_FUNCTIONS
from tenant_portability.worker.tasks.backup import backup_tenant_task, run_scheduled_backup_task
from tenant_portability.services.exceptions import DataAccessError, NotFoundError

@pytest.fixture
def worker_ctx(session_factory, storage) -> dict:
    """模拟 startup 钩子放入 ctx 的依赖。"""
    return {"db_session_factory": session_factory, "storage": storage}

def test_tasks_are_registered():
    assert backup_tenant_task in TASK_FUNCTIONS
    job = next(job for job in CRON_JOBS if job.coroutine is run_scheduled_backup_task)
    assert job.hour == settings.BACKUP_CRON_HOUR
    assert job.minute == settings.BACKUP_CRON_MINUTE

async def test_backup_tenant_task(worker_ctx, storage, seeded_tenant):
    result = await backup_tenant_task(worker_ctx, "tenant-a")

    assert result["success"] is True
    assert result["key"].startswith("backups/tenant-a/")
    assert [s.key for s in await storage.list_objects("backups/tenant-a/")] == [result["key"]]

async def test_backup_tenant_task_unknown_tenant(worker_ctx):
    with pytest.raises(NotFoundError):
        await backup_tenant_task(worker_ctx, "nobody")

async def test_scheduled_backup_backs_up_then_prunes(worker_ctx, storage, seeded_tenant):
    await storage.put_object("backups/tenant-a/2000-01-01.json", b"{}")
    os.utime(storage.root / "backups/tenant-a/2000-01-01.json", (946684800, 946684800))

    summary = await run_scheduled_backup_task(worker_ctx)

    assert summary == {"success": True, "backed_up": 1, "failed": [], "pruned": 1}
    keys = [s.key for s in await storage.list_objects("backups/tenant-a/")]
    assert "backups/tenant-a/2000-01-01.json" not in keys
    assert len(keys) == 1

async def test_scheduled_backup_propagates_fatal_errors(broken_session_factory, storage):
    ctx = {"db_session_factory": broken_session_factory, "storage": storage}
    with pytest.raises(DataAccessError):
        await run_scheduled_backup_task(ctx)
