# tests/api/v1/test_backup_api.py

import os
from datetime import datetime, timedelta, timezone
import pytest
from httpx import AsyncClient
from fastapi import status

@pytest.mark.asyncio
async def test_backup_single_tenant(client: AsyncClient, storage, seeded_tenant):
    resp = await client.post("/api/v1/backups/tenants/tenant-a")

    assert resp.status_code == status.HTTP_200_OK
    data = resp.json()["data"]
    assert data["success"] is True
    assert data["key"].startswith("backups/tenant-a/")
    assert data["url"] == f"https://backups.test/{data['key']}"
    assert data["size"] > 0

@pytest.mark.asyncio
async def test_backup_unknown_tenant_returns_404(client: AsyncClient):
    resp = await client.post("/api/v1/backups/tenants/nobody")

    assert resp.status_code == status.HTTP_404_NOT_FOUND
    assert "nobody" in resp.json()["msg"]

@pytest.mark.asyncio
async def test_backup_all_tenants(client: AsyncClient, seeded_tenant):
    resp = await client.post("/api/v1/backups")

    assert resp.status_code == status.HTTP_200_OK
    data = resp.json()["data"]
    assert data["success"] is True
    assert [r["tenant_id"] for r in data["results"]] == ["tenant-a"]

@pytest.mark.asyncio
async def test_prune_tenant_snapshots(client: AsyncClient, storage):
    old_key = "backups/tenant-a/2020-01-01.json"
    await storage.put_object(old_key, b"{}")
    stamp = (datetime.now(timezone.utc) - timedelta(days=10)).timestamp()
    os.utime(storage.root / old_key, (stamp, stamp))

    resp = await client.delete("/api/v1/backups/tenants/tenant-a", params={"retain_days": 30})
    assert resp.json()["data"] == {"tenant_id": "tenant-a", "deleted": 0, "failed": 0, "error": None}

    resp = await client.delete("/api/v1/backups/tenants/tenant-a", params={"retain_days": 7})
    assert resp.status_code == status.HTTP_200_OK
    assert resp.json()["data"]["deleted"] == 1
    assert await storage.list_objects("backups/tenant-a/") == []

@pytest.mark.asyncio
async def test_prune_rejects_invalid_retention(client: AsyncClient):
    resp = await client.delete("/api/v1/backups/tenants/tenant-a", params={"retain_days": 0})
    assert resp.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
