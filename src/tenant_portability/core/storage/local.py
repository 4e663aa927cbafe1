# src/tenant_portability/core/storage/local.py

import asyncio
import logging
from datetime import datetime, timezone
from functools import partial
from pathlib import Path
from typing import List, Optional

from tenant_portability.core.config import settings
from tenant_portability.services.exceptions import StorageError
from .base import register_storage_provider, BaseStorageProvider, StoredObject

logger = logging.getLogger(__name__)

@register_storage_provider
class LocalStorageProvider(BaseStorageProvider):
    """
    本地文件系统存储，Key 直接映射为 root 下的相对路径。
    用于开发环境和测试。
    """
    name: str = "local"

    def __init__(self, root: Optional[str] = None, public_domain: Optional[str] = None):
        self.root = Path(root or settings.STORAGE_LOCAL_ROOT).resolve()
        self.public_domain = public_domain if public_domain is not None else settings.STORAGE_PUBLIC_DOMAIN

    async def _run_in_executor(self, func, *args, **kwargs):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(func, *args, **kwargs))

    def _path_for(self, key: str) -> Path:
        path = (self.root / key.lstrip('/')).resolve()
        if self.root != path and self.root not in path.parents:
            raise ValueError(f"Key escapes storage root: {key}")
        return path

    def _write(self, key: str, data: bytes) -> None:
        path = self._path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)

    async def put_object(self, key: str, data: bytes, content_type: Optional[str] = None) -> str:
        try:
            await self._run_in_executor(self._write, key, data)
        except OSError as e:
            logger.error(f"[Storage] Local Put Error: {str(e)} Key: {key}")
            raise StorageError(f"Failed to write object '{key}': {e}") from e
        return self.get_public_url(key)

    def _list_sync(self, prefix: str) -> List[StoredObject]:
        if not self.root.exists():
            return []
        objects = []
        for path in sorted(self.root.rglob("*")):
            if not path.is_file():
                continue
            key = path.relative_to(self.root).as_posix()
            if not key.startswith(prefix):
                continue
            stat = path.stat()
            objects.append(StoredObject(
                key=key,
                url=self.get_public_url(key),
                size=stat.st_size,
                uploaded_at=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
            ))
        return objects

    async def list_objects(self, prefix: str) -> List[StoredObject]:
        try:
            return await self._run_in_executor(self._list_sync, prefix)
        except OSError as e:
            raise StorageError(f"Failed to list objects under '{prefix}': {e}") from e

    async def download_object(self, key: str) -> bytes:
        path = self._path_for(key)
        if not path.is_file():
            raise FileNotFoundError(f"Local object not found: {key}")
        return await self._run_in_executor(path.read_bytes)

    async def delete_object(self, key: str) -> bool:
        try:
            await self._run_in_executor(self._path_for(key).unlink)
            return True
        except OSError as e:
            logger.error(f"[Storage] Local Delete Error: {str(e)} Key: {key}")
            return False

    def get_public_url(self, key: str) -> str:
        clean_key = key.lstrip('/')
        if self.public_domain:
            return f"{self.public_domain.rstrip('/')}/{clean_key}"
        return (self.root / clean_key).as_uri()
