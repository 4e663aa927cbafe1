import asyncio
import logging
from datetime import datetime, timezone
from typing import List, Optional
from functools import partial

import oss2  # type: ignore
from tenant_portability.core.config import settings
from tenant_portability.services.exceptions import StorageError
from .base import register_storage_provider, BaseStorageProvider, StoredObject

logger = logging.getLogger(__name__)

@register_storage_provider
class AliyunOSSProvider(BaseStorageProvider):
    name: str = "aliyun_oss"

    def __init__(self):
        # 阿里云 OSS2 库是同步的，需要专门的 Auth 实例
        self.auth = oss2.Auth(settings.STORAGE_ACCESS_KEY, settings.STORAGE_SECRET_KEY)
        self.bucket_name = settings.STORAGE_BUCKET
        self.endpoint = settings.STORAGE_ENDPOINT
        # 初始化 Bucket 对象 (轻量级，不涉及网络请求)
        self.bucket = oss2.Bucket(self.auth, self.endpoint, self.bucket_name)

        self.public_domain = settings.STORAGE_PUBLIC_DOMAIN or f"https://{self.bucket_name}.{self.endpoint}"

    async def _run_in_executor(self, func, *args, **kwargs):
        """
        将同步 IO 操作放入线程池执行，避免阻塞 Async Event Loop
        """
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(func, *args, **kwargs))

    async def put_object(self, key: str, data: bytes, content_type: Optional[str] = None) -> str:
        headers = {"Content-Type": content_type} if content_type else None
        try:
            await self._run_in_executor(self.bucket.put_object, key, data, headers=headers)
        except oss2.exceptions.OssError as e:
            logger.error(f"[Storage] OSS Put Error: {str(e)} Key: {key}")
            raise StorageError(f"Failed to upload object '{key}': {e}") from e
        return self.get_public_url(key)

    def _list_sync(self, prefix: str) -> List[StoredObject]:
        # ObjectIterator 内部自动翻页
        return [
            StoredObject(
                key=info.key,
                url=self.get_public_url(info.key),
                size=info.size,
                uploaded_at=datetime.fromtimestamp(info.last_modified, tz=timezone.utc),
            )
            for info in oss2.ObjectIterator(self.bucket, prefix=prefix)
        ]

    async def list_objects(self, prefix: str) -> List[StoredObject]:
        try:
            return await self._run_in_executor(self._list_sync, prefix)
        except oss2.exceptions.OssError as e:
            logger.error(f"[Storage] OSS List Error: {str(e)} Prefix: {prefix}")
            raise StorageError(f"Failed to list objects under '{prefix}': {e}") from e

    async def download_object(self, key: str) -> bytes:
        try:
            result = await self._run_in_executor(self.bucket.get_object, key)
            return result.read()
        except oss2.exceptions.OssError as e:
            # 区分 404
            if e.status == 404:
                raise FileNotFoundError(f"OSS Object not found: {key}")
            raise StorageError(f"Failed to download object '{key}': {e}") from e

    async def delete_object(self, key: str) -> bool:
        """
        异步封装的删除操作
        """
        try:
            # 使用线程池执行同步的 bucket.delete_object
            await self._run_in_executor(self.bucket.delete_object, key)
            return True
        except oss2.exceptions.OssError as e:
            logger.error(f"[Storage] OSS Delete Error: {str(e)} Key: {key}")
            return False

    def get_public_url(self, key: str) -> str:
        # 纯字符串拼接，无需 IO
        base = self.public_domain.rstrip('/')
        clean_key = key.lstrip('/')
        return f"{base}/{clean_key}"
