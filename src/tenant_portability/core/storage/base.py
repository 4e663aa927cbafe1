# src/tenant_portability/core/storage/base.py

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, List, NamedTuple, Optional, Type, TypeVar
from enum import Enum

class StorageType(str, Enum):
    ALIYUN_OSS = "aliyun_oss"
    LOCAL = "local"

class StoredObject(NamedTuple):
    """
    对象存储中一个对象的列表视图。
    uploaded_at 始终为带时区的 UTC 时间。
    """
    key: str
    url: str
    size: int
    uploaded_at: datetime

class BaseStorageProvider(ABC):
    """
    存储提供商抽象基类。
    所有具体实现（OSS, Local）必须继承此类并定义 `name` 属性。
    """
    name: str = "base"

    @abstractmethod
    async def put_object(self, key: str, data: bytes, content_type: Optional[str] = None) -> str:
        """
        写入对象 (同名覆盖)，返回对象的访问 URL。
        """
        raise NotImplementedError

    @abstractmethod
    async def list_objects(self, prefix: str) -> List[StoredObject]:
        """
        列出前缀下的所有对象。
        """
        raise NotImplementedError

    @abstractmethod
    async def download_object(self, key: str) -> bytes:
        """下载对象内容"""
        raise NotImplementedError

    @abstractmethod
    async def delete_object(self, key: str) -> bool:
        """
        删除存储桶中的对象。失败时返回 False 而不是抛出异常。
        """
        raise NotImplementedError

    @abstractmethod
    def get_public_url(self, key: str) -> str:
        """
        获取文件的访问 URL。
        如果配置了 CDN，应返回 CDN 地址。
        """
        raise NotImplementedError

# 定义注册表
ALL_STORAGE_PROVIDERS: Dict[str, Type[BaseStorageProvider]] = {}

T = TypeVar('T', bound=BaseStorageProvider)

def register_storage_provider(cls: Type[T]) -> Type[T]:
    """
    装饰器：注册存储提供商实现类。
    """
    if not hasattr(cls, 'name') or not cls.name:
        raise ValueError(f"Storage provider class {cls.__name__} must define a 'name' attribute.")

    if cls.name in ALL_STORAGE_PROVIDERS:
        raise ValueError(f"Storage provider with name '{cls.name}' already registered.")

    ALL_STORAGE_PROVIDERS[cls.name] = cls
    return cls
