# src/tenant_portability/services/portability/export_service.py

import json
import logging
from datetime import datetime, timezone
from typing import AsyncIterator, Iterator, Optional

from tenant_portability.core.config import settings
from tenant_portability.core.context import AppContext
from tenant_portability.schemas.portability.envelope import COLLECTIONS, Envelope, TenantGraph
from tenant_portability.services.base_service import BaseService
from tenant_portability.services.portability.graph_fetcher import GraphFetcher
from tenant_portability.services.portability.utils import to_absolute_url

logger = logging.getLogger(__name__)

def _dumps(value) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))

class ExportService(BaseService):
    """
    [Service Layer] Export Assembler.
    Wraps a tenant graph in the versioned envelope. Read-only.
    """

    def __init__(self, context: AppContext):
        super().__init__(context)
        self.fetcher = GraphFetcher(context)

    @staticmethod
    def normalize_media_urls(graph: TenantGraph, base_url: str) -> None:
        """
        媒体 url / relative_path 统一补全为绝对地址，使导出文件不依赖导出方站点的域名。
        """
        if not base_url:
            return
        for row in graph.media:
            row.url = to_absolute_url(base_url, row.url)
            row.relative_path = to_absolute_url(base_url, row.relative_path)

    async def assemble(self, tenant_id: str, base_url: Optional[str] = None) -> Envelope:
        graph = await self.fetcher.fetch(tenant_id)
        self.normalize_media_urls(graph, settings.EXPORT_BASE_URL if base_url is None else base_url)

        return Envelope(
            version=settings.EXPORT_FORMAT_VERSION,
            tenant_id=tenant_id,
            exported_at=datetime.now(timezone.utc).isoformat(),
            counts=graph.counts(),
            graph=graph,
        )

    async def export_to_json(self, tenant_id: str, base_url: Optional[str] = None) -> bytes:
        envelope = await self.assemble(tenant_id, base_url)
        return _dumps(envelope.to_document()).encode("utf-8")

    @staticmethod
    def iter_chunks(envelope: Envelope) -> Iterator[bytes]:
        """
        流式序列化：先输出头部，再逐集合、逐行输出，不在内存中拼接完整字符串。
        拼接结果与 export_to_json 的文档等价。
        """
        header = _dumps(envelope.header())
        # 去掉头部对象的结尾 '}'，后续集合接在同一个对象里
        yield header[:-1].encode("utf-8")

        for name in COLLECTIONS:
            yield f',"{name}":['.encode("utf-8")
            for index, row in enumerate(getattr(envelope.graph, name)):
                chunk = _dumps(row.model_dump(mode="json"))
                yield (chunk if index == 0 else "," + chunk).encode("utf-8")
            yield b"]"

        yield b"}"

    async def stream(self, tenant_id: str, base_url: Optional[str] = None) -> AsyncIterator[bytes]:
        envelope = await self.assemble(tenant_id, base_url)
        for chunk in self.iter_chunks(envelope):
            yield chunk
        logger.info(f"[Export] Streamed envelope for tenant {tenant_id}: {envelope.counts}")
