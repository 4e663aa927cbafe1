# src/tenant_portability/services/portability/utils.py

from collections import deque
from datetime import datetime
from typing import Callable, Dict, Hashable, List, Optional, TypeVar

T = TypeVar("T")

def to_absolute_url(base_url: str, url: Optional[str]) -> Optional[str]:
    """
    把相对路径补全为绝对 URL。已经是 http(s) 的地址、空值原样返回。
    Example: ("https://example.com/", "/files/a.png") -> "https://example.com/files/a.png"
    """
    if not url or not base_url:
        return url
    if url.startswith("http://") or url.startswith("https://"):
        return url
    base = base_url.rstrip("/")
    return f"{base}{url}" if url.startswith("/") else f"{base}/{url}"

def parents_first(
    rows: List[T],
    key: Callable[[T], Hashable],
    parent_key: Callable[[T], Optional[Hashable]],
) -> List[T]:
    """
    对自引用集合做拓扑排序：父节点总在子节点之前，同层按输入顺序稳定排列。
    父节点不在集合中的行视为根；形成环的行无法排序，按原顺序追加在末尾。
    """
    keys = {key(row) for row in rows}
    children: Dict[Hashable, List[int]] = {}
    queue = deque()
    for index, row in enumerate(rows):
        parent = parent_key(row)
        if parent is None or parent not in keys or parent == key(row):
            queue.append(index)
        else:
            children.setdefault(parent, []).append(index)

    ordered: List[int] = []
    placed = set()
    while queue:
        index = queue.popleft()
        if index in placed:
            continue
        placed.add(index)
        ordered.append(index)
        queue.extend(children.pop(key(rows[index]), []))

    # 环上的节点永远不会从根可达
    ordered.extend(index for index in range(len(rows)) if index not in placed)
    return [rows[index] for index in ordered]

def generate_backup_key(prefix: str, tenant_id: str, day: datetime) -> str:
    """
    生成快照的物理存储路径 (Key)，同一租户同一天只有一个快照。
    Format: {prefix}/{tenant_id}/{YYYY-MM-DD}.json
    Example: backups/tenant-gosg/2024-05-01.json
    """
    return f"{backup_prefix(prefix, tenant_id)}{day.strftime('%Y-%m-%d')}.json"

def backup_prefix(prefix: str, tenant_id: str) -> str:
    return f"{prefix.strip('/')}/{tenant_id}/"
