# src/tenant_portability/services/portability/reference_rewriter.py

import re
from typing import Any, Dict, Iterable, Optional

# 文档中引用 Media 的结构化字段名
MEDIA_REFERENCE_FIELDS = (
    "mediaId", "media_id",
    "imageId", "image_id",
    "featuredImageId", "featured_image_id",
)

_NUMERIC = re.compile(r"[0-9]+")
_NUMBER_TOKEN = re.compile(r"\b[0-9]+\b")

class ReferenceRewriter:
    """
    递归改写不透明 JSON 文档 (layout_json / props / content) 中嵌入的实体 ID。

    规则:
      - 键名属于 field_names 的字段：整数或纯数字字符串按映射替换，保留原类型；无映射则不动。
      - 字符串叶子：只改写其中序列化 JSON 片段的 `"mediaId": 12` 形式。
      - legacy_token_scan=True 时，额外把字符串中的整数 token 当作旧 ID 替换。
        该模式会误伤价格、像素宽度、年份等数字，仅用于历史数据。

    所有替换都是单次扫描，链式映射 (1->2, 2->3) 不会级联。
    """

    def __init__(
        self,
        id_map: Dict[int, int],
        field_names: Iterable[str] = MEDIA_REFERENCE_FIELDS,
        legacy_token_scan: bool = False,
    ):
        self.id_map = {int(old): int(new) for old, new in id_map.items()}
        self.field_names = frozenset(field_names)
        self.legacy_token_scan = legacy_token_scan

        names = "|".join(re.escape(name) for name in sorted(self.field_names, key=len, reverse=True))
        # 兼容转义过的 JSON 字符串: \"mediaId\": \"12\"
        self._embedded_field = re.compile(
            r'(\\?"(?:%s)\\?"\s*:\s*\\?"?)([0-9]+)(?![0-9])' % names
        ) if names else None

    def rewrite(self, document: Any) -> Any:
        """返回改写后的新文档，输入不会被修改。"""
        if not self.id_map:
            return document
        return self._walk(document)

    def _walk(self, node: Any) -> Any:
        if isinstance(node, dict):
            return {
                key: self._rewrite_reference(value) if key in self.field_names else self._walk(value)
                for key, value in node.items()
            }
        if isinstance(node, list):
            return [self._walk(item) for item in node]
        if isinstance(node, str):
            return self._rewrite_string(node)
        return node

    def _rewrite_reference(self, value: Any) -> Any:
        # bool 是 int 的子类
        if isinstance(value, bool):
            return value
        if isinstance(value, int):
            return self.id_map.get(value, value)
        if isinstance(value, str) and _NUMERIC.fullmatch(value):
            new_id = self._lookup(value)
            return value if new_id is None else str(new_id)
        if isinstance(value, list):
            return [self._rewrite_reference(item) for item in value]
        # 引用字段下挂的是对象时按普通节点处理
        return self._walk(value)

    def _rewrite_string(self, value: str) -> str:
        # token 扫描已覆盖嵌入字段的数字，两者只能跑一遍
        if self.legacy_token_scan:
            return _NUMBER_TOKEN.sub(self._replace_token, value)
        if self._embedded_field is None:
            return value
        return self._embedded_field.sub(self._replace_embedded, value)

    def _lookup(self, token: str) -> Optional[int]:
        # "012" 不是 ID 的写法
        if str(int(token)) != token:
            return None
        return self.id_map.get(int(token))

    def _replace_embedded(self, match: "re.Match") -> str:
        new_id = self._lookup(match.group(2))
        return match.group(0) if new_id is None else f"{match.group(1)}{new_id}"

    def _replace_token(self, match: "re.Match") -> str:
        new_id = self._lookup(match.group(0))
        return match.group(0) if new_id is None else str(new_id)
