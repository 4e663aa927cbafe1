import operator
from typing import Type, TypeVar, Generic, Any, Callable, Optional, List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import inspect, and_, func, select
from sqlalchemy.sql.selectable import Select
from tenant_portability.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)

IN_CHUNK_SIZE = 10000

# 支持的字符串条件操作符: ("slug", "==", "home") / ("id", "in", [1, 2])
_OPERATORS = {
    "==": operator.eq,
    "!=": operator.ne,
    ">": operator.gt,
    ">=": operator.ge,
    "<": operator.lt,
    "<=": operator.le,
}

class BaseDao(Generic[ModelType]):
    def __init__(self, model_class: Type[ModelType], db_session: AsyncSession):
        self.model: Type[ModelType] = model_class
        self.db_session: AsyncSession = db_session
        primary_keys = inspect(model_class).primary_key
        if not primary_keys:
            raise ValueError(f"Model {model_class.__name__} does not have a primary key.")
        self.pk: str = primary_keys[0].name

    # ==============================================================================
    # 1. 实体/对象方法 (Object Methods)
    # ==============================================================================

    async def get_list(
        self,
        where: Optional[dict | list] = None,
        order: Optional[list] = None,
        limit: int = 0,
    ) -> list[ModelType]:
        stmt = self._quick_query(where=where, order=order, limit=limit)
        executed = await self.db_session.execute(stmt)
        return list(executed.scalars().all())

    async def get_list_in(
        self,
        column_name: str,
        values: list,
        where: Optional[list] = None,
        order: Optional[list] = None,
        sort_key: Optional[Callable[[ModelType], Any]] = None,
        chunk_size: int = IN_CHUNK_SIZE,
    ) -> list[ModelType]:
        """
        column IN values 查询，values 按 chunk_size 分批绑定 (asyncpg 单条语句最多 32767 个参数)。
        多于一批时按 sort_key 对合并结果重新排序。
        """
        results: list[ModelType] = []
        for start in range(0, len(values), chunk_size):
            conditions = [(column_name, "in", values[start:start + chunk_size]), *(where or [])]
            results.extend(await self.get_list(where=conditions, order=order))
        if sort_key is not None and len(values) > chunk_size:
            results.sort(key=sort_key)
        return results

    async def get_one(
        self,
        where: Optional[dict | list] = None,
        order: Optional[list] = None
    ) -> Optional[ModelType]:
        stmt = self._quick_query(where=where, order=order, limit=1)
        executed = await self.db_session.execute(stmt)
        return executed.scalars().first()

    async def get_by_pk(self, pk_value: Any) -> Optional[ModelType]:
        return await self.get_one(where={self.pk: pk_value})

    async def exists(self, where: dict | list) -> bool:
        return await self.get_one(where=where) is not None

    async def count(self, where: Optional[dict | list] = None) -> int:
        subquery_stmt = self._quick_query(where=where).subquery()
        count_stmt = select(func.count()).select_from(subquery_stmt)
        executed = await self.db_session.execute(count_stmt)
        return executed.scalar() or 0

    async def add(self, instance: ModelType, auto_flush: bool = True) -> ModelType:
        self.db_session.add(instance)
        if auto_flush:
            # flush 之后自增主键即可用
            await self.db_session.flush()
        return instance

    # ==============================================================================
    # 2. 聚合/数据查询方法 (Projection Methods)
    # ==============================================================================

    async def pluck(self, column_name: str, where: Optional[dict | list] = None, order: Optional[list] = None) -> list[Any]:
        stmt = select(getattr(self.model, column_name))
        stmt = self._quick_query(stmt=stmt, where=where, order=order)
        executed = await self.db_session.execute(stmt)
        return list(executed.scalars().all())

    # ==============================================================================
    # 3. 查询构建辅助方法 (Query Building Helpers)
    # ==============================================================================

    def _quick_query(
        self,
        stmt: Optional[Select] = None,
        where: Optional[dict | list] = None,
        order: Optional[list] = None,
        limit: int = 0,
    ) -> Select:
        """
        一个线性的、清晰的查询构建方法。
        """
        if stmt is None:
            stmt = select(self.model)

        if where is not None:
            stmt = stmt.filter(*self._where_format(where))

        if order is not None:
            stmt = stmt.order_by(*order)

        if limit > 0:
            stmt = stmt.limit(limit)

        return stmt

    def _where_format(self, conditions: list | dict) -> list:
        if not conditions:
            return []

        processed_conditions = []
        if isinstance(conditions, dict):
            processed_conditions = [getattr(self.model, field) == value for field, value in conditions.items()]
        else:
            for condition in conditions:
                if isinstance(condition, (list, tuple)):
                    field_name, op, value = condition
                    field = getattr(self.model, field_name)
                    # 特殊处理 'in' 操作符
                    if op == 'in':
                        expr = field.in_(value)
                    elif op not in _OPERATORS:
                        raise ValueError(f"Unsupported operator in where clause: {op}")
                    else:
                        expr = _OPERATORS[op](field, value)
                    processed_conditions.append(expr)
                else:
                    processed_conditions.append(condition)
        if len(processed_conditions) > 1:
            processed_conditions = [and_(*processed_conditions)]
        return processed_conditions
