# src/tenant_portability/worker/context.py

from tenant_portability.core.context import AppContext

def build_context_for_worker(ctx: dict) -> AppContext:
    """
    用 startup 中准备好的依赖为后台任务组装 AppContext。
    """
    return AppContext(
        session_factory=ctx['db_session_factory'],
        storage=ctx['storage'],
    )
