# src/tenant_portability/services/base_service.py

from tenant_portability.core.context import AppContext

class BaseService:
    """Common constructor for services driven by an AppContext."""

    def __init__(self, context: AppContext):
        self.context = context
        self.session_factory = context.session_factory
