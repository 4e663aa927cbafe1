# src/tenant_portability/worker/__init__.py

# 1. 导入并导出配置与注册表
from .main import (
    WorkerSettings,
    startup,
    shutdown,
    TASK_FUNCTIONS,
    CRON_JOBS
)

# 2. 加载任务包，触发自注册
from . import tasks
