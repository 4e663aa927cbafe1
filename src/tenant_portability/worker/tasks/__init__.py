# src/tenant_portability/worker/tasks/__init__.py

from arq import cron
from tenant_portability.core.config import settings
# 1. 导入并导出这个子域的所有公开任务
from .backup import backup_tenant_task, run_scheduled_backup_task
# 2. 导入注册中心
from ..main import TASK_FUNCTIONS, CRON_JOBS

# 3. 将自己注册进去
TASK_FUNCTIONS.extend([
    backup_tenant_task,
])

CRON_JOBS.extend([
    # 每天定时全量备份并清理过期快照
    cron(run_scheduled_backup_task, hour=settings.BACKUP_CRON_HOUR, minute=settings.BACKUP_CRON_MINUTE)
])
