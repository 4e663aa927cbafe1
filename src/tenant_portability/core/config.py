# src/tenant_portability/core/config.py
from dotenv import load_dotenv
load_dotenv(".env")
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, computed_field
from typing import Optional, Literal

class Settings(BaseSettings):
    # model_config 会自动加载 .env 文件
    model_config = SettingsConfigDict(env_file='.env', env_file_encoding='utf-8', extra='ignore')

    # 应用配置 (会自动转换类型)
    APP_ENV: str = "production"
    APP_HOST: str = "127.0.0.1"
    APP_PORT: int = 8000
    LOG_LEVEL: str = "INFO"

    # --- Database ---
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_USER: str = "postgres"
    DB_PASSWORD: str = "postgres"
    DB_NAME: str = "cms"

    # 设置后直接使用该 DSN (例如 sqlite+aiosqlite:///./local.db)，忽略上面的拼接
    DATABASE_URL_OVERRIDE: Optional[str] = None

    @computed_field
    @property
    def DATABASE_URL(self) -> str:
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE
        return f"postgresql+asyncpg://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    # Redis (arq worker)
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_PASSWORD: Optional[str] = None
    REDIS_DB: int = 0

    # --- Storage Infrastructure ---
    # 'aliyun_oss' 用于生产, 'local' 用于开发与测试
    STORAGE_PROVIDER: Literal["aliyun_oss", "local"] = "local"

    STORAGE_ENDPOINT: Optional[str] = Field(None, description="e.g., oss-cn-hangzhou.aliyuncs.com")
    STORAGE_BUCKET: Optional[str] = Field(None, description="Bucket name")
    STORAGE_ACCESS_KEY: Optional[str] = Field(None, description="Access Key ID")
    STORAGE_SECRET_KEY: Optional[str] = Field(None, description="Access Key Secret")

    # [Optional] CDN / Public Domain
    # 如果配置了CDN，生成的URL将使用此域名而不是 Endpoint
    STORAGE_PUBLIC_DOMAIN: Optional[str] = None

    # local provider 的根目录
    STORAGE_LOCAL_ROOT: str = "./storage"

    # --- Portability ---
    EXPORT_FORMAT_VERSION: int = 1
    # 导出时用于补全相对媒体 URL 的站点域名
    EXPORT_BASE_URL: str = ""

    BACKUP_PREFIX: str = "backups"
    BACKUP_RETENTION_DAYS: int = Field(30, ge=1)
    BACKUP_CRON_HOUR: int = 3
    BACKUP_CRON_MINUTE: int = 0

    # 是否在自由文本中按整数 token 替换旧媒体 ID (存在误替换风险，默认关闭)
    IMPORT_LEGACY_ID_SCAN: bool = False

settings = Settings()
