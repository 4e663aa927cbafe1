import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from tenant_portability.db.session import engine
from tenant_portability.core.config import settings
from tenant_portability.api.router import router
from tenant_portability.services.exceptions import (
    ServiceException, NotFoundError, DataAccessError, StorageError
)
from tenant_portability.schemas.common import JsonFaildResponse

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logger.info(f"Tenant portability service starting (env={settings.APP_ENV}, storage={settings.STORAGE_PROVIDER})")

    yield

    # --- 清理 ---
    await engine.dispose()

app = FastAPI(
    title="Tenant Portability",
    lifespan=lifespan
)

app.include_router(router)

def _error(status_code: int, message: str, headers=None) -> JSONResponse:
    body = JsonFaildResponse(status=status_code, msg=message, data=None)
    return JSONResponse(status_code=status_code, content=body.model_dump(), headers=headers)

@app.exception_handler(NotFoundError)
async def not_found_exception_handler(request: Request, exc: NotFoundError):
    return _error(status.HTTP_404_NOT_FOUND, exc.message)

@app.exception_handler(DataAccessError)
@app.exception_handler(StorageError)
async def unavailable_exception_handler(request: Request, exc: ServiceException):
    """
    数据库或对象存储不可用，返回 503。
    """
    logger.error(f"Collaborator unavailable on {request.url.path}: {exc.message}")
    return _error(status.HTTP_503_SERVICE_UNAVAILABLE, exc.message)

@app.exception_handler(ServiceException)
async def service_exception_handler(request: Request, exc: ServiceException):
    # 处理所有来自服务层的、可预期的业务逻辑错误
    return _error(status.HTTP_400_BAD_REQUEST, exc.message)

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    # 重写 FastAPI 默认的 HTTPException 处理器，以匹配我们的响应格式
    return _error(exc.status_code, exc.detail, headers=exc.headers)

@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    # 这个处理器只处理真正未预料到的服务器内部错误
    logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=exc)
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error")
