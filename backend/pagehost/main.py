import logging
from contextlib import asynccontextmanager

import sentry_sdk
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

from pagehost.api.main import api_router
from pagehost.core.config import settings
from pagehost.core.db import engine, init_db
from pagehost.core.errors import PageHostError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # 启动：配置日志并建表
    logging.basicConfig(level=settings.LOG_LEVEL)
    init_db(engine)
    logger.info("serving your pages")
    yield


if settings.SENTRY_DSN and settings.ENVIRONMENT != "local":
    sentry_sdk.init(dsn=str(settings.SENTRY_DSN), enable_tracing=True)

# 站点可能包含 /docs 等路径，不暴露 OpenAPI 文档
app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=None,
    docs_url=None,
    redoc_url=None,
    lifespan=lifespan,
)


@app.exception_handler(PageHostError)
async def pagehost_error_handler(request: Request, exc: PageHostError) -> PlainTextResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return PlainTextResponse(exc.message, status_code=exc.status_code, headers=exc.headers)


app.include_router(api_router)
