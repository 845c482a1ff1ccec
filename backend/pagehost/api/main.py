from fastapi import APIRouter

from pagehost.api.routes import serve, upload

api_router = APIRouter()
api_router.include_router(upload.router)
# 兜底路由，必须最后注册
api_router.include_router(serve.router)
