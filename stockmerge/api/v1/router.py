from fastapi import APIRouter

from .endpoints import health, stock_merge

api_v1_router = APIRouter()
api_v1_router.include_router(health.router, tags=["健康检查"])
api_v1_router.include_router(stock_merge.router, prefix="/stock-merge", tags=["库存合并"])
