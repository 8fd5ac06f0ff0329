from fastapi import APIRouter

from stockmerge.core.config import settings

router = APIRouter()


@router.get("/health", summary="健康检查")
def health():
	return {"status": "ok", "app": settings.app_name}
