import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from stockmerge.core.config import settings
from stockmerge.api.v1.router import api_v1_router
from stockmerge.services.base import ProcessingFailure, ServiceException

logging.basicConfig(
	level=getattr(logging, settings.log_level.upper(), logging.INFO),
	format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("stockmerge.main")

app = FastAPI(title=settings.app_name)

app.include_router(api_v1_router, prefix="/api/v1")


@app.exception_handler(ServiceException)
async def service_exception_handler(request: Request, exc: ServiceException) -> JSONResponse:
	"""服务层异常统一转换为 {"error": ...}"""
	if exc.status_code >= 500:
		logger.error(f"处理请求失败 {request.url.path}: {exc}", exc_info=exc)
	else:
		logger.warning(f"请求无效 {request.url.path}: {exc}")
	return JSONResponse(
		status_code=exc.status_code,
		content={"error": exc.to_response_message(), "code": exc.code},
	)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
	"""表单解析失败、路由不存在等框架异常同样返回 {"error": ...}"""
	logger.warning(f"请求失败 {request.url.path}: {exc.status_code} {exc.detail}")
	return JSONResponse(
		status_code=exc.status_code,
		content={"error": str(exc.detail), "code": "http_error"},
		headers=getattr(exc, "headers", None),
	)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
	logger.error(f"未处理的异常 {request.url.path}: {exc}", exc_info=exc)
	return await service_exception_handler(request, ProcessingFailure(str(exc)))


@app.get("/")
def read_root():
	return {"message": f"{settings.app_name} is running"}


def run() -> None:
	uvicorn.run(
		"stockmerge.main:app",
		host=settings.host,
		port=settings.port,
		reload=settings.reload,
	)


if __name__ == "__main__":
	run()
