"""
依赖注入模块 - 提供各种服务依赖
"""
from typing import Annotated

from fastapi import Depends

from stockmerge.services import StockMergeService
from stockmerge.services.merge import StockMerger
from stockmerge.services.workbook import WorkbookEncoder, WorkbookExtractor


def get_extractor() -> WorkbookExtractor:
	"""获取工作簿提取器（每个请求独立实例）"""
	return WorkbookExtractor()


def get_merger() -> StockMerger:
	"""获取合并器"""
	return StockMerger()


def get_encoder() -> WorkbookEncoder:
	"""获取工作簿编码器"""
	return WorkbookEncoder()


def get_stock_merge_service(
	extractor: Annotated[WorkbookExtractor, Depends(get_extractor)],
	merger: Annotated[StockMerger, Depends(get_merger)],
	encoder: Annotated[WorkbookEncoder, Depends(get_encoder)],
) -> StockMergeService:
	"""获取库存合并服务"""
	return StockMergeService(extractor=extractor, merger=merger, encoder=encoder)


# 类型别名，方便在端点中使用
StockMergeServiceDep = Annotated[StockMergeService, Depends(get_stock_merge_service)]
