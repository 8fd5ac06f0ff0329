"""
服务层模块 - 提供业务逻辑实现
"""

from .stock_merge_service import StockMergeService, StockMergeResult

__all__ = [
    "StockMergeService",
    "StockMergeResult",
]
