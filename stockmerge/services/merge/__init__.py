"""
数据合并模块 - 按复合键合并多个文件的行
"""

from .rules import ColumnSpec, build_composite_key, to_key_segment, is_numeric
from .merger import StockMerger, MergeResult

__all__ = [
    "ColumnSpec",
    "build_composite_key",
    "to_key_segment",
    "is_numeric",
    "StockMerger",
    "MergeResult",
]
