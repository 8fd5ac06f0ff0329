"""
工作簿模块 - 负责 xlsx 的读取与写出
"""

from .models import (
    CellValue,
    RawRow,
    SourceFile,
    Diagnostic,
    ExtractResult,
    DIAG_SHEET_MISSING,
    DIAG_NON_NUMERIC_VALUE,
)
from .extractor import WorkbookExtractor
from .encoder import WorkbookEncoder

__all__ = [
    "CellValue",
    "RawRow",
    "SourceFile",
    "Diagnostic",
    "ExtractResult",
    "DIAG_SHEET_MISSING",
    "DIAG_NON_NUMERIC_VALUE",
    "WorkbookExtractor",
    "WorkbookEncoder",
]
