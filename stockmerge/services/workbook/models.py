"""
工作簿相关数据模型
"""
from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Any, Dict, List, Optional, Union


# 单元格值：String / Number / Date / Empty
CellValue = Union[str, int, float, datetime, date, time, None]

# 以列字母（"A"、"J"）为键的一行数据
RawRow = Dict[str, CellValue]


DIAG_SHEET_MISSING = "sheet_missing"
DIAG_NON_NUMERIC_VALUE = "non_numeric_value"


@dataclass
class SourceFile:
    """上传的单个工作簿"""
    name: str  # 原始文件名
    content: bytes  # 完整文件内容
    content_type: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass
class Diagnostic:
    """被静默吸收的数据问题（缺失 Sheet、非数值求和字段等）"""
    kind: str
    source: str
    detail: str
    column: Optional[str] = None
    key: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "kind": self.kind,
            "source": self.source,
            "detail": self.detail,
        }
        if self.column is not None:
            data["column"] = self.column
        if self.key is not None:
            data["key"] = self.key
        return data


@dataclass
class ExtractResult:
    """单个文件的提取结果"""
    source: str
    rows: List[RawRow] = field(default_factory=list)
    sheet_found: bool = True
    diagnostics: List[Diagnostic] = field(default_factory=list)
