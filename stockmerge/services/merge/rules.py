"""
合并规则定义 - 列配置与复合键生成
"""
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Tuple


# 行中缺少该列时，复合键中使用的片段
MISSING_SEGMENT = "undefined"


@dataclass(frozen=True)
class ColumnSpec:
    """合并列配置"""
    key_columns: Tuple[str, ...]  # 组成复合键的列，按顺序拼接
    value_columns: Tuple[str, ...]  # 需要求和的数值列
    separator: str = "_"  # 复合键分隔符

    @classmethod
    def of(
        cls,
        key_columns: Iterable[str],
        value_columns: Iterable[str],
        separator: str = "_",
    ) -> "ColumnSpec":
        return cls(tuple(key_columns), tuple(value_columns), separator)


def is_numeric(value: Any) -> bool:
    """仅 int / float 视为数值，bool 除外"""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def to_key_segment(value: Any) -> str:
    """
    将单元格值转换为复合键片段

    数值 5、5.0 与字符串 "5" 得到相同片段。
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def build_composite_key(row: Mapping[str, Any], spec: ColumnSpec) -> str:
    """
    生成复合键

    Args:
        row: 行数据 {列字母: 值}
        spec: 列配置

    Returns:
        按 key_columns 顺序拼接的字符串，例如 "X_1001"；
        key_columns 为空时返回 ""
    """
    return spec.separator.join(
        to_key_segment(row[column]) if column in row else MISSING_SEGMENT
        for column in spec.key_columns
    )
