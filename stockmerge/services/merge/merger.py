"""
库存合并器 - 按复合键合并多个文件的行并对数值列求和
"""
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from stockmerge.services.base import BaseService
from stockmerge.services.workbook.models import (
    DIAG_NON_NUMERIC_VALUE,
    Diagnostic,
    RawRow,
)
from .rules import ColumnSpec, build_composite_key, is_numeric


@dataclass
class MergeResult:
    """合并结果"""
    rows: List[RawRow] = field(default_factory=list)  # 按首次出现顺序排列
    diagnostics: List[Diagnostic] = field(default_factory=list)
    input_rows: int = 0


class StockMerger(BaseService):
    """库存数据合并器"""

    def __init__(self):
        super().__init__("StockMerger")

    def merge(
        self,
        row_sets: Sequence[Sequence[RawRow]],
        spec: ColumnSpec,
        sources: Optional[Sequence[str]] = None,
    ) -> MergeResult:
        """
        合并多个文件的行数据

        Args:
            row_sets: 每个文件的行列表，按文件顺序排列
            spec: 复合键列与求和列
            sources: 与 row_sets 一一对应的文件名，仅用于诊断信息

        Raises:
            ValueError: sources 与 row_sets 长度不一致

        Returns:
            MergeResult，rows 为每个复合键一行，顺序为复合键首次出现的顺序
            {
                "rows": [{"A": "X", "J": 7}, ...],
                "diagnostics": [...],
                "input_rows": 12
            }
        """
        if sources is None:
            sources = [f"file_{idx}" for idx in range(len(row_sets))]
        elif len(sources) != len(row_sets):
            raise ValueError(
                f"sources 与 row_sets 数量不一致: {len(sources)} != {len(row_sets)}"
            )

        merged: "OrderedDict[str, RawRow]" = OrderedDict()
        diagnostics: List[Diagnostic] = []
        input_rows = 0
        summed = 0

        labelled = (
            (source, row)
            for source, rows in zip(sources, row_sets)
            for row in rows
        )
        for source, row in labelled:
            input_rows += 1
            key = build_composite_key(row, spec)

            existing = merged.get(key)
            if existing is None:
                # 首次出现：浅拷贝整行作为种子
                merged[key] = dict(row)
                continue

            for column in spec.value_columns:
                if column not in row:
                    continue
                value = row[column]
                if not is_numeric(value):
                    diagnostics.append(
                        Diagnostic(
                            kind=DIAG_NON_NUMERIC_VALUE,
                            source=source,
                            column=column,
                            key=key,
                            detail=f"Non-numeric value {value!r} not summed",
                        )
                    )
                    continue
                current = existing.get(column)
                existing[column] = (current if is_numeric(current) else 0) + value
                summed += 1

        if diagnostics:
            self.log_warning(f"跳过 {len(diagnostics)} 个非数值求和字段")
        self.log_info(
            f"合并完成: 输入 {input_rows} 行，输出 {len(merged)} 行，键列 {list(spec.key_columns)}，"
            f"求和列 {list(spec.value_columns)}"
        )
        self.record_metric("input_rows", input_rows)
        self.record_metric("merged_rows", len(merged))
        self.record_metric("summed_values", summed)
        self.record_metric("skipped_values", len(diagnostics))

        return MergeResult(
            rows=list(merged.values()),
            diagnostics=diagnostics,
            input_rows=input_rows,
        )

    def merge_flat(self, rows: Sequence[RawRow], spec: ColumnSpec) -> List[RawRow]:
        """合并单个已展平的行序列，仅返回行"""
        return self.merge([rows], spec).rows

