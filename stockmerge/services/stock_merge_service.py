"""
库存合并服务：读取多个门店导出的工作簿，按复合键合并并对库存列求和，
输出单个合并后的工作簿。
"""
import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from stockmerge.core.config import settings
from stockmerge.services.base import (
    BaseService,
    InputMissingError,
    ProcessingFailure,
    ServiceException,
)
from stockmerge.services.merge import ColumnSpec, StockMerger
from stockmerge.services.workbook import (
    Diagnostic,
    ExtractResult,
    RawRow,
    SourceFile,
    WorkbookEncoder,
    WorkbookExtractor,
)


@dataclass
class StockMergeResult:
    """一次合并请求的完整结果"""
    rows: List[RawRow]
    content: bytes
    filename: str
    sheet_name: str
    input_files: int
    input_rows: int
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def merged_rows(self) -> int:
        return len(self.rows)

    def summary(self) -> Dict[str, Any]:
        return {
            "sheet_name": self.sheet_name,
            "input_files": self.input_files,
            "input_rows": self.input_rows,
            "merged_rows": self.merged_rows,
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }


class StockMergeService(BaseService):
    """提取 → 合并 → 编码"""

    def __init__(
        self,
        extractor: Optional[WorkbookExtractor] = None,
        merger: Optional[StockMerger] = None,
        encoder: Optional[WorkbookEncoder] = None,
    ) -> None:
        super().__init__("StockMergeService")
        self.extractor = extractor or WorkbookExtractor()
        self.merger = merger or StockMerger()
        self.encoder = encoder or WorkbookEncoder()

    async def run(
        self,
        files: List[SourceFile],
        spec: ColumnSpec,
        sheet_name: Optional[str] = None,
    ) -> StockMergeResult:
        """
        执行一次合并

        Args:
            files: 上传的工作簿，按上传顺序
            spec: 复合键列与求和列
            sheet_name: 读取的 Sheet，同时作为输出 Sheet 名称

        Raises:
            InputMissingError: 没有文件，或所有文件都没有提取到数据
            ProcessingFailure: 解析 / 合并 / 编码失败
        """
        if not files:
            raise InputMissingError("No files provided")

        sheet_name = sheet_name or settings.merge.default_sheet_name
        self.log_info(
            f"开始合并 {len(files)} 个文件: sheet={sheet_name}, "
            f"键列={list(spec.key_columns)}, 求和列={list(spec.value_columns)}"
        )

        extracted = await self._extract_all(files, sheet_name)
        self.record_metric("last_extracted_rows", sum(len(result.rows) for result in extracted))

        diagnostics: List[Diagnostic] = []
        for result in extracted:
            diagnostics.extend(result.diagnostics)

        if not any(result.rows for result in extracted):
            raise InputMissingError(
                "No data found in Excel files",
                details={"diagnostics": [d.to_dict() for d in diagnostics]},
            )

        try:
            merge_result = self.merger.merge(
                [result.rows for result in extracted],
                spec,
                sources=[result.source for result in extracted],
            )
            diagnostics.extend(merge_result.diagnostics)
            content = self.encoder.encode(merge_result.rows, sheet_name)
        except ServiceException:
            raise
        except Exception as e:
            self.log_error(f"合并失败: {e}", error=e)
            raise ProcessingFailure(str(e)) from e

        filename = self.build_filename(datetime.now())
        self.log_info(
            f"生成文件 {filename}: {len(content)} bytes，"
            f"{merge_result.input_rows} 行 → {len(merge_result.rows)} 行，诊断 {len(diagnostics)} 条"
        )
        self.record_metric("last_input_files", len(files))
        self.record_metric("last_merged_rows", len(merge_result.rows))

        return StockMergeResult(
            rows=merge_result.rows,
            content=content,
            filename=filename,
            sheet_name=sheet_name,
            input_files=len(files),
            input_rows=merge_result.input_rows,
            diagnostics=diagnostics,
        )

    async def _extract_all(self, files: List[SourceFile], sheet_name: str) -> List[ExtractResult]:
        """并发解析所有文件，结果保持上传顺序"""
        loop = asyncio.get_running_loop()
        tasks = [
            loop.run_in_executor(None, self.extractor.extract, source, sheet_name)
            for source in files
        ]
        try:
            return list(await asyncio.gather(*tasks))
        except ServiceException:
            raise
        except Exception as e:
            self.log_error(f"解析文件失败: {e}", error=e)
            raise ProcessingFailure(str(e)) from e

    @staticmethod
    def build_filename(now: datetime) -> str:
        """输出文件名，如 stock_merge_2024-05-01T09-30-00.xlsx"""
        timestamp = now.strftime("%Y-%m-%dT%H-%M-%S")
        return f"{settings.merge.output_filename_prefix}_{timestamp}.xlsx"
