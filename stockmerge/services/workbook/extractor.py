"""
工作簿提取器 - 将上传的 xlsx 字节解析为按列字母索引的行数据
"""
from io import BytesIO
from typing import Iterable, List, Optional, Sequence

from openpyxl import load_workbook
from openpyxl.utils import get_column_letter

from stockmerge.core.config import settings
from stockmerge.services.base import BaseService, WorkbookReadError
from .models import (
    DIAG_SHEET_MISSING,
    Diagnostic,
    ExtractResult,
    RawRow,
    SourceFile,
)


class WorkbookExtractor(BaseService):
    """工作簿提取器"""

    def __init__(self, header_skip_rows: Optional[int] = None):
        """
        Args:
            header_skip_rows: 每个 Sheet 开头丢弃的行数，默认取 settings.merge.header_skip_rows
        """
        super().__init__("WorkbookExtractor")
        if header_skip_rows is None:
            header_skip_rows = settings.merge.header_skip_rows
        if header_skip_rows < 0:
            raise ValueError(f"header_skip_rows 不能为负数: {header_skip_rows}")
        self.header_skip_rows = header_skip_rows

    def extract(self, source: SourceFile, sheet_name: str = "Sheet1") -> ExtractResult:
        """
        提取单个工作簿中指定 Sheet 的数据

        - 列使用字母标识（A、B、...），第一行不作为表头
        - 空行不产出记录；产出记录中的前 header_skip_rows 条被丢弃
        - 日期单元格保持为 datetime
        - Sheet 不存在时返回空结果并附带诊断信息，不抛异常

        Raises:
            WorkbookReadError: 字节无法解析为工作簿
        """
        try:
            workbook = load_workbook(BytesIO(source.content), data_only=True)
        except Exception as e:
            self.log_error(f"解析工作簿失败: {source.name}: {e}", error=e)
            raise WorkbookReadError(
                f"Unable to read workbook '{source.name}': {e}",
                details={"source": source.name},
            ) from e

        try:
            if sheet_name not in workbook.sheetnames:
                self.log_warning(
                    f"{source.name} 中不存在 Sheet '{sheet_name}'，已跳过 "
                    f"(可用: {', '.join(workbook.sheetnames)})"
                )
                return ExtractResult(
                    source=source.name,
                    rows=[],
                    sheet_found=False,
                    diagnostics=[
                        Diagnostic(
                            kind=DIAG_SHEET_MISSING,
                            source=source.name,
                            detail=f"Sheet '{sheet_name}' not found; file contributed no rows",
                        )
                    ],
                )

            worksheet = workbook[sheet_name]
            records = list(self._iter_records(worksheet.iter_rows(values_only=True)))
        finally:
            workbook.close()

        rows = records[self.header_skip_rows:]
        self.log_info(
            f"提取 {source.name}!{sheet_name} 完成: 共 {len(records)} 行，"
            f"跳过 {len(records) - len(rows)} 行，保留 {len(rows)} 行"
        )
        return ExtractResult(source=source.name, rows=rows)

    def extract_many(
        self,
        sources: Sequence[SourceFile],
        sheet_name: str = "Sheet1",
    ) -> List[ExtractResult]:
        """逐个提取，结果与输入顺序一致"""
        return [self.extract(source, sheet_name) for source in sources]

    def _iter_records(self, values: Iterable[tuple]) -> Iterable[RawRow]:
        for row in values:
            record: RawRow = {}
            for col_idx, cell in enumerate(row, start=1):
                if cell is None:
                    continue
                record[get_column_letter(col_idx)] = cell
            # 跳过空行
            if record:
                yield record
