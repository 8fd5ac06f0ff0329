"""
工作簿编码器 - 将合并结果写回 xlsx 字节
"""
from io import BytesIO
from typing import List, Sequence

from openpyxl import Workbook

from stockmerge.services.base import BaseService, WorkbookWriteError
from .models import RawRow


class WorkbookEncoder(BaseService):
    """工作簿编码器"""

    def __init__(self):
        super().__init__("WorkbookEncoder")

    def collect_headers(self, rows: Sequence[RawRow]) -> List[str]:
        """
        汇总所有行出现过的列标识

        首行按其自身键顺序，后续行新出现的键依次追加到末尾。
        """
        headers: List[str] = []
        seen = set()
        for row in rows:
            for column in row:
                if column not in seen:
                    seen.add(column)
                    headers.append(column)
        return headers

    def encode(self, rows: Sequence[RawRow], sheet_name: str) -> bytes:
        """
        将行数据编码为单 Sheet 工作簿

        第 1 行写入列标识（如 A、J），其后每条记录一行，缺失的列留空。

        Raises:
            WorkbookWriteError: Sheet 名称非法或写出失败
        """
        headers = self.collect_headers(rows)

        workbook = Workbook()
        worksheet = workbook.active
        try:
            worksheet.title = sheet_name
        except ValueError as e:
            raise WorkbookWriteError(
                f"Invalid sheet name '{sheet_name}': {e}",
                details={"sheet_name": sheet_name},
            ) from e

        if headers:
            worksheet.append(headers)
            for row in rows:
                worksheet.append([row.get(column) for column in headers])

        buffer = BytesIO()
        try:
            workbook.save(buffer)
        except Exception as e:
            self.log_error(f"写出工作簿失败: {e}", error=e)
            raise WorkbookWriteError(f"Unable to write workbook: {e}") from e

        data = buffer.getvalue()
        self.log_info(
            f"编码完成: sheet={sheet_name}, 列 {len(headers)}，行 {len(rows)}，{len(data)} bytes"
        )
        self.record_metric("encoded_bytes", len(data))
        return data
