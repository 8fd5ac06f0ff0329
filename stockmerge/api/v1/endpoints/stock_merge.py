"""
库存合并 API 端点
"""
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from fastapi import APIRouter, Request
from fastapi.responses import Response
from pydantic import BaseModel
from starlette.datastructures import FormData, UploadFile

from stockmerge.core.config import settings
from stockmerge.dependencies import StockMergeServiceDep
from stockmerge.services.base import InputMissingError, MalformedConfigError
from stockmerge.services.merge import ColumnSpec
from stockmerge.services.workbook import SourceFile

router = APIRouter()
logger = logging.getLogger("stockmerge.api.stock_merge")

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
FILE_FIELD_PREFIX = "file_"

# 表单字段名：首个为正式名称，其后为兼容旧前端的别名
KEY_COLUMN_FIELDS = ("standardColumns", "standardColums")
VALUE_COLUMN_FIELDS = ("valueColumns", "stockColumns")


class PreviewResponse(BaseModel):
    """合并预览响应"""
    sheet_name: str
    input_files: int
    input_rows: int
    merged_rows: int
    rows: List[Dict[str, Any]] = []
    diagnostics: List[Dict[str, Any]] = []


@dataclass
class MergeRequest:
    """从 multipart 表单解析出的合并请求"""
    files: List[SourceFile]
    spec: ColumnSpec
    sheet_name: str


def _first_present(form: FormData, names) -> Optional[str]:
    for name in names:
        value = form.get(name)
        if value is not None and not isinstance(value, UploadFile):
            return value
    return None


def parse_column_list(raw: str, field_name: str) -> List[str]:
    """解析 JSON 编码的列标识数组，如 '["A", "B"]'"""
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as e:
        raise MalformedConfigError(
            f"Invalid JSON in field '{field_name}': {e.msg}",
            details={"field": field_name},
        ) from e
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise MalformedConfigError(
            f"Field '{field_name}' must be a JSON array of column labels",
            details={"field": field_name},
        )
    return value


async def parse_merge_form(request: Request) -> MergeRequest:
    """
    解析合并表单

    - file_* 字段：上传文件，按出现顺序处理
    - standardColumns：复合键列（JSON 数组），必填，可为 []
    - valueColumns / stockColumns：求和列（JSON 数组），缺省使用 settings.merge.value_columns
    - sheetName：读取及输出的 Sheet 名称

    Raises:
        InputMissingError: 缺少文件或列配置
        MalformedConfigError: 列配置不是合法 JSON 数组
    """
    max_files = settings.merge.max_upload_files
    form = await request.form()

    files: List[SourceFile] = []
    for name, value in form.multi_items():
        if not name.startswith(FILE_FIELD_PREFIX) or not isinstance(value, UploadFile):
            continue
        if len(files) >= max_files:
            raise MalformedConfigError(
                f"Too many files: at most {max_files} files per request",
                code="too_many_files",
            )
        content = await value.read()
        files.append(
            SourceFile(
                name=value.filename or name,
                content=content,
                content_type=value.content_type,
            )
        )

    if not files:
        raise InputMissingError("No files provided")

    raw_keys = _first_present(form, KEY_COLUMN_FIELDS)
    if raw_keys is None:
        raise InputMissingError("No key columns provided")
    key_columns = parse_column_list(raw_keys, KEY_COLUMN_FIELDS[0])

    raw_values = _first_present(form, VALUE_COLUMN_FIELDS)
    if raw_values is None:
        value_columns = list(settings.merge.value_columns)
    else:
        value_columns = parse_column_list(raw_values, VALUE_COLUMN_FIELDS[0])
    if not value_columns:
        raise InputMissingError("No value columns provided")

    sheet_name = (_first_present(form, ("sheetName",)) or "").strip()
    sheet_name = sheet_name or settings.merge.default_sheet_name

    return MergeRequest(
        files=files,
        spec=ColumnSpec.of(key_columns, value_columns, settings.merge.key_separator),
        sheet_name=sheet_name,
    )


@router.post("", summary="合并多个门店的库存表并下载")
async def merge_stock_files(
    request: Request,
    service: StockMergeServiceDep = None,
) -> Response:
    merge_request = await parse_merge_form(request)
    logger.info(
        f"收到合并请求: {len(merge_request.files)} 个文件，sheet={merge_request.sheet_name}"
    )

    result = await service.run(merge_request.files, merge_request.spec, merge_request.sheet_name)

    return Response(
        content=result.content,
        status_code=200,
        media_type=XLSX_MEDIA_TYPE,
        headers={
            "Content-Disposition": f"attachment; filename*=UTF-8''{quote(result.filename)}",
            "Cache-Control": "no-cache, no-store, must-revalidate",
            "Pragma": "no-cache",
            "Expires": "0",
            "X-Merge-Diagnostics": str(len(result.diagnostics)),
        },
    )


@router.post("/preview", response_model=PreviewResponse, summary="合并预览（返回 JSON 与诊断信息）")
async def preview_stock_merge(
    request: Request,
    service: StockMergeServiceDep = None,
) -> PreviewResponse:
    merge_request = await parse_merge_form(request)
    result = await service.run(merge_request.files, merge_request.spec, merge_request.sheet_name)
    return PreviewResponse(rows=result.rows, **result.summary())
