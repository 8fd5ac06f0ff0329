import asyncio
from datetime import datetime
from io import BytesIO

import pytest
from openpyxl import load_workbook

from stockmerge.services import StockMergeService
from stockmerge.services.base import InputMissingError, ProcessingFailure, WorkbookReadError
from stockmerge.services.merge import ColumnSpec
from stockmerge.services.workbook import (
    DIAG_NON_NUMERIC_VALUE,
    DIAG_SHEET_MISSING,
    SourceFile,
    WorkbookExtractor,
)


SPEC = ColumnSpec.of(["A", "B"], ["J", "K"])


def _run(service, files, spec=SPEC, sheet_name="Sheet1"):
    return asyncio.run(service.run(files, spec, sheet_name))


def _service() -> StockMergeService:
    return StockMergeService(extractor=WorkbookExtractor(header_skip_rows=3))


def test_run_merges_branches(branch_a_bytes, branch_b_bytes):
    result = _run(
        _service(),
        [SourceFile("a.xlsx", branch_a_bytes), SourceFile("b.xlsx", branch_b_bytes)],
    )
    assert [(row["B"], row["J"], row["K"]) for row in result.rows] == [
        ("P-001", 12, 8),
        ("P-002", 8, 6),
        ("P-003", 7, 7),
    ]
    assert result.input_files == 2
    assert result.input_rows == 5
    assert result.merged_rows == 3
    assert [d.kind for d in result.diagnostics] == [DIAG_NON_NUMERIC_VALUE]

    workbook = load_workbook(BytesIO(result.content))
    assert workbook.sheetnames == ["Sheet1"]
    values = list(workbook["Sheet1"].iter_rows(values_only=True))
    assert values[0] == ("A", "B", "C", "J", "K")
    assert values[1] == ("본점", "P-001", "볼펜", 12, 8)


def test_run_without_files():
    with pytest.raises(InputMissingError):
        _run(_service(), [])


def test_run_missing_sheet_in_one_file_is_reported(branch_a_bytes, make_workbook):
    other = make_workbook({"Other": [["x"]]})
    result = _run(_service(), [SourceFile("a.xlsx", branch_a_bytes), SourceFile("other.xlsx", other)])
    assert result.merged_rows == 2
    assert [(d.kind, d.source) for d in result.diagnostics] == [(DIAG_SHEET_MISSING, "other.xlsx")]


def test_run_no_data_anywhere(make_workbook):
    other = make_workbook({"Other": [["x"]]})
    with pytest.raises(InputMissingError) as exc_info:
        _run(_service(), [SourceFile("other.xlsx", other)])
    assert str(exc_info.value) == "No data found in Excel files"


def test_run_corrupt_file_fails_whole_request(branch_a_bytes):
    with pytest.raises(WorkbookReadError):
        _run(_service(), [SourceFile("a.xlsx", branch_a_bytes), SourceFile("bad.xlsx", b"junk")])


def test_unexpected_merge_error_is_wrapped(branch_a_bytes):
    class ExplodingMerger:
        def merge(self, *args, **kwargs):
            raise RuntimeError("boom")

    service = StockMergeService(
        extractor=WorkbookExtractor(header_skip_rows=3),
        merger=ExplodingMerger(),
    )
    with pytest.raises(ProcessingFailure) as exc_info:
        _run(service, [SourceFile("a.xlsx", branch_a_bytes)])
    assert exc_info.value.to_response_message() == "Processing failed: boom"


def test_output_sheet_uses_requested_name(make_workbook):
    content = make_workbook({"재고": [["h"], ["h"], ["h"], ["본점", "P-1"]]})
    result = _run(_service(), [SourceFile("a.xlsx", content)], sheet_name="재고")
    assert result.sheet_name == "재고"
    assert load_workbook(BytesIO(result.content)).sheetnames == ["재고"]


def test_build_filename():
    name = StockMergeService.build_filename(datetime(2024, 5, 1, 9, 30, 15))
    assert name == "stock_merge_2024-05-01T09-30-15.xlsx"


def test_extracted_row_metric_sums_all_files(branch_a_bytes, branch_b_bytes, make_workbook):
    service = _service()
    other = make_workbook({"Other": [["x"]]})
    _run(
        service,
        [
            SourceFile("a.xlsx", branch_a_bytes),
            SourceFile("b.xlsx", branch_b_bytes),
            SourceFile("other.xlsx", other),
        ],
    )
    metrics = service.get_metrics()
    assert metrics["last_extracted_rows"] == 5
    assert metrics["last_input_files"] == 3
    assert "rows_extracted" not in service.extractor.get_metrics()
