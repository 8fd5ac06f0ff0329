from io import BytesIO
from typing import Any, Dict, List

import pytest
from openpyxl import Workbook


# 门店导出模板的前三行（标题、日期、列名）
TEMPLATE_HEADER = [
    ["재고 현황"],
    ["2024-05-01"],
    ["매장", "상품코드", "상품명", None, None, None, None, None, None, "재고", "가용재고"],
]


def build_workbook(sheets: Dict[str, List[List[Any]]]) -> bytes:
    """按 {sheet 名称: 二维数组} 生成 xlsx 字节"""
    workbook = Workbook()
    workbook.remove(workbook.active)
    for title, rows in sheets.items():
        worksheet = workbook.create_sheet(title)
        for row in rows:
            worksheet.append(row)
    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def stock_row(store: str, code: str, name: str, stock: Any, available: Any) -> List[Any]:
    """A=매장, B=상품코드, C=상품명, J=재고, K=가용재고"""
    return [store, code, name, None, None, None, None, None, None, stock, available]


@pytest.fixture
def make_workbook():
    return build_workbook


@pytest.fixture
def branch_a_bytes() -> bytes:
    return build_workbook({
        "Sheet1": TEMPLATE_HEADER + [
            stock_row("본점", "P-001", "볼펜", 10, 8),
            stock_row("본점", "P-002", "노트", 5, 5),
        ]
    })


@pytest.fixture
def branch_b_bytes() -> bytes:
    return build_workbook({
        "Sheet1": TEMPLATE_HEADER + [
            stock_row("본점", "P-002", "노트", 3, 1),
            stock_row("본점", "P-003", "지우개", 7, 7),
            stock_row("본점", "P-001", "볼펜", 2, "n/a"),
        ]
    })
