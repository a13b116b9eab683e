"""
Cell-level formatting: number formats, header/data/total styling, KPI cards.
"""
from __future__ import annotations

import math

import pandas as pd
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from ehr_eda.config import COVERAGE_OUTLIER_THRESHOLD
from ehr_eda.excel.styles import (
    HEADER_FONT, HEADER_FILL, HEADER_BORDER,
    DATA_FONT, TOTAL_FONT,
    THIN_BORDER, TOTAL_BORDER,
    ALTERNATE_FILL, TOTAL_FILL,
    KPI_VALUE_FONT, KPI_LABEL_FONT,
    CENTER, LEFT, RIGHT,
    HIGHLIGHT_FILLS,
)

# col_type -> Excel number format; anything not listed is written as text
NUMBER_FORMATS = {
    "currency": '"$"#,##0.00',
    "mean_currency": '"$"#,##0.00',   # per-row average, never totalled
    "percent": '0.0"%"',
    "number": "#,##0",
    "decimal": "0.0",
    "ratio": "0.000",
}
KPI_FORMATS = {**NUMBER_FORMATS, "currency": '"$"#,##0'}
# Columns the TOTAL row of a table adds up
SUMMABLE_TYPES = ("currency", "number")


def ratio_highlight(value, threshold: float = COVERAGE_OUTLIER_THRESHOLD) -> str | None:
    """'undefined' for a missing/NaN/inf ratio, 'outlier' above threshold, else None."""
    if value is None or pd.isna(value):
        return "undefined"
    value = float(value)
    if math.isinf(value):
        return "undefined"
    return "outlier" if value > threshold else None


def format_header_row(ws: Worksheet, row_num: int, num_cols: int) -> None:
    for col in range(1, num_cols + 1):
        cell = ws.cell(row=row_num, column=col)
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = CENTER
        cell.border = HEADER_BORDER


def format_data_cell(
    ws: Worksheet,
    row_num: int,
    col_num: int,
    value,
    col_type: str = "text",
    is_total: bool = False,
    highlight: str | None = None,
) -> None:
    """Write one body cell.

    Fill precedence: named highlight, then the total-row fill, then banding
    on even rows.
    """
    cell = ws.cell(row=row_num, column=col_num)
    cell.value = value
    cell.font = TOTAL_FONT if is_total else DATA_FONT
    cell.border = TOTAL_BORDER if is_total else THIN_BORDER

    number_format = NUMBER_FORMATS.get(col_type)
    cell.alignment = RIGHT if number_format else LEFT
    if number_format:
        cell.number_format = number_format

    fill = HIGHLIGHT_FILLS.get(highlight) if highlight else None
    if fill is None and is_total:
        fill = TOTAL_FILL
    elif fill is None and row_num % 2 == 0:
        fill = ALTERNATE_FILL
    if fill is not None:
        cell.fill = fill


def auto_column_width(ws: Worksheet, min_width: int = 10, max_width: int = 60) -> None:
    """Size every column to its longest rendered value, within bounds."""
    for column in ws.iter_cols():
        lengths = [len(str(cell.value)) for cell in column if cell.value is not None]
        width = max(lengths, default=0) + 2
        ws.column_dimensions[get_column_letter(column[0].column)].width = min(max(width, min_width), max_width)


def add_kpi_card(
    ws: Worksheet,
    row: int,
    col: int,
    value,
    label: str,
    format_type: str = "number",
) -> None:
    """Large figure with a small caption underneath."""
    value_cell = ws.cell(row=row, column=col, value=value)
    value_cell.font = KPI_VALUE_FONT
    value_cell.alignment = CENTER
    if format_type in KPI_FORMATS:
        value_cell.number_format = KPI_FORMATS[format_type]

    label_cell = ws.cell(row=row + 1, column=col, value=label)
    label_cell.font = KPI_LABEL_FONT
    label_cell.alignment = CENTER
