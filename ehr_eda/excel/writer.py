"""
ExcelWriter: high-level helpers for building styled Excel workbooks.
"""
from __future__ import annotations

import math
import re
from pathlib import Path

import pandas as pd
from openpyxl import Workbook
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from ehr_eda.excel.styles import (
    TITLE_FONT, SUBTITLE_FONT, SECTION_FONT,
    INSIGHT_TITLE_FONT, INSIGHT_BODY_FONT,
    LEGEND_BOLD_FONT, DATA_FONT,
    LEGEND_FILL, THIN_BORDER, WRAP,
)
from ehr_eda.excel.formatters import (
    format_header_row,
    format_data_cell,
    auto_column_width,
    add_kpi_card,
    SUMMABLE_TYPES,
)


ColSpec = tuple[str, str, str]  # (key, col_type, label)

_INVALID_TITLE_CHARS = re.compile(r"[\[\]\*\?/\\:]")


def _cell_value(val):
    """Blank out NaN/inf so undefined ratios show as empty cells, not 0."""
    if val is None:
        return None
    if isinstance(val, float) and (math.isnan(val) or math.isinf(val)):
        return None
    if pd.api.types.is_scalar(val) and pd.isna(val):
        return None
    if hasattr(val, "item"):
        return val.item()
    return val


class ExcelWriter:
    """Fluent builder for styled Excel workbooks."""

    def __init__(self) -> None:
        self.wb = Workbook()
        self._first_sheet = True

    # ------------------------------------------------------------------
    # Sheet management
    # ------------------------------------------------------------------

    def add_sheet(self, title: str) -> Worksheet:
        """Create a new worksheet (re-uses the default sheet for the first call).

        Titles are cleaned of characters Excel rejects and cut to 31 chars.
        """
        title = _INVALID_TITLE_CHARS.sub("-", title)[:31]
        if self._first_sheet:
            ws = self.wb.active
            ws.title = title
            self._first_sheet = False
        else:
            ws = self.wb.create_sheet(title=title)
        return ws

    # ------------------------------------------------------------------
    # Title block
    # ------------------------------------------------------------------

    def write_title(
        self,
        ws: Worksheet,
        title: str,
        subtitle: str,
        merge_cols: int = 8,
    ) -> int:
        """Write title + subtitle rows. Returns next available row."""
        ws.cell(row=1, column=1).value = title
        ws.cell(row=1, column=1).font = TITLE_FONT
        ws.merge_cells(start_row=1, start_column=1, end_row=1, end_column=merge_cols)

        ws.cell(row=2, column=1).value = subtitle
        ws.cell(row=2, column=1).font = SUBTITLE_FONT
        ws.merge_cells(start_row=2, start_column=1, end_row=2, end_column=merge_cols)

        for col in range(1, merge_cols + 1):
            ws.column_dimensions[get_column_letter(col)].width = 18

        return 4

    def write_section(self, ws: Worksheet, row: int, title: str) -> int:
        """Write a section header. Returns next row."""
        ws.cell(row=row, column=1).value = title
        ws.cell(row=row, column=1).font = SECTION_FONT
        return row + 2

    # ------------------------------------------------------------------
    # KPI cards
    # ------------------------------------------------------------------

    def write_kpi_row(
        self,
        ws: Worksheet,
        row: int,
        kpis: list[tuple],  # [(value, label, format_type), ...]
        start_col: int = 1,
        col_spacing: int = 2,
    ) -> int:
        """Write a row of KPI cards. Returns next row."""
        col = start_col
        for value, label, fmt in kpis:
            add_kpi_card(ws, row, col, value, label, fmt)
            col += col_spacing
        return row + 3

    # ------------------------------------------------------------------
    # Data tables
    # ------------------------------------------------------------------

    def write_table(
        self,
        ws: Worksheet,
        start_row: int,
        columns: list[ColSpec],
        data: list[dict] | pd.DataFrame,
        highlight_fn=None,
        freeze: bool = True,
        show_total: bool = False,
        total_label: str = "TOTAL",
    ) -> int:
        """Write a full table with headers + data rows.

        highlight_fn(row_idx, row_data) -> str|None  a HIGHLIGHT_FILLS key: 'top', 'outlier', ...

        Returns the row number after the last data row.
        """
        for col_num, (_, _, label) in enumerate(columns, 1):
            ws.cell(row=start_row, column=col_num).value = label
        format_header_row(ws, start_row, len(columns))

        rows = data.to_dict("records") if isinstance(data, pd.DataFrame) else data

        row = start_row + 1
        for idx, row_data in enumerate(rows):
            hl = highlight_fn(idx, row_data) if highlight_fn else None
            for col_num, (key, col_type, _) in enumerate(columns, 1):
                format_data_cell(ws, row, col_num, _cell_value(row_data.get(key)), col_type, highlight=hl)
            row += 1

        if show_total and rows:
            df_rows = pd.DataFrame(rows)
            format_data_cell(ws, row, 1, total_label, "text", is_total=True)
            for col_num, (key, col_type, _) in enumerate(columns[1:], 2):
                if col_type in SUMMABLE_TYPES:
                    val = df_rows[key].sum() if key in df_rows.columns else 0
                    format_data_cell(ws, row, col_num, _cell_value(val), col_type, is_total=True)
                else:
                    format_data_cell(ws, row, col_num, "", "text", is_total=True)
            row += 1

        auto_column_width(ws)
        if freeze:
            ws.freeze_panes = f"A{start_row + 1}"

        return row

    def write_frame(
        self,
        ws: Worksheet,
        start_row: int,
        df: pd.DataFrame,
        index_label: str,
        value_type: str = "number",
    ) -> int:
        """Write a wide frame (e.g. a crosstab): index as first column, one column per frame column."""
        frame = df.copy()
        frame.columns = [str(c) for c in frame.columns]
        frame = frame.rename_axis(index_label).reset_index()
        frame[index_label] = frame[index_label].astype(str)
        columns = [(index_label, "text", index_label)] + [
            (c, value_type, c) for c in frame.columns if c != index_label
        ]
        return self.write_table(ws, start_row, columns, frame)

    # ------------------------------------------------------------------
    # Insight / legend blocks
    # ------------------------------------------------------------------

    def write_insight(self, ws: Worksheet, row: int, title: str, body: str, merge_cols: int = 8) -> int:
        """Write a key insight block. Returns next row."""
        ws.cell(row=row, column=1).value = title
        ws.cell(row=row, column=1).font = INSIGHT_TITLE_FONT
        ws.cell(row=row + 1, column=1).value = body
        ws.cell(row=row + 1, column=1).font = INSIGHT_BODY_FONT
        ws.merge_cells(start_row=row + 1, start_column=1, end_row=row + 1, end_column=merge_cols)
        return row + 3

    def write_legend(self, ws: Worksheet, start_row: int, items: list[tuple[str, str]]) -> int:
        """Write a two-column legend table. Returns next row."""
        ws.cell(row=start_row, column=1).value = "Table"
        ws.cell(row=start_row, column=2).value = "What It Contains"
        format_header_row(ws, start_row, 2)

        row = start_row + 1
        for name, desc in items:
            c1 = ws.cell(row=row, column=1)
            c1.value = name
            c1.font = LEGEND_BOLD_FONT
            c1.fill = LEGEND_FILL
            c1.border = THIN_BORDER

            c2 = ws.cell(row=row, column=2)
            c2.value = desc
            c2.font = DATA_FONT
            c2.fill = LEGEND_FILL
            c2.border = THIN_BORDER
            c2.alignment = WRAP
            row += 1

        ws.column_dimensions["A"].width = 22
        ws.column_dimensions["B"].width = 90
        return row + 1

    # ------------------------------------------------------------------
    # Save
    # ------------------------------------------------------------------

    def save(self, path: str | Path) -> Path:
        """Save the workbook to disk."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.wb.save(path)
        return path
