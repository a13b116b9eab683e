"""Tests for the workbook writer and cell formatting."""

import math

import pandas as pd
from openpyxl import load_workbook

from ehr_eda.excel.formatters import ratio_highlight
from ehr_eda.excel.styles import HIGHLIGHT_FILLS
from ehr_eda.excel.writer import ExcelWriter


class TestRatioHighlight:
    def test_undefined(self) -> None:
        assert ratio_highlight(None) == "undefined"
        assert ratio_highlight(math.nan) == "undefined"
        assert ratio_highlight(math.inf) == "undefined"

    def test_outlier(self) -> None:
        assert ratio_highlight(1.2) == "outlier"
        assert ratio_highlight(1.0) is None
        assert ratio_highlight(0.4, threshold=0.3) == "outlier"

    def test_every_name_has_a_fill(self) -> None:
        for name in ("undefined", "outlier", "top", "quality"):
            assert name in HIGHLIGHT_FILLS


class TestExcelWriter:
    def test_sheet_titles_are_cleaned(self) -> None:
        ew = ExcelWriter()
        first = ew.add_sheet("Race/Ethnicity")
        long = ew.add_sheet("x" * 40)
        assert first.title == "Race-Ethnicity"
        assert len(long.title) == 31
        assert ew.wb.sheetnames == [first.title, long.title]

    def test_write_table_with_total(self, tmp_path) -> None:
        ew = ExcelWriter()
        ws = ew.add_sheet("T")
        data = pd.DataFrame({"name": ["a", "b"], "n": [2, 3], "ratio": [0.5, math.nan]})
        next_row = ew.write_table(ws, 1, [
            ("name", "text", "Name"),
            ("n", "number", "Count"),
            ("ratio", "ratio", "Ratio"),
        ], data, show_total=True)
        assert next_row == 5
        path = ew.save(tmp_path / "nested" / "t.xlsx")

        ws = load_workbook(path)["T"]
        assert [c.value for c in ws[1]] == ["Name", "Count", "Ratio"]
        assert ws["C3"].value is None
        assert ws["A4"].value == "TOTAL"
        assert ws["B4"].value == 5
        assert ws.freeze_panes == "A2"

    def test_write_frame_keeps_index(self, tmp_path) -> None:
        ew = ExcelWriter()
        ws = ew.add_sheet("X")
        frame = pd.DataFrame({"hispanic": [1, 0]}, index=pd.Index(["white", "asian"], name="RACE"))
        ew.write_frame(ws, 1, frame, "Race")
        ws = load_workbook(ew.save(tmp_path / "x.xlsx"))["X"]
        assert [c.value for c in ws[1]] == ["Race", "hispanic"]
        assert [ws["A2"].value, ws["B2"].value] == ["white", 1]

    def test_total_row_leaves_averages_blank(self, tmp_path) -> None:
        ew = ExcelWriter()
        ws = ew.add_sheet("G")
        data = pd.DataFrame({"name": ["a", "b"], "cost": [100.0, 50.0], "mean": [25.0, 50.0]})
        ew.write_table(ws, 1, [
            ("name", "text", "Group"),
            ("cost", "currency", "Cost"),
            ("mean", "mean_currency", "Mean Cost"),
        ], data, show_total=True)
        ws = load_workbook(ew.save(tmp_path / "g.xlsx"))["G"]
        assert ws["B4"].value == 150
        assert ws["C4"].value in (None, "")
        assert ws["C2"].number_format == ws["B2"].number_format
