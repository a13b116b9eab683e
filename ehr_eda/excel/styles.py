"""
Workbook palette: colors, fonts, fills, borders, alignments.
"""
from openpyxl.styles import Font, PatternFill, Alignment, Border, Side

# ---------------------------------------------------------------------------
# Palette
# ---------------------------------------------------------------------------
NAVY = "0D2C54"
CLINICAL_BLUE = "1565C0"
PALE_BLUE = "E3F2FD"
ROW_SHADE = "F5F7FA"
TOTAL_SHADE = "E8EAF6"
PALE_GOLD = "FFF8DC"       # top-N rows
PALE_RED = "FFEBEE"        # ratio above threshold
PALE_GRAY = "ECEFF1"       # undefined ratio
PALE_ORANGE = "FFF3E0"     # data-quality problems
GRID = "CCCCCC"
TOTAL_RULE = "999999"
MUTED = "666666"


def _font(size: int, color: str = "000000", **kw) -> Font:
    return Font(name="Calibri", size=size, color=color, **kw)


def _solid(color: str) -> PatternFill:
    return PatternFill(start_color=color, end_color=color, fill_type="solid")


def _box(color: str, edge: str = "thin", top: str = "thin", bottom: str = "thin") -> Border:
    return Border(
        left=Side(style=edge, color=color),
        right=Side(style=edge, color=color),
        top=Side(style=top, color=color),
        bottom=Side(style=bottom, color=color),
    )


# ---------------------------------------------------------------------------
# Fonts
# ---------------------------------------------------------------------------
TITLE_FONT = _font(24, NAVY, bold=True)
SUBTITLE_FONT = _font(12, MUTED, italic=True)
SECTION_FONT = _font(14, NAVY, bold=True)
HEADER_FONT = _font(11, "FFFFFF", bold=True)
DATA_FONT = _font(10)
TOTAL_FONT = _font(10, bold=True)
KPI_VALUE_FONT = _font(28, CLINICAL_BLUE, bold=True)
KPI_LABEL_FONT = _font(10, MUTED)
INSIGHT_TITLE_FONT = _font(11, bold=True)
INSIGHT_BODY_FONT = _font(10, italic=True)
LEGEND_BOLD_FONT = _font(10, bold=True)

# ---------------------------------------------------------------------------
# Fills
# ---------------------------------------------------------------------------
HEADER_FILL = _solid(NAVY)
LEGEND_FILL = _solid(PALE_BLUE)
ALTERNATE_FILL = _solid(ROW_SHADE)
TOTAL_FILL = _solid(TOTAL_SHADE)

# ---------------------------------------------------------------------------
# Borders
# ---------------------------------------------------------------------------
THIN_BORDER = _box(GRID)
HEADER_BORDER = _box(NAVY, bottom="medium")
TOTAL_BORDER = _box(TOTAL_RULE, top="medium", bottom="medium")

# ---------------------------------------------------------------------------
# Alignments
# ---------------------------------------------------------------------------
CENTER = Alignment(horizontal="center", vertical="center")
LEFT = Alignment(horizontal="left", vertical="center")
RIGHT = Alignment(horizontal="right", vertical="center")
WRAP = Alignment(horizontal="left", vertical="center", wrap_text=True)

# ---------------------------------------------------------------------------
# Row highlight name -> fill
# ---------------------------------------------------------------------------
HIGHLIGHT_FILLS = {
    "top": _solid(PALE_GOLD),
    "outlier": _solid(PALE_RED),
    "undefined": _solid(PALE_GRAY),
    "quality": _solid(PALE_ORANGE),
}
