"""Excel styling, formatting, and writing utilities."""
from .styles import *
from .formatters import format_header_row, format_data_cell, auto_column_width, add_kpi_card, ratio_highlight
from .writer import ExcelWriter
