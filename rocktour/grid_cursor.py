# rocktour/grid_cursor.py
"""Stateful row/column cursor over an openpyxl workbook.

Rows and columns are 1-based, like openpyxl itself. Advancing the row resets
the column, so the next cell touched is the first one of that row.
"""
from typing import Any, Dict, Optional

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from .config import HEADER_COLOR, SheetLayout
from .errors import MissingSheetError


class GridCursor:

    def __init__(self, workbook: Workbook):
        self.workbook = workbook
        self.sheet = None
        self.row = 0
        self.column = 0

    # --- Sheets ---

    def has_sheet(self, name: str) -> bool:
        return name in self.workbook.sheetnames

    def select_sheet(self, name: str) -> None:
        if not self.has_sheet(name):
            raise MissingSheetError(name)
        self.sheet = self.workbook[name]
        self.row = 0
        self.column = 0

    def create_sheet(self, name: str, layout: Optional[SheetLayout] = None) -> None:
        self.sheet = self.workbook.create_sheet(title=name)
        self.row = 0
        self.column = 0
        if layout is not None:
            if layout.frozen_columns or layout.frozen_rows:
                self.sheet.freeze_panes = self.sheet.cell(
                    row=layout.frozen_rows + 1, column=layout.frozen_columns + 1)
            self.sheet.sheet_view.showGridLines = layout.show_gridlines

    # --- Movement ---

    def next_row(self) -> None:
        self.row += 1
        self.column = 0

    def next_column(self) -> None:
        self.column += 1

    def has_next_row(self) -> bool:
        """True if a non-empty row exists below the current one."""
        for row_index in range(self.row + 1, self.sheet.max_row + 1):
            for cell in self.sheet[row_index]:
                if cell.value is not None and cell.value != '':
                    return True
        return False

    def row_is_blank(self) -> bool:
        if self.row > self.sheet.max_row:
            return True
        return all(cell.value is None or cell.value == '' for cell in self.sheet[self.row])

    def position(self) -> str:
        return f"Sheet ({self.sheet.title}) row ({self.row}) column ({self.column_letter})"

    @property
    def column_letter(self) -> str:
        return get_column_letter(max(self.column, 1))

    # --- Cell access ---

    def value(self) -> Any:
        return self.sheet.cell(row=self.row, column=self.column).value

    def background_color(self) -> Optional[str]:
        """RGB hex of a solid fill, or None when the cell has no solid fill."""
        fill = self.sheet.cell(row=self.row, column=self.column).fill
        if fill is None or fill.fill_type != 'solid':
            return None
        color = fill.fgColor
        if color is None or color.type != 'rgb' or not isinstance(color.rgb, str):
            return None
        return color.rgb[-6:].upper()

    def write(self, value: Any = None, fill_color: Optional[str] = None, header: bool = False) -> None:
        cell = self.sheet.cell(row=self.row, column=self.column)
        if value is not None and value != '':
            cell.value = value
        if header:
            cell.font = Font(bold=True)
            cell.alignment = Alignment(horizontal='center', vertical='center')
            fill_color = fill_color or HEADER_COLOR
        if fill_color is not None:
            cell.fill = PatternFill(start_color=fill_color, end_color=fill_color, fill_type='solid')

    def merge_span(self, width: int) -> None:
        """Merge the current cell with the (width - 1) cells to its right."""
        if width <= 1:
            return
        self.sheet.merge_cells(start_row=self.row, start_column=self.column,
                               end_row=self.row, end_column=self.column + width - 1)

    def autosize_columns(self, min_width: int = 8, max_width: int = 60) -> None:
        """Widen every column to fit its longest rendered value (merged cells excluded)."""
        merged = set()
        for cell_range in self.sheet.merged_cells.ranges:
            for row_index, column_index in cell_range.cells:
                merged.add((row_index, column_index))
        widths: Dict[int, int] = {}
        for row in self.sheet.iter_rows():
            for cell in row:
                if cell.value is None or (cell.row, cell.column) in merged:
                    continue
                length = len(str(cell.value)) + 2
                widths[cell.column] = max(widths.get(cell.column, 0), length)
        for column_index, width in widths.items():
            letter = get_column_letter(column_index)
            self.sheet.column_dimensions[letter].width = min(max(width, min_width), max_width)
