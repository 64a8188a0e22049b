# rocktour/schema_walker.py
"""Header assertions and typed cell reads/writes on top of a GridCursor.

Every read or write advances one column first, so a row is walked simply by
calling the methods in the order its cells appear.
"""
import math
from typing import Any, Optional, Union

from .config import SHEET_LAYOUTS
from .errors import CellNotBlankError, NonIntegerValueError, SchemaMismatchError, TypeMismatchError
from .grid_cursor import GridCursor


class SchemaReader:

    def __init__(self, cursor: GridCursor):
        self.cursor = cursor

    def select_sheet(self, name: str) -> None:
        self.cursor.select_sheet(name)

    def has_sheet(self, name: str) -> bool:
        return self.cursor.has_sheet(name)

    def next_row(self) -> None:
        self.cursor.next_row()

    def has_more_rows(self) -> bool:
        return self.cursor.has_next_row()

    def position(self) -> str:
        return self.cursor.position()

    def assert_header(self, expected: str) -> None:
        """Advance and fail unless the cell text equals expected ('' matches a blank cell)."""
        self.cursor.next_column()
        actual = self.cursor.value()
        text = '' if actual is None else actual
        if text != expected:
            raise SchemaMismatchError(self.cursor.sheet.title, self.cursor.row,
                                      self.cursor.column_letter, expected, actual)

    def assert_blank_row(self) -> None:
        """Fail unless every cell of the current row is empty."""
        if not self.cursor.row_is_blank():
            raise CellNotBlankError(f"Sheet ({self.cursor.sheet.title}) row ({self.cursor.row}) should be empty.")

    def read_string(self) -> str:
        self.cursor.next_column()
        value = self.cursor.value()
        if value is None:
            return ''
        if not isinstance(value, str):
            raise TypeMismatchError(self.position(), 'string', value)
        return value

    def read_number(self) -> float:
        self.cursor.next_column()
        value = self.cursor.value()
        # bool is an int subclass, but a TRUE cell is not a number cell
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeMismatchError(self.position(), 'numeric', value)
        return float(value)

    def read_integer(self, label: str) -> int:
        """Read a numeric cell that must hold a whole number."""
        value = self.read_number()
        if not math.isfinite(value) or value != int(value):
            raise NonIntegerValueError(f"{self.position()}: the {label} ({value}) should be an integer number.")
        return int(value)

    def read_boolean(self) -> bool:
        self.cursor.next_column()
        value = self.cursor.value()
        if not isinstance(value, bool):
            raise TypeMismatchError(self.position(), 'boolean', value)
        return value

    def read_background_color(self) -> Optional[str]:
        """Color of the cell last read, without advancing."""
        return self.cursor.background_color()


class SchemaWriter:

    def __init__(self, cursor: GridCursor):
        self.cursor = cursor

    def create_sheet(self, name: str) -> None:
        self.cursor.create_sheet(name, SHEET_LAYOUTS.get(name))

    def next_row(self) -> None:
        self.cursor.next_row()

    def write_header(self, text: str, span: int = 1) -> None:
        self.cursor.next_column()
        self.cursor.write(text, header=True)
        self.cursor.merge_span(span)

    def write_cell(self, value: Union[str, int, float, bool, None] = None,
                   fill_color: Optional[str] = None) -> None:
        self.cursor.next_column()
        self.cursor.write(value, fill_color=fill_color)

    def skip_cell(self) -> None:
        """Advance past a cell that a merge already covers."""
        self.cursor.next_column()

    def finish_sheet(self) -> None:
        self.cursor.autosize_columns()


def read_header_row(reader: SchemaReader, *labels: Any) -> None:
    """Advance to the next row and assert each label in turn."""
    reader.next_row()
    for label in labels:
        reader.assert_header(label)


def write_header_row(writer: SchemaWriter, *labels: Any) -> None:
    writer.next_row()
    for label in labels:
        writer.write_header(label)
