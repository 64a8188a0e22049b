# rocktour/errors.py
"""Failures raised while reading or writing a tour workbook.

Every error is fatal to the current read or write call. Messages always carry
enough position context (sheet, row, column or entity) to find the offending
cell without running the reader again.
"""
from typing import Any, Optional


class TourFileError(Exception):
    """Base exception for all tour workbook failures."""


class SchemaMismatchError(TourFileError):
    """A header cell does not hold the expected label."""

    def __init__(self, sheet: str, row: int, column: str, expected: str, actual: Any):
        self.sheet = sheet
        self.row = row
        self.column = column
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Sheet ({sheet}) row ({row}) column ({column}): "
            f"the header cell ({actual!r}) does not contain the expected value ({expected!r})."
        )


class MissingSheetError(TourFileError):
    def __init__(self, sheet: str):
        self.sheet = sheet
        super().__init__(f"The workbook has no sheet named ({sheet}).")


class TypeMismatchError(TourFileError):
    """A data cell holds a value of the wrong type."""

    def __init__(self, position: str, expected_type: str, actual: Any):
        self.position = position
        self.expected_type = expected_type
        self.actual = actual
        super().__init__(
            f"{position}: the cell ({actual!r}) should be a {expected_type} cell "
            f"but is a {type(actual).__name__} cell."
        )


class InvalidNameError(TourFileError):
    pass


class InvalidDateRangeError(TourFileError):
    pass


class DurationError(TourFileError):
    pass


class RevenueError(TourFileError):
    pass


class CellNotBlankError(TourFileError):
    pass


class NoAvailabilityError(TourFileError):
    pass


class NonIntegerValueError(TourFileError):
    pass


class NegativeValueError(TourFileError):
    pass


class InconsistentMatrixError(TourFileError):
    """Two locations in the same coordinate groups disagree on driving time."""


class TourFileIOError(TourFileError, OSError):
    """The workbook could not be opened or saved."""

    def __init__(self, path: Any, action: str, cause: Optional[BaseException] = None):
        self.path = path
        super().__init__(f"Failed {action} tour file ({path}): {cause}")
