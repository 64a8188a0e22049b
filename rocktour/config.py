# rocktour/config.py
import re
from dataclasses import dataclass
from typing import List

# Text formats for dates written into cells
DAY_FORMAT = '%Y-%m-%d'      # e.g. 2024-01-31
MONTH_FORMAT = '%b %Y'       # e.g. Jan 2024

# Tour names are used as file names downstream, so keep them tame
VALID_NAME_PATTERN = re.compile(r'^[\w&#/.\- ]+$')

# Fill colors (aRGB). Only the RGB part is compared when reading.
UNAVAILABLE_COLOR = 'FFC0504D'
HEADER_COLOR = 'FFDCE6F1'

# Sheet names, in the order they appear in the workbook
CONFIGURATION_SHEET = 'Configuration'
BUS_SHEET = 'Bus'
SHOWS_SHEET = 'Shows'
DRIVING_TIME_SHEET = 'Driving time'
STOPS_SHEET = 'Stops'

DRIVING_TIME_NOTE = 'Driving time in seconds. Delete this sheet to generate it from air distances.'

# Fixed columns in front of the availability block on the Shows sheet
SHOW_HEADERS = [
    'Venue name',
    'City name',
    'Latitude',
    'Longitude',
    'Duration (in days)',
    'Revenue opportunity',
    'Required',
]


@dataclass(frozen=True)
class SheetLayout:
    """Presentation settings applied when a sheet is written."""
    frozen_columns: int
    frozen_rows: int
    show_gridlines: bool = False


SHEET_LAYOUTS = {
    CONFIGURATION_SHEET: SheetLayout(1, 3),
    BUS_SHEET: SheetLayout(1, 0),
    SHOWS_SHEET: SheetLayout(1, 3),
    DRIVING_TIME_SHEET: SheetLayout(2, 3),
    STOPS_SHEET: SheetLayout(1, 1, show_gridlines=True),
}


@dataclass(frozen=True)
class ConstraintWeight:
    """One row of the constraint table on the Configuration sheet."""
    name: str           # Header text in the first column
    attribute: str      # Field on Parametrization holding the weight
    description: str    # Header text in the third column


CONSTRAINT_WEIGHTS: List[ConstraintWeight] = [
    ConstraintWeight('Revenue opportunity', 'revenue_opportunity', 'Soft reward per revenue opportunity'),
]
