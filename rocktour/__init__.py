"""Reading and writing rock tour planning workbooks."""

from .data_models import Bus, Location, Parametrization, Show, TourSolution
from .driving_time import air_distance_seconds, create_time_matrix
from .coordinate_grouper import group_by_coordinates
from .xlsx_file_io import TourXlsxReader, TourXlsxWriter, read_tour_file, write_tour_file

__all__ = [
    'Bus',
    'Location',
    'Parametrization',
    'Show',
    'TourSolution',
    'TourXlsxReader',
    'TourXlsxWriter',
    'air_distance_seconds',
    'create_time_matrix',
    'group_by_coordinates',
    'read_tour_file',
    'write_tour_file',
]
