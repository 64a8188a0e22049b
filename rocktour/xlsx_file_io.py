# rocktour/xlsx_file_io.py
"""Reads and writes a TourSolution as an xlsx workbook.

Sheets, in order: Configuration, Bus, Shows, Driving time (optional on read)
and Stops (write only). The writer emits exactly the headers the reader
asserts, so any written file reads back into an equal solution.
"""
import logging
import os
from datetime import date, datetime
from typing import IO, List, Optional, Union
from zipfile import BadZipFile

import numpy as np
from openpyxl import Workbook, load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from .config import (
    BUS_SHEET, CONFIGURATION_SHEET, CONSTRAINT_WEIGHTS, DAY_FORMAT, DRIVING_TIME_NOTE,
    DRIVING_TIME_SHEET, SHOW_HEADERS, SHOWS_SHEET, STOPS_SHEET, UNAVAILABLE_COLOR,
    VALID_NAME_PATTERN,
)
from .coordinate_grouper import group_by_coordinates
from .data_models import Bus, Location, Parametrization, Show, TourSolution
from .driving_time import (
    DrivingTimeStrategy, air_distance_seconds, broadcast_time_matrix,
    collect_time_matrix, resolve_from_air_distance,
)
from .errors import (
    CellNotBlankError, DurationError, InvalidDateRangeError, InvalidNameError,
    NegativeValueError, NoAvailabilityError, RevenueError, TourFileIOError,
)
from .grid_cursor import GridCursor
from .schedule_columns import availability_columns
from .schema_walker import SchemaReader, SchemaWriter, read_header_row, write_header_row
from .stops_view import build_stops_frame

logger = logging.getLogger(__name__)

# Number of leading blank header cells on the two upper Shows header rows
SHOW_HEADER_OFFSET = len(SHOW_HEADERS)
UNAVAILABLE_RGB = UNAVAILABLE_COLOR[-6:].upper()

PathOrStream = Union[str, os.PathLike, IO[bytes]]


def format_coordinate(value: float) -> str:
    """Header text for a latitude or longitude on the Driving time sheet."""
    # -0.0 is stored as 0, so render it the way it reads back
    return str(float(value) + 0.0)


class TourXlsxReader:
    """Builds a TourSolution from an open workbook, one sheet at a time."""

    def __init__(self, workbook: Workbook, driving_time_strategy: DrivingTimeStrategy = air_distance_seconds):
        self.reader = SchemaReader(GridCursor(workbook))
        self.driving_time_strategy = driving_time_strategy

    def read(self) -> TourSolution:
        tour_name, parametrization = self._read_configuration()
        bus = self._read_bus()
        show_list = self._read_show_list(bus)
        solution = TourSolution(tour_name, parametrization, bus, show_list)
        self._read_driving_time(solution)
        return solution

    # --- 1. Configuration ---

    def _read_configuration(self):
        reader = self.reader
        reader.select_sheet(CONFIGURATION_SHEET)
        read_header_row(reader, 'Tour name')
        tour_name = reader.read_string()
        if not VALID_NAME_PATTERN.fullmatch(tour_name):
            raise InvalidNameError(f"{reader.position()}: The tour name ({tour_name}) must match "
                                   f"the regular expression ({VALID_NAME_PATTERN.pattern}).")
        reader.next_row()
        reader.assert_blank_row()
        read_header_row(reader, 'Constraint', 'Weight', 'Description')
        parametrization = Parametrization()
        for constraint in CONSTRAINT_WEIGHTS:
            reader.next_row()
            reader.assert_header(constraint.name)
            setattr(parametrization, constraint.attribute, reader.read_integer('constraint weight'))
            reader.assert_header(constraint.description)
        return tour_name, parametrization

    # --- 2. Bus ---

    def _read_bus(self) -> Bus:
        reader = self.reader
        reader.select_sheet(BUS_SHEET)
        read_header_row(reader, '', 'City name', 'Latitude', 'Longitude', 'Date')
        reader.next_row()
        reader.assert_header('Bus start')
        start_location = self._read_location()
        start_date = self._read_day()
        reader.next_row()
        reader.assert_header('Bus end')
        end_location = self._read_location()
        end_date = self._read_day()
        if start_date >= end_date:
            raise InvalidDateRangeError(f"{reader.position()}: The bus start date ({start_date}) "
                                        f"must be before its end date ({end_date}).")
        return Bus(start_location, start_date, end_location, end_date)

    def _read_location(self, city_name: Optional[str] = None) -> Location:
        if city_name is None:
            city_name = self.reader.read_string()
        latitude = self.reader.read_number()
        longitude = self.reader.read_number()
        return Location(city_name, latitude, longitude)

    def _read_day(self) -> date:
        text = self.reader.read_string()
        try:
            return datetime.strptime(text, DAY_FORMAT).date()
        except ValueError:
            raise InvalidDateRangeError(f"{self.reader.position()}: The date ({text}) "
                                        f"does not match the format ({DAY_FORMAT}).") from None

    # --- 3. Shows ---

    def _read_show_list(self, bus: Bus) -> List[Show]:
        reader = self.reader
        reader.select_sheet(SHOWS_SHEET)
        columns = availability_columns(bus.start_date, bus.end_date)
        logger.debug("Shows sheet spans %d date columns", len(columns))
        read_header_row(reader, *([''] * SHOW_HEADER_OFFSET), 'Availability')
        read_header_row(reader, *([''] * SHOW_HEADER_OFFSET), *(column.month_label for column in columns))
        read_header_row(reader, *SHOW_HEADERS, *(column.day_label for column in columns))

        show_list = []
        while reader.has_more_rows():
            reader.next_row()
            venue_name = reader.read_string()
            if venue_name == '':
                raise InvalidNameError(f"{reader.position()}: The venue name should not be empty.")
            location = self._read_location(reader.read_string())
            duration_in_half_day = self._read_duration()
            revenue_opportunity = self._read_revenue(venue_name)
            required = reader.read_boolean()
            available_dates = []
            for column in columns:
                text = reader.read_string()
                if text != '':
                    raise CellNotBlankError(f"{reader.position()}: The cell ({text}) should be empty.")
                if reader.read_background_color() != UNAVAILABLE_RGB:
                    available_dates.append(column.day)
            if not available_dates:
                raise NoAvailabilityError(f"{reader.position()}: The show ({venue_name}) has no available "
                                          f"date: all dates are unavailable.")
            show_list.append(Show(len(show_list), venue_name, location, duration_in_half_day,
                                  revenue_opportunity, required, available_dates))
        return show_list

    def _read_duration(self) -> int:
        duration = self.reader.read_number()
        duration_in_half_day = int(duration * 2.0)
        if duration_in_half_day != duration * 2.0:
            raise DurationError(f"{self.reader.position()}: The duration ({duration}) "
                                f"should be a multiple of 0.5.")
        if duration_in_half_day < 1:
            raise DurationError(f"{self.reader.position()}: The duration ({duration}) should be at least 0.5.")
        return duration_in_half_day

    def _read_revenue(self, venue_name: str) -> int:
        revenue = self.reader.read_number()
        if revenue != int(revenue):
            raise RevenueError(f"{self.reader.position()}: The show ({venue_name})'s revenue opportunity "
                               f"({revenue}) must be an integer number.")
        if revenue < 0:
            raise RevenueError(f"{self.reader.position()}: The show ({venue_name})'s revenue opportunity "
                               f"({revenue}) must not be negative.")
        return int(revenue)

    # --- 4. Driving time ---

    def _read_driving_time(self, solution: TourSolution) -> None:
        reader = self.reader
        groups = group_by_coordinates(solution.location_list())
        if not reader.has_sheet(DRIVING_TIME_SHEET):
            resolve_from_air_distance(groups, self.driving_time_strategy)
            return

        logger.debug("Reading explicit driving times for %d coordinate groups", len(groups))
        reader.select_sheet(DRIVING_TIME_SHEET)
        read_header_row(reader, DRIVING_TIME_NOTE)
        read_header_row(reader, 'Latitude', '', *(format_coordinate(lat) for lat, _ in groups))
        read_header_row(reader, '', 'Longitude', *(format_coordinate(lon) for _, lon in groups))
        time_matrix = np.zeros((len(groups), len(groups)), dtype=np.int64)
        for i, (latitude, longitude) in enumerate(groups):
            read_header_row(reader, format_coordinate(latitude), format_coordinate(longitude))
            for j in range(len(groups)):
                driving_time = reader.read_integer('driving time')
                if driving_time < 0:
                    raise NegativeValueError(f"{reader.position()}: The driving time ({driving_time}) "
                                             f"must not be negative.")
                time_matrix[i, j] = driving_time
        broadcast_time_matrix(groups, time_matrix)


class TourXlsxWriter:
    """Lays a TourSolution out in a new workbook, mirroring TourXlsxReader."""

    def __init__(self, solution: TourSolution, driving_time_strategy: DrivingTimeStrategy = air_distance_seconds):
        self.solution = solution
        self.driving_time_strategy = driving_time_strategy
        self.workbook = Workbook()
        self.workbook.remove(self.workbook.active)
        self.writer = SchemaWriter(GridCursor(self.workbook))

    def write(self) -> Workbook:
        self._write_configuration()
        self._write_bus()
        self._write_show_list()
        self._write_driving_time()
        self._write_stops_view()
        return self.workbook

    def _write_configuration(self) -> None:
        writer = self.writer
        tour_name = self.solution.tour_name
        if not VALID_NAME_PATTERN.fullmatch(tour_name):
            raise InvalidNameError(f"The tour name ({tour_name}) must match "
                                   f"the regular expression ({VALID_NAME_PATTERN.pattern}).")
        writer.create_sheet(CONFIGURATION_SHEET)
        writer.next_row()
        writer.write_header('Tour name')
        writer.write_cell(tour_name)
        writer.next_row()
        write_header_row(writer, 'Constraint', 'Weight', 'Description')
        for constraint in CONSTRAINT_WEIGHTS:
            writer.next_row()
            writer.write_header(constraint.name)
            writer.write_cell(getattr(self.solution.parametrization, constraint.attribute))
            writer.write_header(constraint.description)
        writer.finish_sheet()

    def _write_bus(self) -> None:
        writer = self.writer
        bus = self.solution.bus
        if bus.start_date >= bus.end_date:
            raise InvalidDateRangeError(f"The bus start date ({bus.start_date}) "
                                        f"must be before its end date ({bus.end_date}).")
        writer.create_sheet(BUS_SHEET)
        write_header_row(writer, '', 'City name', 'Latitude', 'Longitude', 'Date')
        for label, location, day in (('Bus start', bus.start_location, bus.start_date),
                                     ('Bus end', bus.end_location, bus.end_date)):
            writer.next_row()
            writer.write_header(label)
            writer.write_cell(location.city_name)
            writer.write_cell(location.latitude)
            writer.write_cell(location.longitude)
            writer.write_cell(day.strftime(DAY_FORMAT))
        writer.finish_sheet()

    def _write_show_list(self) -> None:
        writer = self.writer
        bus = self.solution.bus
        columns = availability_columns(bus.start_date, bus.end_date)
        writer.create_sheet(SHOWS_SHEET)

        write_header_row(writer, *([''] * SHOW_HEADER_OFFSET))
        writer.write_header('Availability', span=len(columns))
        write_header_row(writer, *([''] * SHOW_HEADER_OFFSET))
        for column in columns:
            if column.month_label:
                writer.write_header(column.month_label, span=column.month_span)
            else:
                writer.skip_cell()
        write_header_row(writer, *SHOW_HEADERS, *(column.day_label for column in columns))

        date_range = {column.day for column in columns}
        for show in self.solution.show_list:
            if show.venue_name == '':
                raise InvalidNameError(f"The show ({show.id}) has an empty venue name.")
            available_dates = set(show.available_dates)
            if not available_dates or not available_dates <= date_range:
                raise NoAvailabilityError(
                    f"The show ({show.venue_name})'s available dates ({sorted(available_dates)}) must be "
                    f"a non-empty subset of the bus date range [{bus.start_date}, {bus.end_date}).")
            writer.next_row()
            writer.write_cell(show.venue_name)
            writer.write_cell(show.location.city_name)
            writer.write_cell(show.location.latitude)
            writer.write_cell(show.location.longitude)
            writer.write_cell(show.duration_in_days)
            writer.write_cell(show.revenue_opportunity)
            writer.write_cell(show.required)
            for column in columns:
                if column.day in available_dates:
                    writer.write_cell()
                else:
                    writer.write_cell(fill_color=UNAVAILABLE_COLOR)
        writer.finish_sheet()

    def _write_driving_time(self) -> None:
        writer = self.writer
        groups = group_by_coordinates(self.solution.location_list())
        if all(not location.driving_seconds for members in groups.values() for location in members):
            resolve_from_air_distance(groups, self.driving_time_strategy)
        # Checked before the sheet exists, so an inconsistent solution writes nothing
        time_matrix = collect_time_matrix(groups)

        writer.create_sheet(DRIVING_TIME_SHEET)
        writer.next_row()
        writer.write_header(DRIVING_TIME_NOTE, span=11)
        write_header_row(writer, 'Latitude', '', *(format_coordinate(lat) for lat, _ in groups))
        write_header_row(writer, '', 'Longitude', *(format_coordinate(lon) for _, lon in groups))
        for i, (latitude, longitude) in enumerate(groups):
            write_header_row(writer, format_coordinate(latitude), format_coordinate(longitude))
            for j in range(len(groups)):
                writer.write_cell(int(time_matrix[i, j]))
        writer.finish_sheet()

    def _write_stops_view(self) -> None:
        writer = self.writer
        stops = build_stops_frame(self.solution)
        writer.create_sheet(STOPS_SHEET)
        write_header_row(writer, *stops.columns)
        for day_label, venue_names, city_names in stops.itertuples(index=False):
            writer.next_row()
            writer.write_header(day_label)
            writer.write_cell(venue_names)
            writer.write_cell(city_names)
        writer.finish_sheet()


def read_tour_file(source: PathOrStream,
                   driving_time_strategy: DrivingTimeStrategy = air_distance_seconds) -> TourSolution:
    """
    Reads a tour workbook from a path or a binary stream.

    Args:
        source (PathOrStream): xlsx file path or readable binary stream.
        driving_time_strategy (DrivingTimeStrategy): Used only when the workbook
            has no Driving time sheet.

    Returns:
        TourSolution: The fully validated solution.

    Raises:
        TourFileIOError: The workbook could not be opened.
        TourFileError: The workbook content is invalid.
    """
    try:
        workbook = load_workbook(source)
    # openpyxl raises KeyError for a zip missing a required workbook part
    except (OSError, BadZipFile, InvalidFileException, KeyError) as e:
        logger.error("Failed reading tour file (%s)", source, exc_info=True)
        raise TourFileIOError(source, 'reading', e) from e
    try:
        solution = TourXlsxReader(workbook, driving_time_strategy).read()
    finally:
        workbook.close()
    logger.info("Read tour (%s) with %d shows from (%s)", solution.tour_name, len(solution.show_list), source)
    return solution


def write_tour_file(solution: TourSolution, target: PathOrStream,
                    driving_time_strategy: DrivingTimeStrategy = air_distance_seconds) -> None:
    """
    Writes a tour workbook to a path or a binary stream.

    The whole workbook is built and validated in memory first, so a failing
    solution never leaves a file behind.
    """
    workbook = TourXlsxWriter(solution, driving_time_strategy).write()
    try:
        workbook.save(target)
    except OSError as e:
        logger.error("Failed writing tour file (%s)", target, exc_info=True)
        raise TourFileIOError(target, 'writing', e) from e
    finally:
        workbook.close()
    logger.info("Wrote tour (%s) with %d shows to (%s)", solution.tour_name, len(solution.show_list), target)
