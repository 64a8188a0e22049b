"""Round trips and validation failures of the tour workbook reader and writer."""
from datetime import date
from io import BytesIO
from zipfile import ZipFile

import pytest
from openpyxl.styles import PatternFill

from conftest import make_example_solution, read_back, save_and_load
from rocktour import Location, Show, TourXlsxWriter, read_tour_file, write_tour_file
from rocktour.config import UNAVAILABLE_COLOR
from rocktour.errors import (
    CellNotBlankError, DurationError, InconsistentMatrixError, InvalidDateRangeError,
    InvalidNameError, MissingSheetError, NegativeValueError, NoAvailabilityError, NonIntegerValueError,
    RevenueError, SchemaMismatchError, TourFileIOError, TypeMismatchError,
)

# Example show row on the Shows sheet: A-G fixed columns, H and I are Jan 1 and Jan 2
SHOW_ROW = 4


def assert_same_driving_times(expected, actual):
    expected_locations = expected.location_list()
    actual_locations = actual.location_list()
    for expected_from, actual_from in zip(expected_locations, actual_locations):
        for expected_to, actual_to in zip(expected_locations, actual_locations):
            assert actual_from.driving_time_to(actual_to) == expected_from.driving_time_to(expected_to)


# =============================================================================
# Round trips
# =============================================================================

class TestRoundTrip:

    def test_written_file_reads_back_equal(self, example_solution, tmp_path):
        path = tmp_path / 'tour.xlsx'
        write_tour_file(example_solution, path)

        solution = read_tour_file(path)

        assert solution == example_solution
        assert_same_driving_times(example_solution, solution)

    def test_example_without_driving_time_sheet_derives_matrix(self, written_workbook):
        del written_workbook['Driving time']

        solution = read_back(written_workbook)

        assert solution == make_example_solution()
        start, end = solution.bus.start_location, solution.bus.end_location
        venue = solution.show_list[0].location
        assert start.driving_time_to(end) == end.driving_time_to(start) == 111195
        assert start.driving_time_to(start) == 0
        # Same coordinates as the bus start, so same driving times
        assert venue.driving_time_to(end) == start.driving_time_to(end)
        assert end.driving_time_to(venue) == end.driving_time_to(start)

    def test_derived_matrix_is_written_as_two_by_two(self, example_solution):
        workbook = save_and_load(TourXlsxWriter(example_solution).write())
        sheet = workbook['Driving time']

        assert [sheet.cell(row=2, column=c).value for c in range(1, 5)] == ['Latitude', None, '0.0', '0.0']
        assert [sheet.cell(row=3, column=c).value for c in range(1, 5)] == [None, 'Longitude', '0.0', '1.0']
        assert [sheet.cell(row=4, column=c).value for c in range(1, 5)] == ['0.0', '0.0', 0, 111195]
        assert [sheet.cell(row=5, column=c).value for c in range(1, 5)] == ['0.0', '1.0', 111195, 0]
        assert sheet.max_row == 5

    def test_explicit_matrix_survives_round_trip(self, written_workbook):
        written_workbook['Driving time'].cell(row=4, column=4).value = 3600
        written_workbook['Driving time'].cell(row=5, column=3).value = 4000

        solution = read_back(written_workbook)
        again = read_back(TourXlsxWriter(solution).write())

        start, end = again.bus.start_location, again.bus.end_location
        assert start.driving_time_to(end) == 3600
        assert end.driving_time_to(start) == 4000
        assert_same_driving_times(solution, again)

    def test_full_availability_and_month_boundary(self, example_solution):
        example_solution.bus.start_date = date(2024, 1, 30)
        example_solution.bus.end_date = date(2024, 2, 3)
        example_solution.show_list[0].available_dates = [
            date(2024, 1, 30), date(2024, 1, 31), date(2024, 2, 1), date(2024, 2, 2)]
        example_solution.show_list.append(Show(
            1, 'Venue Y', Location('City C', 10.5, -3.25), 1, 0, True, [date(2024, 2, 1)]))

        solution = read_back(TourXlsxWriter(example_solution).write())

        assert solution == example_solution
        assert solution.show_list[0].available_dates == example_solution.show_list[0].available_dates
        assert solution.show_list[1].available_dates == [date(2024, 2, 1)]

    def test_missing_driving_times_are_derived_on_write(self, example_solution):
        example_solution.show_list[0].location.driving_seconds.clear()

        solution = read_back(TourXlsxWriter(example_solution).write())

        end = solution.bus.end_location
        assert solution.show_list[0].location.driving_time_to(end) == 111195

    def test_custom_strategy_used_when_sheet_missing(self, written_workbook):
        del written_workbook['Driving time']

        solution = read_back(written_workbook, driving_time_strategy=lambda a, b: 0 if a == b else 42)

        assert solution.bus.start_location.driving_time_to(solution.bus.end_location) == 42

    def test_stops_sheet_lists_assigned_shows(self, example_solution):
        example_solution.show_list[0].assigned_date = date(2024, 1, 2)

        sheet = save_and_load(TourXlsxWriter(example_solution).write())['Stops']

        rows = [[cell.value for cell in row] for row in sheet.iter_rows(min_row=1, max_row=4)]
        assert rows == [
            ['Date', 'Venue names', 'City names'],
            ['2024-01-01', None, None],
            ['2024-01-02', 'Venue X', 'City A'],
            ['Unassigned', None, None],
        ]

    def test_negative_zero_coordinate_round_trips(self, example_solution):
        example_solution.bus.end_location = Location('City B', -0.0, 1.0)

        solution = read_back(TourXlsxWriter(example_solution).write())

        assert solution == example_solution
        assert solution.bus.end_location.driving_time_to(solution.bus.start_location) == 111195

    def test_stops_sheet_is_ignored_on_read(self, example_solution):
        example_solution.show_list[0].assigned_date = date(2024, 1, 1)

        solution = read_back(TourXlsxWriter(example_solution).write())

        assert solution.show_list[0].assigned_date is None


# =============================================================================
# Numeric boundaries on the Shows sheet
# =============================================================================

class TestShowValidation:

    @pytest.mark.parametrize("duration,expected_half_days", [(0.5, 1), (1, 2), (2.5, 5)])
    def test_duration_accepted(self, written_workbook, duration, expected_half_days):
        written_workbook['Shows'].cell(row=SHOW_ROW, column=5).value = duration

        solution = read_back(written_workbook)

        assert solution.show_list[0].duration_in_half_day == expected_half_days

    @pytest.mark.parametrize("duration,message", [
        (0.3, "multiple of 0.5"),
        (0, "at least 0.5"),
        (-1, "at least 0.5"),
    ])
    def test_duration_rejected(self, written_workbook, duration, message):
        written_workbook['Shows'].cell(row=SHOW_ROW, column=5).value = duration

        with pytest.raises(DurationError, match=message):
            read_back(written_workbook)

    def test_integral_revenue_float_accepted(self, written_workbook):
        written_workbook['Shows'].cell(row=SHOW_ROW, column=6).value = 3.0

        solution = read_back(written_workbook)

        assert solution.show_list[0].revenue_opportunity == 3
        assert isinstance(solution.show_list[0].revenue_opportunity, int)

    def test_fractional_revenue_rejected(self, written_workbook):
        written_workbook['Shows'].cell(row=SHOW_ROW, column=6).value = 3.5

        with pytest.raises(RevenueError, match=r"Venue X.*\(3\.5\) must be an integer"):
            read_back(written_workbook)

    def test_text_in_availability_cell_rejected(self, written_workbook):
        written_workbook['Shows'].cell(row=SHOW_ROW, column=9).value = 'x'

        with pytest.raises(CellNotBlankError, match=r"Sheet \(Shows\) row \(4\) column \(I\)"):
            read_back(written_workbook)

    def test_unavailable_color_removes_date(self, written_workbook):
        written_workbook['Shows'].cell(row=SHOW_ROW, column=8).fill = PatternFill(
            start_color=UNAVAILABLE_COLOR, end_color=UNAVAILABLE_COLOR, fill_type='solid')

        solution = read_back(written_workbook)

        assert solution.show_list[0].available_dates == [date(2024, 1, 2)]

    def test_other_colors_are_not_a_signal(self, written_workbook):
        written_workbook['Shows'].cell(row=SHOW_ROW, column=8).fill = PatternFill(
            start_color='FF00FF00', end_color='FF00FF00', fill_type='solid')

        solution = read_back(written_workbook)

        assert solution.show_list[0].available_dates == [date(2024, 1, 1), date(2024, 1, 2)]

    def test_show_without_available_dates_rejected(self, written_workbook):
        for column in (8, 9):
            written_workbook['Shows'].cell(row=SHOW_ROW, column=column).fill = PatternFill(
                start_color=UNAVAILABLE_COLOR, end_color=UNAVAILABLE_COLOR, fill_type='solid')

        with pytest.raises(NoAvailabilityError, match="Venue X"):
            read_back(written_workbook)

    def test_blank_venue_name_rejected(self, written_workbook):
        written_workbook['Shows'].cell(row=SHOW_ROW, column=1).value = None

        with pytest.raises(InvalidNameError, match=r"Sheet \(Shows\) row \(4\) column \(A\).*venue name"):
            read_back(written_workbook)

    def test_required_must_be_boolean(self, written_workbook):
        written_workbook['Shows'].cell(row=SHOW_ROW, column=7).value = 'yes'

        with pytest.raises(TypeMismatchError, match=r"column \(G\).*boolean"):
            read_back(written_workbook)


# =============================================================================
# Schema and other sheets
# =============================================================================

class TestWorkbookValidation:

    def test_invalid_tour_name_rejected(self, written_workbook):
        written_workbook['Configuration'].cell(row=1, column=2).value = 'Bad*name'

        with pytest.raises(InvalidNameError, match="Bad\\*name"):
            read_back(written_workbook)

    def test_invalid_tour_name_not_written(self, example_solution):
        example_solution.tour_name = 'Bad?name'

        with pytest.raises(InvalidNameError):
            TourXlsxWriter(example_solution).write()

    def test_spacer_row_must_be_blank(self, written_workbook):
        written_workbook['Configuration'].cell(row=2, column=3).value = 'note'

        with pytest.raises(CellNotBlankError, match=r"Sheet \(Configuration\) row \(2\)"):
            read_back(written_workbook)

    def test_constraint_weight_read(self, written_workbook):
        assert read_back(written_workbook).parametrization.revenue_opportunity == 7

    def test_fractional_constraint_weight_rejected(self, written_workbook):
        written_workbook['Configuration'].cell(row=4, column=2).value = 1.5

        with pytest.raises(NonIntegerValueError, match="constraint weight"):
            read_back(written_workbook)

    def test_renamed_header_rejected(self, written_workbook):
        written_workbook['Bus'].cell(row=1, column=2).value = 'Town name'

        with pytest.raises(SchemaMismatchError) as excinfo:
            read_back(written_workbook)

        error = excinfo.value
        assert (error.sheet, error.row, error.column) == ('Bus', 1, 'B')
        assert (error.expected, error.actual) == ('City name', 'Town name')

    def test_day_header_must_follow_bus_dates(self, written_workbook):
        written_workbook['Bus'].cell(row=3, column=5).value = '2024-01-04'

        with pytest.raises(SchemaMismatchError, match=r"Sheet \(Shows\) row \(3\) column \(J\)"):
            read_back(written_workbook)

    def test_bus_end_before_start_rejected(self, written_workbook):
        written_workbook['Bus'].cell(row=3, column=5).value = '2024-01-01'

        with pytest.raises(InvalidDateRangeError, match="must be before"):
            read_back(written_workbook)

    def test_badly_formatted_date_rejected(self, written_workbook):
        written_workbook['Bus'].cell(row=2, column=5).value = '01/01/2024'

        with pytest.raises(InvalidDateRangeError, match="01/01/2024"):
            read_back(written_workbook)

    def test_missing_mandatory_sheet(self, written_workbook):
        del written_workbook['Bus']

        with pytest.raises(MissingSheetError, match=r"\(Bus\)"):
            read_back(written_workbook)

    def test_fractional_driving_time_rejected(self, written_workbook):
        written_workbook['Driving time'].cell(row=4, column=4).value = 10.5

        with pytest.raises(NonIntegerValueError, match="driving time"):
            read_back(written_workbook)

    def test_negative_driving_time_rejected(self, written_workbook):
        written_workbook['Driving time'].cell(row=4, column=4).value = -5

        with pytest.raises(NegativeValueError, match=r"column \(D\).*\(-5\) must not be negative"):
            read_back(written_workbook)

    def test_driving_time_headers_must_match_locations(self, written_workbook):
        written_workbook['Driving time'].cell(row=2, column=4).value = '5.0'

        with pytest.raises(SchemaMismatchError, match="Driving time"):
            read_back(written_workbook)


# =============================================================================
# Write-time guards and file boundary
# =============================================================================

class TestWriteGuards:

    def test_inconsistent_matrix_rejected(self, example_solution, tmp_path):
        solution = read_back(TourXlsxWriter(example_solution).write())
        end = solution.bus.end_location
        solution.show_list[0].location.driving_seconds[end] = 5
        path = tmp_path / 'tour.xlsx'

        with pytest.raises(InconsistentMatrixError, match=r"\(111195\).*\(5\)"):
            write_tour_file(solution, path)

        assert not path.exists()

    def test_blank_venue_name_not_written(self, example_solution):
        example_solution.show_list[0].venue_name = ''

        with pytest.raises(InvalidNameError, match="empty venue name"):
            TourXlsxWriter(example_solution).write()

    def test_available_date_outside_bus_range_rejected(self, example_solution):
        example_solution.show_list[0].available_dates = [date(2024, 1, 3)]

        with pytest.raises(NoAvailabilityError, match="Venue X"):
            TourXlsxWriter(example_solution).write()

    def test_unreadable_file_wrapped_with_path(self, tmp_path):
        path = tmp_path / 'missing.xlsx'

        with pytest.raises(TourFileIOError, match="missing.xlsx") as excinfo:
            read_tour_file(path)

        assert isinstance(excinfo.value, OSError)
        assert excinfo.value.__cause__ is not None

    def test_corrupt_stream_wrapped(self):
        with pytest.raises(TourFileIOError):
            read_tour_file(BytesIO(b'not a workbook'))

    def test_zip_without_workbook_parts_wrapped(self):
        stream = BytesIO()
        with ZipFile(stream, 'w') as archive:
            archive.writestr('hello.txt', 'hello')
        stream.seek(0)

        with pytest.raises(TourFileIOError, match="Failed reading tour file") as excinfo:
            read_tour_file(stream)

        assert isinstance(excinfo.value.__cause__, KeyError)
