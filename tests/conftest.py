"""Shared fixtures for the tour workbook tests."""
from datetime import date
from io import BytesIO

import pytest
from openpyxl import load_workbook

from rocktour import Bus, Location, Parametrization, Show, TourSolution, TourXlsxWriter, read_tour_file


def make_example_solution() -> TourSolution:
    """Two-day tour: City A (0, 0) to City B (0, 1), one show in City A."""
    bus = Bus(
        start_location=Location('City A', 0.0, 0.0),
        start_date=date(2024, 1, 1),
        end_location=Location('City B', 0.0, 1.0),
        end_date=date(2024, 1, 3),
    )
    show = Show(
        id=0,
        venue_name='Venue X',
        location=Location('City A', 0.0, 0.0),
        duration_in_half_day=2,
        revenue_opportunity=10,
        required=False,
        available_dates=[date(2024, 1, 1), date(2024, 1, 2)],
    )
    return TourSolution('Example tour', Parametrization(revenue_opportunity=7), bus, [show])


@pytest.fixture
def example_solution() -> TourSolution:
    return make_example_solution()


@pytest.fixture
def written_workbook(example_solution):
    """The example solution written, saved and loaded again with openpyxl."""
    return save_and_load(TourXlsxWriter(example_solution).write())


def save_and_load(workbook):
    stream = BytesIO()
    workbook.save(stream)
    stream.seek(0)
    return load_workbook(stream)


def read_back(workbook, **kwargs) -> TourSolution:
    """Saves an openpyxl workbook to memory and runs the tour reader on it."""
    stream = BytesIO()
    workbook.save(stream)
    stream.seek(0)
    return read_tour_file(stream, **kwargs)
