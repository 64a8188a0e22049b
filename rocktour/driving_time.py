# rocktour/driving_time.py

import logging
import math
from typing import Callable, Dict, List, Tuple

import numpy as np

from .data_models import Location
from .errors import InconsistentMatrixError

logger = logging.getLogger(__name__)

Coordinates = Tuple[float, float]
CoordinateGroups = Dict[Coordinates, List[Location]]
DrivingTimeStrategy = Callable[[Coordinates, Coordinates], int]

EARTH_RADIUS_METERS = 6371000


def haversine_meters(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two coordinates, in meters."""
    lat1, lon1, lat2, lon2 = map(np.radians, [lat1, lon1, lat2, lon2])
    dlat = lat2 - lat1
    dlon = lon2 - lon1
    a = np.sin(dlat/2)**2 + np.cos(lat1) * np.cos(lat2) * np.sin(dlon/2)**2
    c = 2 * np.arctan2(np.sqrt(a), np.sqrt(1-a))
    return float(EARTH_RADIUS_METERS * c)


def air_distance_seconds(from_coordinates: Coordinates, to_coordinates: Coordinates) -> int:
    """
    Placeholder driving time: the air distance in meters, rounded up, taken as seconds.

    No speed conversion is applied, so the result is NOT a realistic driving
    time. Pass a routing-based strategy to read_tour_file for real durations.
    """
    if from_coordinates == to_coordinates:
        return 0
    return int(math.ceil(haversine_meters(*from_coordinates, *to_coordinates)))


def create_time_matrix(coordinates: List[Coordinates],
                       strategy: DrivingTimeStrategy = air_distance_seconds) -> np.ndarray:
    """
    Calculates driving time between all ordered pairs of coordinates.

    Args:
        coordinates (List[Coordinates]): Distinct coordinates, in matrix order.
        strategy (DrivingTimeStrategy): Seconds from one coordinate to another.

    Returns:
        np.ndarray: Square int64 matrix, row = from, column = to.
    """
    num_locations = len(coordinates)
    time_matrix = np.zeros((num_locations, num_locations), dtype=np.int64)
    for i in range(num_locations):
        for j in range(num_locations):
            time_matrix[i, j] = strategy(coordinates[i], coordinates[j])
    return time_matrix


def broadcast_time_matrix(groups: CoordinateGroups, time_matrix: np.ndarray) -> None:
    """Gives every location a fresh driving time map from the group-level matrix."""
    group_list = list(groups.values())
    if time_matrix.shape != (len(group_list), len(group_list)):
        raise ValueError(f"The time matrix shape {time_matrix.shape} does not match "
                         f"the {len(group_list)} coordinate groups.")
    for i, from_locations in enumerate(group_list):
        driving_seconds = {}
        for j, to_locations in enumerate(group_list):
            for to_location in to_locations:
                driving_seconds[to_location] = int(time_matrix[i, j])
        for from_location in from_locations:
            from_location.driving_seconds.clear()
            from_location.driving_seconds.update(driving_seconds)


def resolve_from_air_distance(groups: CoordinateGroups,
                              strategy: DrivingTimeStrategy = air_distance_seconds) -> np.ndarray:
    """Derives and broadcasts the matrix when the workbook carries none."""
    logger.debug("Deriving driving times for %d coordinate groups from air distance", len(groups))
    time_matrix = create_time_matrix(list(groups.keys()), strategy)
    broadcast_time_matrix(groups, time_matrix)
    return time_matrix


def collect_time_matrix(groups: CoordinateGroups) -> np.ndarray:
    """
    Rebuilds the group-level matrix from the per-location maps.

    Raises:
        InconsistentMatrixError: Two locations sharing coordinates disagree on a
            driving time, or a driving time is missing.
    """
    group_list = list(groups.values())
    time_matrix = np.zeros((len(group_list), len(group_list)), dtype=np.int64)
    for i, from_locations in enumerate(group_list):
        for j, to_locations in enumerate(group_list):
            reference_from, reference_to = from_locations[0], to_locations[0]
            driving_time = _driving_time(reference_from, reference_to)
            for from_location in from_locations:
                for to_location in to_locations:
                    other_time = _driving_time(from_location, to_location)
                    if other_time != driving_time:
                        raise InconsistentMatrixError(
                            f"The driving time ({driving_time}) from ({reference_from}) to ({reference_to}) "
                            f"is not the driving time ({other_time}) from ({from_location}) to ({to_location}).")
            time_matrix[i, j] = driving_time
    return time_matrix


def _driving_time(from_location: Location, to_location: Location) -> int:
    try:
        return from_location.driving_time_to(to_location)
    except KeyError:
        raise InconsistentMatrixError(
            f"The location ({from_location}) has no driving time to ({to_location}).") from None
