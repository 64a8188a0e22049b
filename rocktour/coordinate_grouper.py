# rocktour/coordinate_grouper.py
from itertools import groupby
from typing import Dict, Iterable, List, Tuple

from .data_models import Location

Coordinates = Tuple[float, float]


def group_by_coordinates(locations: Iterable[Location]) -> Dict[Coordinates, List[Location]]:
    """
    Groups locations that share the same (latitude, longitude).

    The same Location object listed twice is kept once, but distinct objects
    with equal fields all stay, since each one owns its own driving time map.
    Groups are ordered by latitude, then longitude, which is the row and column
    order of the driving time matrix.

    Args:
        locations (Iterable[Location]): Locations in any order, possibly repeated.

    Returns:
        Dict[Coordinates, List[Location]]: Coordinate key to member locations,
            both in sorted order.
    """
    seen = set()
    distinct = []
    for location in locations:
        if id(location) not in seen:
            seen.add(id(location))
            distinct.append(location)

    distinct.sort(key=lambda location: (location.latitude, location.longitude, location.city_name))
    return {coordinates: list(members)
            for coordinates, members in groupby(distinct, key=lambda location: location.coordinates)}
