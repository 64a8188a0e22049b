# rocktour/data_models.py
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class Location:
    """A named place on the map.

    Identity is (city_name, latitude, longitude). The driving time map is filled
    in by the driving time resolver and ignored for equality and hashing.
    """
    city_name: str
    latitude: float
    longitude: float
    driving_seconds: Dict['Location', int] = field(default_factory=dict, compare=False, hash=False, repr=False)

    @property
    def coordinates(self) -> Tuple[float, float]:
        return (self.latitude, self.longitude)

    def driving_time_to(self, other: 'Location') -> int:
        """Seconds needed to drive from this location to the other one."""
        return self.driving_seconds[other]


@dataclass
class Bus:
    """The single vehicle of the tour, driving from start to end location."""
    start_location: Location
    start_date: date
    end_location: Location
    end_date: date           # Exclusive: the last show day is end_date - 1
    id: int = 0

    def date_range(self) -> List[date]:
        """Every date in [start_date, end_date)."""
        return [self.start_date + timedelta(days=offset)
                for offset in range((self.end_date - self.start_date).days)]


@dataclass
class Parametrization:
    """Constraint weights the solver applies to soft constraints."""
    revenue_opportunity: int = 1
    id: int = 0


@dataclass
class Show:
    """A candidate performance the bus can stop for."""
    id: int
    venue_name: str
    location: Location
    duration_in_half_day: int     # 1 = half a day, 2 = a full day, ...
    revenue_opportunity: int
    required: bool
    available_dates: List[date]   # Sorted, distinct, inside the bus date range
    assigned_date: Optional[date] = None   # Set by the solver, never read from file

    @property
    def duration_in_days(self) -> float:
        return self.duration_in_half_day * 0.5


@dataclass
class TourSolution:
    """Aggregate root: everything a tour workbook describes."""
    tour_name: str
    parametrization: Parametrization
    bus: Bus
    show_list: List[Show] = field(default_factory=list)

    def location_list(self) -> List[Location]:
        """Bus locations first, then show locations, duplicates included."""
        return [self.bus.start_location, self.bus.end_location] + [show.location for show in self.show_list]
