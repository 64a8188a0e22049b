# rocktour/stops_view.py
import pandas as pd

from .config import DAY_FORMAT
from .data_models import TourSolution

STOPS_COLUMNS = ['Date', 'Venue names', 'City names']
UNASSIGNED_LABEL = 'Unassigned'


def build_stops_frame(solution: TourSolution) -> pd.DataFrame:
    """
    Lists the shows planned on each day of the bus range.

    Returns:
        pd.DataFrame: One row per date in [bus start, bus end), then a final
            'Unassigned' row. Venue and city names are comma-joined in show order.
    """
    shows = pd.DataFrame({
        'assigned_date': [show.assigned_date for show in solution.show_list],
        'venue_name': [show.venue_name for show in solution.show_list],
        'city_name': [show.location.city_name for show in solution.show_list],
    }, dtype=object)

    rows = []
    for day in solution.bus.date_range():
        day_shows = shows[shows['assigned_date'] == day]
        rows.append((day.strftime(DAY_FORMAT), ', '.join(day_shows['venue_name']),
                     ', '.join(day_shows['city_name'])))

    unassigned = shows[shows['assigned_date'].isna()]
    rows.append((UNASSIGNED_LABEL, ', '.join(unassigned['venue_name']), ', '.join(unassigned['city_name'])))
    return pd.DataFrame(rows, columns=STOPS_COLUMNS)
