from .latest import latest_by_investment, latest_positions, portfolio_total
from .timeseries import GROUPINGS, grouped_time_series
from .breakdown import BREAKDOWN_ATTRIBUTES, breakdown_by

__all__ = [
    "latest_by_investment",
    "latest_positions",
    "portfolio_total",
    "GROUPINGS",
    "grouped_time_series",
    "BREAKDOWN_ATTRIBUTES",
    "breakdown_by",
]
