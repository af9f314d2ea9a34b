"""
src/series: Per-entity indicator time series.

Turns per-year keyed payloads into year-ascending series and picks out
the values the map and charts need.
"""

from .timeseries import (
    SeriesPoint,
    TimeSeries,
    rank_series,
    series_from_year_records,
    values_for_year,
)

__all__ = [
    "SeriesPoint",
    "TimeSeries",
    "rank_series",
    "series_from_year_records",
    "values_for_year",
]
