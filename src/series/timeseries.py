"""
Time series assembly from per-year keyed indicator payloads.

Backends answer with one mapping per indicator, keyed by year:

    {"2000": [{"countryCode": "USA", "countryName": "United States", "value": 2.5}, ...],
     "2001": [...]}

This module pivots that into one :class:`TimeSeries` per entity, feeds the
choropleth with the values of one year, and ranks entities for summaries.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import pandas as pd


logger = logging.getLogger(__name__)


RANK_METHODS = ("latest", "mean_abs")


@dataclass(frozen=True)
class SeriesPoint:
    """One yearly observation; ``value`` is None when the year has no data."""

    year: int
    value: Optional[float]

    @property
    def is_observed(self) -> bool:
        return self.value is not None and not math.isnan(self.value)


@dataclass(frozen=True)
class TimeSeries:
    """
    Yearly values of one indicator for one entity.

    Points are year-ascending with no duplicate years; anything else raises
    ValueError on construction.
    """

    code: str
    """ISO3 code of the entity."""

    name: str
    """Display name of the entity."""

    indicator: Optional[str]
    """Indicator name the values belong to."""

    points: Tuple[SeriesPoint, ...]

    def __post_init__(self):
        object.__setattr__(self, "points", tuple(self.points))
        for previous, current in zip(self.points, self.points[1:]):
            if current.year == previous.year:
                raise ValueError(f"Duplicate year {current.year} in series '{self.code}'")
            if current.year < previous.year:
                raise ValueError(
                    f"Series '{self.code}' is not year-ascending: "
                    f"{previous.year} before {current.year}"
                )

    def __len__(self) -> int:
        return len(self.points)

    @property
    def years(self) -> List[int]:
        return [p.year for p in self.points]

    def observed(self) -> List[SeriesPoint]:
        """Points carrying a value, in year order."""
        return [p for p in self.points if p.is_observed]

    def values(self) -> List[float]:
        return [p.value for p in self.observed()]

    def latest(self) -> Optional[SeriesPoint]:
        """The most recent observed point, or None if nothing was observed."""
        observed = self.observed()
        return observed[-1] if observed else None

    def value_at(self, year: int) -> Optional[float]:
        for point in self.points:
            if point.year == year:
                return point.value if point.is_observed else None
        return None


def _flatten_payload(payload: Mapping[str, Iterable[Mapping[str, Any]]]) -> pd.DataFrame:
    rows = []
    for year_key, records in payload.items():
        year = int(year_key)
        for record in records or ():
            code = record["countryCode"]
            rows.append(
                {
                    "year": year,
                    "code": code,
                    "name": record.get("countryName") or code,
                    "value": record.get("value"),
                }
            )
    return pd.DataFrame(rows, columns=["year", "code", "name", "value"])


def series_from_year_records(
    payload: Mapping[str, Iterable[Mapping[str, Any]]],
    indicator: Optional[str] = None,
) -> Dict[str, TimeSeries]:
    """
    Pivot a per-year keyed payload into one series per entity.

    Args:
        payload: Mapping from year (string or int) to the records of that year;
                 each record has 'countryCode', optional 'countryName' and 'value'
        indicator: Indicator name stamped on every series

    Returns:
        Dictionary from entity code to TimeSeries, in order of first
        appearance of the entity. When an entity appears twice in the same
        year, the later record wins.
    """
    frame = _flatten_payload(payload)
    if frame.empty:
        return {}

    frame["value"] = pd.to_numeric(frame["value"])
    frame = frame.drop_duplicates(subset=["code", "year"], keep="last")
    frame = frame.sort_values("year", kind="stable")

    series_map: Dict[str, TimeSeries] = {}
    for code, group in frame.groupby("code", sort=False):
        points = tuple(
            SeriesPoint(int(year), None if pd.isna(value) else float(value))
            for year, value in zip(group["year"], group["value"])
        )
        series_map[code] = TimeSeries(
            code=code,
            name=group["name"].iloc[-1],
            indicator=indicator,
            points=points,
        )

    logger.debug(
        "Assembled %d series for %s over %d years",
        len(series_map),
        indicator or "indicator",
        frame["year"].nunique(),
    )
    return series_map


def values_for_year(series_map: Mapping[str, TimeSeries], year: int) -> Dict[str, Optional[float]]:
    """Value of every entity in ``year`` (None where it has no data)."""
    return {code: series.value_at(year) for code, series in series_map.items()}


def rank_series(
    series_map: Mapping[str, TimeSeries],
    by: str = "latest",
    limit: Optional[int] = None,
) -> List[Tuple[str, float]]:
    """
    Rank entities by their series, highest first.

    Args:
        series_map: Series to rank
        by: "latest" (most recent observed value) or "mean_abs" (mean of
            absolute observed values)
        limit: Keep only the first ``limit`` entries

    Returns:
        ``(code, score)`` pairs; entities without observations are left out
        and ties keep their input order.

    Raises:
        ValueError: If ``by`` is not a known rank method
    """
    if by not in RANK_METHODS:
        raise ValueError(f"Unknown rank method '{by}'. Available methods: {', '.join(RANK_METHODS)}")

    scored: List[Tuple[str, float]] = []
    for code, series in series_map.items():
        values: Sequence[float] = series.values()
        if not values:
            continue
        if by == "latest":
            score = values[-1]
        else:
            score = sum(abs(v) for v in values) / len(values)
        scored.append((code, score))

    scored.sort(key=lambda item: item[1], reverse=True)
    if limit is not None:
        scored = scored[:limit]
    return scored
