"""Choropleth fills and legend for one indicator."""

from typing import List, Mapping, Optional

from src.scales.buckets import NO_DATA_COLOR, is_missing
from src.scales.registry import NO_DATA_LABEL, IndicatorConfig

from .schemas import LegendEntry, RegionFill


def build_region_fills(
    values_by_code: Mapping[str, Optional[float]],
    config: IndicatorConfig,
) -> List[RegionFill]:
    """
    Color every region by its bucket.

    Regions with a missing value get NO_DATA_COLOR and the "No data" label.
    """
    fills = []
    for code, value in values_by_code.items():
        missing = is_missing(value)
        fills.append(
            RegionFill(
                code=code,
                color=config.fill_for(value),
                label=config.tooltip(value),
                value=None if missing else float(value),
            )
        )
    return fills


def build_legend(config: IndicatorConfig, include_no_data: bool = True) -> List[LegendEntry]:
    """Legend entries, lowest bucket first, optionally followed by the no-data swatch."""
    entries = [LegendEntry(label=label, color=color) for label, color in config.legend()]
    if include_no_data:
        entries.append(LegendEntry(label=NO_DATA_LABEL, color=NO_DATA_COLOR))
    return entries
