"""
Indicator history chart geometry.

Lays out one TimeSeries on an SVG canvas under the indicator's scale mode:
line and area paths, axis ticks, the zero line, clip annotations for
out-of-domain extremes and the endpoint marker for the latest value.
"""

import logging
import math
from dataclasses import dataclass, replace
from typing import List, Optional

from src.scales.axis import ChartScaleMode, ResolvedScale, SymmetricLog, resolve_scale, scale_mode_name
from src.scales.registry import IndicatorConfig
from src.series.timeseries import SeriesPoint, TimeSeries

from .schemas import (
    ChartAnnotation,
    ChartGeometry,
    ClipRegion,
    EndpointMarker,
    TickMark,
)


logger = logging.getLogger(__name__)


X_TICK_INTERVAL = 10


@dataclass(frozen=True)
class ChartLayout:
    """Canvas size and padding in pixels."""

    width: float = 560
    height: float = 300
    padding_top: float = 20
    padding_right: float = 20
    padding_bottom: float = 40
    padding_left: float = 70

    symlog_padding_left: float = 80
    """Left padding under a symlog axis, whose tick labels run wider."""

    annotation_inset: float = 4
    peak_offset: float = 14
    low_offset: float = 6

    @property
    def plot_width(self) -> float:
        return self.width - self.padding_left - self.padding_right

    @property
    def plot_height(self) -> float:
        return self.height - self.padding_top - self.padding_bottom

    @property
    def plot_bottom(self) -> float:
        return self.height - self.padding_bottom

    def for_mode(self, mode: ChartScaleMode) -> "ChartLayout":
        if isinstance(mode, SymmetricLog):
            return replace(self, padding_left=self.symlog_padding_left)
        return self


def _num(value: float) -> str:
    """Path coordinate with at most two decimals."""
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


class _Projection:
    """Pixel mapping of (year, value) pairs for one chart."""

    def __init__(self, layout: ChartLayout, scale: ResolvedScale, start_year: int, end_year: int):
        self.layout = layout
        self.scale = scale
        self.start_year = start_year
        self.end_year = end_year

    def x(self, year: float) -> float:
        layout = self.layout
        if self.end_year == self.start_year:
            return layout.padding_left + layout.plot_width / 2
        fraction = (year - self.start_year) / (self.end_year - self.start_year)
        return layout.padding_left + fraction * layout.plot_width

    def y(self, value: float) -> float:
        layout = self.layout
        return layout.padding_top + (1 - self.scale.normalize(value)) * layout.plot_height


def _line_path(points: List[SeriesPoint], projection: _Projection) -> str:
    commands = []
    for i, point in enumerate(points):
        command = "M" if i == 0 else "L"
        commands.append(f"{command} {_num(projection.x(point.year))} {_num(projection.y(point.value))}")
    return " ".join(commands)


def _x_ticks(projection: _Projection) -> List[TickMark]:
    ticks = []
    year = math.ceil(projection.start_year / X_TICK_INTERVAL) * X_TICK_INTERVAL
    while year <= projection.end_year:
        ticks.append(TickMark(value=year, position=projection.x(year), label=str(year)))
        year += X_TICK_INTERVAL
    return ticks


def _annotations(projection: _Projection) -> List[ChartAnnotation]:
    layout = projection.layout
    x = layout.width - layout.padding_right - layout.annotation_inset
    annotations = []
    for clip in projection.scale.annotations:
        if clip.kind == "peak":
            y = layout.padding_top + layout.peak_offset
        else:
            y = layout.plot_bottom - layout.low_offset
        annotations.append(
            ChartAnnotation(kind=clip.kind, value=clip.value, label=clip.label, x=x, y=y)
        )
    return annotations


def build_chart_geometry(
    series: TimeSeries,
    config: IndicatorConfig,
    layout: Optional[ChartLayout] = None,
) -> Optional[ChartGeometry]:
    """
    Lay out ``series`` as a history chart of indicator ``config``.

    Years without a value are skipped: the line joins the neighbouring
    observations.

    Args:
        series: Indicator history of one entity
        config: Indicator configuration (scale mode, formatters, subtitle)
        layout: Canvas size and padding (defaults to ChartLayout())

    Returns:
        ChartGeometry, or None if the series has no observed value
    """
    observed = series.observed()
    if not observed:
        logger.debug("No observed values for %s, skipping chart", series.code)
        return None

    layout = (layout or ChartLayout()).for_mode(config.scale_mode)
    scale = resolve_scale(config.scale_mode, [p.value for p in observed], config.tick_format)
    projection = _Projection(layout, scale, observed[0].year, observed[-1].year)

    line_path = _line_path(observed, projection)
    zero_y = projection.y(0)
    area_path = (
        f"{line_path} L {_num(projection.x(projection.end_year))} {_num(zero_y)}"
        f" L {_num(projection.x(projection.start_year))} {_num(zero_y)} Z"
    )

    y_ticks = [
        TickMark(value=v, position=projection.y(v), label=config.tick_format(v))
        for v in scale.ticks
    ]

    latest = observed[-1]
    endpoint = EndpointMarker(
        x=projection.x(latest.year),
        y=projection.y(latest.value),
        year=latest.year,
        value=latest.value,
        label=config.headline_format(latest.value),
    )

    return ChartGeometry(
        width=layout.width,
        height=layout.height,
        scale_mode=scale_mode_name(config.scale_mode),
        subtitle=config.subtitle,
        domain_min=scale.domain_min,
        domain_max=scale.domain_max,
        line_path=line_path,
        area_path=area_path,
        y_ticks=y_ticks,
        x_ticks=_x_ticks(projection),
        zero_line_y=zero_y if scale.show_zero_line else None,
        clip=ClipRegion(
            x=layout.padding_left,
            y=layout.padding_top,
            width=layout.plot_width,
            height=layout.plot_height,
        ),
        annotations=_annotations(projection),
        endpoint=endpoint,
    )
