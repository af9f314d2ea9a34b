"""
src/render: Render primitives for the map and chart views.

Converts clustering and scale engine output into cluster markers,
choropleth fills, legends and SVG chart geometry.
"""

from .chart import ChartLayout, build_chart_geometry
from .choropleth import build_legend, build_region_fills
from .markers import (
    build_cluster_markers,
    cluster_radius,
    expansion_zoom,
    singleton_radius,
)
from .schemas import (
    ChartAnnotation,
    ChartGeometry,
    ClipRegion,
    ClusterMarker,
    EndpointMarker,
    FacilitySummary,
    LatLon,
    LegendEntry,
    RegionFill,
    TickMark,
)

__all__ = [
    "ChartLayout",
    "build_chart_geometry",
    "build_legend",
    "build_region_fills",
    "build_cluster_markers",
    "cluster_radius",
    "expansion_zoom",
    "singleton_radius",
    "ChartAnnotation",
    "ChartGeometry",
    "ClipRegion",
    "ClusterMarker",
    "EndpointMarker",
    "FacilitySummary",
    "LatLon",
    "LegendEntry",
    "RegionFill",
    "TickMark",
]
