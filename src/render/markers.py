"""
Cluster marker rendering.

Turns clusters into circle markers. Marker size follows magnitude (square
root, so area grows linearly with capacity) and shrinks with zoom so that
markers keep a constant on-screen size as the map scales up.
"""

import math
from typing import Iterable, List, Union

from src.scales.formatting import format_capacity, format_grouped
from src.spatial.clustering import Cluster
from src.spatial.datasets import FacilityCategory, get_category

from .schemas import ClusterMarker, FacilitySummary, LatLon


SINGLETON_FILL_OPACITY = 0.85
CLUSTER_FILL_OPACITY = 0.7
MAX_EXPANSION_ZOOM = 20.0
EXPANSION_FACTOR = 2.5


def singleton_radius(magnitude: float, zoom_level: float) -> float:
    """``clamp(4 + sqrt(magnitude / 50), 5, 18) / zoom_level``."""
    radius = 4 + math.sqrt(magnitude / 50)
    return min(18.0, max(5.0, radius)) / zoom_level


def cluster_radius(total_magnitude: float, zoom_level: float) -> float:
    """``min(35, (6 + sqrt(total_magnitude / 50)) / zoom_level)``."""
    return min(35.0, (6 + math.sqrt(total_magnitude / 50)) / zoom_level)


def expansion_zoom(zoom_level: float) -> float:
    """Zoom level a click on a cluster flies to."""
    return min(MAX_EXPANSION_ZOOM, zoom_level * EXPANSION_FACTOR)


def _summaries(cluster: Cluster) -> List[FacilitySummary]:
    return [
        FacilitySummary(
            name=p.name,
            position=LatLon(lat=p.lat, lon=p.lon),
            magnitude=p.magnitude,
            owner_code=p.owner_code,
        )
        for p in cluster.members
    ]


def build_cluster_markers(
    clusters: Iterable[Cluster],
    zoom_level: float,
    category: Union[str, FacilityCategory],
) -> List[ClusterMarker]:
    """
    Build one marker per cluster, in cluster order.

    Args:
        clusters: Output of cluster_points at ``zoom_level``
        zoom_level: Current map zoom
        category: Facility category key or FacilityCategory (color, label, unit)

    Returns:
        List of ClusterMarker
    """
    if isinstance(category, str):
        category = get_category(category)

    markers = []
    for cluster in clusters:
        position = LatLon(lat=cluster.centroid_lat, lon=cluster.centroid_lon)
        if cluster.is_singleton:
            point = cluster.members[0]
            markers.append(
                ClusterMarker(
                    position=position,
                    radius=singleton_radius(point.magnitude, zoom_level),
                    color=category.color,
                    count=1,
                    total_magnitude=cluster.total_magnitude,
                    title=point.name,
                    value_label=f"{format_grouped(point.magnitude)} {category.unit}",
                    fill_opacity=SINGLETON_FILL_OPACITY,
                    stroke_width=0.5 / zoom_level,
                    members=_summaries(cluster),
                )
            )
            continue

        radius = cluster_radius(cluster.total_magnitude, zoom_level)
        markers.append(
            ClusterMarker(
                position=position,
                radius=radius,
                color=category.color,
                count=cluster.size,
                total_magnitude=cluster.total_magnitude,
                title=f"{cluster.size} {category.label} {category.noun}",
                value_label=f"Total: {format_capacity(cluster.total_magnitude, category.unit)}",
                fill_opacity=CLUSTER_FILL_OPACITY,
                stroke_width=1 / zoom_level,
                count_font_size=max(3.0, radius * 0.8),
                expansion_zoom=expansion_zoom(zoom_level),
                members=_summaries(cluster),
            )
        )
    return markers
