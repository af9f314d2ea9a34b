"""
Zoom-dependent grid clustering for point-located facilities.

This module provides:
1. High-zoom bypass (every facility rendered as its own marker)
2. Uniform lat/lon grid aggregation with a zoom-dependent cell size
3. Unweighted centroids with full member retention
4. Diagnostics for inspecting how a point set broke apart at a zoom level

Clusters are rebuilt from scratch on every call.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PointFeature:
    """A located facility (power plant, refinery, ...)."""

    name: str
    lat: float
    lon: float
    magnitude: float
    """Size of the facility in its category unit (MW, kb/d)."""

    owner_code: str
    """ISO3 code of the owning country."""


@dataclass(frozen=True)
class Cluster:
    """A group of facilities sharing one grid cell."""

    centroid_lat: float
    """Arithmetic mean of member latitudes (not magnitude-weighted)."""

    centroid_lon: float
    """Arithmetic mean of member longitudes (not magnitude-weighted)."""

    members: Tuple[PointFeature, ...]
    """All member facilities, in input order."""

    total_magnitude: float
    """Sum of member magnitudes."""

    @classmethod
    def from_members(cls, members: Sequence[PointFeature]) -> "Cluster":
        if not members:
            raise ValueError("A cluster needs at least one member")
        count = len(members)
        lat_sum = 0.0
        lon_sum = 0.0
        magnitude_sum = 0.0
        for point in members:
            lat_sum += point.lat
            lon_sum += point.lon
            magnitude_sum += point.magnitude
        return cls(
            centroid_lat=lat_sum / count,
            centroid_lon=lon_sum / count,
            members=tuple(members),
            total_magnitude=magnitude_sum,
        )

    @property
    def size(self) -> int:
        return len(self.members)

    @property
    def is_singleton(self) -> bool:
        return len(self.members) == 1


@dataclass(frozen=True)
class GridClusteringConfig:
    """Constants of the grid clustering policy."""

    base_cell_degrees: float = 25.0
    """Cell side at zoom 1; the side at zoom z is base_cell_degrees / z."""

    bypass_zoom: float = 8.0
    """At or above this zoom every facility is its own cluster."""

    min_zoom: float = 1.0
    """Smallest accepted zoom level."""

    def cell_size(self, zoom_level: float) -> float:
        return self.base_cell_degrees / zoom_level


DEFAULT_CONFIG = GridClusteringConfig()


@dataclass
class ClusteringDiagnostics:
    """Summary of one clustering pass."""

    zoom_level: float
    """Zoom level the pass ran at."""

    num_points: int
    """Number of facilities provided."""

    num_clusters: int
    """Number of clusters produced (singletons included)."""

    num_singletons: int = 0
    """Number of clusters holding exactly one facility."""

    largest_cluster: int = 0
    """Member count of the biggest cluster (0 for empty input)."""

    cell_size: Optional[float] = None
    """Grid cell side in degrees (None when the bypass fired)."""

    bypassed: bool = False
    """Whether the high-zoom bypass skipped grid aggregation."""


def cell_size(zoom_level: float, config: Optional[GridClusteringConfig] = None) -> float:
    """Return the grid cell side in degrees for ``zoom_level``."""
    return (config or DEFAULT_CONFIG).cell_size(zoom_level)


def _check_zoom(zoom_level: float, config: GridClusteringConfig) -> None:
    if not zoom_level >= config.min_zoom:
        raise ValueError(
            f"zoom_level must be >= {config.min_zoom}, got {zoom_level}"
        )


def points_to_frame(points: Sequence[PointFeature]) -> pd.DataFrame:
    """Tabulate ``points`` with one row per facility, in input order."""
    return pd.DataFrame(
        {
            "name": [p.name for p in points],
            "lat": np.array([p.lat for p in points], dtype=float),
            "lon": np.array([p.lon for p in points], dtype=float),
            "magnitude": np.array([p.magnitude for p in points], dtype=float),
            "owner_code": [p.owner_code for p in points],
        }
    )


def assign_grid_cells(
    frame: pd.DataFrame,
    zoom_level: float,
    config: Optional[GridClusteringConfig] = None,
) -> pd.DataFrame:
    """
    Return a copy of ``frame`` with integer ``cell_x`` / ``cell_y`` columns.

    Cell indices are ``floor(coord / cell_size)`` taken on the rounded float
    quotient, so a point whose quotient rounds up onto an integer lands in
    the higher cell.

    Args:
        frame: DataFrame with at least 'lat' and 'lon' columns
        zoom_level: Current map zoom (>= config.min_zoom)
        config: Clustering constants (defaults if None)
    """
    config = config or DEFAULT_CONFIG
    _check_zoom(zoom_level, config)

    size = config.cell_size(zoom_level)
    frame = frame.copy()
    frame["cell_x"] = np.floor(frame["lon"].to_numpy(dtype=float) / size).astype(np.int64)
    frame["cell_y"] = np.floor(frame["lat"].to_numpy(dtype=float) / size).astype(np.int64)
    return frame


def cluster_with_diagnostics(
    points: Sequence[PointFeature],
    zoom_level: float,
    config: Optional[GridClusteringConfig] = None,
) -> Tuple[List[Cluster], ClusteringDiagnostics]:
    """
    Group ``points`` by grid cell at ``zoom_level``.

    Handles:
    1. Empty input (no clusters)
    2. High zoom (one singleton cluster per point)
    3. Grid aggregation (one cluster per occupied cell)

    Args:
        points: Facilities to cluster; coordinates must already be finite
        zoom_level: Current map zoom (>= config.min_zoom)
        config: Clustering constants (uses defaults if None)

    Returns:
        (clusters, diagnostics)

    Clusters come out in order of first appearance of their cell, and
    members keep their input order, so the result is reproducible from the
    inputs alone.
    """
    config = config or DEFAULT_CONFIG
    _check_zoom(zoom_level, config)

    if zoom_level >= config.bypass_zoom:
        clusters = [Cluster.from_members([p]) for p in points]
        diagnostics = ClusteringDiagnostics(
            zoom_level=zoom_level,
            num_points=len(points),
            num_clusters=len(clusters),
            num_singletons=len(clusters),
            largest_cluster=1 if clusters else 0,
            cell_size=None,
            bypassed=True,
        )
        logger.debug(
            "Clustering bypassed at zoom %.2f: %d individual markers",
            zoom_level,
            len(clusters),
        )
        return clusters, diagnostics

    size = config.cell_size(zoom_level)
    if not points:
        return [], ClusteringDiagnostics(
            zoom_level=zoom_level, num_points=0, num_clusters=0, cell_size=size
        )

    frame = assign_grid_cells(points_to_frame(points), zoom_level, config)
    frame["position"] = np.arange(len(frame))

    clusters: List[Cluster] = []
    for _cell, group in frame.groupby(["cell_x", "cell_y"], sort=False):
        members = [points[i] for i in group["position"].tolist()]
        clusters.append(Cluster.from_members(members))

    sizes = [c.size for c in clusters]
    diagnostics = ClusteringDiagnostics(
        zoom_level=zoom_level,
        num_points=len(points),
        num_clusters=len(clusters),
        num_singletons=sum(1 for s in sizes if s == 1),
        largest_cluster=max(sizes),
        cell_size=size,
        bypassed=False,
    )
    logger.debug(
        "Clustered %d points into %d cells (cell=%.3f deg, zoom=%.2f, largest=%d)",
        diagnostics.num_points,
        diagnostics.num_clusters,
        size,
        zoom_level,
        diagnostics.largest_cluster,
    )
    return clusters, diagnostics


def cluster_points(
    points: Sequence[PointFeature],
    zoom_level: float,
    config: Optional[GridClusteringConfig] = None,
) -> List[Cluster]:
    """Return the clusters for ``points`` at ``zoom_level``."""
    clusters, _diagnostics = cluster_with_diagnostics(points, zoom_level, config)
    return clusters
