"""
src/spatial: Facility datasets and zoom-dependent grid clustering.

This module groups point-located facilities into map clusters.
"""

from .clustering import (
    Cluster,
    ClusteringDiagnostics,
    GridClusteringConfig,
    PointFeature,
    assign_grid_cells,
    cell_size,
    cluster_points,
    cluster_with_diagnostics,
)
from .datasets import (
    FACILITY_CATEGORIES,
    FacilityCategory,
    FacilityRecord,
    get_category,
    load_facilities,
    owner_counts,
    parse_facilities,
    top_facilities,
)

__all__ = [
    "Cluster",
    "ClusteringDiagnostics",
    "GridClusteringConfig",
    "PointFeature",
    "assign_grid_cells",
    "cell_size",
    "cluster_points",
    "cluster_with_diagnostics",
    "FACILITY_CATEGORIES",
    "FacilityCategory",
    "FacilityRecord",
    "get_category",
    "load_facilities",
    "owner_counts",
    "parse_facilities",
    "top_facilities",
]
