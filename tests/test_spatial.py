"""
Unit Tests for Spatial Module (src/spatial)

Tests grid clustering (bypass, aggregation, ordering, mass conservation)
and facility dataset parsing and summaries.
"""

import math

import numpy as np
import pandas as pd
import pytest
from pydantic import ValidationError

from src.spatial.clustering import (
    Cluster,
    GridClusteringConfig,
    PointFeature,
    assign_grid_cells,
    cell_size,
    cluster_points,
    cluster_with_diagnostics,
    points_to_frame,
)
from src.spatial.datasets import (
    FACILITY_CATEGORIES,
    FacilityRecord,
    get_category,
    load_facilities,
    owner_counts,
    parse_facilities,
    top_facilities,
)


# ==============================================================================
# Grid Geometry Tests
# ==============================================================================

class TestCellSize:
    """Test zoom-dependent cell size."""

    def test_cell_size_at_zoom_one(self):
        assert cell_size(1) == 25.0

    def test_cell_size_shrinks_with_zoom(self):
        assert cell_size(2) == 12.5
        assert cell_size(5) == 5.0

    def test_custom_config(self):
        config = GridClusteringConfig(base_cell_degrees=10.0)
        assert cell_size(2, config) == 5.0


class TestAssignGridCells:
    """Test vectorised cell assignment."""

    def test_adds_integer_cell_columns(self, sample_points):
        frame = assign_grid_cells(points_to_frame(sample_points), zoom_level=2)

        assert list(frame["cell_x"]) == [0, 0, 4]
        assert list(frame["cell_y"]) == [0, 0, 4]
        assert frame["cell_x"].dtype == np.int64

    def test_does_not_modify_input(self, sample_points):
        frame = points_to_frame(sample_points)
        assign_grid_cells(frame, zoom_level=2)
        assert "cell_x" not in frame.columns

    def test_negative_coordinates_floor_downwards(self):
        frame = pd.DataFrame({"lat": [-0.1, 0.1], "lon": [-0.1, 0.1]})
        frame = assign_grid_cells(frame, zoom_level=1)

        assert list(frame["cell_x"]) == [-1, 0]
        assert list(frame["cell_y"]) == [-1, 0]

    def test_floors_rounded_float_quotient(self):
        """1.0 / 0.1 rounds to 10.0 while 1.0 // 0.1 is 9.0; the grid uses the former."""
        config = GridClusteringConfig(base_cell_degrees=0.1)
        frame = pd.DataFrame({"lat": [0.0], "lon": [1.0]})
        frame = assign_grid_cells(frame, zoom_level=1, config=config)

        assert list(frame["cell_x"]) == [10]
        assert list(frame["cell_y"]) == [0]

    def test_rejects_zoom_below_one(self, sample_points):
        with pytest.raises(ValueError):
            assign_grid_cells(points_to_frame(sample_points), zoom_level=0.5)


# ==============================================================================
# Clustering Tests
# ==============================================================================

class TestClusterPoints:
    """Test grid clustering."""

    def test_two_nearby_points_merge(self, sample_points):
        """Two points in one cell and one far away give two clusters."""
        clusters = cluster_points(sample_points, zoom_level=2)

        assert len(clusters) == 2
        assert clusters[0].total_magnitude == pytest.approx(30.0)
        assert clusters[1].total_magnitude == pytest.approx(5.0)
        assert clusters[0].centroid_lat == pytest.approx(0.05)
        assert clusters[0].centroid_lon == pytest.approx(0.05)
        assert [p.name for p in clusters[0].members] == ["A", "B"]

    def test_high_zoom_bypass(self, sample_points):
        clusters = cluster_points(sample_points, zoom_level=8)

        assert len(clusters) == 3
        assert all(c.is_singleton for c in clusters)
        assert [c.members[0] for c in clusters] == sample_points
        assert clusters[0].centroid_lat == 0.0
        assert clusters[0].total_magnitude == 10.0

    def test_bypass_above_threshold(self, world_points):
        clusters = cluster_points(world_points, zoom_level=12.5)
        assert len(clusters) == len(world_points)

    def test_empty_input(self):
        assert cluster_points([], zoom_level=3) == []
        assert cluster_points([], zoom_level=10) == []

    def test_zoom_below_one_raises(self, sample_points):
        with pytest.raises(ValueError):
            cluster_points(sample_points, zoom_level=0.9)

    def test_cells_split_at_zero(self):
        """Points either side of the prime meridian never share a cell."""
        points = [
            PointFeature("W", 0.0, -0.1, 1.0, "AAA"),
            PointFeature("E", 0.0, 0.1, 1.0, "AAA"),
        ]
        clusters = cluster_points(points, zoom_level=1)
        assert len(clusters) == 2

    def test_first_appearance_order(self, world_points):
        clusters = cluster_points(world_points, zoom_level=1)

        first_names = [c.members[0].name for c in clusters]
        assert first_names == [
            "Bruce",
            "Palo Verde",
            "Kashiwazaki",
            "Gravelines",
            "Paluel",
            "Koeberg",
            "Angra",
        ]
        assert [p.name for p in clusters[0].members] == ["Bruce", "Darlington"]
        assert [p.name for p in clusters[-1].members] == ["Angra", "Small"]

    @pytest.mark.parametrize("zoom", [1, 1.5, 2, 3, 4.2, 6, 7.99, 8, 15])
    def test_mass_conservation(self, world_points, zoom):
        clusters = cluster_points(world_points, zoom_level=zoom)

        total = sum(c.total_magnitude for c in clusters)
        assert total == pytest.approx(sum(p.magnitude for p in world_points))
        for cluster in clusters:
            assert cluster.total_magnitude == pytest.approx(
                sum(m.magnitude for m in cluster.members)
            )

    @pytest.mark.parametrize("zoom", [1, 2, 3, 5, 7.5, 9])
    def test_partition(self, world_points, zoom):
        """Every point lands in exactly one cluster."""
        clusters = cluster_points(world_points, zoom_level=zoom)

        members = [m for c in clusters for m in c.members]
        assert len(members) == len(world_points)
        assert sorted(m.name for m in members) == sorted(p.name for p in world_points)
        assert all(c.size >= 1 for c in clusters)

    def test_idempotent(self, world_points):
        first = cluster_points(world_points, zoom_level=2)
        second = cluster_points(world_points, zoom_level=2)
        assert first == second

    def test_zero_magnitude_members(self):
        points = [PointFeature("Z", 10.0, 10.0, 0.0, "AAA")] * 3
        clusters = cluster_points(points, zoom_level=1)

        assert len(clusters) == 1
        assert clusters[0].size == 3
        assert clusters[0].total_magnitude == 0.0


class TestClusterFromMembers:
    """Test cluster construction."""

    def test_unweighted_centroid(self):
        points = [
            PointFeature("big", 0.0, 0.0, 1000.0, "AAA"),
            PointFeature("small", 10.0, 20.0, 1.0, "AAA"),
        ]
        cluster = Cluster.from_members(points)

        assert cluster.centroid_lat == pytest.approx(5.0)
        assert cluster.centroid_lon == pytest.approx(10.0)

    def test_empty_members_rejected(self):
        with pytest.raises(ValueError):
            Cluster.from_members([])


class TestClusteringDiagnostics:
    """Test clustering diagnostics."""

    def test_grid_diagnostics(self, world_points):
        clusters, diagnostics = cluster_with_diagnostics(world_points, zoom_level=1)

        assert diagnostics.num_points == 9
        assert diagnostics.num_clusters == len(clusters) == 7
        assert diagnostics.num_singletons == 5
        assert diagnostics.largest_cluster == 2
        assert diagnostics.cell_size == 25.0
        assert diagnostics.bypassed is False

    def test_bypass_diagnostics(self, sample_points):
        _, diagnostics = cluster_with_diagnostics(sample_points, zoom_level=9)

        assert diagnostics.bypassed is True
        assert diagnostics.cell_size is None
        assert diagnostics.num_singletons == 3
        assert diagnostics.largest_cluster == 1

    def test_empty_diagnostics(self):
        clusters, diagnostics = cluster_with_diagnostics([], zoom_level=2)

        assert clusters == []
        assert diagnostics.num_clusters == 0
        assert diagnostics.largest_cluster == 0


# ==============================================================================
# Facility Dataset Tests
# ==============================================================================

class TestFacilityCategories:
    """Test the facility category table."""

    def test_all_categories_present(self):
        assert set(FACILITY_CATEGORIES) == {
            "nuclear", "hydro", "solar", "wind", "coal", "gas", "oil",
        }

    def test_oil_uses_refinery_units(self):
        oil = get_category("oil")
        assert oil.unit == "kb/d"
        assert oil.title == "Oil Refineries"

    def test_power_plant_title(self):
        assert get_category("nuclear").title == "Nuclear Plants"

    def test_unknown_category(self):
        with pytest.raises(KeyError, match="Available categories"):
            get_category("geothermal")

    def test_table_is_read_only(self):
        with pytest.raises(TypeError):
            FACILITY_CATEGORIES["geothermal"] = FACILITY_CATEGORIES["wind"]


class TestParseFacilities:
    """Test dataset record parsing."""

    def test_parse_compact_records(self, raw_facility_records):
        features = parse_facilities(raw_facility_records)

        assert len(features) == 3
        assert features[0] == PointFeature("Bruce", 44.33, -81.6, 6232.0, "CAN")

    def test_field_names_accepted(self):
        record = FacilityRecord.model_validate(
            {"name": "X", "lat": 1.0, "lon": 2.0, "magnitude": 3.0, "owner_code": "AAA"}
        )
        assert record.to_feature().magnitude == 3.0

    def test_non_finite_records_dropped(self, raw_facility_records, caplog):
        records = raw_facility_records + [
            {"n": "Broken", "lat": math.nan, "lon": 0.0, "mw": 10, "c": "AAA"},
            {"n": "Huge", "lat": 0.0, "lon": 0.0, "mw": math.inf, "c": "AAA"},
        ]
        with caplog.at_level("WARNING"):
            features = parse_facilities(records)

        assert len(features) == 3
        assert "Dropped 2" in caplog.text

    def test_missing_field_raises(self):
        with pytest.raises(ValidationError):
            parse_facilities([{"n": "NoCoords", "mw": 10, "c": "AAA"}])

    @pytest.mark.parametrize(
        "record",
        [
            {"n": "Negative", "lat": 10.0, "lon": 10.0, "mw": -100, "c": "AAA"},
            {"n": "North", "lat": 120.0, "lon": 10.0, "mw": 100, "c": "AAA"},
            {"n": "South", "lat": -90.5, "lon": 10.0, "mw": 100, "c": "AAA"},
            {"n": "East", "lat": 10.0, "lon": 180.1, "mw": 100, "c": "AAA"},
            {"n": "West", "lat": 10.0, "lon": -200.0, "mw": 100, "c": "AAA"},
        ],
    )
    def test_out_of_range_raises(self, record):
        """Out-of-range records never reach the clustering engine."""
        with pytest.raises(ValidationError):
            parse_facilities([record])

    def test_range_limits_accepted(self):
        features = parse_facilities(
            [
                {"n": "Pole", "lat": 90.0, "lon": 180.0, "mw": 0, "c": "AAA"},
                {"n": "Antipole", "lat": -90.0, "lon": -180.0, "mw": 0, "c": "AAA"},
            ]
        )
        assert [f.name for f in features] == ["Pole", "Antipole"]

    def test_negative_infinite_magnitude_dropped(self):
        features = parse_facilities(
            [{"n": "Broken", "lat": 0.0, "lon": 0.0, "mw": -math.inf, "c": "AAA"}]
        )
        assert features == []


class TestLoadFacilities:
    """Test dataset file loading."""

    def test_load_by_key(self, dataset_dir):
        features = load_facilities("nuclear", data_dir=dataset_dir)
        assert [f.name for f in features] == ["Bruce", "Kashiwazaki", "Gravelines"]

    def test_load_by_category(self, dataset_dir):
        features = load_facilities(FACILITY_CATEGORIES["nuclear"], data_dir=dataset_dir)
        assert len(features) == 3

    def test_missing_file(self, dataset_dir):
        with pytest.raises(FileNotFoundError):
            load_facilities("hydro", data_dir=dataset_dir)


class TestFacilitySummaries:
    """Test top-N summaries."""

    def test_top_facilities(self, world_points):
        top = top_facilities(world_points, n=2)
        assert [p.name for p in top] == ["Kashiwazaki", "Bruce"]

    def test_top_facilities_default_five(self, world_points):
        assert len(top_facilities(world_points)) == 5

    def test_owner_counts(self, world_points):
        counts = owner_counts(world_points)

        assert counts[:3] == [("CAN", 2), ("FRA", 2), ("BRA", 2)]
        assert sum(c for _, c in counts) == len(world_points)

    def test_owner_counts_limit(self, world_points):
        assert len(owner_counts(world_points, n=2)) == 2
