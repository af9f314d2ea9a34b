"""
Pytest configuration and shared fixtures for world-metrics-atlas tests.

This file provides:
- Sample facility features and raw dataset records
- Sample per-year indicator payloads
- Temporary dataset and YAML configuration files
"""

import json
from pathlib import Path
from typing import Any, Dict, List

import pytest
import yaml

from src.spatial.clustering import PointFeature


# ==============================================================================
# Sample Facilities
# ==============================================================================

@pytest.fixture
def sample_points() -> List[PointFeature]:
    """Three facilities: two close together near (0, 0), one far away."""
    return [
        PointFeature(name="A", lat=0.0, lon=0.0, magnitude=10.0, owner_code="AAA"),
        PointFeature(name="B", lat=0.1, lon=0.1, magnitude=20.0, owner_code="AAA"),
        PointFeature(name="C", lat=50.0, lon=50.0, magnitude=5.0, owner_code="BBB"),
    ]


@pytest.fixture
def world_points() -> List[PointFeature]:
    """A spread of facilities across hemispheres, including negative coordinates."""
    return [
        PointFeature(name="Bruce", lat=44.33, lon=-81.6, magnitude=6232.0, owner_code="CAN"),
        PointFeature(name="Darlington", lat=43.87, lon=-78.72, magnitude=3512.0, owner_code="CAN"),
        PointFeature(name="Palo Verde", lat=33.39, lon=-112.86, magnitude=3937.0, owner_code="USA"),
        PointFeature(name="Kashiwazaki", lat=37.43, lon=138.6, magnitude=7965.0, owner_code="JPN"),
        PointFeature(name="Gravelines", lat=51.02, lon=2.14, magnitude=5460.0, owner_code="FRA"),
        PointFeature(name="Paluel", lat=49.86, lon=0.63, magnitude=5320.0, owner_code="FRA"),
        PointFeature(name="Koeberg", lat=-33.68, lon=18.43, magnitude=1860.0, owner_code="ZAF"),
        PointFeature(name="Angra", lat=-23.01, lon=-44.46, magnitude=1884.0, owner_code="BRA"),
        PointFeature(name="Small", lat=-23.5, lon=-44.9, magnitude=0.0, owner_code="BRA"),
    ]


@pytest.fixture
def raw_facility_records() -> List[Dict[str, Any]]:
    """Records in the compact on-disk dataset format."""
    return [
        {"n": "Bruce", "lat": 44.33, "lon": -81.6, "mw": 6232, "c": "CAN"},
        {"n": "Kashiwazaki", "lat": 37.43, "lon": 138.6, "mw": 7965, "c": "JPN"},
        {"n": "Gravelines", "lat": 51.02, "lon": 2.14, "mw": 5460, "c": "FRA"},
    ]


# ==============================================================================
# Sample Indicator Payloads
# ==============================================================================

@pytest.fixture
def year_payload() -> Dict[str, List[Dict[str, Any]]]:
    """Per-year keyed payload as returned by the indicator services."""
    return {
        "2000": [
            {"countryCode": "USA", "countryName": "United States", "value": 3.4},
            {"countryCode": "ARG", "countryName": "Argentina", "value": -0.9},
        ],
        "2001": [
            {"countryCode": "USA", "countryName": "United States", "value": 2.8},
            {"countryCode": "ARG", "countryName": "Argentina", "value": None},
        ],
        "2002": [
            {"countryCode": "USA", "countryName": "United States", "value": 1.6},
            {"countryCode": "ARG", "countryName": "Argentina", "value": 25.9},
            {"countryCode": "ZWE", "countryName": "Zimbabwe", "value": 140.0},
        ],
    }


# ==============================================================================
# Temporary Files
# ==============================================================================

@pytest.fixture
def dataset_dir(tmp_path, raw_facility_records) -> Path:
    """Directory holding a nuclear.json dataset."""
    path = tmp_path / "infrastructure"
    path.mkdir()
    with open(path / "nuclear.json", "w", encoding="utf-8") as f:
        json.dump(raw_facility_records, f)
    return path


@pytest.fixture
def indicator_yaml_data() -> Dict[str, Any]:
    return {
        "indicators": {
            "Inflation": {
                "thresholds": [0, 2, 5, 10, 20],
                "colors": ["#4575b4", "#91bfdb", "#e0f3f8", "#fee090", "#fc8d59", "#d73027"],
                "scale": {"mode": "symlog", "constant": 10.0},
                "format": {"style": "percent", "label": "Inflation"},
                "axis_format": {"style": "percent_magnitude"},
                "has_chart": True,
            },
            "Current Account Balance": {
                "thresholds": [-10, -5, 0, 5, 10],
                "colors": ["#b2182b", "#ef8a62", "#fddbc7", "#d1e5f0", "#67a9cf", "#2166ac"],
                "scale": "clipped",
                "format": {"style": "percent", "label": "Current Account", "suffix": " of GDP"},
            },
        }
    }


@pytest.fixture
def indicator_yaml(tmp_path, indicator_yaml_data) -> Path:
    """YAML indicator profile written to a temporary directory."""
    path = tmp_path / "custom.yaml"
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(indicator_yaml_data, f)
    return path
