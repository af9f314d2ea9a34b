"""Static facility datasets: category table, record parsing and summaries."""

from __future__ import annotations

import json
import logging
import math
from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterable, List, Mapping, Tuple, Union

from pydantic import BaseModel, Field, field_validator

from .clustering import PointFeature


logger = logging.getLogger(__name__)


DATA_DIR = Path(__file__).parent.parent.parent / "data" / "infrastructure"


@dataclass(frozen=True)
class FacilityCategory:
    """Display and file settings for one facility dataset."""

    key: str
    label: str
    color: str
    file: str
    min_capacity: str
    unit: str = "MW"
    noun: str = "plants"

    @property
    def title(self) -> str:
        """Heading used for the category summary."""
        return f"{self.label} {self.noun.title()}"


FACILITY_CATEGORIES: Mapping[str, FacilityCategory] = MappingProxyType(
    {
        "nuclear": FacilityCategory("nuclear", "Nuclear", "#9cc837", "nuclear.json", "≥20 MW"),
        "hydro": FacilityCategory("hydro", "Hydro", "#4fc3f7", "hydro.json", "≥1,000 MW"),
        "solar": FacilityCategory("solar", "Solar", "#ffd700", "solar.json", "≥200 MW"),
        "wind": FacilityCategory("wind", "Wind", "#c56cf0", "wind.json", "≥200 MW"),
        "coal": FacilityCategory("coal", "Coal", "#4a4a4a", "coal.json", "≥500 MW"),
        "gas": FacilityCategory("gas", "Gas", "#ff6600", "gas.json", "≥1,000 MW"),
        "oil": FacilityCategory(
            "oil", "Oil", "#b91c1c", "oil.json", "≥50 kb/d", unit="kb/d", noun="refineries"
        ),
    }
)


def get_category(key: str) -> FacilityCategory:
    """Return the facility category ``key``; unknown keys raise KeyError."""
    try:
        return FACILITY_CATEGORIES[key]
    except KeyError:
        raise KeyError(
            f"Unknown facility category '{key}'. "
            f"Available categories: {', '.join(FACILITY_CATEGORIES)}"
        ) from None


class FacilityRecord(BaseModel):
    """One record of a per-category facility dataset."""

    name: str = Field(..., alias="n", description="Facility name")
    lat: float = Field(..., description="Latitude in decimal degrees")
    lon: float = Field(..., description="Longitude in decimal degrees")
    magnitude: float = Field(..., alias="mw", description="Capacity in the category unit")
    owner_code: str = Field(..., alias="c", description="ISO3 code of the owning country")

    model_config = {"populate_by_name": True}

    @field_validator("lat")
    @classmethod
    def _validate_lat(cls, value: float) -> float:
        if math.isfinite(value) and not -90 <= value <= 90:
            raise ValueError("Latitude must be within [-90, 90]")
        return value

    @field_validator("lon")
    @classmethod
    def _validate_lon(cls, value: float) -> float:
        if math.isfinite(value) and not -180 <= value <= 180:
            raise ValueError("Longitude must be within [-180, 180]")
        return value

    @field_validator("magnitude")
    @classmethod
    def _validate_magnitude(cls, value: float) -> float:
        if math.isfinite(value) and value < 0:
            raise ValueError("Magnitude must be non-negative")
        return value

    def is_finite(self) -> bool:
        return all(math.isfinite(v) for v in (self.lat, self.lon, self.magnitude))

    def to_feature(self) -> PointFeature:
        return PointFeature(
            name=self.name,
            lat=self.lat,
            lon=self.lon,
            magnitude=self.magnitude,
            owner_code=self.owner_code,
        )


def parse_facilities(records: Iterable[Mapping[str, Any]]) -> List[PointFeature]:
    """
    Validate raw dataset records and convert them to point features.

    Records with non-finite coordinates or magnitude are dropped, since the
    clustering engine does not validate its input. Malformed records (missing
    fields, wrong types, out-of-range coordinates, negative magnitude) raise
    pydantic's ValidationError.
    """
    features: List[PointFeature] = []
    dropped = 0
    for raw in records:
        record = FacilityRecord.model_validate(raw)
        if not record.is_finite():
            dropped += 1
            continue
        features.append(record.to_feature())

    if dropped:
        logger.warning("Dropped %d facility records with non-finite values", dropped)
    return features


def load_facilities(
    category: Union[str, FacilityCategory],
    data_dir: Union[str, Path, None] = None,
) -> List[PointFeature]:
    """
    Load the dataset file of ``category`` from ``data_dir``.

    Args:
        category: Category key (e.g. "nuclear") or FacilityCategory
        data_dir: Directory holding the JSON files (defaults to data/infrastructure)

    Raises:
        FileNotFoundError: If the dataset file doesn't exist
    """
    if isinstance(category, str):
        category = get_category(category)

    path = Path(data_dir) if data_dir is not None else DATA_DIR
    path = path / category.file
    if not path.exists():
        raise FileNotFoundError(f"Dataset for '{category.key}' not found at {path}")

    with open(path, "r", encoding="utf-8") as f:
        records = json.load(f)

    features = parse_facilities(records)
    logger.info("Loaded %d %s facilities from %s", len(features), category.key, path)
    return features


def top_facilities(points: Iterable[PointFeature], n: int = 5) -> List[PointFeature]:
    """Return the ``n`` largest facilities by magnitude (stable for ties)."""
    return sorted(points, key=lambda p: p.magnitude, reverse=True)[:n]


def owner_counts(points: Iterable[PointFeature], n: int = 15) -> List[Tuple[str, int]]:
    """Return ``(owner_code, count)`` pairs for the ``n`` owners with most facilities."""
    return Counter(p.owner_code for p in points).most_common(n)
