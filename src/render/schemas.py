"""Pydantic models for the render primitives handed to the map and chart views."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class LatLon(BaseModel):
    """Simple latitude/longitude container."""

    lat: float = Field(..., description="Latitude in decimal degrees")
    lon: float = Field(..., description="Longitude in decimal degrees")


class FacilitySummary(BaseModel):
    """A cluster member as listed in the marker popup."""

    name: str
    position: LatLon
    magnitude: float
    owner_code: str = Field(..., alias="ownerCode")

    model_config = {"populate_by_name": True}


class ClusterMarker(BaseModel):
    """Circle marker drawn for one cluster at one zoom level."""

    position: LatLon
    radius: float = Field(..., gt=0, description="Radius in map units at the current zoom")
    color: str
    count: int = Field(..., ge=1)
    total_magnitude: float = Field(..., alias="totalMagnitude")
    title: str
    value_label: str = Field(..., alias="valueLabel")
    fill_opacity: float = Field(..., alias="fillOpacity", ge=0, le=1)
    stroke_width: float = Field(..., alias="strokeWidth")
    count_font_size: Optional[float] = Field(
        default=None, alias="countFontSize", description="Only set for multi-member clusters"
    )
    expansion_zoom: Optional[float] = Field(
        default=None, alias="expansionZoom", description="Zoom to fly to when the cluster is clicked"
    )
    members: List[FacilitySummary] = Field(default_factory=list)

    model_config = {"populate_by_name": True}

    @property
    def is_cluster(self) -> bool:
        return self.count > 1


class RegionFill(BaseModel):
    """Choropleth fill of one region."""

    code: str
    color: str
    label: str
    value: Optional[float] = None


class LegendEntry(BaseModel):
    label: str
    color: str


class TickMark(BaseModel):
    value: float
    position: float = Field(..., description="Pixel coordinate along the axis")
    label: str


class ClipRegion(BaseModel):
    """Plot-area rectangle the line and area paths are clipped to."""

    x: float
    y: float
    width: float
    height: float


class ChartAnnotation(BaseModel):
    """Label for an observed extreme outside the visible domain."""

    kind: str = Field(..., description="'peak' or 'low'")
    value: float
    label: str
    x: float
    y: float


class EndpointMarker(BaseModel):
    """Dot on the latest observation with its headline label."""

    x: float
    y: float
    year: int
    value: float
    label: str


class ChartGeometry(BaseModel):
    """Everything needed to draw one indicator history chart as SVG."""

    width: float
    height: float
    scale_mode: str = Field(..., alias="scaleMode")
    subtitle: str = ""
    domain_min: float = Field(..., alias="domainMin")
    domain_max: float = Field(..., alias="domainMax")
    line_path: str = Field(..., alias="linePath")
    area_path: str = Field(..., alias="areaPath")
    y_ticks: List[TickMark] = Field(default_factory=list, alias="yTicks")
    x_ticks: List[TickMark] = Field(default_factory=list, alias="xTicks")
    zero_line_y: Optional[float] = Field(default=None, alias="zeroLineY")
    clip: ClipRegion
    annotations: List[ChartAnnotation] = Field(default_factory=list)
    endpoint: EndpointMarker

    model_config = {"populate_by_name": True}
