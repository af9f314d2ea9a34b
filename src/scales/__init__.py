"""
Metric Scale Module for the World Metrics Atlas

Provides the value-to-visual encodings of indicators:
- Threshold buckets for choropleth colors (lower bucket on exact thresholds)
- Chart axis scales: linear, symmetric-log and percentile-clipped
- Value formatters for tooltips, ticks and legends
- The immutable per-indicator configuration registry

Usage:
    from src.scales import (
        DEFAULT_REGISTRY,
        bucket_color,
        resolve_scale,
    )

    config = DEFAULT_REGISTRY["Inflation"]
    color = bucket_color(3.1, config.thresholds, config.colors)

    scale = resolve_scale(config.scale_mode, values, config.tick_format)
    positions = scale.normalize_many(values)
"""

# Bucket lookup
from .buckets import (
    NO_DATA_COLOR,
    ScaleConfigError,
    bucket_color,
    bucket_index,
    fill_color,
    legend_entries,
    validate_buckets,
)

# Axis scales
from .axis import (
    ChartScaleMode,
    ClipAnnotation,
    Linear,
    PercentileClipped,
    ResolvedScale,
    SymmetricLog,
    percentile,
    resolve_scale,
    scale_mode_from_name,
    symlog,
    transform_value,
)

# Formatting
from .formatting import (
    format_capacity,
    format_grouped,
    labelled,
    make_formatter,
)

# Indicator registry
from .registry import (
    DEFAULT_REGISTRY,
    IndicatorConfig,
    IndicatorRegistry,
    get_indicator,
    load_registry_from_yaml,
)

__all__ = [
    # Buckets
    "NO_DATA_COLOR",
    "ScaleConfigError",
    "bucket_color",
    "bucket_index",
    "fill_color",
    "legend_entries",
    "validate_buckets",

    # Axis
    "ChartScaleMode",
    "ClipAnnotation",
    "Linear",
    "PercentileClipped",
    "ResolvedScale",
    "SymmetricLog",
    "percentile",
    "resolve_scale",
    "scale_mode_from_name",
    "symlog",
    "transform_value",

    # Formatting
    "format_capacity",
    "format_grouped",
    "labelled",
    "make_formatter",

    # Registry
    "DEFAULT_REGISTRY",
    "IndicatorConfig",
    "IndicatorRegistry",
    "get_indicator",
    "load_registry_from_yaml",
]
