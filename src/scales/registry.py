"""
Indicator Registry Module

Holds the per-indicator scale configuration (bucket thresholds and colors,
value formats, chart scale mode) as an immutable registry built once at
startup and passed by reference to the engines.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Tuple, Union

import yaml

from .axis import (
    ChartScaleMode,
    Linear,
    PercentileClipped,
    SymmetricLog,
    scale_mode_from_name,
    scale_mode_name,
)
from .buckets import (
    ScaleConfigError,
    bucket_color,
    fill_color,
    is_missing,
    legend_entries,
    validate_buckets,
)
from .formatting import (
    Formatter,
    format_currency,
    format_currency_compact,
    format_currency_k,
    format_headcount,
    format_percent,
    format_percent_magnitude,
    labelled,
    make_formatter,
)


logger = logging.getLogger(__name__)


NO_DATA_LABEL = "No data"


@dataclass(frozen=True)
class IndicatorConfig:
    """
    Scale configuration of one indicator.

    Attributes:
        name: Indicator name as shown in the metric menu
        thresholds: Strictly ascending bucket boundaries
        colors: Bucket colors, one more than thresholds
        format: Tooltip formatter (e.g. "GDP: $1.00T")
        scale_mode: Chart y-axis scale mode
        axis_format: Formatter for axis ticks, legends and clip annotations
        latest_format: Formatter for the "latest value" readout of a chart
        subtitle: Chart subtitle
        has_chart: Whether a historical chart is offered for this indicator
    """
    name: str
    thresholds: Tuple[float, ...]
    colors: Tuple[str, ...]
    format: Formatter
    scale_mode: ChartScaleMode = field(default_factory=Linear)
    axis_format: Optional[Formatter] = None
    latest_format: Optional[Formatter] = None
    subtitle: str = ""
    has_chart: bool = False

    def __post_init__(self):
        object.__setattr__(self, "thresholds", tuple(float(t) for t in self.thresholds))
        object.__setattr__(self, "colors", tuple(self.colors))
        try:
            validate_buckets(self.thresholds, self.colors)
        except ScaleConfigError as exc:
            raise ScaleConfigError(f"Indicator '{self.name}': {exc}") from None

    @property
    def tick_format(self) -> Formatter:
        return self.axis_format or self.format

    @property
    def headline_format(self) -> Formatter:
        return self.latest_format or self.tick_format

    def color_for(self, value: float) -> str:
        """Bucket color of ``value`` (missing values must be handled by the caller)."""
        return bucket_color(value, self.thresholds, self.colors)

    def fill_for(self, value: Optional[float]) -> str:
        """Bucket color of ``value``, or the no-data color when it is missing."""
        return fill_color(value, self.thresholds, self.colors)

    def tooltip(self, value: Optional[float]) -> str:
        if is_missing(value):
            return NO_DATA_LABEL
        return self.format(value)

    def legend(self) -> List[Tuple[str, str]]:
        return legend_entries(self.thresholds, self.colors, self.tick_format)


class IndicatorRegistry(Mapping[str, IndicatorConfig]):
    """Read-only mapping from indicator name to :class:`IndicatorConfig`."""

    def __init__(self, configs: Union[Mapping[str, IndicatorConfig], List[IndicatorConfig]]):
        if isinstance(configs, Mapping):
            configs = list(configs.values())
        entries: Dict[str, IndicatorConfig] = {}
        for config in configs:
            if config.name in entries:
                raise ScaleConfigError(f"Indicator '{config.name}' is configured twice")
            entries[config.name] = config
        self._entries = MappingProxyType(entries)

    def __getitem__(self, name: str) -> IndicatorConfig:
        try:
            return self._entries[name]
        except KeyError:
            raise KeyError(
                f"Indicator '{name}' is not configured. "
                f"Available indicators: {', '.join(self._entries)}"
            ) from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def charted(self) -> List[str]:
        """Names of indicators that offer a historical chart."""
        return [name for name, config in self._entries.items() if config.has_chart]


# Built-in indicator configurations
GDP = IndicatorConfig(
    name="GDP",
    thresholds=(0.1e12, 0.5e12, 1e12, 5e12, 10e12),
    colors=("#e8f5c8", "#c5e384", "#9cc837", "#6fa02a", "#4a7a1c", "#2d5210"),
    format=labelled("GDP", format_currency_compact),
    axis_format=format_currency_compact,
    subtitle="GDP — Historical",
)

GDP_GROWTH = IndicatorConfig(
    name="GDP growth",
    thresholds=(-5, 0, 2, 5, 8),
    colors=("#d73027", "#fc8d59", "#fee08b", "#d9ef8b", "#91cf60", "#1a9850"),
    format=labelled("GDP growth", format_percent),
    scale_mode=PercentileClipped(),
    axis_format=format_percent,
    subtitle="GDP Growth — Historical",
)

GDP_PER_CAPITA = IndicatorConfig(
    name="GDP per capita",
    thresholds=(1000, 5000, 15000, 30000, 60000),
    colors=("#f7fcf5", "#c7e9c0", "#74c476", "#31a354", "#006d2c", "#00441b"),
    format=labelled("GDP per capita", format_currency),
    scale_mode=Linear(),
    axis_format=format_currency_k,
    latest_format=format_currency_k,
    subtitle="GDP per Capita — Historical",
    has_chart=True,
)

DEBT_TO_GDP = IndicatorConfig(
    name="Debt-to-GDP",
    thresholds=(30, 60, 90, 120, 150),
    colors=("#fff5eb", "#fdd0a2", "#fdae6b", "#f16913", "#d94801", "#8c2d04"),
    format=labelled("Debt-to-GDP", format_percent),
    axis_format=format_percent,
    subtitle="Government Debt (% of GDP) — Historical",
    has_chart=True,
)

INFLATION = IndicatorConfig(
    name="Inflation",
    thresholds=(0, 2, 5, 10, 20),
    colors=("#4575b4", "#91bfdb", "#e0f3f8", "#fee090", "#fc8d59", "#d73027"),
    format=labelled("Inflation", format_percent),
    scale_mode=SymmetricLog(),
    axis_format=format_percent_magnitude,
    latest_format=format_percent,
    subtitle="Inflation Rate — Historical (symlog scale)",
    has_chart=True,
)

CURRENT_ACCOUNT_BALANCE = IndicatorConfig(
    name="Current Account Balance",
    thresholds=(-10, -5, 0, 5, 10),
    colors=("#b2182b", "#ef8a62", "#fddbc7", "#d1e5f0", "#67a9cf", "#2166ac"),
    format=labelled("Current Account", lambda v: format_percent(v, suffix=" of GDP")),
    scale_mode=PercentileClipped(),
    axis_format=format_percent,
    subtitle="Current Account Balance (% of GDP) — Historical",
    has_chart=True,
)

TRADE_OPENNESS = IndicatorConfig(
    name="Trade Openness",
    thresholds=(25, 50, 75, 100, 150),
    colors=("#f2f0f7", "#dadaeb", "#bcbddc", "#9e9ac8", "#756bb1", "#54278f"),
    format=labelled("Trade Openness", lambda v: format_percent(v, suffix=" of GDP")),
    axis_format=format_percent,
    subtitle="Trade (% of GDP) — Historical",
)

MILITARY_SPENDING = IndicatorConfig(
    name="Military Spending",
    thresholds=(1e9, 10e9, 50e9, 100e9, 500e9),
    colors=("#fee5d9", "#fcbba1", "#fc9272", "#fb6a4a", "#de2d26", "#a50f15"),
    format=labelled("Military Spending", format_currency_compact),
    axis_format=format_currency_compact,
    subtitle="Military Expenditure — Historical",
)

ACTIVE_PERSONNEL = IndicatorConfig(
    name="Active Personnel",
    thresholds=(10_000, 50_000, 100_000, 500_000, 1_000_000),
    colors=("#f1eef6", "#d0d1e6", "#a6bddb", "#74a9cf", "#2b8cbe", "#045a8d"),
    format=labelled("Active Personnel", format_headcount),
    axis_format=format_headcount,
    subtitle="Active Military Personnel",
    has_chart=True,
)

DEFAULT_REGISTRY = IndicatorRegistry(
    [
        GDP,
        GDP_GROWTH,
        GDP_PER_CAPITA,
        DEBT_TO_GDP,
        INFLATION,
        CURRENT_ACCOUNT_BALANCE,
        TRADE_OPENNESS,
        MILITARY_SPENDING,
        ACTIVE_PERSONNEL,
    ]
)


def get_indicator(name: str, registry: Optional[IndicatorRegistry] = None) -> IndicatorConfig:
    """
    Get the configuration of indicator ``name``.

    Raises:
        KeyError: If the indicator is not configured
    """
    if registry is None:
        registry = DEFAULT_REGISTRY
    return registry[name]


def _formatter_from_yaml(value: Any, name: str, key: str) -> Optional[Callable[[float], str]]:
    if value is None:
        return None
    if not isinstance(value, Mapping):
        raise ScaleConfigError(f"Indicator '{name}': '{key}' must be a mapping, got {value!r}")
    return make_formatter(value)


def _scale_mode_from_yaml(value: Any) -> ChartScaleMode:
    if value is None:
        return Linear()
    if isinstance(value, str):
        return scale_mode_from_name(value)

    params = dict(value)
    mode = scale_mode_from_name(params.pop("mode", "linear"))
    if params:
        try:
            mode = type(mode)(**params)
        except TypeError:
            raise ScaleConfigError(
                f"Scale mode '{scale_mode_name(mode)}' does not accept {sorted(params)}"
            ) from None
    return mode


def indicator_from_dict(name: str, data: Mapping[str, Any]) -> IndicatorConfig:
    """Build an :class:`IndicatorConfig` from its YAML mapping."""
    if "format" not in data:
        raise ScaleConfigError(f"Indicator '{name}' has no 'format'")
    return IndicatorConfig(
        name=name,
        thresholds=tuple(data.get("thresholds", ())),
        colors=tuple(data.get("colors", ())),
        format=_formatter_from_yaml(data["format"], name, "format"),
        scale_mode=_scale_mode_from_yaml(data.get("scale")),
        axis_format=_formatter_from_yaml(data.get("axis_format"), name, "axis_format"),
        latest_format=_formatter_from_yaml(data.get("latest_format"), name, "latest_format"),
        subtitle=data.get("subtitle", ""),
        has_chart=bool(data.get("has_chart", False)),
    )


def registry_from_dict(data: Mapping[str, Any]) -> IndicatorRegistry:
    indicators = data.get("indicators", data)
    return IndicatorRegistry(
        [indicator_from_dict(name, entry) for name, entry in indicators.items()]
    )


def load_registry_from_yaml(yaml_path: Optional[Union[str, Path]] = None) -> IndicatorRegistry:
    """
    Load indicator configurations from a YAML file.

    Args:
        yaml_path: Path to the YAML file. If None, looks in configs/indicators.yaml

    Returns:
        IndicatorRegistry built from the file, or DEFAULT_REGISTRY if the
        file doesn't exist

    YAML Format:
        ```yaml
        indicators:
          Inflation:
            thresholds: [0, 2, 5, 10, 20]
            colors: ["#4575b4", ...]
            scale: symlog
            format: {style: percent, label: Inflation}
            axis_format: {style: percent_magnitude}
            has_chart: true
        ```
    """
    if yaml_path is None:
        yaml_path = Path(__file__).parent.parent.parent / "configs" / "indicators.yaml"

    yaml_path = Path(yaml_path)

    if not yaml_path.exists():
        logger.warning("Indicator config %s not found, using built-in registry", yaml_path)
        return DEFAULT_REGISTRY

    with open(yaml_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    registry = registry_from_dict(data)
    logger.info("Loaded %d indicators from %s", len(registry), yaml_path)
    return registry
