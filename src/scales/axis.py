"""
Chart Axis Scale Module

Maps raw indicator values to normalized [0, 1] axis positions under one of
three scale modes:

- Linear: domain [0, max], for non-negative quantities where the true zero
  baseline matters (GDP per capita)
- SymmetricLog: sign(v) * log10(1 + |v| / C), linear near zero and
  logarithmic in the tails (inflation, including hyperinflation years)
- PercentileClipped: domain padded around the 5th/95th percentiles, with
  values outside clamped and flagged instead of compressing the axis
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np

from .buckets import ScaleConfigError


logger = logging.getLogger(__name__)


SYMLOG_CONSTANT = 5.0

SYMLOG_TICK_CANDIDATES: Tuple[float, ...] = (
    -1_000_000, -100_000, -10_000, -1000, -200, -100, -50, -20, -10, -5, -2,
    0,
    2, 5, 10, 20, 50, 100, 200, 1000, 10_000, 100_000, 1_000_000,
)

DEGENERATE_POSITION = 0.5


@dataclass(frozen=True)
class Linear:
    """Linear axis with the domain floor fixed at zero."""

    tick_count: int = 5

    def __post_init__(self):
        if self.tick_count < 1:
            raise ScaleConfigError(f"tick_count must be at least 1, got {self.tick_count}")


@dataclass(frozen=True)
class SymmetricLog:
    """Symmetric-log axis; ``constant`` is the linear-transition width."""

    constant: float = SYMLOG_CONSTANT
    tick_candidates: Tuple[float, ...] = SYMLOG_TICK_CANDIDATES
    tick_slack: float = 1.0

    def __post_init__(self):
        object.__setattr__(self, "tick_candidates", tuple(float(v) for v in self.tick_candidates))
        if not self.constant > 0:
            raise ScaleConfigError(f"Symlog constant must be positive, got {self.constant}")
        if not self.tick_slack >= 0:
            raise ScaleConfigError(f"tick_slack must be non-negative, got {self.tick_slack}")


@dataclass(frozen=True)
class PercentileClipped:
    """Axis padded around a central percentile band, clamping outliers."""

    low: float = 0.05
    high: float = 0.95
    padding: float = 0.15
    tick_count: int = 5

    def __post_init__(self):
        if not 0 <= self.low < self.high <= 1:
            raise ScaleConfigError(
                f"Percentiles must satisfy 0 <= low < high <= 1, got low={self.low}, high={self.high}"
            )
        if not self.padding >= 0:
            raise ScaleConfigError(f"padding must be non-negative, got {self.padding}")
        if self.tick_count < 1:
            raise ScaleConfigError(f"tick_count must be at least 1, got {self.tick_count}")


ChartScaleMode = Union[Linear, SymmetricLog, PercentileClipped]

SCALE_MODE_NAMES = {
    "linear": Linear,
    "symlog": SymmetricLog,
    "clipped": PercentileClipped,
}


def scale_mode_from_name(name: str) -> ChartScaleMode:
    """Return the default-parameter scale mode called ``name``."""
    try:
        return SCALE_MODE_NAMES[name]()
    except KeyError:
        raise ScaleConfigError(
            f"Unknown scale mode '{name}'. Available modes: {', '.join(SCALE_MODE_NAMES)}"
        ) from None


def scale_mode_name(mode: ChartScaleMode) -> str:
    for name, cls in SCALE_MODE_NAMES.items():
        if isinstance(mode, cls):
            return name
    raise TypeError(f"Unsupported scale mode: {mode!r}")


def symlog(value, constant: float = SYMLOG_CONSTANT):
    """
    Symmetric log transform ``sign(v) * log10(1 + |v| / constant)``.

    Accepts a scalar (returns float) or an array (returns ndarray).
    Strictly increasing in ``value`` and zero at zero.
    """
    arr = np.asarray(value, dtype=float)
    result = np.sign(arr) * np.log10(1.0 + np.abs(arr) / constant)
    if result.ndim == 0:
        return float(result)
    return result


def percentile(values: Iterable[float], p: float) -> float:
    """
    Nearest-rank percentile: ``sorted[max(0, floor(n * p) - 1)]``.

    Raises:
        ValueError: If ``values`` is empty
    """
    ordered = np.sort(np.asarray(list(values), dtype=float))
    if ordered.size == 0:
        raise ValueError("percentile of an empty sequence")
    index = max(0, int(math.floor(ordered.size * p)) - 1)
    return float(ordered[index])


def transform_value(mode: ChartScaleMode, value: float) -> float:
    """Map ``value`` into the space in which ``mode`` is linear."""
    if isinstance(mode, Linear):
        return float(value)
    if isinstance(mode, SymmetricLog):
        return symlog(value, mode.constant)
    if isinstance(mode, PercentileClipped):
        return float(value)
    raise TypeError(f"Unsupported scale mode: {mode!r}")


@dataclass(frozen=True)
class ClipAnnotation:
    """Marker for an observed extreme that lies outside the visible domain."""

    kind: str
    """Either 'peak' (above the domain) or 'low' (below it)."""

    value: float
    label: str


@dataclass(frozen=True)
class ResolvedScale:
    """A scale mode bound to the domain of a concrete set of values."""

    mode: ChartScaleMode
    domain_min: float
    domain_max: float
    ticks: Tuple[float, ...] = ()
    annotations: Tuple[ClipAnnotation, ...] = ()

    @property
    def clamps(self) -> bool:
        return isinstance(self.mode, PercentileClipped)

    @property
    def show_zero_line(self) -> bool:
        return self.domain_min < 0 < self.domain_max

    @property
    def is_degenerate(self) -> bool:
        return transform_value(self.mode, self.domain_max) == transform_value(
            self.mode, self.domain_min
        )

    def clamp(self, value: float) -> float:
        if not self.clamps:
            return float(value)
        return float(min(self.domain_max, max(self.domain_min, value)))

    def is_clipped(self, value: float) -> bool:
        return self.clamps and (value < self.domain_min or value > self.domain_max)

    def normalize(self, value: float) -> float:
        """
        Return the axis position of ``value``: 0 at domain_min, 1 at domain_max.

        Degenerate domains map every value to the midpoint.
        """
        t_min = transform_value(self.mode, self.domain_min)
        t_max = transform_value(self.mode, self.domain_max)
        if t_max == t_min:
            return DEGENERATE_POSITION
        t = transform_value(self.mode, self.clamp(value))
        return (t - t_min) / (t_max - t_min)

    def normalize_many(self, values: Sequence[float]) -> np.ndarray:
        """Vectorised :meth:`normalize`."""
        arr = np.asarray(values, dtype=float)
        if self.is_degenerate:
            return np.full(arr.shape, DEGENERATE_POSITION)
        if self.clamps:
            arr = np.clip(arr, self.domain_min, self.domain_max)
        t_min = transform_value(self.mode, self.domain_min)
        t_max = transform_value(self.mode, self.domain_max)
        if isinstance(self.mode, SymmetricLog):
            arr = symlog(arr, self.mode.constant)
        return (arr - t_min) / (t_max - t_min)


def _even_ticks(lo: float, hi: float, count: int) -> Tuple[float, ...]:
    if count < 2:
        return (lo,)
    step = (hi - lo) / (count - 1)
    return tuple(lo + i * step for i in range(count))


def _default_format(value: float) -> str:
    return f"{value:g}"


def _resolve_linear(mode: Linear, values: np.ndarray) -> ResolvedScale:
    domain_max = float(values.max())
    return ResolvedScale(
        mode=mode,
        domain_min=0.0,
        domain_max=domain_max,
        ticks=_even_ticks(0.0, domain_max, mode.tick_count),
    )


def _resolve_symlog(mode: SymmetricLog, values: np.ndarray) -> ResolvedScale:
    raw_min = float(values.min())
    raw_max = float(values.max())
    ticks = tuple(
        float(v)
        for v in mode.tick_candidates
        if raw_min - mode.tick_slack <= v <= raw_max + mode.tick_slack
    )
    return ResolvedScale(mode=mode, domain_min=raw_min, domain_max=raw_max, ticks=ticks)


def _resolve_clipped(
    mode: PercentileClipped,
    values: np.ndarray,
    format_value: Callable[[float], str],
) -> ResolvedScale:
    p_low = percentile(values, mode.low)
    p_high = percentile(values, mode.high)
    spread = p_high - p_low
    domain_min = p_low - mode.padding * spread
    domain_max = p_high + mode.padding * spread

    raw_min = float(values.min())
    raw_max = float(values.max())
    annotations: List[ClipAnnotation] = []
    if raw_max > domain_max:
        annotations.append(ClipAnnotation("peak", raw_max, f"▲ Peak: {format_value(raw_max)}"))
    if raw_min < domain_min:
        annotations.append(ClipAnnotation("low", raw_min, f"▼ Low: {format_value(raw_min)}"))

    return ResolvedScale(
        mode=mode,
        domain_min=domain_min,
        domain_max=domain_max,
        ticks=_even_ticks(domain_min, domain_max, mode.tick_count),
        annotations=tuple(annotations),
    )


def resolve_scale(
    mode: ChartScaleMode,
    values: Iterable[Optional[float]],
    format_value: Optional[Callable[[float], str]] = None,
) -> ResolvedScale:
    """
    Bind ``mode`` to the observed ``values``.

    Missing values (None or NaN) are ignored.

    Args:
        mode: Scale mode and its parameters
        values: Observed values of the plotted series
        format_value: Formatter for clip annotation labels

    Returns:
        ResolvedScale with domain, ticks and clip annotations

    Raises:
        ValueError: If no value is observed
        TypeError: If ``mode`` is not a known scale mode
    """
    observed = np.asarray(
        [v for v in values if v is not None and not math.isnan(v)], dtype=float
    )
    if observed.size == 0:
        raise ValueError("Cannot resolve a scale without observed values")

    if isinstance(mode, Linear):
        resolved = _resolve_linear(mode, observed)
    elif isinstance(mode, SymmetricLog):
        resolved = _resolve_symlog(mode, observed)
    elif isinstance(mode, PercentileClipped):
        resolved = _resolve_clipped(mode, observed, format_value or _default_format)
    else:
        raise TypeError(f"Unsupported scale mode: {mode!r}")

    logger.debug(
        "Resolved %s scale over %d values: domain [%g, %g], %d ticks, %d annotations",
        scale_mode_name(mode),
        observed.size,
        resolved.domain_min,
        resolved.domain_max,
        len(resolved.ticks),
        len(resolved.annotations),
    )
    return resolved
