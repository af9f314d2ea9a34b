"""
Threshold Bucket Module

Maps indicator values to discrete choropleth colors.

Thresholds split the number line into ``len(thresholds) + 1`` buckets
``(-inf, t0], (t0, t1], ..., (t_last, inf)``. A value exactly equal to a
threshold belongs to the lower bucket.
"""

import math
from bisect import bisect_left
from typing import Callable, List, Optional, Sequence, Tuple


NO_DATA_COLOR = "#2a2a3d"
"""Fill for entities without a value; never used as a bucket color."""


class ScaleConfigError(ValueError):
    """A threshold/color/format configuration is malformed."""


def validate_buckets(thresholds: Sequence[float], colors: Sequence[str]) -> None:
    """
    Check that ``thresholds`` and ``colors`` describe a valid bucket scale.

    Raises:
        ScaleConfigError: If colors don't number len(thresholds) + 1, if
            thresholds are not strictly ascending, or if a bucket color
            collides with NO_DATA_COLOR
    """
    if len(colors) != len(thresholds) + 1:
        raise ScaleConfigError(
            f"Expected {len(thresholds) + 1} colors for {len(thresholds)} thresholds, "
            f"got {len(colors)}"
        )
    for lower, upper in zip(thresholds, thresholds[1:]):
        if not lower < upper:
            raise ScaleConfigError(f"Thresholds must be strictly ascending: {list(thresholds)}")
    if any(c.lower() == NO_DATA_COLOR for c in colors):
        raise ScaleConfigError(f"Bucket colors must not reuse the no-data color {NO_DATA_COLOR}")


def bucket_index(value: float, thresholds: Sequence[float]) -> int:
    """Return the index of the first threshold >= ``value`` (len(thresholds) if none)."""
    return bisect_left(thresholds, value)


def bucket_color(value: float, thresholds: Sequence[float], colors: Sequence[str]) -> str:
    """
    Return the color of the bucket containing ``value``.

    Args:
        value: Indicator value (missing values must be handled by the caller)
        thresholds: Strictly ascending bucket boundaries
        colors: One color per bucket, len(thresholds) + 1 of them

    Returns:
        ``colors[i]`` for the first ``i`` with ``value <= thresholds[i]``,
        otherwise the last color

    Examples:
        >>> bucket_color(0, [-5, 0, 2], ["a", "b", "c", "d"])
        'b'
        >>> bucket_color(2.01, [-5, 0, 2], ["a", "b", "c", "d"])
        'd'
    """
    validate_buckets(thresholds, colors)
    return colors[bucket_index(value, thresholds)]


def is_missing(value: Optional[float]) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value))


def fill_color(
    value: Optional[float],
    thresholds: Sequence[float],
    colors: Sequence[str],
) -> str:
    """Like :func:`bucket_color`, but renders missing values with NO_DATA_COLOR."""
    if is_missing(value):
        return NO_DATA_COLOR
    return bucket_color(value, thresholds, colors)


def legend_entries(
    thresholds: Sequence[float],
    colors: Sequence[str],
    format_value: Callable[[float], str] = str,
) -> List[Tuple[str, str]]:
    """
    Return ``(label, color)`` pairs describing every bucket, lowest first.

    Labels read "≤ t0", "t0 – t1", ..., "> t_last".
    """
    validate_buckets(thresholds, colors)
    if not thresholds:
        return [("All values", colors[0])]

    labels = [f"≤ {format_value(thresholds[0])}"]
    for lower, upper in zip(thresholds, thresholds[1:]):
        labels.append(f"{format_value(lower)} – {format_value(upper)}")
    labels.append(f"> {format_value(thresholds[-1])}")
    return list(zip(labels, colors))
