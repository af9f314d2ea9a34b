"""
Value formatters for map tooltips, legends and chart axes.

Every formatter is a plain ``float -> str`` function. ``make_formatter``
builds one from the mapping form used in ``configs/indicators.yaml``:

    format:
      style: percent
      label: Current Account
      decimals: 1
      suffix: " of GDP"
"""

import math
from decimal import ROUND_HALF_UP, Context, Decimal
from functools import partial
from typing import Any, Callable, Dict, Mapping

from .buckets import ScaleConfigError


Formatter = Callable[[float], str]

_ROUNDING_CONTEXT = Context(prec=400, rounding=ROUND_HALF_UP)


def fixed(value: float, decimals: int = 0, grouped: bool = False) -> str:
    """
    Format ``value`` with exactly ``decimals`` fraction digits, rounding ties
    away from zero (2.5 -> "3", 1.25 -> "1.3") on the exact binary value.

    Args:
        value: Number to format
        decimals: Fraction digits
        grouped: Insert thousands separators
    """
    pattern = f"{',' if grouped else ''}.{decimals}f"
    if not math.isfinite(value):
        return format(value, pattern)
    if value == 0:
        value = 0.0
    rounded = Decimal(value).quantize(Decimal(1).scaleb(-decimals), context=_ROUNDING_CONTEXT)
    return format(rounded, pattern)


def format_grouped(value: float, max_decimals: int = 3) -> str:
    """Thousands-grouped number with up to ``max_decimals`` fraction digits."""
    text = fixed(value, max_decimals, grouped=True)
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def format_currency_compact(value: float) -> str:
    """$1.00T / $500B / $45M / $950."""
    magnitude = abs(value)
    if magnitude >= 1e12:
        return f"${fixed(value / 1e12, 2)}T"
    if magnitude >= 1e9:
        return f"${fixed(value / 1e9)}B"
    if magnitude >= 1e6:
        return f"${fixed(value / 1e6)}M"
    return f"${fixed(value, grouped=True)}"


def format_currency(value: float) -> str:
    """Whole dollars with thousands separators."""
    return f"${fixed(value, grouped=True)}"


def format_currency_k(value: float) -> str:
    """$1.2K above a thousand, whole dollars below."""
    if value >= 1000:
        return f"${fixed(value / 1000, 1)}K"
    return f"${fixed(value)}"


def format_percent(value: float, decimals: int = 1, suffix: str = "") -> str:
    return f"{fixed(value, decimals)}%{suffix}"


def format_percent_magnitude(value: float) -> str:
    """Percent with precision dropping as magnitude grows (2.5%, 150%, 2K%)."""
    magnitude = abs(value)
    if magnitude >= 1000:
        return f"{fixed(value / 1000)}K%"
    if magnitude >= 100:
        return f"{fixed(value)}%"
    return f"{fixed(value, 1)}%"


def format_headcount(value: float) -> str:
    """1.23M / 450K / 800."""
    if value >= 1_000_000:
        return f"{fixed(value / 1_000_000, 2)}M"
    if value >= 1_000:
        return f"{fixed(value / 1_000)}K"
    return fixed(value)


def format_capacity(value: float, unit: str = "MW") -> str:
    """12.3k MW above a thousand units, grouped units below."""
    if value >= 1000:
        return f"{fixed(value / 1000, 1)}k {unit}"
    return f"{format_grouped(value)} {unit}"


def labelled(label: str, formatter: Formatter) -> Formatter:
    """Wrap ``formatter`` so its output reads '<label>: <value>'."""

    def _format(value: float) -> str:
        return f"{label}: {formatter(value)}"

    return _format


FORMATTER_STYLES: Dict[str, Callable[..., str]] = {
    "currency_compact": format_currency_compact,
    "currency": format_currency,
    "currency_k": format_currency_k,
    "percent": format_percent,
    "percent_magnitude": format_percent_magnitude,
    "headcount": format_headcount,
    "grouped": format_grouped,
    "capacity": format_capacity,
}

# Extra keys each style accepts besides 'style' and 'label'.
_STYLE_OPTIONS = {
    "percent": ("decimals", "suffix"),
    "grouped": ("max_decimals",),
    "capacity": ("unit",),
}


def make_formatter(declaration: Mapping[str, Any]) -> Formatter:
    """
    Build a formatter from its configuration mapping.

    Args:
        declaration: Mapping with a 'style' key (see FORMATTER_STYLES), an optional
                     'label' prefix and style-specific options

    Raises:
        ScaleConfigError: If the style is unknown or an option doesn't apply
    """
    options = dict(declaration)
    style = options.pop("style", None)
    label = options.pop("label", None)

    if style not in FORMATTER_STYLES:
        raise ScaleConfigError(
            f"Unknown format style '{style}'. Available styles: {', '.join(FORMATTER_STYLES)}"
        )

    allowed = _STYLE_OPTIONS.get(style, ())
    unexpected = [key for key in options if key not in allowed]
    if unexpected:
        raise ScaleConfigError(f"Format style '{style}' does not accept {unexpected}")

    formatter: Formatter = FORMATTER_STYLES[style]
    if options:
        formatter = partial(formatter, **options)
    if label:
        formatter = labelled(label, formatter)
    return formatter
