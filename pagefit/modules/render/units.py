"""Unit conversion for margins: spec string -> millimetres -> pixels."""

import math
import re

# Layout reference density. The dpi option only affects PNG resolution.
CSS_DPI = 96
MM_PER_INCH = 25.4
PX_PER_MM = CSS_DPI / MM_PER_INCH

_UNIT_FACTORS = {
    "mm": 1.0,
    "cm": 10.0,
    "in": MM_PER_INCH,
}

_LEADING_NUMBER = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def _leading_float(text: str) -> float:
    match = _LEADING_NUMBER.match(text)
    if not match:
        return 0.0
    value = float(match.group(0))
    return value if math.isfinite(value) else 0.0


def parse_margin_mm(value: str | float | int | None) -> float:
    """
    Convert a margin spec to millimetres.

    ``"10mm"`` -> 10, ``"1cm"`` -> 10, ``"1in"`` -> 25.4. Numbers and strings
    without a known unit are taken as millimetres. Anything unparsable is 0.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else 0.0
    if not isinstance(value, str):
        return 0.0

    text = value.strip().lower()
    for suffix, factor in _UNIT_FACTORS.items():
        if text.endswith(suffix):
            return _leading_float(text[: -len(suffix)]) * factor
    return _leading_float(text)


def mm_to_px(mm: float) -> float:
    return mm * PX_PER_MM
