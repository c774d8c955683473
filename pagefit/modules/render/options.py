"""
Render options.

Raw request options are loose JSON; ``normalize_options`` turns them into an
immutable RenderOptions once, at the request boundary. Bad values fall back
to defaults instead of failing the request.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

DEFAULT_MARGIN = "10mm"
DEFAULT_DPI = 96.0
DEFAULT_FORMAT = "A4"

_TRUE_STRINGS = {"true", "1", "yes", "on"}


class OutputKind(str, Enum):
    PDF = "pdf"
    PNG = "png"

    @property
    def media_type(self) -> str:
        return "image/png" if self is OutputKind.PNG else "application/pdf"


class Orientation(str, Enum):
    PORTRAIT = "portrait"
    LANDSCAPE = "landscape"


@dataclass(frozen=True)
class RenderOptions:
    """Normalized, immutable rendering options for one request."""
    output_kind: OutputKind = OutputKind.PDF
    paper_name: str = DEFAULT_FORMAT
    orientation: Orientation = Orientation.PORTRAIT
    margin: str = DEFAULT_MARGIN
    single_page: bool = False
    manual_scale: float | None = None
    dpi: float = DEFAULT_DPI
    filename: str | None = None

    @property
    def is_image(self) -> bool:
        return self.output_kind is OutputKind.PNG


# =============================================================================
# COERCION HELPERS
# =============================================================================

def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return bool(value)


def _as_number(value: Any) -> float | None:
    """Finite float from a number or numeric string, else None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _as_margin(value: Any) -> str:
    if isinstance(value, bool) or value is None:
        return DEFAULT_MARGIN
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            return DEFAULT_MARGIN
        # Bare numbers are millimetres in the fitting math; keep the printer in step.
        return f"{value:g}mm"
    if isinstance(value, str) and value.strip():
        return value.strip()
    return DEFAULT_MARGIN


def _as_orientation(value: Any) -> Orientation:
    if isinstance(value, str) and value.strip().lower() == Orientation.LANDSCAPE.value:
        return Orientation.LANDSCAPE
    return Orientation.PORTRAIT


def _as_paper_name(value: Any) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip().upper()
    return DEFAULT_FORMAT


# =============================================================================
# NORMALIZATION
# =============================================================================

def normalize_options(raw: Mapping[str, Any] | None) -> RenderOptions:
    """
    Build RenderOptions from a request's ``options`` object.

    Recognised keys: png, format, orientation, margin, single, scale, dpi,
    filename. Unknown keys are ignored.
    """
    if not isinstance(raw, Mapping):
        raw = {}

    manual_scale = _as_number(raw.get("scale"))
    if manual_scale == 0:
        manual_scale = None

    dpi = _as_number(raw.get("dpi"))
    if dpi is None or dpi <= 0:
        dpi = DEFAULT_DPI

    filename = raw.get("filename")
    if not isinstance(filename, str) or not filename.strip():
        filename = None

    return RenderOptions(
        output_kind=OutputKind.PNG if _as_bool(raw.get("png")) else OutputKind.PDF,
        paper_name=_as_paper_name(raw.get("format")),
        orientation=_as_orientation(raw.get("orientation")),
        margin=_as_margin(raw.get("margin")),
        single_page=_as_bool(raw.get("single")),
        manual_scale=manual_scale,
        dpi=dpi,
        filename=filename.strip() if filename else None,
    )
