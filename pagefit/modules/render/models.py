"""Value objects produced while fitting content to paper."""

from dataclasses import dataclass

from .options import Orientation, OutputKind


@dataclass(frozen=True)
class ContentBox:
    """Natural rendered size of the loaded content, in CSS pixels."""
    width: float
    height: float

    def to_dict(self) -> dict[str, float]:
        return {"width": self.width, "height": self.height}


@dataclass(frozen=True)
class FitPlan:
    """Scale decision plus the print area it was computed against."""
    scale: float
    available_width_px: float
    available_height_px: float
    width_scale: float
    height_scale: float | None = None


@dataclass(frozen=True)
class FitResult:
    """Rendered bytes and the metadata describing how they were fitted."""
    data: bytes
    scale: float
    content_size: ContentBox
    paper: str
    orientation: Orientation
    output_kind: OutputKind
    duration_ms: int = 0

    @property
    def media_type(self) -> str:
        return self.output_kind.media_type

    @property
    def size(self) -> int:
        return len(self.data)
