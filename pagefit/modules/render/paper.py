"""
Paper geometry table.

One table drives both the fitting math and the format string handed to the
browser's PDF printer, so an unknown name lands on A4 in both places.
"""

from dataclasses import dataclass

from .options import Orientation

DEFAULT_PAPER = "A4"

# name -> (width_mm, height_mm, browser format)
PAPER_SIZES: dict[str, tuple[float, float, str]] = {
    "A4": (210, 297, "A4"),
    "A5": (148, 210, "A5"),
    "LETTER": (216, 279, "Letter"),
    "LEGAL": (216, 356, "Legal"),
}


@dataclass(frozen=True)
class PaperGeometry:
    """Physical page size in millimetres, orientation already applied."""
    name: str
    width_mm: float
    height_mm: float
    orientation: Orientation = Orientation.PORTRAIT

    def swapped(self) -> "PaperGeometry":
        other = (
            Orientation.PORTRAIT
            if self.orientation == Orientation.LANDSCAPE
            else Orientation.LANDSCAPE
        )
        return PaperGeometry(self.name, self.height_mm, self.width_mm, other)


def canonical_paper_name(name: str | None) -> str:
    """Upper-cased table key for ``name``; unknown names map to A4."""
    key = (name or "").strip().upper()
    return key if key in PAPER_SIZES else DEFAULT_PAPER


def resolve_paper(name: str | None, orientation: Orientation) -> PaperGeometry:
    key = canonical_paper_name(name)
    width, height, _ = PAPER_SIZES[key]
    geometry = PaperGeometry(key, width, height, Orientation.PORTRAIT)
    if orientation == Orientation.LANDSCAPE:
        geometry = geometry.swapped()
    return geometry


def backend_format(name: str | None) -> str:
    """Format string for ``page.pdf(format=...)``."""
    return PAPER_SIZES[canonical_paper_name(name)][2]
