"""
Content-to-page fitting.

Default regime scales content so its width fills the printable width and
lets height flow onto further pages. Single-page mode also binds the scale
to the printable height so everything lands on one sheet. A manual scale
replaces either result. Every scale leaves through ``clamp_scale``.
"""

import math

from .models import ContentBox, FitPlan
from .paper import PaperGeometry
from .units import PX_PER_MM

MIN_SCALE = 0.1
MAX_SCALE = 2.0


def clamp_scale(scale: float) -> float:
    """Clamp into the range the PDF printer accepts."""
    return min(MAX_SCALE, max(MIN_SCALE, scale))


def printable_area_px(paper: PaperGeometry, margin_mm: float) -> tuple[float, float]:
    """Width and height left inside uniform margins, floored at 1px."""
    width = max(1.0, (paper.width_mm - 2 * margin_mm) * PX_PER_MM)
    height = max(1.0, (paper.height_mm - 2 * margin_mm) * PX_PER_MM)
    return width, height


def compute_fit(
    content: ContentBox,
    paper: PaperGeometry,
    margin_mm: float,
    single_page: bool = False,
    manual_scale: float | None = None,
) -> FitPlan:
    """
    Decide the scale applied to ``content`` before emission.

    Args:
        content: Measured natural size of the content
        paper: Target paper, orientation applied
        margin_mm: Uniform margin on all four sides
        single_page: Fit both width and height onto one page
        manual_scale: Caller override; replaces the computed scale

    Returns:
        FitPlan with the final, clamped scale
    """
    available_width, available_height = printable_area_px(paper, margin_mm)

    # Degenerate (empty) content measures as 1px so the ratio stays finite.
    width_scale = available_width / max(1.0, content.width)
    scale = width_scale

    height_scale = None
    if single_page:
        height_scale = available_height / max(1.0, content.height)
        scale = min(scale, height_scale)

    if manual_scale is not None:
        scale = manual_scale

    return FitPlan(
        scale=clamp_scale(scale),
        available_width_px=available_width,
        available_height_px=available_height,
        width_scale=width_scale,
        height_scale=height_scale,
    )


def image_viewport(plan: FitPlan, content: ContentBox, single_page: bool) -> tuple[int, int]:
    """
    Viewport for PNG capture.

    Single page: the whole scaled content. Otherwise one page worth of
    printable height; anything below is clipped.
    """
    width = max(1, math.ceil(content.width * plan.scale))
    if single_page:
        height = max(1, math.ceil(content.height * plan.scale))
    else:
        height = max(1, math.ceil(plan.available_height_px))
    return width, height
