"""
Fit engine: load markup, measure it, fit it to paper, emit PDF or PNG.
"""

import time

from pagefit.shared.errors import MissingContentError
from pagefit.shared.logging import get_logger

from .browser import BrowserEngine
from .fitting import compute_fit, image_viewport
from .models import FitResult
from .options import Orientation, RenderOptions
from .paper import backend_format, resolve_paper
from .units import parse_margin_mm

logger = get_logger(__name__)


class FitEngine:
    """Renders one request at a time per call; safe to call concurrently."""

    def __init__(self, browser: BrowserEngine):
        self.browser = browser

    async def render(self, html: object, options: RenderOptions) -> FitResult:
        """
        Render ``html`` fitted to the paper described by ``options``.

        Raises:
            MissingContentError: html is not a non-empty string
            LoadTimeoutError: content did not load in time
            RenderingEngineError: the browser failed or produced nothing
        """
        if not isinstance(html, str) or not html:
            raise MissingContentError()

        start = time.perf_counter()

        async with self.browser.session(image=options.is_image, dpi=options.dpi) as session:
            await session.load(html)
            content = await session.measure()

            paper = resolve_paper(options.paper_name, options.orientation)
            margin_mm = parse_margin_mm(options.margin)
            plan = compute_fit(
                content,
                paper,
                margin_mm,
                single_page=options.single_page,
                manual_scale=options.manual_scale,
            )

            logger.debug(
                f"Fit {content.width:g}x{content.height:g}px onto {paper.name} "
                f"{options.orientation.value}: scale={plan.scale:.4f} "
                f"(width={plan.width_scale:.4f}, height={plan.height_scale})"
            )

            if options.is_image:
                width, height = image_viewport(plan, content, options.single_page)
                data = await session.emit_png(width, height, full_page=options.single_page)
            else:
                data = await session.emit_pdf(
                    paper_format=backend_format(options.paper_name),
                    landscape=options.orientation == Orientation.LANDSCAPE,
                    margin=options.margin,
                    scale=plan.scale,
                )

        return FitResult(
            data=data,
            scale=plan.scale,
            content_size=content,
            paper=paper.name,
            orientation=options.orientation,
            output_kind=options.output_kind,
            duration_ms=int((time.perf_counter() - start) * 1000),
        )
