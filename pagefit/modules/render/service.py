"""Render service - normalizes a convert request, renders it, optionally persists it."""

import asyncio
import time

from pagefit.infra.storage import ArtifactStore
from pagefit.shared.logging import get_logger, get_request_context

from .engine import FitEngine
from .models import FitResult
from .options import RenderOptions, normalize_options
from .schemas import ContentSize, ConvertRequest, SavedArtifactResponse

logger = get_logger(__name__)


def default_filename(options: RenderOptions) -> str:
    """Caller's filename, else ``output-<epoch ms>.<ext>``."""
    if options.filename:
        return options.filename
    return f"output-{int(time.time() * 1000)}.{options.output_kind.value}"


class RenderService:
    """Orchestrates one convert request."""

    def __init__(self, engine: FitEngine, store: ArtifactStore):
        self.engine = engine
        self.store = store

    async def render(self, request: ConvertRequest) -> tuple[FitResult, RenderOptions]:
        options = normalize_options(request.options)
        result = await self.engine.render(request.html, options)

        ctx = get_request_context()
        logger.info(
            f"Convert request completed: auth={ctx.auth_id if ctx else 'anon'} "
            f"size={result.size} mode={options.output_kind.value} "
            f"scale={result.scale:.4f} duration={result.duration_ms}ms"
        )
        return result, options

    async def save(
        self,
        result: FitResult,
        options: RenderOptions,
        out_path: str | None = None,
    ) -> SavedArtifactResponse:
        """Write the result under the output root and describe where it went."""
        relative = out_path or default_filename(options)
        stored = await asyncio.to_thread(self.store.save, result.data, relative)

        return SavedArtifactResponse(
            path=str(stored.path),
            filename=stored.filename,
            size=stored.size,
            scale=result.scale,
            content_size=ContentSize(**result.content_size.to_dict()),
            paper=result.paper,
            orientation=result.orientation.value,
        )
