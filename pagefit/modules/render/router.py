"""Render module routes."""

from urllib.parse import quote

from fastapi import APIRouter, Depends, Request, Response

from pagefit.shared.logging import get_logger
from .schemas import ConvertRequest, SavedArtifactResponse
from .service import RenderService, default_filename

logger = get_logger(__name__)
router = APIRouter(tags=["render"])


def content_disposition(filename: str) -> str:
    """Attachment header; non-ASCII names go in the RFC 5987 ``filename*`` form."""
    fallback = filename.encode("ascii", "replace").decode("ascii").replace('"', "")
    header = f'attachment; filename="{fallback}"'
    if fallback != filename:
        header += f"; filename*=UTF-8''{quote(filename)}"
    return header


def get_service(request: Request) -> RenderService:
    """Dependency injection: service bound to the app's shared engine."""
    state = request.app.state
    return RenderService(engine=state.fit_engine, store=state.artifact_store)


@router.post(
    "/convert",
    response_model=SavedArtifactResponse,
    responses={200: {"content": {"application/pdf": {}, "image/png": {}}}},
)
async def convert(
    req: ConvertRequest,
    service: RenderService = Depends(get_service),
) -> Response | SavedArtifactResponse:
    """
    Render HTML to PDF (default) or PNG, fitted to the requested paper.

    Streams the bytes back unless ``save`` is set, in which case the file is
    written under the output root and its location is returned as JSON.
    """
    result, options = await service.render(req)

    if req.save:
        return await service.save(result, options, req.out_path)

    filename = default_filename(options)
    return Response(
        content=result.data,
        media_type=result.media_type,
        headers={
            "Content-Disposition": content_disposition(filename),
            "Content-Length": str(result.size),
            "X-Render-Scale": f"{result.scale:.6f}",
            "X-Content-Width": f"{result.content_size.width:g}",
            "X-Content-Height": f"{result.content_size.height:g}",
            "X-Paper": result.paper,
            "X-Orientation": result.orientation.value,
        },
    )
