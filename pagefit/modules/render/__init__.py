"""Render module - HTML to PDF/PNG fitted to paper, using Playwright."""

from .browser import BrowserEngine
from .engine import FitEngine
from .router import router
from .schemas import ConvertRequest, SavedArtifactResponse
from .service import RenderService

__all__ = [
    "router",
    "BrowserEngine",
    "FitEngine",
    "RenderService",
    "ConvertRequest",
    "SavedArtifactResponse",
]
