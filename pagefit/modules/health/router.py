"""Health check route."""

import os
from typing import Any

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
async def health(request: Request) -> dict[str, Any]:
    """Liveness plus a summary of the access and admission configuration."""
    state = request.app.state
    return {
        "ok": True,
        "pid": os.getpid(),
        "apiAuthFileInUse": state.api_keys.file_in_use,
        "browser_started": state.browser.started,
        "rate_limit_window_ms": state.rate_limiter.window_ms,
        "rate_limit_max": state.rate_limiter.max_requests,
    }
