"""
Typed errors surfaced to API callers.

Each error carries a stable ``code`` and the HTTP status the app maps it to.
Input problems are 4xx; rendering failures are 5xx.
"""

from typing import Any


class PagefitError(Exception):
    """Base error for the render service."""

    code = "INTERNAL_ERROR"
    http_status = 500
    retryable = False

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }


# =============================================================================
# INPUT ERRORS
# =============================================================================

class MissingContentError(PagefitError):
    """Request did not carry a non-empty HTML string."""
    code = "MISSING_CONTENT"
    http_status = 400

    def __init__(self, message: str = 'Missing "html" (string)'):
        super().__init__(message)


class InvalidPathError(PagefitError):
    """Requested artifact path escapes the output root."""
    code = "INVALID_PATH"
    http_status = 400

    def __init__(self, path: str):
        super().__init__(f"Output path not allowed: {path}", {"path": path})


class PayloadTooLargeError(PagefitError):
    code = "PAYLOAD_TOO_LARGE"
    http_status = 413

    def __init__(self, size: int, limit: int):
        super().__init__(
            f"Request body of {size} bytes exceeds limit of {limit} bytes",
            {"size": size, "limit": limit},
        )


# =============================================================================
# ACCESS ERRORS
# =============================================================================

class UnauthorizedError(PagefitError):
    code = "UNAUTHORIZED"
    http_status = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class RateLimitedError(PagefitError):
    code = "RATE_LIMITED"
    http_status = 429
    retryable = True

    def __init__(self, retry_after_seconds: int):
        super().__init__(
            "Rate limit exceeded",
            {"retry_after_seconds": retry_after_seconds},
        )
        self.retry_after_seconds = retry_after_seconds


# =============================================================================
# RENDERING ERRORS
# =============================================================================

class LoadTimeoutError(PagefitError):
    """Content did not finish loading within the configured bound."""
    code = "LOAD_TIMEOUT"
    http_status = 504
    retryable = True

    def __init__(self, timeout_ms: int):
        super().__init__(
            f"Content load exceeded {timeout_ms}ms",
            {"timeout_ms": timeout_ms},
        )


class RenderingEngineError(PagefitError):
    """The browser crashed, disconnected or produced no output."""
    code = "RENDERING_ENGINE_FAILURE"
    http_status = 502
