"""Render module schemas."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ConvertRequest(BaseModel):
    """Request to render HTML to PDF or PNG."""

    model_config = ConfigDict(populate_by_name=True)

    # Typed loosely so a wrong type surfaces as MissingContentError, not a 422.
    html: Any = Field(default=None, description="HTML content to render")
    # Anything that is not an object falls back to default options.
    options: Any = Field(
        default=None,
        description="png, format, orientation, margin, single, scale, dpi, filename",
    )
    save: bool = Field(
        default=False,
        description="Persist under the output root instead of streaming bytes",
    )
    out_path: str | None = Field(
        default=None,
        alias="outPath",
        description="Path relative to the output root (save only)",
    )


class ContentSize(BaseModel):
    width: float
    height: float


class SavedArtifactResponse(BaseModel):
    """Response when the artifact was saved instead of streamed."""

    model_config = ConfigDict(populate_by_name=True)

    path: str
    filename: str
    size: int
    scale: float
    content_size: ContentSize = Field(alias="contentSize")
    paper: str
    orientation: str
