"""Pydantic response models for the AdStudio relay API.

The generation endpoint takes a multipart body, so its inputs are declared
as ``Form``/``File`` parameters on the route.  These models describe the
JSON it returns, and FastAPI uses them for OpenAPI documentation.

Models
------
GenerateAdsResponse
    Success body of ``POST /api/generate-ads``.
ErrorResponse
    Failure body shared by every endpoint.  It keeps the ``success`` field
    of the success shape so clients can branch on one key.
HealthResponse
    Body of ``GET /health``.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class GenerateAdsResponse(BaseModel):
    """Response body for a successful ``POST /api/generate-ads``.

    Attributes:
        success: Always ``True``.
        images: Root-relative URLs of the generated images, in API order.
        count: Number of entries in ``images``.
    """

    success: Literal[True] = True
    images: list[str] = Field(
        default_factory=list,
        description="Root-relative URLs such as '/results/<uuid>.png'.",
    )
    count: int = Field(
        default=0,
        description="Number of generated images.",
    )


class ErrorResponse(BaseModel):
    """Response body for any failed request.

    Attributes:
        success: Always ``False``.
        message: Human-readable description of the failure.
    """

    success: Literal[False] = False
    message: str = Field(
        ...,
        description="Human-readable failure description.",
    )


class HealthResponse(BaseModel):
    """Response body for ``GET /health``."""

    status: str = "ok"
