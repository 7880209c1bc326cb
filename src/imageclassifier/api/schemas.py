"""Pydantic response schemas for the image classifier API."""

from __future__ import annotations

from pydantic import BaseModel, Field


class DisplayResponse(BaseModel):
    """What the display currently shows."""

    message: str
    image_visible: bool
    progress_visible: bool
    has_image: bool
    processing: bool


class KeyEventResponse(BaseModel):
    """Outcome of an injected key-up event."""

    keycode: int
    handled: bool = Field(description="Whether the activity consumed the key")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    model: str
    labels: int
    button: bool
    processing: bool
    pending_events: int


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str
