"""API route definitions.

Reading the display and health is open. Injecting keys drives the kiosk, so
it requires the configured API key when one is set.
"""

from __future__ import annotations

import secrets
from typing import TYPE_CHECKING, Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from imageclassifier.api.schemas import (
    DisplayResponse,
    ErrorResponse,
    HealthResponse,
    KeyEventResponse,
)
from imageclassifier.ui.display import Visibility

if TYPE_CHECKING:
    from imageclassifier.activity import ImageClassifierActivity
    from imageclassifier.config import Settings
    from imageclassifier.ui.dispatcher import KeyEventDispatcher

router = APIRouter(prefix="/api/v1")

_injection_bearer = HTTPBearer(auto_error=False, description="IMAGECLASSIFIER_API_KEY")


def _get_settings(request: Request) -> Settings:
    settings: Settings = request.app.state.settings
    return settings


def _get_activity(request: Request) -> ImageClassifierActivity:
    activity: ImageClassifierActivity = request.app.state.activity
    return activity


def _get_dispatcher(request: Request) -> KeyEventDispatcher:
    dispatcher: KeyEventDispatcher = request.app.state.dispatcher
    return dispatcher


async def authorize_key_injection(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_injection_bearer)],
) -> None:
    """Reject key injection without 'Authorization: Bearer <api_key>' when a key is configured."""
    expected = _get_settings(request).api_key
    if expected is None:
        return
    supplied = credentials.credentials if credentials is not None else ""
    if not secrets.compare_digest(supplied.encode(), expected.encode()):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Key injection requires a valid API key",
            headers={"WWW-Authenticate": "Bearer"},
        )


@router.post(
    "/keys/{keycode}",
    response_model=KeyEventResponse,
    responses={status.HTTP_401_UNAUTHORIZED: {"model": ErrorResponse}},
    dependencies=[Depends(authorize_key_injection)],
    summary="Inject a key-up event",
)
async def inject_key(keycode: int, request: Request) -> KeyEventResponse:
    """Deliver a key-up event to the activity, like a keyboard press.

    ``66`` (Enter) starts photo recognition.
    """
    dispatcher = _get_dispatcher(request)
    handled = await dispatcher.dispatch(keycode)
    return KeyEventResponse(keycode=keycode, handled=handled)


@router.get(
    "/display",
    response_model=DisplayResponse,
    summary="Current display contents",
)
async def get_display(request: Request) -> DisplayResponse:
    activity = _get_activity(request)
    snap = activity.display.snapshot()
    return DisplayResponse(
        message=snap.message,
        image_visible=snap.image_visibility is Visibility.VISIBLE,
        progress_visible=snap.progress_visibility is Visibility.VISIBLE,
        has_image=snap.has_image,
        processing=activity.processing,
    )


@router.get(
    "/display/image",
    responses={
        status.HTTP_200_OK: {"content": {"image/png": {}}},
        status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
    },
    summary="Image currently shown",
)
async def get_display_image(request: Request) -> Response:
    """Return the displayed image as PNG."""
    png = _get_activity(request).display.image_png()
    if png is None:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"detail": "No image displayed yet"},
        )
    return Response(content=png, media_type="image/png")


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={status.HTTP_503_SERVICE_UNAVAILABLE: {"model": HealthResponse}},
    summary="Health check",
)
async def health(request: Request) -> HealthResponse | JSONResponse:
    """Return service health; 503 while the activity is down or being recreated."""
    settings = _get_settings(request)
    activity = _get_activity(request)
    body = HealthResponse(
        status="ok" if activity.ready else "unavailable",
        model=settings.model_file,
        labels=len(activity.labels),
        button=activity.button_driver is not None,
        processing=activity.processing,
        pending_events=_get_dispatcher(request).pending,
    )
    if not activity.ready:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=body.model_dump(),
        )
    return body
