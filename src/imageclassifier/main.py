"""FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from imageclassifier.activity import ImageClassifierActivity
from imageclassifier.api.routes import router
from imageclassifier.config import get_settings
from imageclassifier.ui.dispatcher import KeyEventDispatcher

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan: create the activity on startup, destroy it on shutdown."""
    settings = get_settings()
    app.state.settings = settings

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    logger.info(
        "Starting image classifier (assets=%s, model=%s, button_pin=%s)",
        settings.assets_dir,
        settings.model_file,
        settings.button_pin,
    )

    activity = ImageClassifierActivity(settings)
    dispatcher = KeyEventDispatcher(activity.on_key_up, on_fault=activity.restart)
    activity.on_create(key_listener=dispatcher.post)
    app.state.activity = activity
    app.state.dispatcher = dispatcher

    yield

    logger.info("Shutting down image classifier")
    # Stop button presses before the dispatch thread goes away.
    activity.close_button()
    dispatcher.shutdown()
    activity.on_destroy()
    logger.info("Image classifier shutdown complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    application = FastAPI(
        title="Image Classifier",
        description="Photo classification kiosk triggered by a GPIO button or key injection",
        version="0.1.0",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(router)
    return application


app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)
