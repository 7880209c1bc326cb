"""Display model: a message area, an image area and a progress indicator."""

from __future__ import annotations

import io
import threading
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from PIL import Image


class Visibility(StrEnum):
    VISIBLE = "visible"
    GONE = "gone"


@dataclass(frozen=True)
class DisplaySnapshot:
    """Point-in-time copy of what is on screen."""

    message: str
    image_visibility: Visibility
    progress_visibility: Visibility
    has_image: bool


class Display:
    """Holds the three views.

    Only the dispatch thread writes; HTTP handlers read snapshots, so reads
    and writes share a lock.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._message = ""
        self._image: Image.Image | None = None
        self._image_visibility = Visibility.VISIBLE
        self._progress_visibility = Visibility.GONE

    def set_message(self, message: str) -> None:
        with self._lock:
            self._message = message

    def set_image(self, image: Image.Image) -> None:
        with self._lock:
            self._image = image.copy()

    def set_image_visibility(self, visibility: Visibility) -> None:
        with self._lock:
            self._image_visibility = visibility

    def set_progress_visibility(self, visibility: Visibility) -> None:
        with self._lock:
            self._progress_visibility = visibility

    @property
    def message(self) -> str:
        with self._lock:
            return self._message

    def snapshot(self) -> DisplaySnapshot:
        with self._lock:
            return DisplaySnapshot(
                message=self._message,
                image_visibility=self._image_visibility,
                progress_visibility=self._progress_visibility,
                has_image=self._image is not None,
            )

    def image_png(self) -> bytes | None:
        """Encode the current image as PNG, or return None when nothing is shown."""
        with self._lock:
            image = self._image
        if image is None:
            return None
        buf = io.BytesIO()
        image.save(buf, format="PNG")
        return buf.getvalue()
