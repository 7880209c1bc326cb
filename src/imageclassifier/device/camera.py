"""Image source: camera placeholder plus the bundled sample photo."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from imageclassifier.ml.preprocessing import decode_image

if TYPE_CHECKING:
    from pathlib import Path

    from PIL import Image

logger = logging.getLogger(__name__)


class Camera:
    """Camera collaborator. Capture is not supported; photos come from assets."""

    def __init__(self, sample_photo: Path) -> None:
        self._sample_photo = sample_photo

    def init(self) -> None:
        # No camera support: the static sample photo is the only source.
        pass

    def close(self) -> None:
        pass

    def static_bitmap(self) -> Image.Image:
        logger.debug("Using sample photo in %s", self._sample_photo)
        return decode_image(self._sample_photo)
