"""Lifecycle controller and presentation logic for the image classifier.

``ImageClassifierActivity`` owns the camera, the classifier and the GPIO
button for the lifetime of the application. A key-up of ``KEYCODE_ENTER``
runs photo -> classification -> display synchronously on the calling thread.
"""

from __future__ import annotations

import logging
from enum import StrEnum
from typing import TYPE_CHECKING

from imageclassifier.device.button import ButtonInputDriver
from imageclassifier.device.camera import Camera
from imageclassifier.ml.image_classifier import (
    InferenceInterface,
    format_results,
    get_best_results,
    read_labels,
)
from imageclassifier.ml.model_manager import OnnxModelManager
from imageclassifier.ml.preprocessing import get_pixels, network_structure
from imageclassifier.ui.dispatcher import KEYCODE_ENTER
from imageclassifier.ui.display import Display, Visibility

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from PIL import Image

    from imageclassifier.config import Settings
    from imageclassifier.ml.image_classifier import Recognition
    from imageclassifier.ml.model_manager import ModelManager

logger = logging.getLogger(__name__)

MSG_STILL_PROCESSING = "Still processing, please wait"
MSG_RUNNING = "Running photo recognition"


class ProcessingState(StrEnum):
    IDLE = "idle"
    PROCESSING = "processing"


class ImageClassifierActivity:
    """Wires the image source, the classifier and the display together."""

    def __init__(
        self,
        settings: Settings,
        *,
        display: Display | None = None,
        model_manager: ModelManager | None = None,
        camera: Camera | None = None,
        button_factory: Callable[..., ButtonInputDriver] = ButtonInputDriver,
    ) -> None:
        self._settings = settings
        self._model_manager = model_manager if model_manager is not None else OnnxModelManager(settings)
        self._camera = camera if camera is not None else Camera(settings.assets_dir / settings.sample_photo)
        self._button_factory = button_factory

        self.display = display if display is not None else Display()
        self.state = ProcessingState.IDLE
        self.labels: list[str] = []
        self.inference_interface: InferenceInterface | None = None
        self.button_driver: ButtonInputDriver | None = None
        self.ready = False
        self._key_listener: Callable[[int], object] | None = None

    @property
    def processing(self) -> bool:
        return self.state is ProcessingState.PROCESSING

    # -- Lifecycle ----------------------------------------------------------

    def on_create(self, key_listener: Callable[[int], object] | None = None) -> None:
        """Initialize layout, camera, classifier and button, in that order.

        Args:
            key_listener: Receives keycodes from the GPIO button. Defaults to
                ``on_key_up`` on the button's own thread.
        """
        self._key_listener = key_listener
        self.state = ProcessingState.IDLE
        self.init_layout()
        self.init_camera()
        self.init_classifier()
        self.init_button(key_listener or self.on_key_up)
        self.ready = True
        logger.info("READY")

    def on_destroy(self) -> None:
        """Release classifier, camera and button; failures never stop the next release."""
        self.ready = False
        for name, release in (
            ("classifier", self.destroy_classifier),
            ("camera", self.close_camera),
            ("button", self.close_button),
        ):
            try:
                release()
            except Exception:
                logger.debug("Ignoring error while releasing %s", name, exc_info=True)

    def restart(self) -> None:
        """Tear down and recreate every resource after a fault in the photo pipeline.

        The activity comes back Idle with the same key listener. If
        recreation fails, the activity stays not ready and the error propagates.
        """
        logger.warning("Restarting activity after pipeline fault")
        self.on_destroy()
        self.on_create(self._key_listener)

    def init_layout(self) -> None:
        self.display.set_message("")
        self.display.set_image_visibility(Visibility.VISIBLE)
        self.display.set_progress_visibility(Visibility.GONE)

    def init_camera(self) -> None:
        self._camera.init()

    def close_camera(self) -> None:
        self._camera.close()

    def init_classifier(self) -> None:
        """Load the network session and the label list."""
        session = self._model_manager.open_session()
        self.inference_interface = InferenceInterface(session)
        self.labels = read_labels(self._model_manager.labels_path())

    def destroy_classifier(self) -> None:
        if self.inference_interface is not None:
            self.inference_interface.close()

    def init_button(self, key_listener: Callable[[int], object]) -> None:
        """Register the GPIO button that sends ``KEYCODE_ENTER``.

        Without a button, recognition can still be triggered by posting the
        key through the HTTP key injection route.
        """
        try:
            driver = self._button_factory(
                self._settings.button_pin,
                KEYCODE_ENTER,
                key_listener,
                bounce_ms=self._settings.button_bounce_ms,
            )
            driver.register()
        except (ImportError, RuntimeError, OSError) as exc:
            logger.warning("Cannot find button. Ignoring push button. Use a keyboard instead. (%s)", exc)
            return
        self.button_driver = driver

    def close_button(self) -> None:
        driver = self.button_driver
        if driver is None:
            return
        self.button_driver = None
        driver.close()

    # -- Photo pipeline -----------------------------------------------------

    def load_photo(self) -> None:
        # Camera capture is not supported; always use the bundled sample.
        bitmap = self._camera.static_bitmap()
        self.on_photo_ready(bitmap)

    def on_photo_ready(self, bitmap: Image.Image) -> None:
        logger.debug("Photo ready")
        self.do_recognize(bitmap)

    def do_recognize(self, image: Image.Image) -> None:
        """Classify ``image`` and hand the best results to ``on_photo_recognition_ready``.

        The image can be of any size; it is resized to the network input.
        """
        settings = self._settings
        interface = self.inference_interface
        if interface is None:
            raise RuntimeError("Classifier not initialized")

        self.display.set_image(image)
        logger.debug("Starting recognition")
        pixels = get_pixels(image, settings.image_size, settings.image_mean, settings.image_std)

        interface.feed(settings.input_name, pixels, network_structure(settings.image_size))
        interface.run([settings.output_name])
        outputs = interface.fetch(settings.output_name, settings.num_classes)
        logger.debug("Recognition finished")

        self.on_photo_recognition_ready(
            get_best_results(
                outputs,
                self.labels,
                max_results=settings.max_results,
                threshold=settings.confidence_threshold,
            )
        )

    def on_photo_recognition_ready(self, results: Sequence[Recognition]) -> None:
        self.display_message(f"RESULT: {format_results(results)}")
        self.state = ProcessingState.IDLE
        self.hide_progress()

    # -- Presentation -------------------------------------------------------

    def on_key_up(self, keycode: int) -> bool:
        """Handle a key-up event. Returns True when the key was consumed."""
        if keycode != KEYCODE_ENTER:
            return False
        if self.processing:
            self.display_message(MSG_STILL_PROCESSING)
            return True
        self.show_progress()
        self.display_message(MSG_RUNNING)
        self.state = ProcessingState.PROCESSING
        self.load_photo()
        return True

    def show_progress(self) -> None:
        self.display.set_image_visibility(Visibility.GONE)
        self.display.set_progress_visibility(Visibility.VISIBLE)

    def hide_progress(self) -> None:
        self.display.set_progress_visibility(Visibility.GONE)
        self.display.set_image_visibility(Visibility.VISIBLE)

    def display_message(self, message: str) -> None:
        self.display.set_message(message)
