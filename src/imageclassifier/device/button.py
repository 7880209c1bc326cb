"""GPIO push button that synthesizes key events.

The button is wired between a BCM pin and ground, so the pin reads low while
pressed. Each press is reported to the listener as a key-up of the configured
keycode, exactly like a keyboard would.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)


class ButtonInputDriver:
    """Registers a pressed-when-low button through RPi.GPIO."""

    def __init__(
        self,
        pin: int,
        keycode: int,
        listener: Callable[[int], object],
        bounce_ms: int = 50,
    ) -> None:
        self._pin = pin
        self._keycode = keycode
        self._listener = listener
        self._bounce_ms = bounce_ms
        self._gpio = None

    @property
    def pin(self) -> int:
        return self._pin

    @property
    def registered(self) -> bool:
        return self._gpio is not None

    def register(self) -> None:
        """Configure the pin and start edge detection.

        Raises:
            ImportError: If RPi.GPIO is not installed.
            RuntimeError: If the board is not a Raspberry Pi or access is denied.
            OSError: If the pin cannot be opened.
        """
        import RPi.GPIO as GPIO  # noqa: N814

        GPIO.setmode(GPIO.BCM)
        GPIO.setup(self._pin, GPIO.IN, pull_up_down=GPIO.PUD_UP)
        try:
            GPIO.add_event_detect(
                self._pin,
                GPIO.FALLING,
                callback=self._on_edge,
                bouncetime=self._bounce_ms,
            )
        except Exception:
            GPIO.cleanup(self._pin)
            raise
        self._gpio = GPIO
        logger.info("Button registered on GPIO %d (keycode=%d)", self._pin, self._keycode)

    def close(self) -> None:
        """Stop edge detection and release the pin."""
        gpio = self._gpio
        if gpio is None:
            return
        self._gpio = None
        gpio.remove_event_detect(self._pin)
        gpio.cleanup(self._pin)

    def _on_edge(self, channel: int) -> None:
        logger.debug("Button press on GPIO %d", channel)
        self._listener(self._keycode)
