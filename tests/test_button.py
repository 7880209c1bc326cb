"""Tests for the GPIO button driver, with RPi.GPIO replaced by a mock."""

from __future__ import annotations

import sys
from unittest.mock import MagicMock

import pytest

from imageclassifier.device.button import ButtonInputDriver
from imageclassifier.ui.dispatcher import KEYCODE_ENTER


@pytest.fixture()
def gpio(monkeypatch: pytest.MonkeyPatch) -> MagicMock:
    fake_gpio = MagicMock(name="RPi.GPIO")
    fake_rpi = MagicMock(name="RPi")
    fake_rpi.GPIO = fake_gpio
    monkeypatch.setitem(sys.modules, "RPi", fake_rpi)
    monkeypatch.setitem(sys.modules, "RPi.GPIO", fake_gpio)
    return fake_gpio


class TestButtonInputDriver:
    def test_register_configures_pull_up_falling_edge(self, gpio: MagicMock) -> None:
        driver = ButtonInputDriver(21, KEYCODE_ENTER, MagicMock(), bounce_ms=30)

        driver.register()

        gpio.setmode.assert_called_once_with(gpio.BCM)
        gpio.setup.assert_called_once_with(21, gpio.IN, pull_up_down=gpio.PUD_UP)
        args, kwargs = gpio.add_event_detect.call_args
        assert args == (21, gpio.FALLING)
        assert kwargs["bouncetime"] == 30
        assert driver.registered

    def test_press_emits_keycode(self, gpio: MagicMock) -> None:
        listener = MagicMock()
        driver = ButtonInputDriver(21, KEYCODE_ENTER, listener)
        driver.register()

        callback = gpio.add_event_detect.call_args.kwargs["callback"]
        callback(21)

        listener.assert_called_once_with(KEYCODE_ENTER)

    def test_close_releases_pin_once(self, gpio: MagicMock) -> None:
        driver = ButtonInputDriver(21, KEYCODE_ENTER, MagicMock())
        driver.register()

        driver.close()
        driver.close()

        gpio.remove_event_detect.assert_called_once_with(21)
        gpio.cleanup.assert_called_once_with(21)
        assert not driver.registered

    def test_close_without_register_is_noop(self) -> None:
        driver = ButtonInputDriver(21, KEYCODE_ENTER, MagicMock())
        driver.close()
        assert not driver.registered

    def test_register_propagates_gpio_errors(self, gpio: MagicMock) -> None:
        gpio.setup.side_effect = RuntimeError("No access to /dev/mem")
        driver = ButtonInputDriver(21, KEYCODE_ENTER, MagicMock())

        with pytest.raises(RuntimeError, match="/dev/mem"):
            driver.register()
        assert not driver.registered

    def test_failed_edge_detection_releases_pin(self, gpio: MagicMock) -> None:
        gpio.add_event_detect.side_effect = RuntimeError("Failed to add edge detection")
        driver = ButtonInputDriver(21, KEYCODE_ENTER, MagicMock())

        with pytest.raises(RuntimeError, match="edge detection"):
            driver.register()

        gpio.cleanup.assert_called_once_with(21)
        assert not driver.registered

    def test_register_without_library(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setitem(sys.modules, "RPi", None)
        monkeypatch.setitem(sys.modules, "RPi.GPIO", None)
        driver = ButtonInputDriver(21, KEYCODE_ENTER, MagicMock())

        with pytest.raises(ImportError):
            driver.register()
