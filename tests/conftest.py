"""Shared fixtures: fake model assets, a scripted session and a sample photo."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING
from unittest.mock import MagicMock

import numpy as np
import pytest
from PIL import Image

from imageclassifier.config import Settings

if TYPE_CHECKING:
    from collections.abc import Sequence


LABELS = ["cat", "dog", "bird"]


class FakeModelManager:
    """Serves a MagicMock session whose output vector is scripted per test."""

    def __init__(self, assets_dir: Path, scores: Sequence[float]) -> None:
        self._assets_dir = assets_dir
        self.session = MagicMock(name="InferenceSession")
        self.set_scores(scores)

    def set_scores(self, scores: Sequence[float]) -> None:
        self.session.run.return_value = [np.array([scores], dtype=np.float32)]

    def ensure_model(self) -> Path:
        return self._assets_dir / "model.onnx"

    def labels_path(self) -> Path:
        return self._assets_dir / "labels.txt"

    def open_session(self) -> MagicMock:
        return self.session


def make_settings(assets_dir: Path, **overrides: object) -> Settings:
    defaults: dict[str, object] = {
        "assets_dir": assets_dir,
        "model_file": "model.onnx",
        "labels_file": "labels.txt",
        "sample_photo": "sample.png",
        "num_classes": len(LABELS),
        "button_pin": 21,
    }
    defaults.update(overrides)
    return Settings(**defaults)  # type: ignore[arg-type]


@pytest.fixture()
def assets_dir(tmp_path: Path) -> Path:
    """Assets directory with a label list and a 320x240 sample photo."""
    (tmp_path / "labels.txt").write_text("\n".join(LABELS) + "\n", encoding="utf-8")
    Image.new("RGB", (320, 240), (200, 120, 40)).save(tmp_path / "sample.png")
    return tmp_path


@pytest.fixture()
def settings(assets_dir: Path) -> Settings:
    return make_settings(assets_dir)


@pytest.fixture()
def model_manager(assets_dir: Path) -> FakeModelManager:
    return FakeModelManager(assets_dir, [0.1, 0.9, 0.0])


@pytest.fixture()
def no_button() -> MagicMock:
    """Button factory whose driver fails to register, as on a board without the button."""
    driver = MagicMock(name="ButtonInputDriver")
    driver.register.side_effect = OSError("no such GPIO")
    return MagicMock(return_value=driver)
