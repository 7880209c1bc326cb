"""Tests for the ONNX model manager."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from conftest import make_settings
from imageclassifier.ml.model_manager import OnnxModelManager


class TestOnnxModelManager:
    @patch("imageclassifier.ml.model_manager.hf_hub_download")
    def test_bundled_model_is_used_as_is(self, mock_download: MagicMock, tmp_path: Path) -> None:
        model_file = tmp_path / "model.onnx"
        model_file.touch()
        mgr = OnnxModelManager(make_settings(tmp_path, model_repo_id="someone/models"))

        assert mgr.ensure_model() == model_file
        mock_download.assert_not_called()

    def test_missing_model_without_repo_raises(self, tmp_path: Path) -> None:
        mgr = OnnxModelManager(make_settings(tmp_path))
        with pytest.raises(FileNotFoundError, match="model.onnx"):
            mgr.ensure_model()

    @patch("imageclassifier.ml.model_manager.hf_hub_download")
    def test_missing_model_is_downloaded(self, mock_download: MagicMock, tmp_path: Path) -> None:
        assets = tmp_path / "assets"
        mock_download.return_value = str(assets / "model.onnx")
        mgr = OnnxModelManager(make_settings(assets, model_repo_id="someone/models"))

        path = mgr.ensure_model()

        mock_download.assert_called_once_with(
            repo_id="someone/models",
            filename="model.onnx",
            local_dir=str(assets),
        )
        assert path == assets / "model.onnx"
        assert assets.is_dir()

    def test_labels_path(self, tmp_path: Path) -> None:
        mgr = OnnxModelManager(make_settings(tmp_path))
        assert mgr.labels_path() == tmp_path / "labels.txt"

    @patch("imageclassifier.ml.model_manager.InferenceSession")
    def test_open_session_uses_cpu_provider(self, mock_session_cls: MagicMock, tmp_path: Path) -> None:
        (tmp_path / "model.onnx").touch()
        mgr = OnnxModelManager(make_settings(tmp_path))

        session = mgr.open_session()

        assert session is mock_session_cls.return_value
        args, kwargs = mock_session_cls.call_args
        assert args == (str(tmp_path / "model.onnx"),)
        assert kwargs["providers"] == ["CPUExecutionProvider"]

    def test_session_options_follow_settings(self, tmp_path: Path) -> None:
        mgr = OnnxModelManager(make_settings(tmp_path, intra_op_threads=2, inter_op_threads=3))
        assert mgr._session_options.intra_op_num_threads == 2
        assert mgr._session_options.inter_op_num_threads == 3
