"""Model manager: resolve bundled assets and open ONNX sessions.

The network file and its label list ship as read-only assets next to the
application. When the network file is missing and a HuggingFace repository
is configured, it is fetched once into the assets directory.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from huggingface_hub import hf_hub_download
from onnxruntime import InferenceSession, SessionOptions
from onnxruntime.capi.onnxruntime_pybind11_state import ExecutionMode

if TYPE_CHECKING:
    from imageclassifier.config import Settings

logger = logging.getLogger(__name__)


class ModelManager(Protocol):
    """Protocol for model asset management."""

    def ensure_model(self) -> Path:
        """Return the local path of the network file, fetching it if needed."""
        ...

    def labels_path(self) -> Path:
        """Return the local path of the labels file."""
        ...

    def open_session(self) -> InferenceSession:
        """Create a new InferenceSession for the network file."""
        ...


class OnnxModelManager:
    """Locates bundled assets and creates CPU inference sessions."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._assets_dir = Path(settings.assets_dir)
        self._session_options = self._build_session_options()

    # -- Public API ---------------------------------------------------------

    def ensure_model(self) -> Path:
        """Return the bundled network file, downloading it when a repo is configured."""
        path = self._assets_dir / self._settings.model_file
        if path.exists():
            return path

        repo_id = self._settings.model_repo_id
        if repo_id is None:
            raise FileNotFoundError(f"Model asset not found: {path}")

        self._assets_dir.mkdir(parents=True, exist_ok=True)
        downloaded = Path(
            hf_hub_download(
                repo_id=repo_id,
                filename=self._settings.model_file,
                local_dir=str(self._assets_dir),
            )
        )
        logger.info("Downloaded %s to %s", self._settings.model_file, downloaded)
        return downloaded

    def labels_path(self) -> Path:
        return self._assets_dir / self._settings.labels_file

    def open_session(self) -> InferenceSession:
        """Create an InferenceSession for the network file."""
        model_path = self.ensure_model()
        session = InferenceSession(
            str(model_path),
            sess_options=self._session_options,
            providers=["CPUExecutionProvider"],
        )
        logger.info("Loaded session for %s", model_path.name)
        return session

    # -- Internal -----------------------------------------------------------

    def _build_session_options(self) -> SessionOptions:
        opts = SessionOptions()
        opts.intra_op_num_threads = self._settings.intra_op_threads
        opts.inter_op_num_threads = self._settings.inter_op_threads
        opts.execution_mode = ExecutionMode.ORT_SEQUENTIAL
        opts.enable_mem_pattern = True
        opts.enable_mem_reuse = True
        return opts
