"""Inference interface and result helpers for the image classifier.

``InferenceInterface`` wraps an ONNX Runtime session behind a
feed / run / fetch protocol: inputs are staged by name, one forward pass is
executed, and outputs are read back as flat float vectors.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

import numpy as np

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from numpy.typing import NDArray

logger = logging.getLogger(__name__)

MAX_BEST_RESULTS: int = 3
RESULT_CONFIDENCE_THRESHOLD: float = 0.1
UNKNOWN_LABEL: str = "unknown"


@dataclass(frozen=True)
class Recognition:
    """A single classification prediction."""

    label: str
    confidence: float


class Session(Protocol):
    """The subset of ``onnxruntime.InferenceSession`` used here."""

    def run(self, output_names: list[str] | None, input_feed: dict[str, object]) -> list[object]: ...


class InferenceInterface:
    """Stages named inputs, runs the session once, and serves fetched outputs."""

    def __init__(self, session: Session) -> None:
        self._session: Session | None = session
        self._feeds: dict[str, NDArray[np.float32]] = {}
        self._outputs: dict[str, NDArray[np.float32]] = {}

    def feed(self, input_name: str, values: NDArray[np.float32], dims: Sequence[int]) -> None:
        """Stage ``values`` reshaped to ``dims`` under ``input_name``."""
        self._feeds[input_name] = np.asarray(values, dtype=np.float32).reshape(tuple(dims))

    def run(self, output_names: Sequence[str]) -> None:
        """Execute one forward pass with the staged inputs."""
        session = self._require_session()
        names = list(output_names)
        results = session.run(names, dict(self._feeds))
        self._outputs = {name: np.asarray(value, dtype=np.float32) for name, value in zip(names, results)}
        self._feeds.clear()

    def fetch(self, output_name: str, size: int) -> NDArray[np.float32]:
        """Return exactly ``size`` values of a fetched output, zero-padded if short.

        Raises:
            RuntimeError: If ``output_name`` was not produced by the last run.
        """
        try:
            flat = self._outputs[output_name].reshape(-1)
        except KeyError:
            raise RuntimeError(f"Output '{output_name}' not available; call run() first") from None
        out = np.zeros(size, dtype=np.float32)
        count = min(size, flat.size)
        out[:count] = flat[:count]
        return out

    def close(self) -> None:
        """Release the session. Safe to call more than once."""
        self._session = None
        self._feeds.clear()
        self._outputs.clear()

    @property
    def closed(self) -> bool:
        return self._session is None

    def _require_session(self) -> Session:
        if self._session is None:
            raise RuntimeError("Inference interface is closed")
        return self._session


def read_labels(path: Path) -> list[str]:
    """Read one label per line, keeping blank lines so indices stay aligned."""
    with path.open(encoding="utf-8") as fh:
        labels = [line.rstrip("\r\n") for line in fh]
    logger.debug("Read %d labels from %s", len(labels), path)
    return labels


def get_best_results(
    confidences: Sequence[float] | NDArray[np.float32],
    labels: Sequence[str],
    max_results: int = MAX_BEST_RESULTS,
    threshold: float = RESULT_CONFIDENCE_THRESHOLD,
) -> list[Recognition]:
    """Pair scores with labels and keep the highest ones above ``threshold``.

    Scores are compared as float32 so a score of exactly ``threshold`` is
    dropped. Ties keep their label order.
    """
    scores = np.asarray(confidences, dtype=np.float32).reshape(-1)
    limit = np.float32(threshold)
    candidates = [
        Recognition(
            label=labels[idx] if idx < len(labels) else UNKNOWN_LABEL,
            confidence=float(score),
        )
        for idx, score in enumerate(scores)
        if score > limit
    ]
    candidates.sort(key=lambda r: r.confidence, reverse=True)
    return candidates[:max_results]


def format_results(results: Sequence[Recognition]) -> str:
    """Render recognitions as ``"label (12.3%), other (4.5%)"``."""
    if not results:
        return "Nothing recognized"
    return ", ".join(f"{r.label} ({r.confidence:.1%})" for r in results)
