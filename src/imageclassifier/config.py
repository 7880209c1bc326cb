"""Environment-based configuration for the image classifier."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from IMAGECLASSIFIER_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="IMAGECLASSIFIER_",
        case_sensitive=False,
        protected_namespaces=(),
    )

    # Server
    host: str = "0.0.0.0"  # noqa: S104
    port: int = 8080
    log_level: str = "INFO"

    # Authentication (None = disabled)
    api_key: str | None = None

    # Bundled assets
    assets_dir: Path = Path("assets")
    model_file: str = "inception5h.onnx"
    labels_file: str = "imagenet_comp_graph_label_strings.txt"
    sample_photo: str = "sampledog_224x224.png"
    model_repo_id: str | None = None

    # Network structure
    input_name: str = "input"
    output_name: str = "output"
    num_classes: int = Field(default=1008, ge=1)
    image_size: int = Field(default=224, ge=1)
    image_mean: float = 117.0
    image_std: float = Field(default=1.0, gt=0.0)

    # Result selection
    max_results: int = Field(default=3, ge=1)
    confidence_threshold: float = Field(default=0.1, ge=0.0, le=1.0)

    # GPIO button (BCM numbering)
    button_pin: int = Field(default=21, ge=0)
    button_bounce_ms: int = Field(default=50, ge=0)

    # ONNX Runtime threading
    intra_op_threads: int = Field(default=0, ge=0)
    inter_op_threads: int = Field(default=1, ge=1)


def get_settings() -> Settings:
    """Create and return application settings."""
    return Settings()
