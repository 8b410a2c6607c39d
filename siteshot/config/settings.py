"""
SiteShot service configuration.

Values come from environment variables prefixed with ``SITESHOT_``
(e.g. ``SITESHOT_NAVIGATION_TIMEOUT_MS=30000``) or a local ``.env`` file.
"""
from functools import lru_cache
from pathlib import Path
from typing import List, Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

SERVICE_VERSION = "1.0.0"

# Chromium flags for constrained/containerized hosts
DEFAULT_BROWSER_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-gpu",
    "--disable-dev-shm-usage",
]


class Settings(BaseSettings):
    """Runtime settings for the asset generation pipeline."""

    model_config = SettingsConfigDict(
        env_prefix="SITESHOT_",
        env_file=".env",
        extra="ignore",
    )

    # Paths
    temp_dir: Path = Path("/tmp/siteshot/jobs")

    # Capture
    viewport_width: int = Field(default=1280, gt=0)
    viewport_height: int = Field(default=720, gt=0)
    device_scale_factor: float = Field(default=1.0, gt=0)
    capture_mode: Literal["viewport", "full_page"] = "viewport"
    navigation_timeout_ms: int = Field(default=60000, gt=0)
    settle_delay_ms: int = Field(default=2000, ge=0)
    browser_args: List[str] = Field(default_factory=lambda: list(DEFAULT_BROWSER_ARGS))

    # Collage
    canvas_width: int = Field(default=1080, gt=0)
    canvas_height: int = Field(default=1920, gt=0)

    # Video
    video_width: int = Field(default=1280, gt=0)
    video_height: int = Field(default=720, gt=0)
    video_fps: int = Field(default=30, gt=0)
    video_duration_seconds: float = Field(default=10.0, gt=0)
    video_strategy: Literal["pan", "frames"] = "pan"

    # FFmpeg
    ffmpeg_path: str = "ffmpeg"
    ffmpeg_preset: str = "ultrafast"
    ffmpeg_crf: int = Field(default=28, ge=0, le=51)
    ffmpeg_threads: int = Field(default=2, ge=0)
    ffmpeg_pix_fmt: str = "yuv420p"

    # Admission control
    memory_limit_mb: Optional[int] = Field(default=None, gt=0)
    memory_threshold: float = Field(default=0.8, gt=0, le=1)

    # Cleanup / output
    cleanup_grace_seconds: float = Field(default=0.5, ge=0)
    embed_base64: bool = True

    log_level: str = "INFO"

    @field_validator("video_width", "video_height")
    @classmethod
    def _even_dimension(cls, value: int) -> int:
        # libx264 + yuv420p needs even frame sizes
        if value % 2:
            raise ValueError("video dimensions must be even")
        return value

    @property
    def navigation_timeout_seconds(self) -> float:
        return self.navigation_timeout_ms / 1000


@lru_cache
def get_settings() -> Settings:
    """Process-wide settings instance."""
    return Settings()
