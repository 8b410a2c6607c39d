"""
Video Renderer Base Classes
===========================
Shared VideoSpec and abstract interface for the scrolling-video strategies.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from ..capture import CaptureRequest, CapturedImage

ProgressCallback = Callable[[float], None]


class VideoStrategy(str, Enum):
    """Supported ways of producing the scroll video."""
    PAN = "pan"  # moving crop over one full-page screenshot
    FRAMES = "frames"  # re-rendered frame per scroll step


@dataclass(frozen=True)
class VideoSpec:
    width: int = 1280
    height: int = 720
    fps: int = 30
    duration_seconds: float = 10.0
    strategy: VideoStrategy = VideoStrategy.PAN

    @property
    def frame_count(self) -> int:
        return max(1, round(self.fps * self.duration_seconds))


class VideoRenderer(ABC):
    """
    Abstract base class for video strategies.

    Renderers write intermediate files only inside ``workdir`` (a job-scoped
    directory owned by the orchestrator) and return the encoded MP4 bytes.
    """

    @abstractmethod
    def get_strategy(self) -> VideoStrategy:
        """Return the strategy this renderer implements."""

    @abstractmethod
    async def render(
        self,
        source: CapturedImage,
        request: CaptureRequest,
        spec: VideoSpec,
        workdir: Path,
        on_progress: Optional[ProgressCallback] = None,
    ) -> bytes:
        """
        Render the video.

        Args:
            source: Captured still image (used directly by the pan strategy)
            request: Capture request (used to re-navigate by the frames strategy)
            spec: Output size, frame rate and duration
            workdir: Job-scoped scratch directory
            on_progress: Optional callback receiving 0.0-1.0

        Returns:
            Encoded MP4 bytes

        Raises:
            EncodeFailed: encoder exited non-zero or was killed
        """
