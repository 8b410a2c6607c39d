"""
Video Renderer Factory
======================
Picks the video strategy for a job.

Default: single-image pan (one browser launch, cheap).
Override: ``SITESHOT_VIDEO_STRATEGY=frames`` for true per-frame re-rendering.
"""

from typing import Optional

from loguru import logger

from ..capture import PageCapturer
from .base import VideoRenderer, VideoStrategy
from .encoder import FFmpegEncoder
from .frame_renderer import FrameSequenceRenderer
from .pan_renderer import SingleImagePanRenderer


class VideoRendererFactory:
    @staticmethod
    def create(
        strategy: VideoStrategy,
        capturer: PageCapturer,
        encoder: Optional[FFmpegEncoder] = None,
    ) -> VideoRenderer:
        """
        Create a renderer for ``strategy``.

        Args:
            strategy: Pan or frame-sequence
            capturer: Used by the frame-sequence strategy to re-navigate
            encoder: Shared ffmpeg runner
        """
        strategy = VideoStrategy(strategy)
        if strategy == VideoStrategy.PAN:
            logger.debug("[Factory] Single-image pan renderer")
            return SingleImagePanRenderer(encoder=encoder)
        if strategy == VideoStrategy.FRAMES:
            logger.debug("[Factory] Frame-sequence renderer")
            return FrameSequenceRenderer(capturer=capturer, encoder=encoder)
        raise ValueError(f"Unknown video strategy: {strategy}")
