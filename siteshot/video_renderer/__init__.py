"""
Video Renderer Service
======================
Scrolling videos from captured pages, encoded with ffmpeg.

Strategies:
- pan: moving crop over a single full-page screenshot
- frames: scroll-and-capture frame sequence
"""

from .base import VideoRenderer, VideoSpec, VideoStrategy
from .encoder import FFmpegEncoder
from .factory import VideoRendererFactory
from .frame_renderer import FrameSequenceRenderer
from .pan_renderer import PanPlan, SingleImagePanRenderer, build_pan_filter, plan_pan

__all__ = [
    "VideoRenderer",
    "VideoSpec",
    "VideoStrategy",
    "FFmpegEncoder",
    "VideoRendererFactory",
    "FrameSequenceRenderer",
    "SingleImagePanRenderer",
    "PanPlan",
    "build_pan_filter",
    "plan_pan",
]
