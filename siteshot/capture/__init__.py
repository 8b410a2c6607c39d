"""
Page Capture Service
====================
Headless-browser capture of web pages into PNG rasters.
"""

from .models import CaptureMode, CaptureRequest, CapturedImage, Viewport
from .page_capturer import PageCapturer

__all__ = [
    "CaptureMode",
    "CaptureRequest",
    "CapturedImage",
    "Viewport",
    "PageCapturer",
]
