"""
Capture Models
==============
Data models for page capture requests and captured images.
"""

from dataclasses import dataclass, field
from enum import Enum
from io import BytesIO
from pathlib import Path
from typing import Optional

from PIL import Image


class CaptureMode(str, Enum):
    """What part of the page ends up in the raster."""
    VIEWPORT = "viewport"
    FULL_PAGE = "full_page"


@dataclass(frozen=True)
class Viewport:
    width: int = 1280
    height: int = 720
    device_scale_factor: float = 1.0

    def as_playwright(self) -> dict:
        return {"width": self.width, "height": self.height}


@dataclass(frozen=True)
class CaptureRequest:
    """One capture of one URL. Built per job, never mutated."""
    url: str
    mode: CaptureMode = CaptureMode.VIEWPORT
    viewport: Viewport = field(default_factory=Viewport)


@dataclass
class CapturedImage:
    """
    Raster produced by the capturer.

    Owned by the orchestrator for the duration of one job. ``path`` is set
    once the bytes are persisted into the job workspace for the encoder.
    """
    data: bytes
    width: int
    height: int
    format: str = "png"
    path: Optional[Path] = None

    @classmethod
    def from_bytes(cls, data: bytes, format: str = "png") -> "CapturedImage":
        with Image.open(BytesIO(data)) as img:
            width, height = img.size
        return cls(data=data, width=width, height=height, format=format)

    def write_to(self, path: Path) -> Path:
        path.write_bytes(self.data)
        self.path = path
        return path

    def release(self) -> None:
        """Drop the in-memory buffer; the backing file belongs to the workspace."""
        self.data = b""
