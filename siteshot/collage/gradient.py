"""
Gradient backgrounds.

A ``GradientDescriptor`` describes the fill; ``render_gradient`` turns it
into a Pillow image with numpy, no markup involved.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Tuple

import numpy as np
from PIL import Image

RGB = Tuple[int, int, int]


class GradientDirection(str, Enum):
    DIAGONAL = "diagonal"  # top-left -> bottom-right
    VERTICAL = "vertical"
    HORIZONTAL = "horizontal"


@dataclass(frozen=True)
class GradientDescriptor:
    start: RGB
    end: RGB
    direction: GradientDirection = GradientDirection.DIAGONAL


def render_gradient(descriptor: GradientDescriptor, size: Tuple[int, int]) -> Image.Image:
    """Render a linear gradient of ``size`` (width, height) as an RGB image."""
    width, height = size
    xs = np.linspace(0.0, 1.0, width, dtype=np.float32)[np.newaxis, :]
    ys = np.linspace(0.0, 1.0, height, dtype=np.float32)[:, np.newaxis]

    if descriptor.direction == GradientDirection.HORIZONTAL:
        t = np.broadcast_to(xs, (height, width))
    elif descriptor.direction == GradientDirection.VERTICAL:
        t = np.broadcast_to(ys, (height, width))
    else:
        t = (xs + ys) / 2.0

    start = np.asarray(descriptor.start, dtype=np.float32)
    end = np.asarray(descriptor.end, dtype=np.float32)
    pixels = start + (end - start) * t[..., np.newaxis]

    return Image.fromarray(np.clip(np.rint(pixels), 0, 255).astype(np.uint8), "RGB")


def render_solid(color: RGB, size: Tuple[int, int]) -> Image.Image:
    return Image.new("RGB", size, color=tuple(color))
