"""
Collage Compositor
==================
Builds the vertical "vision board" collage: a gradient (or flat) background
with the screenshot resized, framed and centered on top.

Pure transform: same screenshot bytes, colors and CompositeSpec give the same PNG.
"""

from dataclasses import dataclass
from enum import Enum
from io import BytesIO
from typing import Optional, Tuple

from loguru import logger
from PIL import Image, ImageDraw

from ..colors import ColorSample
from ..errors import CompositeFailed
from .gradient import GradientDescriptor, GradientDirection, render_gradient, render_solid


class BackgroundStyle(str, Enum):
    GRADIENT = "gradient"
    SOLID = "solid"


class Anchor(str, Enum):
    """Which part of the screenshot survives when it has to be cut."""
    TOP = "top"  # keep the page header visible
    CENTER = "center"


@dataclass(frozen=True)
class CompositeSpec:
    canvas_width: int = 1080
    canvas_height: int = 1920
    background: BackgroundStyle = BackgroundStyle.GRADIENT
    gradient_direction: GradientDirection = GradientDirection.DIAGONAL
    # Screenshot region as a fraction of the canvas
    region_width_ratio: float = 0.85
    region_height_ratio: float = 0.75
    anchor: Anchor = Anchor.TOP
    frame_padding: int = 24
    frame_radius: int = 32
    frame_color: Optional[Tuple[int, int, int, int]] = (255, 255, 255, 72)
    output_format: str = "PNG"

    @property
    def canvas_size(self) -> Tuple[int, int]:
        return self.canvas_width, self.canvas_height

    @property
    def region_size(self) -> Tuple[int, int]:
        return (
            max(1, int(self.canvas_width * self.region_width_ratio)),
            max(1, int(self.canvas_height * self.region_height_ratio)),
        )


def compose(screenshot: bytes, colors: ColorSample, spec: CompositeSpec = CompositeSpec()) -> bytes:
    """
    Render the collage and return encoded image bytes.

    Raises:
        CompositeFailed: the screenshot could not be decoded, resized or composited
    """
    try:
        with Image.open(BytesIO(screenshot)) as source:
            foreground = fit_to_region(source.convert("RGBA"), spec.region_size, spec.anchor)

        background = _render_background(colors, spec).convert("RGBA")
        framed = _add_frame(foreground, spec)

        x = (spec.canvas_width - framed.width) // 2
        y = (spec.canvas_height - framed.height) // 2
        background.alpha_composite(framed, dest=(max(0, x), max(0, y)))

        buffer = BytesIO()
        background.convert("RGB").save(buffer, format=spec.output_format)
    # Pillow reports corrupt PNG chunks as SyntaxError
    except (OSError, ValueError, SyntaxError, Image.DecompressionBombError) as e:
        raise CompositeFailed(f"Collage composition failed: {e}") from e

    logger.debug(f"[Collage] Rendered {spec.canvas_width}x{spec.canvas_height} collage")
    return buffer.getvalue()


def fit_to_region(img: Image.Image, region: Tuple[int, int], anchor: Anchor) -> Image.Image:
    """
    Resize ``img`` to fit ``region`` keeping its aspect ratio.

    TOP: scale to the region width, then keep the top slice if still too tall.
    CENTER: scale down/up until the whole image fits.
    Resizing always happens before cropping so the crop box is never larger
    than the image it is cut from.
    """
    region_w, region_h = region
    if anchor == Anchor.TOP:
        scale = region_w / img.width
    else:
        scale = min(region_w / img.width, region_h / img.height)

    new_size = (
        max(1, min(region_w, round(img.width * scale))),
        max(1, round(img.height * scale)),
    )
    resized = img.resize(new_size, Image.Resampling.LANCZOS)

    if resized.height > region_h:
        resized = resized.crop((0, 0, resized.width, region_h))
    return resized


def _render_background(colors: ColorSample, spec: CompositeSpec) -> Image.Image:
    if spec.background == BackgroundStyle.SOLID:
        return render_solid(colors.primary, spec.canvas_size)
    descriptor = GradientDescriptor(
        start=colors.primary,
        end=colors.secondary,
        direction=spec.gradient_direction,
    )
    return render_gradient(descriptor, spec.canvas_size)


def _add_frame(img: Image.Image, spec: CompositeSpec) -> Image.Image:
    """Pad with a (semi-)transparent margin that reads as a device frame."""
    pad = spec.frame_padding
    if pad <= 0:
        return img

    framed = Image.new("RGBA", (img.width + 2 * pad, img.height + 2 * pad), (0, 0, 0, 0))
    if spec.frame_color is not None:
        draw = ImageDraw.Draw(framed)
        draw.rounded_rectangle(
            [0, 0, framed.width - 1, framed.height - 1],
            radius=spec.frame_radius,
            fill=spec.frame_color,
        )
    framed.alpha_composite(img, dest=(pad, pad))
    return framed
