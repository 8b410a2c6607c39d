"""
Dominant color sampling.

Averages the channels of a downsampled copy of the screenshot. This is an
approximation of "dominant color", not a clustering algorithm.
"""
from dataclasses import dataclass
from io import BytesIO
from typing import Tuple

import numpy as np
from loguru import logger
from PIL import Image, UnidentifiedImageError

RGB = Tuple[int, int, int]

SAMPLE_SIZE = 64
BRIGHTEN_DELTA = 40


@dataclass(frozen=True)
class ColorSample:
    primary: RGB
    secondary: RGB

    def to_hex(self) -> dict:
        return {"primary": _hex(self.primary), "secondary": _hex(self.secondary)}


# Used whenever the image cannot be decoded; color is cosmetic, never fatal.
FALLBACK_COLORS = ColorSample(primary=(102, 126, 234), secondary=(118, 75, 162))


def extract_colors(
    image: bytes,
    sample_size: int = SAMPLE_SIZE,
    brighten_delta: int = BRIGHTEN_DELTA,
) -> ColorSample:
    """
    Return the mean color of ``image`` and a brightened companion.

    Undecodable input yields ``FALLBACK_COLORS``.
    """
    try:
        with Image.open(BytesIO(image)) as img:
            small = img.convert("RGB").resize(
                (sample_size, sample_size), Image.Resampling.BILINEAR
            )
    except (
        UnidentifiedImageError,
        OSError,
        ValueError,
        SyntaxError,
        Image.DecompressionBombError,
    ) as e:
        logger.warning(f"[Colors] Could not decode image, using fallback colors: {e}")
        return FALLBACK_COLORS

    pixels = np.asarray(small, dtype=np.float64).reshape(-1, 3)
    primary = tuple(int(round(c)) for c in pixels.mean(axis=0))
    return ColorSample(primary=primary, secondary=brighten(primary, brighten_delta))


def brighten(color: RGB, delta: int) -> RGB:
    return tuple(max(0, min(255, channel + delta)) for channel in color)


def _hex(color: RGB) -> str:
    return "#{:02x}{:02x}{:02x}".format(*color)
