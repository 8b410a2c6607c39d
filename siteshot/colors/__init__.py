from .color_extractor import FALLBACK_COLORS, ColorSample, brighten, extract_colors

__all__ = ["FALLBACK_COLORS", "ColorSample", "brighten", "extract_colors"]
