"""
Collage Service
===============
Vertical collage composites: gradient background + framed screenshot.
"""

from .compositor import Anchor, BackgroundStyle, CompositeSpec, compose, fit_to_region
from .gradient import GradientDescriptor, GradientDirection, render_gradient

__all__ = [
    "Anchor",
    "BackgroundStyle",
    "CompositeSpec",
    "GradientDescriptor",
    "GradientDirection",
    "compose",
    "fit_to_region",
    "render_gradient",
]
