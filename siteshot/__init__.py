"""
SiteShot
========
Turns a web page URL into marketing assets: a screenshot, a vertical
collage and a scrolling video.

Architecture:
- capture: headless-browser page capture (one browser per job)
- colors: dominant color sampling for backgrounds
- collage: gradient background + framed screenshot composite
- video_renderer: ffmpeg-encoded panning / scrolling video
- pipeline: admission control, job lifecycle and result assembly
"""

from .config.settings import SERVICE_VERSION
from .pipeline import (
    AssetKind,
    GenerateResult,
    PipelineOrchestrator,
    generate,
    get_orchestrator,
)

__version__ = SERVICE_VERSION

__all__ = [
    "AssetKind",
    "GenerateResult",
    "PipelineOrchestrator",
    "generate",
    "get_orchestrator",
    "__version__",
]
