"""
Single-image pan renderer.

Loops one full-page screenshot as a still input and slides a crop window
from the top of the page to the bottom over the clip duration, which reads
as a scroll without re-rendering the page.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from loguru import logger

from ..capture import CaptureRequest, CapturedImage
from .base import ProgressCallback, VideoRenderer, VideoSpec, VideoStrategy
from .encoder import FFmpegEncoder


@dataclass(frozen=True)
class PanPlan:
    """Geometry of the moving crop, in output-width-scaled pixels."""
    scaled_width: int
    scaled_height: int
    max_offset: int

    @property
    def is_static(self) -> bool:
        return self.max_offset == 0


def plan_pan(source_width: int, source_height: int, spec: VideoSpec) -> PanPlan:
    """
    Scale the source to the output width and work out how far the crop moves.

    Sources shorter than the output height get a zero pan distance (static
    crop) instead of a negative crop origin.
    """
    scaled_height = max(2, round(source_height * spec.width / source_width))
    scaled_height += scaled_height % 2
    return PanPlan(
        scaled_width=spec.width,
        scaled_height=scaled_height,
        max_offset=max(0, scaled_height - spec.height),
    )


def build_pan_filter(plan: PanPlan, spec: VideoSpec) -> str:
    """ffmpeg -vf chain: scale to width, pad short pages, then the moving crop."""
    padded_height = max(plan.scaled_height, spec.height)
    if plan.is_static:
        y = "0"
    else:
        # crop clamps y into range, so the last frames hold at the bottom
        y = f"{plan.max_offset}*t/{spec.duration_seconds:g}"
    return (
        f"scale={plan.scaled_width}:{plan.scaled_height},"
        f"pad={spec.width}:{padded_height}:0:0:color=white,"
        f"crop={spec.width}:{spec.height}:0:{y}"
    )


class SingleImagePanRenderer(VideoRenderer):
    def __init__(self, encoder: Optional[FFmpegEncoder] = None):
        self.encoder = encoder or FFmpegEncoder()

    def get_strategy(self) -> VideoStrategy:
        return VideoStrategy.PAN

    async def render(
        self,
        source: CapturedImage,
        request: CaptureRequest,
        spec: VideoSpec,
        workdir: Path,
        on_progress: Optional[ProgressCallback] = None,
    ) -> bytes:
        source_path = source.path or source.write_to(workdir / "pan_source.png")
        plan = plan_pan(source.width, source.height, spec)
        video_filter = build_pan_filter(plan, spec)

        logger.info(
            f"[Video] Pan {source.width}x{source.height} -> {spec.width}x{spec.height}, "
            f"offset 0..{plan.max_offset}px over {spec.duration_seconds:g}s"
        )

        args = [
            "-loop", "1",
            "-framerate", str(spec.fps),
            "-i", str(source_path),
            "-vf", video_filter,
            "-t", f"{spec.duration_seconds:g}",
            *self.encoder.output_args(spec.fps),
        ]
        output_path = await self.encoder.run(
            args,
            workdir / "pan.mp4",
            duration_seconds=spec.duration_seconds,
            on_progress=on_progress,
        )
        return output_path.read_bytes()
