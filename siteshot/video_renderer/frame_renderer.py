"""
Frame-sequence renderer.

Re-navigates the page, captures one screenshot per scroll step, then
encodes the sequence. Correct for lazy-loaded and animated pages at a much
higher time and memory cost than the pan strategy.
"""

import shutil
from pathlib import Path
from typing import Optional

from loguru import logger

from ..capture import CaptureMode, CaptureRequest, CapturedImage, PageCapturer, Viewport
from .base import ProgressCallback, VideoRenderer, VideoSpec, VideoStrategy
from .encoder import FFmpegEncoder


class FrameSequenceRenderer(VideoRenderer):
    def __init__(
        self,
        capturer: PageCapturer,
        encoder: Optional[FFmpegEncoder] = None,
    ):
        self.capturer = capturer
        self.encoder = encoder or FFmpegEncoder()

    def get_strategy(self) -> VideoStrategy:
        return VideoStrategy.FRAMES

    async def render(
        self,
        source: CapturedImage,
        request: CaptureRequest,
        spec: VideoSpec,
        workdir: Path,
        on_progress: Optional[ProgressCallback] = None,
    ) -> bytes:
        frames_dir = workdir / "frames"
        # Frames are captured at the output size so no rescale is needed
        frame_request = CaptureRequest(
            url=request.url,
            mode=CaptureMode.VIEWPORT,
            viewport=Viewport(width=spec.width, height=spec.height, device_scale_factor=1.0),
        )
        try:
            # Browser is closed by the time this returns
            frames = await self.capturer.capture_scroll_frames(
                frame_request, spec.frame_count, frames_dir
            )
            logger.info(f"[Video] Encoding {len(frames)} frames at {spec.fps}fps")

            args = [
                "-framerate", str(spec.fps),
                "-i", str(frames_dir / "frame_%04d.png"),
                "-vf", f"scale={spec.width}:{spec.height}",
                *self.encoder.output_args(spec.fps),
            ]
            output_path = await self.encoder.run(
                args,
                workdir / "frames.mp4",
                duration_seconds=spec.duration_seconds,
                on_progress=on_progress,
            )
            return output_path.read_bytes()
        finally:
            # Frames go as one unit, never file by file
            shutil.rmtree(frames_dir, ignore_errors=True)
