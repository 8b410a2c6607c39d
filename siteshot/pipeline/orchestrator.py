"""
Pipeline Orchestrator
=====================
Runs one asset-generation job end to end:

    Idle -> Admitted -> Capturing -> Processing -> Completed
                                                -> Failed (from any stage after Admitted)

- Admission: single-slot job lease + memory gate; rejected jobs get ``Busy``
  immediately, nothing is queued.
- Capture once, then feed the same image to the compositor and/or the video
  renderer, strictly one stage after another.
- Cleanup (browser, encoder, temp files, lease) runs on every exit path,
  including task cancellation.
"""

import asyncio
import time
import uuid
from contextlib import contextmanager
from functools import lru_cache
from typing import Iterable, Iterator, Optional, Type, Union

from loguru import logger
from pydantic import ValidationError

from ..capture import CaptureMode, CaptureRequest, CapturedImage, PageCapturer, Viewport
from ..collage import CompositeSpec, compose
from ..colors import ColorSample, extract_colors
from ..config import Settings, get_settings
from ..errors import (
    CaptureFailed,
    CaptureUnavailable,
    CompositeFailed,
    EncodeFailed,
    InternalCleanupError,
    InvalidInput,
    PipelineError,
)
from ..video_renderer import FFmpegEncoder, VideoRendererFactory, VideoSpec, VideoStrategy
from .job_lease import JobLease
from .memory import MemoryGate
from .models import (
    AssetKind,
    GenerateRequest,
    GenerateResult,
    GeneratedAsset,
    GeneratedAssets,
    JobStage,
    JobState,
)
from .workspace import JobWorkspace

AssetKinds = Iterable[Union[AssetKind, str]]

SCREENSHOT_FILENAME = "screenshot-full.png"
COLLAGE_FILENAME = "screenshot-collage.png"
VIDEO_FILENAME = "scroll-video.mp4"


class PipelineOrchestrator:
    """
    Owns the job lease and sequences Capturer -> Compositor / Video Renderer.

    Usage:
        orchestrator = PipelineOrchestrator()
        result = await orchestrator.generate("https://example.com", {"screenshot", "collage"})
        if result.ok:
            png = result.assets.collage.data
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        capturer: Optional[PageCapturer] = None,
        encoder: Optional[FFmpegEncoder] = None,
        memory_gate: Optional[MemoryGate] = None,
        composite_spec: Optional[CompositeSpec] = None,
        video_spec: Optional[VideoSpec] = None,
    ):
        self.settings = settings or get_settings()
        s = self.settings

        self.capturer = capturer or PageCapturer(settings=s)
        self.encoder = encoder or FFmpegEncoder(settings=s)
        self.memory_gate = memory_gate or MemoryGate(
            threshold=s.memory_threshold,
            limit_bytes=s.memory_limit_mb * 2**20 if s.memory_limit_mb else None,
        )
        self.composite_spec = composite_spec or CompositeSpec(
            canvas_width=s.canvas_width,
            canvas_height=s.canvas_height,
        )
        self.video_spec = video_spec or VideoSpec(
            width=s.video_width,
            height=s.video_height,
            fps=s.video_fps,
            duration_seconds=s.video_duration_seconds,
            strategy=VideoStrategy(s.video_strategy),
        )
        self.video_renderer = VideoRendererFactory.create(
            self.video_spec.strategy, capturer=self.capturer, encoder=self.encoder
        )
        self.lease = JobLease()
        self.settings.temp_dir.mkdir(parents=True, exist_ok=True)

    @property
    def state(self) -> JobState:
        return self.lease.state

    async def generate(self, url: str, asset_kinds: AssetKinds) -> GenerateResult:
        """
        Produce the requested assets for ``url``.

        Never raises a ``PipelineError``: failures come back as
        ``GenerateResult.error``. Task cancellation still propagates after
        cleanup has run.
        """
        job_id = uuid.uuid4().hex[:12]

        if isinstance(asset_kinds, str):
            asset_kinds = [asset_kinds]
        try:
            request = GenerateRequest(url=url, asset_kinds=set(asset_kinds or ()))
        except (ValidationError, TypeError, ValueError) as e:
            logger.info(f"[Pipeline] {job_id} rejected: invalid input")
            return GenerateResult(job_id=job_id, error=InvalidInput(_validation_message(e)))

        try:
            with self.lease.hold(job_id) as state:
                state.last_memory = self.memory_gate.read()
                self.memory_gate.check(state.last_memory)
                logger.info(
                    f"[Pipeline] {job_id} admitted: {request.url} "
                    f"{sorted(k.value for k in request.asset_kinds)} (memory {state.last_memory})"
                )
                return await self._run_job(job_id, request, state)
        except PipelineError as e:
            # Only admission errors get here; job errors are handled in _run_job
            logger.info(f"[Pipeline] {job_id} rejected: {e.message}")
            return GenerateResult(job_id=job_id, error=e)

    async def _run_job(
        self,
        job_id: str,
        request: GenerateRequest,
        state: JobState,
    ) -> GenerateResult:
        start_time = time.time()
        workspace = JobWorkspace(self.settings.temp_dir, job_id)
        image: Optional[CapturedImage] = None
        result: Optional[GenerateResult] = None

        try:
            workspace.create()

            state.stage = JobStage.CAPTURING
            image = await self._capture(request)

            state.stage = JobStage.PROCESSING
            assets = await self._process(request, image, workspace)

            state.stage = JobStage.COMPLETED
            logger.info(
                f"[Pipeline] ✅ {job_id} completed in {time.time() - start_time:.2f}s: "
                f"{sorted(k.value for k in assets.kinds())}"
            )
            result = GenerateResult(job_id=job_id, assets=assets)
        except PipelineError as e:
            failed_stage = state.stage
            state.stage = JobStage.FAILED
            logger.error(f"[Pipeline] ❌ {job_id} failed in {failed_stage.value}: {e.message}")
            result = GenerateResult(job_id=job_id, error=e)
        except Exception as e:
            failed_stage = state.stage
            state.stage = JobStage.FAILED
            logger.opt(exception=e).error(
                f"[Pipeline] ❌ {job_id} unexpected error in {failed_stage.value}"
            )
            error_cls = CaptureUnavailable if failed_stage == JobStage.ADMITTED else CaptureFailed
            message = f"Job failed while {failed_stage.value}: {type(e).__name__}: {e}"
            result = GenerateResult(job_id=job_id, error=error_cls(message))
        finally:
            if image is not None:
                image.release()
            await self._cleanup(job_id, workspace)

        return result

    async def _capture(self, request: GenerateRequest) -> CapturedImage:
        s = self.settings
        capture_request = CaptureRequest(
            url=request.url,
            mode=self._capture_mode(request),
            viewport=Viewport(
                width=s.viewport_width,
                height=s.viewport_height,
                device_scale_factor=s.device_scale_factor,
            ),
        )
        with _stage_errors(CaptureFailed, f"Capture of {request.url}"):
            return await self.capturer.capture(capture_request)

    def _capture_mode(self, request: GenerateRequest) -> CaptureMode:
        # The pan video needs the whole page; the same image then serves every asset
        if (
            AssetKind.VIDEO in request.asset_kinds
            and self.video_spec.strategy == VideoStrategy.PAN
        ):
            return CaptureMode.FULL_PAGE
        return CaptureMode(self.settings.capture_mode)

    async def _process(
        self,
        request: GenerateRequest,
        image: CapturedImage,
        workspace: JobWorkspace,
    ) -> GeneratedAssets:
        kinds = request.asset_kinds
        colors: ColorSample = await asyncio.to_thread(extract_colors, image.data)
        assets = GeneratedAssets(url=request.url, colors=colors)

        if AssetKind.SCREENSHOT in kinds:
            assets.screenshot = GeneratedAsset(
                kind=AssetKind.SCREENSHOT,
                data=image.data,
                media_type="image/png",
                filename=SCREENSHOT_FILENAME,
            )

        if AssetKind.COLLAGE in kinds:
            # Pillow work is CPU-bound; keep the loop free to answer Busy
            with _stage_errors(CompositeFailed, "Collage"):
                collage = await asyncio.to_thread(
                    compose, image.data, colors, self.composite_spec
                )
            assets.collage = GeneratedAsset(
                kind=AssetKind.COLLAGE,
                data=collage,
                media_type=f"image/{self.composite_spec.output_format.lower()}",
                filename=COLLAGE_FILENAME,
            )

        if AssetKind.VIDEO in kinds:
            with _stage_errors(EncodeFailed, "Video rendering"):
                image.write_to(workspace.file("capture.png"))
                video = await self.video_renderer.render(
                    source=image,
                    request=CaptureRequest(url=request.url),
                    spec=self.video_spec,
                    workdir=workspace.path,
                    on_progress=lambda p: logger.debug(f"[Pipeline] Encoding {p:.0%}"),
                )
            assets.video = GeneratedAsset(
                kind=AssetKind.VIDEO,
                data=video,
                media_type="video/mp4",
                filename=VIDEO_FILENAME,
            )

        return assets

    async def _cleanup(self, job_id: str, workspace: JobWorkspace) -> None:
        try:
            await asyncio.shield(workspace.cleanup(self.settings.cleanup_grace_seconds))
        except InternalCleanupError as e:
            # Logged, never allowed to replace the job's own outcome
            logger.error(f"[Pipeline] {job_id} {e.kind.value}: {e.message}")


@contextmanager
def _stage_errors(error_cls: Type[PipelineError], what: str) -> Iterator[None]:
    """Re-raise non-pipeline exceptions from a stage as that stage's failure kind."""
    try:
        yield
    except PipelineError:
        raise
    except Exception as e:
        raise error_cls(f"{what} failed: {type(e).__name__}: {e}") from e


def _validation_message(exc: Exception) -> str:
    if isinstance(exc, ValidationError):
        return "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
    return str(exc)


@lru_cache
def get_orchestrator() -> PipelineOrchestrator:
    """Process-wide orchestrator; its lease is the admission gate for the process."""
    return PipelineOrchestrator()


async def generate(url: str, asset_kinds: AssetKinds) -> GenerateResult:
    """Run one job on the process-wide orchestrator."""
    return await get_orchestrator().generate(url, asset_kinds)
