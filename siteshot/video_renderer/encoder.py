"""
FFmpeg encoder runner.

Runs one ffmpeg process to completion, streaming ``-progress`` output to an
optional callback. The process is killed and reaped on every non-normal
exit path, including task cancellation.
"""

import asyncio
import time
from collections import deque
from pathlib import Path
from typing import List, Optional, Sequence

from loguru import logger

from ..config import Settings, get_settings
from ..errors import EncodeFailed
from .base import ProgressCallback

DIAGNOSTIC_LINES = 40


class FFmpegEncoder:
    """Thin async wrapper around the ffmpeg CLI."""

    def __init__(self, settings: Optional[Settings] = None, binary: Optional[str] = None):
        self.settings = settings or get_settings()
        self.binary = binary or self.settings.ffmpeg_path

    def output_args(self, fps: int) -> List[str]:
        """Codec flags: fast/low-memory preset and a widely playable pixel format."""
        s = self.settings
        args = [
            "-r", str(fps),
            "-c:v", "libx264",
            "-preset", s.ffmpeg_preset,
            "-crf", str(s.ffmpeg_crf),
            "-pix_fmt", s.ffmpeg_pix_fmt,
            "-movflags", "+faststart",
        ]
        if s.ffmpeg_threads:
            args += ["-threads", str(s.ffmpeg_threads)]
        return args

    async def run(
        self,
        args: Sequence[str],
        output_path: Path,
        duration_seconds: Optional[float] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> Path:
        """
        Run ``ffmpeg <args> <output_path>`` and wait for it.

        Raises:
            EncodeFailed: non-zero exit, signal, missing binary or no output file
        """
        cmd = [
            self.binary, "-y", "-hide_banner", "-loglevel", "error",
            "-progress", "pipe:1", "-nostats",
            *args,
            str(output_path),
        ]
        logger.info(f"[Encoder] Running: {' '.join(cmd)}")
        start_time = time.time()

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise EncodeFailed(f"Could not start encoder '{self.binary}': {e}") from e

        try:
            _, stderr = await asyncio.gather(
                self._read_progress(process.stdout, duration_seconds, on_progress),
                process.stderr.read(),
            )
            returncode = await process.wait()
        finally:
            if process.returncode is None:
                logger.warning(f"[Encoder] Killing encoder pid={process.pid}")
                process.kill()
                await asyncio.shield(process.wait())

        diagnostics = _tail(stderr.decode(errors="replace"))
        if returncode != 0:
            if returncode < 0:
                message = f"Encoder killed by signal {-returncode}"
            else:
                message = f"Encoder exited with code {returncode}"
            logger.error(f"[Encoder] {message}: {diagnostics}")
            raise EncodeFailed(message, diagnostics=diagnostics, returncode=returncode)

        if not output_path.exists():
            raise EncodeFailed(
                f"Encoder produced no output at {output_path}",
                diagnostics=diagnostics,
                returncode=returncode,
            )

        if on_progress:
            on_progress(1.0)
        logger.info(f"[Encoder] Done in {time.time() - start_time:.2f}s: {output_path.name}")
        return output_path

    async def _read_progress(
        self,
        stream: asyncio.StreamReader,
        duration_seconds: Optional[float],
        on_progress: Optional[ProgressCallback],
    ) -> None:
        # key=value lines; out_time_us is microseconds of output written so far
        async for raw in stream:
            if not on_progress or not duration_seconds:
                continue
            key, _, value = raw.decode(errors="replace").strip().partition("=")
            if key in ("out_time_us", "out_time_ms") and value.isdigit():
                done = int(value) / 1_000_000 / duration_seconds
                on_progress(min(done, 0.99))


def _tail(text: str, lines: int = DIAGNOSTIC_LINES) -> str:
    return "\n".join(deque(text.strip().splitlines(), maxlen=lines))
