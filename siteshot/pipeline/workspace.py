"""
Job-scoped scratch directory.

Every temp file a job creates lives under ``<temp_dir>/<job_id>/`` and the
whole directory is removed when the job ends.
"""
import asyncio
import shutil
from pathlib import Path

from loguru import logger

from ..errors import InternalCleanupError


class JobWorkspace:
    def __init__(self, root: Path, job_id: str):
        self.path = Path(root) / job_id

    def create(self) -> Path:
        self.path.mkdir(parents=True, exist_ok=False)
        return self.path

    def file(self, name: str) -> Path:
        return self.path / name

    async def cleanup(self, grace_seconds: float = 0.0) -> None:
        """
        Remove the workspace.

        A failed first attempt is retried once after ``grace_seconds`` (a
        just-exited subprocess may still hold a file open).

        Raises:
            InternalCleanupError: the directory still exists after the retry
        """
        if not self.path.exists():
            return
        try:
            shutil.rmtree(self.path)
            return
        except OSError as e:
            logger.warning(f"[Pipeline] Cleanup of {self.path} failed, retrying: {e}")

        await asyncio.sleep(grace_seconds)
        try:
            shutil.rmtree(self.path)
        except OSError as e:
            raise InternalCleanupError(f"Could not remove {self.path}: {e}") from e
