"""
Single-slot job lease.

At most one generation job holds the lease. A second caller fails fast
with ``Busy``; there is no queue.
"""
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator

from loguru import logger

from ..errors import Busy
from .models import JobStage, JobState


class JobLease:
    def __init__(self):
        self.state = JobState()

    @property
    def held(self) -> bool:
        return self.state.running

    @contextmanager
    def hold(self, job_id: str) -> Iterator[JobState]:
        """
        Acquire the lease for ``job_id`` and release it on any exit.

        Check-and-set has no await in between, so it is atomic on the event loop.
        """
        if self.state.running:
            raise Busy(f"Another job ({self.state.job_id}) is already running")

        self.state = JobState(
            job_id=job_id,
            stage=JobStage.ADMITTED,
            started_at=datetime.now(timezone.utc),
        )
        try:
            yield self.state
        finally:
            logger.debug(f"[Pipeline] Lease released by {job_id} ({self.state.stage.value})")
            self.state = JobState(last_memory=self.state.last_memory)
