"""
Tests for admission primitives: job lease, memory gate and workspace.
"""
import asyncio

import pytest

from siteshot.errors import Busy, InternalCleanupError
from siteshot.pipeline import JobLease, JobStage, JobWorkspace, MemoryGate


class TestJobLease:
    def test_hold_and_release(self):
        lease = JobLease()
        with lease.hold("job-1") as state:
            assert lease.held
            assert state.job_id == "job-1"
            assert state.stage == JobStage.ADMITTED
        assert not lease.held
        assert lease.state.stage == JobStage.IDLE

    def test_second_holder_fails_fast(self):
        lease = JobLease()
        with lease.hold("job-1"):
            with pytest.raises(Busy):
                with lease.hold("job-2"):
                    pass
            assert lease.state.job_id == "job-1"

    def test_released_on_error(self):
        lease = JobLease()
        with pytest.raises(RuntimeError):
            with lease.hold("job-1"):
                raise RuntimeError("stage blew up")
        assert not lease.held


class TestMemoryGate:
    def test_below_threshold_admits(self):
        gate = MemoryGate(threshold=0.8, limit_bytes=1000, reader=lambda: 500)
        reading = gate.check()
        assert reading.ratio == 0.5

    def test_at_threshold_rejects(self):
        gate = MemoryGate(threshold=0.8, limit_bytes=1000, reader=lambda: 800)
        with pytest.raises(Busy):
            gate.check()

    def test_real_reading_is_positive(self):
        reading = MemoryGate().read()
        assert reading.used_bytes > 0
        assert reading.limit_bytes > 0


class TestJobWorkspace:
    def test_cleanup_removes_everything(self, tmp_path):
        workspace = JobWorkspace(tmp_path, "abc")
        workspace.create()
        workspace.file("capture.png").write_bytes(b"png")
        (workspace.path / "frames").mkdir()
        (workspace.path / "frames" / "frame_0000.png").write_bytes(b"png")

        asyncio.run(workspace.cleanup())

        assert list(tmp_path.iterdir()) == []

    def test_cleanup_of_missing_dir_is_noop(self, tmp_path):
        asyncio.run(JobWorkspace(tmp_path, "never-created").cleanup())

    def test_persistent_failure_raises(self, tmp_path, monkeypatch):
        workspace = JobWorkspace(tmp_path, "stuck")
        workspace.create()

        def refuse(path):
            raise PermissionError(f"busy: {path}")

        monkeypatch.setattr("siteshot.pipeline.workspace.shutil.rmtree", refuse)
        with pytest.raises(InternalCleanupError):
            asyncio.run(workspace.cleanup(grace_seconds=0))
