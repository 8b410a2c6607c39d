"""
Tests for environment-driven settings.
"""
import pytest
from pydantic import ValidationError

from siteshot.config import Settings


class TestSettings:
    def test_defaults(self):
        s = Settings(_env_file=None)
        assert (s.canvas_width, s.canvas_height) == (1080, 1920)
        assert s.navigation_timeout_ms == 60000
        assert "--disable-dev-shm-usage" in s.browser_args
        assert s.memory_threshold == 0.8

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("SITESHOT_NAVIGATION_TIMEOUT_MS", "30000")
        monkeypatch.setenv("SITESHOT_VIDEO_STRATEGY", "frames")
        s = Settings(_env_file=None)
        assert s.navigation_timeout_seconds == 30
        assert s.video_strategy == "frames"

    def test_threshold_out_of_range(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, memory_threshold=1.5)

    def test_odd_video_size_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, video_width=1279)


class TestVersion:
    def test_package_version_comes_from_settings(self):
        import siteshot
        from siteshot.config.settings import SERVICE_VERSION

        assert siteshot.__version__ == SERVICE_VERSION
