"""
SiteShot Errors
===============
Structured failure taxonomy shared by every stage.

Each stage raises its own ``PipelineError`` subclass; the orchestrator turns
them into a ``GenerateResult`` with a machine-readable ``ErrorKind``.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Machine-readable failure kinds."""
    INVALID_INPUT = "invalid_input"
    CAPTURE_TIMEOUT = "capture_timeout"
    CAPTURE_UNAVAILABLE = "capture_unavailable"
    CAPTURE_FAILED = "capture_failed"
    COMPOSITE_FAILED = "composite_failed"
    ENCODE_FAILED = "encode_failed"
    BUSY = "busy"
    INTERNAL_CLEANUP_ERROR = "internal_cleanup_error"

    @property
    def http_status(self) -> int:
        """Suggested status code for an HTTP front end."""
        return _HTTP_STATUS.get(self, 500)


_HTTP_STATUS = {
    ErrorKind.INVALID_INPUT: 400,
    ErrorKind.BUSY: 503,
    ErrorKind.CAPTURE_TIMEOUT: 504,
    ErrorKind.CAPTURE_UNAVAILABLE: 502,
    ErrorKind.CAPTURE_FAILED: 502,
}


class PipelineError(Exception):
    """Base class for all pipeline failures."""

    kind: ErrorKind = ErrorKind.INTERNAL_CLEANUP_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"kind": self.kind.value, "message": self.message}


class InvalidInput(PipelineError):
    kind = ErrorKind.INVALID_INPUT


class CaptureTimeout(PipelineError):
    kind = ErrorKind.CAPTURE_TIMEOUT


class CaptureUnavailable(PipelineError):
    kind = ErrorKind.CAPTURE_UNAVAILABLE


class CaptureFailed(PipelineError):
    kind = ErrorKind.CAPTURE_FAILED


class CompositeFailed(PipelineError):
    kind = ErrorKind.COMPOSITE_FAILED


class EncodeFailed(PipelineError):
    """Encoder exited non-zero or was killed by a signal."""

    kind = ErrorKind.ENCODE_FAILED

    def __init__(
        self,
        message: str,
        diagnostics: str = "",
        returncode: Optional[int] = None,
    ):
        super().__init__(message)
        self.diagnostics = diagnostics
        self.returncode = returncode

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["diagnostics"] = self.diagnostics
        data["returncode"] = self.returncode
        return data


class Busy(PipelineError):
    kind = ErrorKind.BUSY


class InternalCleanupError(PipelineError):
    kind = ErrorKind.INTERNAL_CLEANUP_ERROR
