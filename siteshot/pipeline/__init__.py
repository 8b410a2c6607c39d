"""
Asset Generation Pipeline
=========================
URL in -> captured raster -> {screenshot, collage, video} out, one job at a time.
"""

from ..errors import (
    Busy,
    CaptureFailed,
    CaptureTimeout,
    CaptureUnavailable,
    CompositeFailed,
    EncodeFailed,
    ErrorKind,
    InternalCleanupError,
    InvalidInput,
    PipelineError,
)
from .job_lease import JobLease
from .memory import MemoryGate, MemoryReading
from .models import (
    AssetKind,
    GenerateRequest,
    GenerateResult,
    GeneratedAsset,
    GeneratedAssets,
    JobStage,
    JobState,
)
from .orchestrator import PipelineOrchestrator, generate, get_orchestrator
from .workspace import JobWorkspace

__all__ = [
    "AssetKind",
    "Busy",
    "CaptureFailed",
    "CaptureTimeout",
    "CaptureUnavailable",
    "CompositeFailed",
    "EncodeFailed",
    "ErrorKind",
    "GenerateRequest",
    "GenerateResult",
    "GeneratedAsset",
    "GeneratedAssets",
    "InternalCleanupError",
    "InvalidInput",
    "JobLease",
    "JobStage",
    "JobState",
    "JobWorkspace",
    "MemoryGate",
    "MemoryReading",
    "PipelineError",
    "PipelineOrchestrator",
    "generate",
    "get_orchestrator",
]
