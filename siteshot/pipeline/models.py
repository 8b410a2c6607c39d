"""
Pipeline Models
===============
Request, job state and result models for asset generation.
"""

import base64
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Set
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator

from ..colors import ColorSample
from ..errors import PipelineError
from .memory import MemoryReading


class AssetKind(str, Enum):
    SCREENSHOT = "screenshot"
    COLLAGE = "collage"
    VIDEO = "video"


class JobStage(str, Enum):
    IDLE = "idle"
    ADMITTED = "admitted"
    CAPTURING = "capturing"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class GenerateRequest(BaseModel):
    """Validated input for one generation job."""

    url: str = Field(..., description="Absolute http(s) URL of the page")
    asset_kinds: Set[AssetKind] = Field(..., min_length=1)

    @field_validator("url")
    @classmethod
    def _absolute_http_url(cls, value: str) -> str:
        value = value.strip()
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("url must be an absolute http:// or https:// URL")
        return value


@dataclass
class JobState:
    """What the orchestrator knows about the job in flight (if any)."""
    job_id: Optional[str] = None
    stage: JobStage = JobStage.IDLE
    started_at: Optional[datetime] = None
    last_memory: Optional[MemoryReading] = None

    @property
    def running(self) -> bool:
        return self.job_id is not None


@dataclass
class GeneratedAsset:
    kind: AssetKind
    data: bytes
    media_type: str
    filename: str

    def to_payload(self, embed_base64: bool = True) -> Dict[str, Any]:
        payload = {
            "media_type": self.media_type,
            "filename": self.filename,
            "size_bytes": len(self.data),
        }
        if embed_base64:
            payload["base64"] = base64.b64encode(self.data).decode("ascii")
        return payload


@dataclass
class GeneratedAssets:
    url: str
    colors: ColorSample
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    screenshot: Optional[GeneratedAsset] = None
    collage: Optional[GeneratedAsset] = None
    video: Optional[GeneratedAsset] = None

    def get(self, kind: AssetKind) -> Optional[GeneratedAsset]:
        return getattr(self, kind.value)

    def kinds(self) -> Set[AssetKind]:
        return {kind for kind in AssetKind if self.get(kind) is not None}

    def to_payload(self, embed_base64: bool = True) -> Dict[str, Any]:
        return {
            "url": self.url,
            "generated_at": self.generated_at.isoformat(),
            "colors": self.colors.to_hex(),
            "assets": {
                kind.value: self.get(kind).to_payload(embed_base64)
                for kind in AssetKind
                if self.get(kind) is not None
            },
        }


@dataclass
class GenerateResult:
    """Tagged result: exactly one of ``assets`` / ``error`` is set."""
    job_id: str
    assets: Optional[GeneratedAssets] = None
    error: Optional[PipelineError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self, embed_base64: bool = True) -> Dict[str, Any]:
        if self.error is not None:
            return {"status": "error", "job_id": self.job_id, "error": self.error.to_dict()}
        return {
            "status": "success",
            "job_id": self.job_id,
            **self.assets.to_payload(embed_base64),
        }
