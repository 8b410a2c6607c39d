"""
Memory gate.

Admission refuses new jobs when the process tree is already close to its
hard memory ceiling. The ceiling is, in order: an explicit limit, the cgroup
limit of the container, total system memory.
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import psutil
from loguru import logger

from ..errors import Busy

CGROUP_LIMIT_FILES = (
    Path("/sys/fs/cgroup/memory.max"),  # cgroup v2
    Path("/sys/fs/cgroup/memory/memory.limit_in_bytes"),  # cgroup v1
)
# cgroup v1 reports "no limit" as a huge page-aligned number
_UNLIMITED = 1 << 60


@dataclass(frozen=True)
class MemoryReading:
    used_bytes: int
    limit_bytes: int

    @property
    def ratio(self) -> float:
        return self.used_bytes / self.limit_bytes if self.limit_bytes else 0.0

    def __str__(self) -> str:
        return (
            f"{self.used_bytes / 2**20:.0f}MB / {self.limit_bytes / 2**20:.0f}MB "
            f"({self.ratio:.0%})"
        )


def process_tree_rss() -> int:
    """Resident memory of this process plus its children (browser, ffmpeg)."""
    process = psutil.Process()
    total = process.memory_info().rss
    for child in process.children(recursive=True):
        try:
            total += child.memory_info().rss
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            continue
    return total


def detect_memory_limit() -> int:
    for path in CGROUP_LIMIT_FILES:
        try:
            raw = path.read_text().strip()
        except OSError:
            continue
        if raw.isdigit() and int(raw) < _UNLIMITED:
            return int(raw)
    return psutil.virtual_memory().total


class MemoryGate:
    def __init__(
        self,
        threshold: float = 0.8,
        limit_bytes: Optional[int] = None,
        reader: Callable[[], int] = process_tree_rss,
    ):
        self.threshold = threshold
        self.limit_bytes = limit_bytes or detect_memory_limit()
        self._reader = reader

    def read(self) -> MemoryReading:
        return MemoryReading(used_bytes=self._reader(), limit_bytes=self.limit_bytes)

    def check(self, reading: Optional[MemoryReading] = None) -> MemoryReading:
        """
        Refuse admission above the threshold. Takes a fresh reading unless
        one is passed in.

        Raises:
            Busy: usage is at or above ``threshold`` of the ceiling
        """
        reading = reading or self.read()
        if reading.ratio >= self.threshold:
            logger.warning(f"[Pipeline] Memory pressure, rejecting job: {reading}")
            raise Busy(
                f"Server is under memory pressure ({reading.ratio:.0%} of limit); "
                "try again shortly"
            )
        return reading
