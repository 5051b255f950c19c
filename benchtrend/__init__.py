"""Benchmark history and CI build trend toolkit."""

from benchtrend.records.builds import BuildRecord, Builds
from benchtrend.records.snapshots import Snapshot, Snapshots

__all__ = [
    "BuildRecord",
    "Builds",
    "Snapshot",
    "Snapshots",
]

__version__ = "0.1.0"
