"""Benchmark history and CI build record loaders."""

from benchtrend.records.builds import BuildRecord, Builds, load_build_history
from benchtrend.records.snapshots import Snapshot, Snapshots

__all__ = [
    "BuildRecord",
    "Builds",
    "Snapshot",
    "Snapshots",
    "load_build_history",
]
