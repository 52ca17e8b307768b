"""Batch-level services: environment checks, progress, orchestration."""

from .environment import check_environment
from .orchestrator import BatchOrchestrator
from .progress import ProgressSnapshot, ProgressTracker

__all__ = [
    "BatchOrchestrator",
    "ProgressSnapshot",
    "ProgressTracker",
    "check_environment",
]
