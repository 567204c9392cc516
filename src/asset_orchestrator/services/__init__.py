"""Orchestration services: job runner, batch coordinator and wiring."""

from .batch_coordinator import BatchCoordinator
from .container import Orchestrator, build_orchestrator
from .failures import classify_failure, user_message
from .job_runner import JobRunner
from .narration import NarrationPool

__all__ = [
    "BatchCoordinator",
    "JobRunner",
    "NarrationPool",
    "Orchestrator",
    "build_orchestrator",
    "classify_failure",
    "user_message",
]
