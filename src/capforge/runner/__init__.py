"""Task runners that execute deployment actions against generated scripts."""

from .base import AuthenticationFailed, InvocationStatus, RunOptions, TaskRunner, TaskRunnerError
from .capistrano import CapistranoRunner

__all__ = [
    "AuthenticationFailed",
    "InvocationStatus",
    "RunOptions",
    "TaskRunner",
    "TaskRunnerError",
    "CapistranoRunner",
]
