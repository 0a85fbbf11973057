"""Task runner interface used by the deployer."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Sequence


class InvocationStatus(str, Enum):
    """How a task runner invocation ended when it did not raise."""
    COMPLETED = "completed"
    ABORTED = "aborted"      # the runner stopped deliberately


class TaskRunnerError(RuntimeError):
    """Raised when the task runner fails to execute the requested tasks."""

    pass


class AuthenticationFailed(TaskRunnerError):
    """Raised when the runner could not authenticate against a host."""

    pass


@dataclass
class RunOptions:
    """Options handed to the task runner for one run."""

    recipes: List[str] = field(default_factory=list)
    actions: List[str] = field(default_factory=list)
    vars: Dict[str, str] = field(default_factory=dict)
    pre_vars: Dict[str, str] = field(default_factory=dict)
    verbose: int = 3


class TaskRunner(ABC):
    """Executes named tasks against the scripts in a working directory."""

    @abstractmethod
    def load_requirements(self, workdir: Path, options: RunOptions) -> None:
        """Make the runner's extension modules available for ``workdir``."""
        pass

    @abstractmethod
    def invoke(self, workdir: Path, targets: Sequence[str]) -> InvocationStatus:
        """
        Run ``targets`` in order: the stage first, then hooks and actions.

        Returns:
            InvocationStatus.COMPLETED or InvocationStatus.ABORTED

        Raises:
            TaskRunnerError: the runner failed
        """
        pass
