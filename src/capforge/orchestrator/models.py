"""Result types for deployer runs."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class RunStatus(Enum):
    """运行结果"""
    SUCCESS = "success"
    ABORTED = "aborted"     # cooperative stop requested by the task runner
    ERROR = "error"


@dataclass
class RunResult:
    """Outcome of one deployer run, with the output captured while it ran."""
    status: RunStatus
    error: Optional[Exception] = None
    output: str = ""

    @property
    def ok(self) -> bool:
        return self.status == RunStatus.SUCCESS

    @classmethod
    def success(cls, output: str = "") -> "RunResult":
        return cls(status=RunStatus.SUCCESS, output=output)

    @classmethod
    def aborted(cls, output: str = "") -> "RunResult":
        return cls(status=RunStatus.ABORTED, output=output)

    @classmethod
    def failed(cls, error: Exception, output: str = "") -> "RunResult":
        return cls(status=RunStatus.ERROR, error=error, output=output)
