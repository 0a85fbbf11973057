"""Orchestrator module for running deployments.

- Deployer: writes the scripts, invokes the task runner, classifies the outcome
- OutputCapture: scoped redirection of standard output during a run
- RunResult/RunStatus: three-way outcome of a run
"""

from .capture import DEPLOYMENT_ID_ENV, OutputCapture
from .deployer import AUTHENTICATION_ERRORS, Deployer
from .models import RunResult, RunStatus

__all__ = [
    "AUTHENTICATION_ERRORS",
    "DEPLOYMENT_ID_ENV",
    "Deployer",
    "OutputCapture",
    "RunResult",
    "RunStatus",
]
