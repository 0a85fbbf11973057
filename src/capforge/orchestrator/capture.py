"""Scoped capture of standard output for the duration of a run."""

from __future__ import annotations

import io
import os
import sys
from typing import Any, Optional, TextIO

DEPLOYMENT_ID_ENV = "deployment_id"


class OutputCapture:
    """Redirects ``sys.stdout`` into a private buffer and exports the deployment id.

    Both the stream and the environment variable are restored on exit, whether
    the block finished, returned early or raised. The captured text stays
    available as ``output`` afterwards.

    Usage:
        with OutputCapture(deployment.id) as capture:
            runner.invoke(...)
        log = capture.output
    """

    def __init__(self, deployment_id: Any) -> None:
        self.deployment_id = str(deployment_id)
        self.output = ""
        self._buffer: Optional[io.StringIO] = None
        self._saved_stdout: Optional[TextIO] = None
        self._saved_env: Optional[str] = None

    @property
    def active(self) -> bool:
        return self._buffer is not None

    def getvalue(self) -> str:
        if self._buffer is not None:
            return self._buffer.getvalue()
        return self.output

    def __enter__(self) -> "OutputCapture":
        if self.active:
            raise RuntimeError("Output capture is already active")
        self._buffer = io.StringIO()
        self._saved_stdout = sys.stdout
        self._saved_env = os.environ.get(DEPLOYMENT_ID_ENV)
        sys.stdout = self._buffer
        os.environ[DEPLOYMENT_ID_ENV] = self.deployment_id
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        if self._buffer is None:
            raise RuntimeError("Output capture is not active")
        sys.stdout = self._saved_stdout
        if self._saved_env is None:
            os.environ.pop(DEPLOYMENT_ID_ENV, None)
        else:
            os.environ[DEPLOYMENT_ID_ENV] = self._saved_env
        self.output = self._buffer.getvalue()
        self._buffer.close()
        self._buffer = None
        self._saved_stdout = None
