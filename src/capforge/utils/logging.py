"""Logging helpers."""

from __future__ import annotations

import logging
from typing import Any, MutableMapping, Optional, Tuple

TRACE = 5
IMPORTANT = 25

logging.addLevelName(TRACE, "TRACE")
logging.addLevelName(IMPORTANT, "IMPORTANT")

_LOGGING_CONFIGURED = False


def get_logger(name: Optional[str] = None) -> logging.Logger:
    global _LOGGING_CONFIGURED
    if not _LOGGING_CONFIGURED:
        logging.basicConfig(
            level=logging.INFO,
            format="[%(asctime)s] %(levelname)s %(name)s - %(message)s",
        )
        _LOGGING_CONFIGURED = True
    return logging.getLogger(name)


class DeploymentLogger(logging.LoggerAdapter):
    """Logger adapter that tags every message with a deployment id.

    Adds the ``important`` severity the deployer reports failures with, and
    ``trace`` for runner chatter below DEBUG.
    """

    def __init__(self, logger: logging.Logger, deployment_id: Any) -> None:
        super().__init__(logger, {"deployment_id": deployment_id})

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> Tuple[Any, MutableMapping[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        extra.setdefault("deployment_id", self.extra["deployment_id"])
        kwargs["extra"] = extra
        return f"[deployment {self.extra['deployment_id']}] {msg}", kwargs

    def important(self, msg: Any, *args: Any, **kwargs: Any) -> None:
        self.log(IMPORTANT, msg, *args, **kwargs)

    def trace(self, msg: Any, *args: Any, **kwargs: Any) -> None:
        self.log(TRACE, msg, *args, **kwargs)


def deployment_logger(deployment_id: Any, name: str = "capforge.deployment") -> DeploymentLogger:
    """Adapter for one deployment; its logger reports down to ``TRACE``."""
    logger = get_logger(name)
    logger.setLevel(TRACE)
    return DeploymentLogger(logger, deployment_id)
