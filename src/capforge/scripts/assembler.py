"""Assemble the project and stage scripts handed to the task runner."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List

from ..models import Deployment, Role
from ..utils.logging import get_logger
from .literals import render_parameter

logger = get_logger(__name__)

LIFECYCLE_CHECKPOINTS = (
    "deploy:started",
    "deploy:updated",
    "deploy:published",
    "deploy:finished",
)

HOST_USER_PARAMETER = "user"


class ParameterNotFound(LookupError):
    """Raised when a parameter required for assembly is not configured."""

    pass


def after_flow(task: str) -> str:
    return f"after '{task}', :custom_log"


def role_line(role: Role, user: str) -> str:
    return f"role :{role.name}, %w{{{user}@{role.host.name}}}"


class ScriptAssembler:
    """Builds the lines of both scripts for one deployment and writes them."""

    def __init__(self, deployment: Deployment) -> None:
        self.deployment = deployment
        self.stage = deployment.stage
        self.project = deployment.project

    def deploy_lines(self) -> List[str]:
        lines = self._parameter_lines(self.project.configuration_parameters)
        lines.append(after_flow(self.stage.name))
        lines.extend(after_flow(checkpoint) for checkpoint in LIFECYCLE_CHECKPOINTS)
        return lines

    def stage_lines(self) -> List[str]:
        lines: List[str] = []
        for role in self.stage.roles:
            if self.deployment.excludes(role):
                logger.debug("Skipping role %s on excluded host %s", role.name, role.host_id)
                continue
            lines.append(role_line(role, self.host_user()))
        lines.extend(self._parameter_lines(self.stage.configuration_parameters))
        for recipe in self.stage.recipes:
            lines.append(recipe.body.removesuffix("\n"))
        return lines

    def host_user(self) -> str:
        parameter = self.project.find_parameter(HOST_USER_PARAMETER)
        if parameter is None:
            raise ParameterNotFound(
                f"Project {self.project.name!r} has no {HOST_USER_PARAMETER!r} parameter"
            )
        return parameter.value or ""

    def write_deploy(self, path: Path) -> Path:
        return _write_lines(path, self.deploy_lines())

    def write_stage(self, path: Path) -> Path:
        return _write_lines(path, self.stage_lines())

    def _parameter_lines(self, parameters: Iterable) -> List[str]:
        rendered = (
            render_parameter(parameter, self.deployment.prompt_config)
            for parameter in parameters
        )
        return [line for line in rendered if line is not None]


def _write_lines(path: Path, lines: List[str]) -> Path:
    # lines are built before the file is opened, so a failed assembly leaves
    # the previous script untouched
    path.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")
    return path
