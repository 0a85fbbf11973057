"""Configuration records consumed by the script assembler and the deployer."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Set


class DeploymentStatus(str, Enum):
    """Terminal state of a deployment."""
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class Host:
    id: int
    name: str


@dataclass
class ConfigurationParameter:
    """A name/raw-value pair owned by a project or a stage.

    When ``prompt_on_deploy`` is set the stored value is ignored and the value
    is taken from the deployment's prompt mapping instead.
    """

    name: str
    value: Optional[str] = None
    prompt_on_deploy: bool = False

    def prompt(self) -> bool:
        return self.prompt_on_deploy


@dataclass
class Role:
    name: str
    host: Host

    @property
    def host_id(self) -> int:
        return self.host.id


@dataclass
class Recipe:
    """Opaque block of task-runner script text attached to a stage."""

    name: str
    body: str = ""


@dataclass
class Stage:
    id: int
    name: str
    project: Optional["Project"] = field(default=None, repr=False, compare=False)
    roles: List[Role] = field(default_factory=list)
    configuration_parameters: List[ConfigurationParameter] = field(default_factory=list)
    recipes: List[Recipe] = field(default_factory=list)


@dataclass
class Project:
    id: int
    name: str
    configuration_parameters: List[ConfigurationParameter] = field(default_factory=list)
    stages: List[Stage] = field(default_factory=list)

    @property
    def artifact_name(self) -> str:
        """Filesystem-safe name of the project's working directory."""
        slug = re.sub(r"[^a-z0-9]+", "_", self.name.strip().lower()).strip("_")
        return slug or f"project_{self.id}"

    def add_stage(self, stage: Stage) -> Stage:
        stage.project = self
        self.stages.append(stage)
        return stage

    def find_parameter(self, name: str) -> Optional[ConfigurationParameter]:
        for parameter in self.configuration_parameters:
            if parameter.name == name:
                return parameter
        return None


class DeploymentAlreadyCompleted(RuntimeError):
    """Raised when a finished deployment is completed a second time."""

    pass


@dataclass
class Deployment:
    """The unit of work: one task run against one stage."""

    id: int
    stage: Stage
    task: str = "deploy"
    excluded_host_ids: Set[str] = field(default_factory=set)
    prompt_config: Dict[str, str] = field(default_factory=dict)
    status: DeploymentStatus = DeploymentStatus.PENDING
    pid: Optional[int] = None
    is_new: bool = True
    completed_at: Optional[str] = None

    def __post_init__(self) -> None:
        # host ids arrive as ints from records and as strings from the CLI
        self.excluded_host_ids = {str(host_id) for host_id in self.excluded_host_ids}

    @property
    def project(self) -> Project:
        if self.stage.project is None:
            raise ValueError(f"Stage {self.stage.name!r} is not attached to a project")
        return self.stage.project

    @property
    def roles(self) -> List[Role]:
        return [role for role in self.stage.roles if not self.excludes(role)]

    def excludes(self, role: Role) -> bool:
        return str(role.host_id) in self.excluded_host_ids

    @property
    def completed(self) -> bool:
        return self.status != DeploymentStatus.PENDING

    def complete_successfully(self) -> None:
        self._complete(DeploymentStatus.SUCCEEDED)

    def complete_with_error(self) -> None:
        self._complete(DeploymentStatus.FAILED)

    def _complete(self, status: DeploymentStatus) -> None:
        if self.completed:
            raise DeploymentAlreadyCompleted(
                f"Deployment {self.id} already completed with status {self.status.value}"
            )
        self.status = status
        self.completed_at = datetime.now().isoformat()
