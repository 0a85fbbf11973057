"""Builders for configuration records used across the tests."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Sequence

from capforge.models import ConfigurationParameter, Deployment, Host, Project, Recipe, Role, Stage
from capforge.runner import InvocationStatus, RunOptions, TaskRunner


def param(name: str, value: Optional[str] = None, prompt: bool = False) -> ConfigurationParameter:
    return ConfigurationParameter(name=name, value=value, prompt_on_deploy=prompt)


def build_project(
    project_parameters: Optional[List[ConfigurationParameter]] = None,
    stage_parameters: Optional[List[ConfigurationParameter]] = None,
    recipes: Optional[List[Recipe]] = None,
    hosts: Sequence[str] = ("app1.example.com", "app2.example.com"),
    stage_name: str = "production",
) -> Project:
    if project_parameters is None:
        project_parameters = [param("application", "shop"), param("user", "deploy")]
    project = Project(id=1, name="Shop", configuration_parameters=project_parameters)
    roles = [
        Role(name="app" if index == 1 else f"web{index}", host=Host(id=index, name=name))
        for index, name in enumerate(hosts, 1)
    ]
    project.add_stage(
        Stage(
            id=1,
            name=stage_name,
            roles=roles,
            configuration_parameters=list(stage_parameters or []),
            recipes=list(recipes or []),
        )
    )
    return project


def build_deployment(project: Optional[Project] = None, **kwargs) -> Deployment:
    project = project or build_project()
    return Deployment(id=kwargs.pop("id", 7), stage=project.stages[0], **kwargs)


class FakeRunner(TaskRunner):
    """Records calls instead of running anything."""

    def __init__(
        self,
        status: InvocationStatus = InvocationStatus.COMPLETED,
        error: Optional[BaseException] = None,
        output: str = "",
    ) -> None:
        self.status = status
        self.error = error
        self.output = output
        self.loaded: List[Path] = []
        self.invocations: List[List[str]] = []
        self.options: Optional[RunOptions] = None

    def load_requirements(self, workdir: Path, options: RunOptions) -> None:
        self.loaded.append(workdir)
        self.options = options

    def invoke(self, workdir: Path, targets: Sequence[str]) -> InvocationStatus:
        self.invocations.append(list(targets))
        if self.output:
            print(self.output)
        if self.error is not None:
            raise self.error
        return self.status
