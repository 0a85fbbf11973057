"""JSON-backed record store for projects, stages and deployments."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from .models import (
    ConfigurationParameter,
    Deployment,
    DeploymentStatus,
    Host,
    Project,
    Recipe,
    Role,
    Stage,
)
from .utils.logging import get_logger

logger = get_logger(__name__)


class RecordNotFound(LookupError):
    """Raised when a requested record does not exist."""

    pass


class RecordStore:
    """Loads configuration records from a JSON document and persists deployments.

    Document layout::

        {
          "hosts": [{"id": 1, "name": "app1.example.com"}],
          "projects": [{
            "id": 1, "name": "Shop",
            "configuration_parameters": [{"name": "user", "value": "deploy"}],
            "stages": [{
              "id": 1, "name": "production",
              "roles": [{"name": "app", "host_id": 1}],
              "configuration_parameters": [],
              "recipes": [{"name": "restart", "body": "..."}]
            }]
          }],
          "deployments": []
        }

    Prompt answers are never written back to the document.
    """

    def __init__(self, payload: Optional[Dict[str, Any]] = None, path: Optional[Path] = None) -> None:
        payload = payload or {}
        self.path = path
        self.hosts: Dict[int, Host] = {
            int(item["id"]): Host(id=int(item["id"]), name=item["name"])
            for item in payload.get("hosts", [])
        }
        self.projects: List[Project] = [
            self._build_project(item) for item in payload.get("projects", [])
        ]
        self._deployments: Dict[int, Deployment] = {}
        for item in payload.get("deployments", []):
            deployment = self._build_deployment(item)
            self._deployments[deployment.id] = deployment

    @classmethod
    def load(cls, path: Union[str, Path]) -> "RecordStore":
        path = Path(path)
        if not path.is_file():
            raise FileNotFoundError(f"Record store not found: {path}")
        payload = json.loads(path.read_text(encoding="utf-8"))
        return cls(payload, path=path)

    def host(self, host_id: Union[int, str]) -> Host:
        try:
            return self.hosts[int(host_id)]
        except (KeyError, ValueError):
            raise RecordNotFound(f"Host {host_id!r} not found") from None

    def project(self, name: str) -> Project:
        for project in self.projects:
            if project.name == name or project.artifact_name == name:
                return project
        raise RecordNotFound(f"Project {name!r} not found")

    def stage(self, project_name: str, stage_name: str) -> Stage:
        project = self.project(project_name)
        for stage in project.stages:
            if stage.name == stage_name:
                return stage
        raise RecordNotFound(f"Stage {stage_name!r} not found in project {project.name!r}")

    def deployment(self, deployment_id: int) -> Deployment:
        try:
            return self._deployments[int(deployment_id)]
        except KeyError:
            raise RecordNotFound(f"Deployment {deployment_id!r} not found") from None

    def deployments(self, project_name: Optional[str] = None) -> List[Deployment]:
        found = sorted(self._deployments.values(), key=lambda d: d.id)
        if project_name is None:
            return found
        project = self.project(project_name)
        return [d for d in found if d.stage.project is project]

    def create_deployment(
        self,
        stage: Stage,
        task: str = "deploy",
        excluded_host_ids: Iterable[Union[int, str]] = (),
        prompt_config: Optional[Dict[str, str]] = None,
    ) -> Deployment:
        """Create a pending deployment. It is persisted by ``save_deployment``."""
        next_id = max(self._deployments, default=0) + 1
        deployment = Deployment(
            id=next_id,
            stage=stage,
            task=task,
            excluded_host_ids=set(str(host_id) for host_id in excluded_host_ids),
            prompt_config=dict(prompt_config or {}),
        )
        self._deployments[deployment.id] = deployment
        return deployment

    def save_deployment(self, deployment: Deployment) -> None:
        self._deployments[deployment.id] = deployment
        deployment.is_new = False
        self.persist()

    def persist(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self.to_dict(), indent=2), encoding="utf-8")
        logger.debug("Saved record store to %s", self.path)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hosts": [{"id": host.id, "name": host.name} for host in self.hosts.values()],
            "projects": [_project_to_dict(project) for project in self.projects],
            "deployments": [
                _deployment_to_dict(deployment) for deployment in self.deployments()
            ],
        }

    def _build_project(self, item: Dict[str, Any]) -> Project:
        project = Project(
            id=int(item["id"]),
            name=item["name"],
            configuration_parameters=_build_parameters(item.get("configuration_parameters", [])),
        )
        for stage_item in item.get("stages", []):
            project.add_stage(
                Stage(
                    id=int(stage_item["id"]),
                    name=stage_item["name"],
                    roles=[
                        Role(name=role["name"], host=self.host(role["host_id"]))
                        for role in stage_item.get("roles", [])
                    ],
                    configuration_parameters=_build_parameters(
                        stage_item.get("configuration_parameters", [])
                    ),
                    recipes=[
                        Recipe(name=recipe.get("name", ""), body=recipe.get("body", ""))
                        for recipe in stage_item.get("recipes", [])
                    ],
                )
            )
        return project

    def _build_deployment(self, item: Dict[str, Any]) -> Deployment:
        return Deployment(
            id=int(item["id"]),
            stage=self.stage(item["project"], item["stage"]),
            task=item.get("task", "deploy"),
            excluded_host_ids=set(item.get("excluded_host_ids", [])),
            status=DeploymentStatus(item.get("status", DeploymentStatus.PENDING.value)),
            pid=item.get("pid"),
            is_new=False,
            completed_at=item.get("completed_at"),
        )


def _build_parameters(items: Iterable[Dict[str, Any]]) -> List[ConfigurationParameter]:
    return [
        ConfigurationParameter(
            name=item["name"],
            value=item.get("value"),
            prompt_on_deploy=bool(item.get("prompt_on_deploy", False)),
        )
        for item in items
    ]


def _parameters_to_list(parameters: Iterable[ConfigurationParameter]) -> List[Dict[str, Any]]:
    return [
        {
            "name": parameter.name,
            "value": parameter.value,
            "prompt_on_deploy": parameter.prompt_on_deploy,
        }
        for parameter in parameters
    ]


def _project_to_dict(project: Project) -> Dict[str, Any]:
    return {
        "id": project.id,
        "name": project.name,
        "configuration_parameters": _parameters_to_list(project.configuration_parameters),
        "stages": [
            {
                "id": stage.id,
                "name": stage.name,
                "roles": [{"name": role.name, "host_id": role.host_id} for role in stage.roles],
                "configuration_parameters": _parameters_to_list(stage.configuration_parameters),
                "recipes": [{"name": recipe.name, "body": recipe.body} for recipe in stage.recipes],
            }
            for stage in project.stages
        ],
    }


def _deployment_to_dict(deployment: Deployment) -> Dict[str, Any]:
    return {
        "id": deployment.id,
        "project": deployment.project.name,
        "stage": deployment.stage.name,
        "task": deployment.task,
        "excluded_host_ids": sorted(deployment.excluded_host_ids),
        "status": deployment.status.value,
        "pid": deployment.pid,
        "completed_at": deployment.completed_at,
    }
