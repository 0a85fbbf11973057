"""Deployer: runs one deployment from script generation to a pass/fail result."""

from __future__ import annotations

import os
import traceback
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional

import paramiko

from ..config import DeployerConfig
from ..models import Deployment
from ..paths import deploy_script_path, ensure_project_dir, stage_script_path
from ..runner import AuthenticationFailed, InvocationStatus, RunOptions, TaskRunner
from ..scripts import ScriptAssembler
from ..utils.logging import DeploymentLogger, deployment_logger
from .capture import OutputCapture
from .models import RunResult

if TYPE_CHECKING:
    from ..store import RecordStore

# runners built on paramiko raise its exception; the Capistrano runner raises ours
AUTHENTICATION_ERRORS = (AuthenticationFailed, paramiko.AuthenticationException)


class Deployer:
    """
    部署执行器

    Generates the project and stage scripts for a deployment, hands them to a
    task runner and reduces the run to ``True``/``False``. Every error raised
    while running is caught and logged here; none escapes ``execute``.
    """

    def __init__(
        self,
        deployment: Deployment,
        *,
        runner: TaskRunner,
        config: Optional[DeployerConfig] = None,
        logger: Optional[DeploymentLogger] = None,
        store: Optional["RecordStore"] = None,
    ) -> None:
        self.deployment = deployment
        self.runner = runner
        self.config = config or DeployerConfig()
        self.logger = logger or deployment_logger(deployment.id)
        self.store = store

        self.stage = deployment.stage
        self.project = deployment.project
        self.root = Path(self.config.artifacts_root)
        self.options = RunOptions(
            recipes=list(self.config.recipes),
            verbose=self.config.verbose,
        )
        self.last_result: Optional[RunResult] = None
        self._browser_log = ""

        if deployment.is_new:
            self.validate()

    @property
    def browser_log(self) -> str:
        """Output captured during the last run."""
        return self._browser_log

    @property
    def project_dir(self) -> Path:
        return self.root / self.project.artifact_name

    def validate(self) -> None:
        if not self.deployment.roles:
            raise ValueError("The given deployment has no roles and thus can not be deployed!")

    def invoke_task(self) -> bool:
        """Run the deployment's task and record how it ended."""
        self.options.actions = self.deployment.task.split()

        if self.execute():
            self.deployment.complete_successfully()
            success = True
        else:
            self.deployment.complete_with_error()
            success = False

        if self.store is not None:
            self.store.save_deployment(self.deployment)
        return success

    def execute(self) -> bool:
        return self.run().ok

    def run(self) -> RunResult:
        capture = OutputCapture(self.deployment.id)
        try:
            workdir = self.find_or_create_project_dir()
            self.write_deploy()
            self.write_stage()

            self.load_requirements(workdir)
            targets = self.targets()
            self.logger.trace("Invoking %s in %s", " ".join(targets), workdir)
            try:
                with capture:
                    status = self.runner.invoke(workdir, targets)
            finally:
                self._browser_log = capture.output
        except KeyboardInterrupt:
            # Ctrl-C 同时打断 cap 和当前进程，按中止处理
            self.logger.info("Run interrupted")
            self.last_result = RunResult.aborted(output=self._browser_log)
            return self.last_result
        except Exception as error:
            self.handle_error(error)
            self.last_result = RunResult.failed(error, output=self._browser_log)
            return self.last_result

        if status == InvocationStatus.ABORTED:
            self.logger.info("Task runner aborted the run")
            self.last_result = RunResult.aborted(output=self._browser_log)
        else:
            self.last_result = RunResult.success(output=self._browser_log)
        return self.last_result

    def targets(self) -> List[str]:
        """The stage, then the post-load hooks, then the requested actions."""
        return [self.stage.name, *self.config.post_load_tasks, *self.options.actions]

    def save_pid(self) -> None:
        """Record this process id so the deployment can be killed from outside."""
        self.deployment.pid = os.getpid()
        if self.store is not None:
            self.store.save_deployment(self.deployment)

    def handle_error(self, error: Exception) -> None:
        if isinstance(error, AUTHENTICATION_ERRORS):
            self.logger.important("authentication failed for `%s'", error)
        else:
            trace = "".join(traceback.format_exception(type(error), error, error.__traceback__))
            self.logger.important("%s\n%s", error, trace)

    def find_or_create_project_dir(self) -> Path:
        return ensure_project_dir(self.root, self.project)

    def write_deploy(self) -> Path:
        path = deploy_script_path(self.root, self.project)
        self.logger.info("Writing deploy configuration to %s", path)
        return ScriptAssembler(self.deployment).write_deploy(path)

    def write_stage(self) -> Path:
        path = stage_script_path(self.root, self.project, self.stage)
        self.logger.info("Writing stage configuration to %s", path)
        return ScriptAssembler(self.deployment).write_stage(path)

    def load_requirements(self, workdir: Optional[Path] = None) -> None:
        self.runner.load_requirements(workdir or self.project_dir, self.options)
