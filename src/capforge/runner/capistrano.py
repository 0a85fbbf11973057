"""Task runner backed by the Capistrano ``cap`` executable."""

from __future__ import annotations

import re
import signal
import subprocess
import sys
from collections import deque
from pathlib import Path
from typing import Deque, Iterable, List, Mapping, Optional, Sequence

from ..scripts.literals import set_non_string_parameter
from ..scripts.typecast import to_literal, type_cast
from ..utils.logging import TRACE, get_logger
from .base import AuthenticationFailed, InvocationStatus, RunOptions, TaskRunner, TaskRunnerError

logger = get_logger(__name__)

CAPFILE = "Capfile"

DEFAULT_CAP_COMMAND = ("bundle", "exec", "cap")

DEFAULT_REQUIREMENTS = (
    "capistrano/deploy",
    "capistrano/rvm",
    "capistrano/bundler",
    "capistrano/rails/migrations",
    "capistrano/rails/assets",
)

# cap killed by SIGINT/SIGTERM, either directly or through a wrapping shell
_ABORT_STATUSES = frozenset(
    {
        -signal.SIGINT,
        -signal.SIGTERM,
        128 + signal.SIGINT,
        128 + signal.SIGTERM,
    }
)

_AUTH_FAILED_RE = re.compile(
    r"Net::SSH::AuthenticationFailed:?\s*(?:Authentication failed for user\s+)?(\S*)"
)

_OUTPUT_TAIL_LINES = 200

_CAPFILE_PRELUDE = """\
# Generated by capforge before every run; local edits are overwritten.
include Capistrano::DSL
"""

_CAPFILE_TASKS = """\
namespace :load do
  task :defaults do
    load 'capistrano/defaults.rb'
  end
end

task :custom_log do
  puts "[deployment #{ENV['deployment_id']}] #{fetch(:stage)} checkpoint reached"
end
"""

_STAGE_TASK = """\
Rake::Task.define_task('{stage}') do
  set :stage, :'{stage}'
  invoke 'load:defaults'
  load '{deploy_script}'
  load '{stage_script}'
  configure_backend
end
"""


class CapistranoRunner(TaskRunner):
    """Runs ``cap <stage> <hooks...> <actions...>`` in a project directory.

    Output of the ``cap`` process is streamed line by line to ``sys.stdout``,
    which the deployer has redirected into its capture buffer.
    """

    def __init__(
        self,
        cap_command: Optional[Sequence[str]] = None,
        requirements: Optional[Iterable[str]] = None,
        deploy_script: str = "deploy.rb",
    ) -> None:
        self.cap_command: List[str] = list(cap_command or DEFAULT_CAP_COMMAND)
        self.requirements: List[str] = list(
            DEFAULT_REQUIREMENTS if requirements is None else requirements
        )
        self.deploy_script = deploy_script
        self.options = RunOptions()

    def load_requirements(self, workdir: Path, options: RunOptions) -> None:
        self.options = options
        stages = sorted(
            path.stem for path in workdir.glob("*.rb") if path.name != self.deploy_script
        )
        capfile = workdir / CAPFILE
        capfile.write_text(self.render_capfile(stages, options), encoding="utf-8")
        logger.debug("Wrote %s with %d requirement(s)", capfile, len(self.requirements))

    def render_capfile(self, stages: Sequence[str], options: RunOptions) -> str:
        sections = [_CAPFILE_PRELUDE]
        if options.pre_vars:
            sections.append(_set_lines(options.pre_vars))
        sections.append("".join(f"require '{name}'\n" for name in self.requirements))
        if options.recipes:
            sections.append("".join(f"import '{recipe}'\n" for recipe in options.recipes))
        sections.append(_CAPFILE_TASKS)
        for stage in stages:
            sections.append(
                _STAGE_TASK.format(
                    stage=stage,
                    deploy_script=self.deploy_script,
                    stage_script=f"{stage}.rb",
                )
            )
        if options.vars:
            sections.append(_set_lines(options.vars))
        return "\n".join(sections)

    def invoke(self, workdir: Path, targets: Sequence[str]) -> InvocationStatus:
        command = [*self.cap_command, *targets]
        if self.options.verbose >= 3:
            command.append("--trace")
        logger.info("Running %s in %s", " ".join(command), workdir)

        process = subprocess.Popen(
            command,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            encoding="utf-8",
            errors="replace",
            cwd=str(workdir),
        )
        tail: Deque[str] = deque(maxlen=_OUTPUT_TAIL_LINES)
        finished = False
        try:
            if process.stdout is None:
                raise TaskRunnerError("cap output pipe was not opened")
            with process.stdout:
                for line in process.stdout:
                    tail.append(line)
                    logger.log(TRACE, "cap: %s", line.rstrip("\n"))
                    sys.stdout.write(line)
                    sys.stdout.flush()
            finished = True
        finally:
            if not finished:
                # 读取中断时结束子进程，避免残留
                process.kill()
                process.wait()
        exit_status = process.wait()
        return self._status_for(exit_status, "".join(tail))

    def _status_for(self, exit_status: int, output: str) -> InvocationStatus:
        if exit_status == 0:
            return InvocationStatus.COMPLETED
        if exit_status in _ABORT_STATUSES:
            logger.info("cap was interrupted (exit status %d)", exit_status)
            return InvocationStatus.ABORTED
        match = _AUTH_FAILED_RE.search(output)
        if match:
            raise AuthenticationFailed(match.group(1) or "unknown user")
        raise TaskRunnerError(f"{' '.join(self.cap_command)} exited with status {exit_status}")


def _set_lines(values: Mapping[str, str]) -> str:
    return "".join(
        set_non_string_parameter(name, to_literal(type_cast(value))) + "\n"
        for name, value in values.items()
    )
