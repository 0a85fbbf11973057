"""Path layout for generated scripts.

Every project gets its own working directory under the artifacts root:
- <root>/<project>/deploy.rb     # project script
- <root>/<project>/<stage>.rb    # stage script
- <root>/<project>/Capfile       # written by the Capistrano runner
"""

from pathlib import Path
from typing import Union

from .models import Project, Stage

BASE_DIR = Path(".capforge")
ARTIFACTS_DIR = BASE_DIR / "projects"
STORE_FILE = BASE_DIR / "store.json"

DEPLOY_SCRIPT = "deploy.rb"


def project_dir(root: Union[str, Path], project: Project) -> Path:
    return Path(root) / project.artifact_name


def ensure_project_dir(root: Union[str, Path], project: Project) -> Path:
    """Create the project's working directory if it is missing."""
    directory = project_dir(root, project)
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def deploy_script_path(root: Union[str, Path], project: Project) -> Path:
    return project_dir(root, project) / DEPLOY_SCRIPT


def stage_script_path(root: Union[str, Path], project: Project, stage: Stage) -> Path:
    return project_dir(root, project) / f"{stage.name}.rb"
