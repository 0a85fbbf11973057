"""Configuration loading utilities for capforge."""

from __future__ import annotations

import json
import os
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

from .paths import ARTIFACTS_DIR, STORE_FILE
from .runner.capistrano import DEFAULT_CAP_COMMAND, DEFAULT_REQUIREMENTS

# Load .env file if it exists
load_dotenv()

_DEFAULT_CONFIG_PATH = Path("config/default_config.json")

# 加载 stage 之后、执行 action 之前运行的钩子任务
DEFAULT_POST_LOAD_TASKS = ("rvm:hook", "bundler:map_bins")


@dataclass
class DeployerConfig:
    """Settings related to script generation and task execution."""

    artifacts_root: str = str(ARTIFACTS_DIR)
    cap_command: List[str] = field(default_factory=lambda: list(DEFAULT_CAP_COMMAND))
    requirements: List[str] = field(default_factory=lambda: list(DEFAULT_REQUIREMENTS))
    post_load_tasks: List[str] = field(default_factory=lambda: list(DEFAULT_POST_LOAD_TASKS))
    recipes: List[str] = field(default_factory=list)   # extra recipe files imported by the Capfile
    verbose: int = 3


@dataclass
class StoreConfig:
    """Location of the JSON record store."""

    path: str = str(STORE_FILE)


@dataclass
class InteractionConfig:
    """Configuration for user interaction."""

    enabled: bool = True   # ask for prompted parameters that were not passed on the CLI


@dataclass
class AppConfig:
    """Top-level configuration."""

    deployer: DeployerConfig = field(default_factory=DeployerConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    interaction: InteractionConfig = field(default_factory=InteractionConfig)

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "AppConfig":
        deployer_payload = _strip_comments(payload.get("deployer", {}) or {})
        store_payload = _strip_comments(payload.get("store", {}) or {})
        interaction_payload = _strip_comments(payload.get("interaction", {}) or {})

        return cls(
            deployer=DeployerConfig(**{**DeployerConfig().__dict__, **deployer_payload}),
            store=StoreConfig(**{**StoreConfig().__dict__, **store_payload}),
            interaction=InteractionConfig(
                **{**InteractionConfig().__dict__, **interaction_payload}
            ),
        )


def _strip_comments(section: Dict[str, Any]) -> Dict[str, Any]:
    # 过滤掉以下划线开头的注释字段
    return {k: v for k, v in section.items() if not k.startswith("_")}


def load_config(path: Optional[str] = None) -> AppConfig:
    """Load configuration from `path` or the default location.

    An explicit `path` must exist. Without one, `config/default_config.json`
    is used when present and built-in defaults otherwise.

    Environment variables (higher priority than config file):
    - CAPFORGE_ARTIFACTS_ROOT: Directory receiving the generated scripts
    - CAPFORGE_STORE_PATH: Path of the JSON record store
    - CAPFORGE_CAP_COMMAND: Command used to run Capistrano, e.g. "bundle exec cap"
    - CAPFORGE_VERBOSE: Verbosity handed to the task runner
    """

    if path:
        candidate = Path(path)
        if not candidate.is_file():
            raise FileNotFoundError(f"Could not find configuration file: {candidate}")
        config = _read_config(candidate)
    elif _DEFAULT_CONFIG_PATH.is_file():
        config = _read_config(_DEFAULT_CONFIG_PATH)
    else:
        config = AppConfig()

    env_root = os.getenv("CAPFORGE_ARTIFACTS_ROOT")
    if env_root:
        config.deployer.artifacts_root = env_root

    env_store = os.getenv("CAPFORGE_STORE_PATH")
    if env_store:
        config.store.path = env_store

    env_cap = os.getenv("CAPFORGE_CAP_COMMAND")
    if env_cap:
        config.deployer.cap_command = shlex.split(env_cap)

    env_verbose = os.getenv("CAPFORGE_VERBOSE")
    if env_verbose:
        config.deployer.verbose = int(env_verbose)

    return config


def _read_config(path: Path) -> AppConfig:
    with path.open("r", encoding="utf-8") as handle:
        data = json.load(handle)
    return AppConfig.from_dict(data)
