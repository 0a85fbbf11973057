"""Command-line interface for capforge."""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from .config import AppConfig, load_config
from .interaction import ParameterPrompter
from .models import Deployment
from .orchestrator import Deployer
from .paths import deploy_script_path, ensure_project_dir, stage_script_path
from .runner import CapistranoRunner
from .scripts import ParameterNotFound, ScriptAssembler
from .store import RecordNotFound, RecordStore


@dataclass
class CLIContext:
    """Context captured from CLI arguments."""

    config: AppConfig
    store: RecordStore


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="capforge",
        description="Generate Capistrano scripts from stored configuration and run deployments.",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to a JSON config file overriding defaults.",
    )
    parser.add_argument(
        "--store",
        type=str,
        default=None,
        help="Path to the JSON record store.",
    )
    parser.add_argument(
        "--root",
        type=str,
        default=None,
        help="Directory receiving the generated scripts.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    deploy_parser = subparsers.add_parser("deploy", help="Run a task against a stage")
    _add_target_arguments(deploy_parser)
    deploy_parser.add_argument(
        "--task", default="deploy", help="Task (or space separated tasks) to run"
    )
    deploy_parser.add_argument(
        "--set", action="append", default=[], metavar="NAME=VALUE", dest="vars",
        help="Variable set after the recipes are loaded (repeatable)",
    )
    deploy_parser.add_argument(
        "--pre-set", action="append", default=[], metavar="NAME=VALUE", dest="pre_vars",
        help="Variable set before the recipes are loaded (repeatable)",
    )
    deploy_parser.add_argument(
        "--no-input", action="store_true",
        help="Never ask for prompted parameters",
    )

    # render 子命令 - 只生成脚本，不执行
    render_parser = subparsers.add_parser(
        "render", help="Write and print the generated scripts without running them"
    )
    _add_target_arguments(render_parser)

    list_parser = subparsers.add_parser("deployments", help="List recorded deployments")
    list_parser.add_argument("--project", default=None, help="Only show this project")

    return parser


def _add_target_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--project", required=True, help="Project name")
    parser.add_argument("--stage", required=True, help="Stage name")
    parser.add_argument(
        "--exclude-host", action="append", default=[], dest="excluded_hosts", metavar="HOST_ID",
        help="Host id to leave out of the role list (repeatable)",
    )
    parser.add_argument(
        "--prompt", action="append", default=[], metavar="NAME=VALUE",
        help="Value for a prompted parameter (repeatable)",
    )


def parse_assignments(items: List[str]) -> Dict[str, str]:
    values: Dict[str, str] = {}
    for item in items:
        name, separator, value = item.partition("=")
        if not separator or not name.strip():
            raise ValueError(f"Expected NAME=VALUE, got {item!r}")
        values[name.strip()] = value
    return values


def _build_context(args: argparse.Namespace) -> CLIContext:
    config = load_config(args.config)
    if args.root:
        config.deployer.artifacts_root = args.root
    if args.store:
        config.store.path = args.store
    store = RecordStore.load(config.store.path)
    return CLIContext(config=config, store=store)


def _create_deployment(
    args: argparse.Namespace, context: CLIContext, task: str, ask: bool
) -> Deployment:
    stage = context.store.stage(args.project, args.stage)
    deployment = context.store.create_deployment(
        stage,
        task=task,
        excluded_host_ids=args.excluded_hosts,
        prompt_config=parse_assignments(args.prompt),
    )
    if ask:
        deployment.prompt_config = ParameterPrompter().collect(
            deployment, deployment.prompt_config
        )
    return deployment


def handle_deploy_command(args: argparse.Namespace, context: CLIContext) -> int:
    ask = context.config.interaction.enabled and not args.no_input
    deployment = _create_deployment(args, context, args.task, ask)

    deployer_config = context.config.deployer
    runner = CapistranoRunner(
        cap_command=deployer_config.cap_command,
        requirements=deployer_config.requirements,
    )
    deployer = Deployer(
        deployment,
        runner=runner,
        config=deployer_config,
        store=context.store,
    )
    deployer.options.vars = parse_assignments(args.vars)
    deployer.options.pre_vars = parse_assignments(args.pre_vars)
    deployer.save_pid()

    success = deployer.invoke_task()
    if deployer.browser_log:
        print(deployer.browser_log, end="" if deployer.browser_log.endswith("\n") else "\n")

    status_emoji = "✅" if success else "❌"
    print(f"{status_emoji} Deployment {deployment.id} {deployment.status.value}")
    return 0 if success else 1


def handle_render_command(args: argparse.Namespace, context: CLIContext) -> int:
    deployment = _create_deployment(
        args, context, task="render", ask=context.config.interaction.enabled
    )
    root = Path(context.config.deployer.artifacts_root)
    ensure_project_dir(root, deployment.project)

    assembler = ScriptAssembler(deployment)
    written = [
        assembler.write_deploy(deploy_script_path(root, deployment.project)),
        assembler.write_stage(stage_script_path(root, deployment.project, deployment.stage)),
    ]
    for path in written:
        print(f"# {path}")
        print(path.read_text(encoding="utf-8"), end="")
        print()
    return 0


def handle_deployments_command(args: argparse.Namespace, context: CLIContext) -> int:
    deployments = context.store.deployments(args.project)
    if not deployments:
        print("📁 No deployments recorded.")
        return 0

    print(f"{'#':<5} {'Status':<12} {'Project':<20} {'Stage':<15} {'Task':<20} {'Completed'}")
    print("-" * 90)
    for deployment in deployments:
        status = deployment.status.value
        status_emoji = {"succeeded": "✅", "failed": "❌", "pending": "🔄"}.get(status, "❓")
        completed = (deployment.completed_at or "")[:19].replace("T", " ")
        print(
            f"{deployment.id:<5} {status_emoji} {status:<10} {deployment.project.name:<20} "
            f"{deployment.stage.name:<15} {deployment.task:<20} {completed}"
        )
    return 0


def dispatch_command(args: argparse.Namespace) -> int:
    try:
        context = _build_context(args)

        if args.command == "deploy":
            return handle_deploy_command(args, context)

        if args.command == "render":
            return handle_render_command(args, context)

        if args.command == "deployments":
            return handle_deployments_command(args, context)
    except FileNotFoundError as e:
        print(f"❌ {e}")
        return 1
    except RecordNotFound as e:
        print(f"❌ {e}")
        return 1
    except ParameterNotFound as e:
        print(f"❌ Cannot generate scripts: {e}")
        return 1
    except ValueError as e:
        print(f"❌ {e}")
        return 1

    raise ValueError(f"Unsupported command: {args.command}")


def run_cli(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    return dispatch_command(args)
