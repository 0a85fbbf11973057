import tempfile
import unittest
from pathlib import Path

from capforge.models import Recipe
from capforge.scripts import LIFECYCLE_CHECKPOINTS, ParameterNotFound, ScriptAssembler

from factories import build_deployment, build_project, param


class DeployScriptTests(unittest.TestCase):
    def test_parameters_then_stage_hook_then_lifecycle_hooks(self) -> None:
        project = build_project(
            project_parameters=[
                param("application", "shop"),
                param("user", "deploy"),
                param("keep_releases", "5"),
                param("unset", ""),
            ]
        )
        lines = ScriptAssembler(build_deployment(project)).deploy_lines()
        self.assertEqual(
            lines,
            [
                "set :application, 'shop'",
                "set :user, 'deploy'",
                "set :keep_releases, 5",
                "after 'production', :custom_log",
                "after 'deploy:started', :custom_log",
                "after 'deploy:updated', :custom_log",
                "after 'deploy:published', :custom_log",
                "after 'deploy:finished', :custom_log",
            ],
        )
        self.assertEqual(len(LIFECYCLE_CHECKPOINTS), 4)

    def test_prompted_project_parameter_uses_answer(self) -> None:
        project = build_project(
            project_parameters=[param("user", "deploy"), param("branch", prompt=True)]
        )
        deployment = build_deployment(project, prompt_config={"branch": "hotfix"})
        lines = ScriptAssembler(deployment).deploy_lines()
        self.assertIn("set :branch, 'hotfix'", lines)


class StageScriptTests(unittest.TestCase):
    def test_roles_parameters_and_recipes_in_order(self) -> None:
        project = build_project(
            stage_parameters=[param("rails_env", "production"), param("deploy_to", "/var/www")],
            recipes=[
                Recipe(name="one", body="task :one do\nend\n"),
                Recipe(name="two", body="task :two do\nend"),
            ],
        )
        lines = ScriptAssembler(build_deployment(project)).stage_lines()
        self.assertEqual(
            lines,
            [
                "role :app, %w{deploy@app1.example.com}",
                "role :web2, %w{deploy@app2.example.com}",
                "set :rails_env, 'production'",
                "set :deploy_to, '/var/www'",
                "task :one do\nend",
                "task :two do\nend",
            ],
        )

    def test_excluded_host_drops_only_its_role(self) -> None:
        deployment = build_deployment(excluded_host_ids={1})
        lines = ScriptAssembler(deployment).stage_lines()
        role_lines = [line for line in lines if line.startswith("role ")]
        self.assertEqual(role_lines, ["role :web2, %w{deploy@app2.example.com}"])

    def test_excluded_host_ids_compare_as_strings(self) -> None:
        deployment = build_deployment(excluded_host_ids={"2"})
        lines = ScriptAssembler(deployment).stage_lines()
        self.assertEqual(lines, ["role :app, %w{deploy@app1.example.com}"])

    def test_missing_user_parameter_raises(self) -> None:
        project = build_project(project_parameters=[param("application", "shop")])
        with self.assertRaises(ParameterNotFound):
            ScriptAssembler(build_deployment(project)).stage_lines()


class WriteScriptTests(unittest.TestCase):
    def test_write_truncates_existing_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "production.rb"
            path.write_text("stale content\n" * 50, encoding="utf-8")

            assembler = ScriptAssembler(build_deployment())
            assembler.write_stage(path)

            self.assertEqual(
                path.read_text(encoding="utf-8"),
                "role :app, %w{deploy@app1.example.com}\n"
                "role :web2, %w{deploy@app2.example.com}\n",
            )

    def test_failed_assembly_leaves_previous_script(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "production.rb"
            path.write_text("previous\n", encoding="utf-8")
            project = build_project(project_parameters=[])

            with self.assertRaises(ParameterNotFound):
                ScriptAssembler(build_deployment(project)).write_stage(path)
            self.assertEqual(path.read_text(encoding="utf-8"), "previous\n")


if __name__ == "__main__":
    unittest.main()
