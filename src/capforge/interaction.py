"""Ask the user for prompted configuration parameters."""

from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Mapping, Optional

from rich.console import Console
from rich.prompt import Prompt

from .models import ConfigurationParameter, Deployment

AskFunction = Callable[[str], str]


def prompted_parameters(deployment: Deployment) -> List[ConfigurationParameter]:
    """Prompted parameters of the deployment's project and stage, project first."""
    parameters: Iterable[ConfigurationParameter] = [
        *deployment.project.configuration_parameters,
        *deployment.stage.configuration_parameters,
    ]
    return [parameter for parameter in parameters if parameter.prompt()]


class ParameterPrompter:
    """Collects values for prompted parameters that have no answer yet."""

    def __init__(
        self,
        ask: Optional[AskFunction] = None,
        console: Optional[Console] = None,
    ) -> None:
        self.console = console or Console()
        self._ask = ask

    def ask(self, parameter: ConfigurationParameter) -> str:
        question = f"Value for [bold]{parameter.name}[/bold]"
        if self._ask is not None:
            return self._ask(question)
        secret = any(word in parameter.name.lower() for word in ("password", "secret", "token"))
        return Prompt.ask(question, console=self.console, password=secret)

    def collect(
        self,
        deployment: Deployment,
        provided: Optional[Mapping[str, str]] = None,
    ) -> Dict[str, str]:
        answers = dict(provided or {})
        missing = [p for p in prompted_parameters(deployment) if p.name not in answers]
        if missing:
            self.console.print(
                f"📝 Deployment needs {len(missing)} prompted value(s) for "
                f"{deployment.project.name}/{deployment.stage.name}"
            )
        for parameter in missing:
            answers[parameter.name] = self.ask(parameter)
        return answers
