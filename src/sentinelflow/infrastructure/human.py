"""
Human-intervention adapters.

ConsoleHumanIntervention asks on the terminal; ScriptedHumanIntervention
replays predetermined decisions for unattended runs and tests.
"""

import asyncio

from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm

from sentinelflow.domain.interfaces import HumanInterventionInterface
from sentinelflow.domain.models import HandoffRecord


class ConsoleHumanIntervention(HumanInterventionInterface):
    """
    Pauses the run and asks the operator whether to resume.

    The prompt is synchronous; it runs in a worker thread so the event loop
    is not blocked while waiting for input.
    """

    def __init__(
        self,
        prompt_title: str = "HUMAN INTERVENTION REQUIRED",
        console: Console | None = None,
    ):
        self.prompt_title = prompt_title
        self.console = console or Console()

    async def ask(self, reason: str, record: HandoffRecord) -> bool:
        return await asyncio.to_thread(self._prompt, reason, record)

    def _prompt(self, reason: str, record: HandoffRecord) -> bool:
        self.console.print(f"\n[bold yellow]═══ {self.prompt_title} ═══[/bold yellow]")
        self.console.print(f"[bold]{escape(reason)}[/bold]")
        self.console.print(f"[dim]Record: {record.record_id}[/dim]")
        self.console.print(f"[dim]Attempt: {record.attempt_number}[/dim]")

        if record.failure_history:
            self.console.print("\n[dim]Failure history:[/dim]")
            for failure in record.failure_history:
                entry = escape(f"[{failure.stage.value}] {failure.reason}")
                self.console.print(f"  [dim]- {entry}[/dim]")

        return Confirm.ask(
            "\n[bold]Resume at the implementer?[/bold]",
            default=False,
            console=self.console,
        )


class ScriptedHumanIntervention(HumanInterventionInterface):
    """Answers from a fixed list of decisions, then repeats ``default``."""

    def __init__(self, decisions: list[bool] | None = None, default: bool = False):
        self._decisions = list(decisions or [])
        self._default = default
        self.asked: list[tuple[str, HandoffRecord]] = []

    async def ask(self, reason: str, record: HandoffRecord) -> bool:
        self.asked.append((reason, record))
        if self._decisions:
            return self._decisions.pop(0)
        return self._default

    @property
    def call_count(self) -> int:
        return len(self.asked)
