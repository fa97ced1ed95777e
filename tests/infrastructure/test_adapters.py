"""Tests for the worker switcher and human-intervention adapters."""

import asyncio
import io

import pytest
from rich.console import Console

from sentinelflow.domain.models import FailureRecord, HandoffRecord
from sentinelflow.domain.stages import Stage
from sentinelflow.infrastructure.human import (
    ConsoleHumanIntervention,
    ScriptedHumanIntervention,
)
from sentinelflow.infrastructure.workers import MockWorkerSwitcher


class TestMockWorkerSwitcher:
    def test_records_switches(self) -> None:
        switcher = MockWorkerSwitcher()

        asyncio.run(switcher.switch_to("planner"))
        asyncio.run(switcher.switch_to("implementer"))

        assert switcher.switched == ["planner", "implementer"]
        assert switcher.current == "implementer"

    def test_fail_on(self) -> None:
        switcher = MockWorkerSwitcher(fail_on=frozenset({"auditor"}))

        with pytest.raises(RuntimeError, match="auditor"):
            asyncio.run(switcher.switch_to("auditor"))

        assert switcher.current is None


class TestScriptedHumanIntervention:
    def test_replays_decisions_then_default(self, full_record: HandoffRecord) -> None:
        human = ScriptedHumanIntervention([True, False], default=True)

        answers = [asyncio.run(human.ask(f"r{i}", full_record)) for i in range(4)]

        assert answers == [True, False, True, True]
        assert human.call_count == 4
        assert human.asked[0] == ("r0", full_record)


class TestConsoleHumanIntervention:
    """Tests for the rich console prompt."""

    def test_prints_context_and_returns_answer(
        self, monkeypatch: pytest.MonkeyPatch, full_record: HandoffRecord
    ) -> None:
        output = io.StringIO()
        console = Console(file=output, force_terminal=False, width=120)
        monkeypatch.setattr(
            "sentinelflow.infrastructure.human.Confirm.ask",
            lambda *args, **kwargs: True,
        )
        human = ConsoleHumanIntervention(console=console)

        answer = asyncio.run(
            human.ask("Verification rejected 3 times (limit 3).", full_record)
        )

        text = output.getvalue()
        assert answer is True
        assert "HUMAN INTERVENTION REQUIRED" in text
        assert "Verification rejected 3 times" in text
        assert full_record.record_id in text
        assert "[verifying] Login test failed" in text

    def test_decline(
        self, monkeypatch: pytest.MonkeyPatch, full_record: HandoffRecord
    ) -> None:
        monkeypatch.setattr(
            "sentinelflow.infrastructure.human.Confirm.ask",
            lambda *args, **kwargs: False,
        )
        human = ConsoleHumanIntervention(console=Console(file=io.StringIO()))
        full_record.failure_history.append(
            FailureRecord(
                stage=Stage.AUDITING,
                timestamp=full_record.created_at,
                reason="SQL injection",
            )
        )

        assert asyncio.run(human.ask("halt?", full_record)) is False
