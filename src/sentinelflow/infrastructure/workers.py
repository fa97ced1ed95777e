"""
In-memory worker switcher for tests and scripted runs.

Records the worker ids it was asked to activate.
"""

from sentinelflow.domain.interfaces import WorkerSwitcherInterface


class MockWorkerSwitcher(WorkerSwitcherInterface):
    """Records switches; optionally fails for selected workers."""

    def __init__(self, fail_on: frozenset[str] = frozenset()):
        """
        Args:
            fail_on: Worker ids whose activation raises RuntimeError; the
                set is public so a run can lose a worker part way through
        """
        self.fail_on: set[str] = set(fail_on)
        self.switched: list[str] = []

    async def switch_to(self, worker_id: str) -> None:
        if worker_id in self.fail_on:
            raise RuntimeError(f"Worker '{worker_id}' unavailable")
        self.switched.append(worker_id)

    @property
    def current(self) -> str | None:
        """Most recently activated worker."""
        return self.switched[-1] if self.switched else None
