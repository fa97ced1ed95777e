"""Built-in subscriber projecting engine events onto a status display."""

from sentinelflow.domain.events import EngineEvent, EngineEventType
from sentinelflow.domain.interfaces import UINotifierInterface
from sentinelflow.domain.models import StageStatus
from sentinelflow.domain.stages import Stage, activity_text, display_name, ui_lane
from sentinelflow.domain.summary import summarize_for_ui


def stage_status(stage: Stage, event: EngineEvent | None = None) -> StageStatus:
    """Map a stage (and the record on ``event``) to a UI status."""
    record = event.record if event is not None else None
    return StageStatus(
        stage=stage,
        display_name=display_name(stage),
        activity_text=activity_text(stage),
        last_handoff_summary=summarize_for_ui(record),
        lane=ui_lane(stage),
        enabled=stage != Stage.IDLE,
    )


class UIStatusProjector:
    """Event listener forwarding a StageStatus to a UI notifier.

    The engine registers it ahead of user listeners; it is otherwise an
    ordinary subscriber.
    """

    # Error and retry events do not change the stage shown.
    _PROJECTED = frozenset(
        {
            EngineEventType.TRANSITION,
            EngineEventType.BLOCKED,
            EngineEventType.COMPLETED,
        }
    )

    def __init__(self, notifier: UINotifierInterface) -> None:
        self._notifier = notifier

    def __call__(self, event: EngineEvent) -> None:
        if event.event_type not in self._PROJECTED:
            return
        self._notifier.notify(stage_status(event.to_stage, event))
