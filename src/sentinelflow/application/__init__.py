"""
Application layer for the handoff pipeline.

Contains the workflow engine and the event channel that coordinate domain
objects and collaborator ports.
"""

from sentinelflow.application.engine import WorkflowEngine, create_engine
from sentinelflow.application.event_channel import EventChannel, EventListener
from sentinelflow.application.ui_status import UIStatusProjector, stage_status

__all__ = [
    "EventChannel",
    "EventListener",
    "UIStatusProjector",
    "WorkflowEngine",
    "create_engine",
    "stage_status",
]
