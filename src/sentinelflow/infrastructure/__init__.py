"""
Infrastructure layer: adapters for the engine's collaborator ports.

Contains the worker switcher, human-intervention prompts, walkthrough
writer, persistence and configuration loading.
"""

from sentinelflow.infrastructure.config import (
    engine_config_from_dict,
    load_engine_config,
)
from sentinelflow.infrastructure.human import (
    ConsoleHumanIntervention,
    ScriptedHumanIntervention,
)
from sentinelflow.infrastructure.persistence import (
    FilesystemHandoffRepository,
    InMemoryEventLog,
    JsonlEventLog,
)
from sentinelflow.infrastructure.walkthrough import (
    MarkdownWalkthroughWriter,
    render_walkthrough,
)
from sentinelflow.infrastructure.workers import MockWorkerSwitcher

__all__ = [
    # Configuration
    "engine_config_from_dict",
    "load_engine_config",
    # Ports
    "ConsoleHumanIntervention",
    "ScriptedHumanIntervention",
    "MarkdownWalkthroughWriter",
    "MockWorkerSwitcher",
    "render_walkthrough",
    # Persistence
    "FilesystemHandoffRepository",
    "InMemoryEventLog",
    "JsonlEventLog",
]
