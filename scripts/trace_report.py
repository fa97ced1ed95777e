#!/usr/bin/env python3
"""Generate a trace report from a JSONL engine event log.

Usage:
    python scripts/trace_report.py <events.jsonl> [--format table|timeline]

Example:
    python scripts/trace_report.py output/events.jsonl --format timeline
"""

import argparse
from pathlib import Path

from sentinelflow.domain.events import EngineEvent, EngineEventType
from sentinelflow.domain.stages import display_name
from sentinelflow.infrastructure.persistence import JsonlEventLog


def format_table(events: list[EngineEvent]) -> None:
    """Format events as a table."""
    print(f"{'#':>3} {'Event':11} {'From':13} {'To':13} {'Attempt':7} {'Details'}")
    print("-" * 90)

    for i, event in enumerate(events, 1):
        attempt = str(event.record.attempt_number) if event.record else "-"
        message = event.message[:40] if event.message else ""

        print(
            f"{i:>3} {event.event_type.value:11} {event.from_stage.value:13} "
            f"{event.to_stage.value:13} {attempt:>7} {message}"
        )


def format_timeline(events: list[EngineEvent]) -> None:
    """Format events as a timeline."""
    for event in events:
        timestamp = event.created_at.isoformat()[:19]
        symbol = {
            "transition": "[>]",
            "retry": "[-]",
            "blocked": "[!]",
            "completed": "[+]",
            "error": "[x]",
        }.get(event.event_type.value, "[?]")

        line = f"{timestamp} {symbol} {display_name(event.to_stage)}"
        if event.message:
            line += f": {event.message[:60]}"
        print(line)

        # Show failure history on escalation
        if event.event_type == EngineEventType.BLOCKED and event.record:
            for failure in event.record.failure_history:
                print(f"              [{failure.stage.value}] {failure.reason}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Generate engine trace report")
    parser.add_argument("log_path", type=Path, help="Path to JSONL event log")
    parser.add_argument(
        "--format",
        choices=["table", "timeline"],
        default="table",
        help="Output format (default: table)",
    )
    args = parser.parse_args()

    events = JsonlEventLog(args.log_path).read()

    if not events:
        print(f"No events found in {args.log_path}")
        return

    print(f"Log: {args.log_path}")
    print(f"Events: {len(events)}")
    print()

    if args.format == "table":
        format_table(events)
    else:
        format_timeline(events)

    def count(event_type: EngineEventType) -> int:
        return sum(1 for e in events if e.event_type == event_type)

    # Summary statistics
    print()
    print("Summary:")
    print(f"  Total events: {len(events)}")
    print(f"  Transitions: {count(EngineEventType.TRANSITION)}")
    print(f"  Retries: {count(EngineEventType.RETRY)}")
    print(f"  Errors: {count(EngineEventType.ERROR)}")
    print(f"  Escalations halted: {count(EngineEventType.BLOCKED)}")
    print(f"  Completed: {count(EngineEventType.COMPLETED)}")


if __name__ == "__main__":
    main()
