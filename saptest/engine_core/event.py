"""
Events and the event log.

An Event is an immutable record of something that happened. The engine
dispatches on events and appends each dispatched event, together with the
action results it produced, to an EventLog. The log is the battle's
observable output: it is enough to rebuild the fight step by step, and two
runs with equal inputs and seeds serialize to identical JSON.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Iterator
import json

from .effect import EventKind, Side


@dataclass(frozen=True)
class Event:
    """
    Something that happened during a battle or shop turn.

    ``side`` is the roster of the afflicted pet (or of the roster that
    caused a pet-less event); None for events addressed to both rosters.
    ``source_side`` is the roster of the source pet. Pet ids are only
    unique within one roster, so the source is looked up on that side.
    """
    kind: EventKind
    phase_index: int = 0
    turn_index: int = 0
    side: Side | None = None
    source_id: str | None = None
    source_side: Side | None = None
    source_position: int | None = None
    afflicted_id: str | None = None
    afflicted_position: int | None = None
    payload: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "phase_index": self.phase_index,
            "turn_index": self.turn_index,
            "side": self.side.value if self.side else None,
            "source_id": self.source_id,
            "source_side": self.source_side.value if self.source_side else None,
            "source_position": self.source_position,
            "afflicted_id": self.afflicted_id,
            "afflicted_position": self.afflicted_position,
            "payload": dict(self.payload),
        }


@dataclass
class ActionRecord:
    """Result of executing one action against one target."""
    action: str
    owner_id: str | None
    target_id: str | None
    before: dict[str, int] | None = None
    after: dict[str, int] | None = None
    note: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "action": self.action,
            "owner_id": self.owner_id,
            "target_id": self.target_id,
            "before": self.before,
            "after": self.after,
            "note": self.note,
        }


@dataclass
class LogEntry:
    event: Event
    results: list[ActionRecord] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "event": self.event.to_dict(),
            "results": [r.to_dict() for r in self.results],
        }


@dataclass
class EventLog:
    """
    Append-only record of dispatched events.

    Iterating yields entries in dispatch order; each iteration is a fresh
    replay of the full log.
    """
    entries: list[LogEntry] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[LogEntry]:
        return iter(list(self.entries))

    def record(self, event: Event) -> LogEntry:
        entry = LogEntry(event=event)
        self.entries.append(entry)
        return entry

    def events(self, kind: EventKind | None = None) -> list[Event]:
        """All logged events, optionally of one kind."""
        return [e.event for e in self.entries if kind is None or e.event.kind == kind]

    def replay(self) -> Iterator[Event]:
        """Lazily yield logged events in order."""
        for entry in self.entries:
            yield entry.event

    def to_dicts(self) -> list[dict[str, Any]]:
        return [entry.to_dict() for entry in self.entries]

    def to_json(self, indent: int | None = None) -> str:
        return json.dumps(self.to_dicts(), indent=indent, sort_keys=True)
