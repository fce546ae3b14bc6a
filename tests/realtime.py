"""In-memory stand-in for ``socketio.AsyncServer`` used by router tests."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from dataclasses import field
from typing import Any


@dataclass
class Emitted:
    event: str
    data: Any
    room: str | None = None
    to: str | None = None


@dataclass
class FakeServer:
    handlers: dict[str, Any] = field(default_factory=dict)
    rooms: dict[str, set[str]] = field(default_factory=lambda: defaultdict(set))
    emitted: list[Emitted] = field(default_factory=list)

    def on(self, event: str, handler=None):
        self.handlers[event] = handler
        return handler

    async def enter_room(self, sid: str, room: str, namespace: str | None = None):
        self.rooms[room].add(sid)

    async def leave_room(self, sid: str, room: str, namespace: str | None = None):
        self.rooms[room].discard(sid)

    async def emit(self, event: str, data: Any = None, to=None, room=None, **kwargs):
        self.emitted.append(Emitted(event=event, data=data, room=room, to=to))

    def events(self, name: str) -> list[Emitted]:
        return [e for e in self.emitted if e.event == name]
