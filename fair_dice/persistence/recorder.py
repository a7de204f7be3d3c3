"""
recorder.py
Implements event recording for fair dice games: an ordered, in-memory audit trail of every disclosure.
Subscribe InMemoryRecorder.record to GameEngine to capture a game.
Related modules:
- events.py: Defines GameEvent type.
"""

from typing import Any, Dict, List, Union

from .events import GameEvent


class InMemoryRecorder:
    """
    Records GameEvent objects in memory for later retrieval.
    Methods:
        record(event): Add a new event (a GameEvent or an engine event dict).
        events(): Get all recorded events.
        of_type(event_type): Recorded events of one type.
    """
    def __init__(self, game_id: str = ""):
        self.game_id = game_id
        self._events: List[GameEvent] = []

    def record(self, event: Union[GameEvent, Dict[str, Any]]) -> None:
        """Add a new event to the recorder."""
        if not isinstance(event, GameEvent):
            event = GameEvent.from_dict(self.game_id, event)
        self._events.append(event)

    def __call__(self, event: Union[GameEvent, Dict[str, Any]]) -> None:
        self.record(event)

    def events(self):
        """Return all recorded events as a list."""
        return list(self._events)

    def types(self) -> List[str]:
        return [e.event_type for e in self._events]

    def of_type(self, event_type: str) -> List[GameEvent]:
        return [e for e in self._events if e.event_type == event_type]
