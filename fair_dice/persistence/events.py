"""
events.py
Defines the GameEvent dataclass for recording the disclosures of a fair dice game.
Used by recorder.py to keep an ordered audit trail of everything shown to the user.
"""

from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass
class GameEvent:
    """
    Represents a single event in the game (e.g. commitment announced, key revealed, die rolled).
    Fields:
        game_id (str): Unique game identifier.
        event_type (str): Type of event (e.g., 'Committed').
        payload (dict): Event-specific data, without the 'type' key.
    """
    game_id: str
    event_type: str
    payload: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, game_id: str, event: Dict[str, Any]) -> "GameEvent":
        payload = {k: v for k, v in event.items() if k != "type"}
        return cls(game_id=game_id, event_type=event["type"], payload=payload)
