"""
state.py
Defines the game state dataclasses: RollState and GameState.
Related modules:
- engine.py: Mutates and reads GameState during play.
- protocol.py: ProtocolRound objects are kept in GameState.rounds for auditing.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .dice import Die
from .protocol import ProtocolRound


@dataclass
class RollState:
    """
    Outcome of one fair roll.
    Fields:
        die_index (int): Index of the rolled die.
        face_index (int): Face selected by the protocol result.
        value (int): The face value.
    """
    die_index: int
    face_index: int
    value: int


@dataclass
class GameState:
    """
    Everything that happens in one game.
    Fields:
        dice (tuple[Die]): The dice set.
        status (str): NOT_STARTED | FIRST_MOVE | SELECTING | ROLLING | ENDED | ABORTED.
        computer_first (bool|None): Who picked a die first.
        computer_die (int|None): Index of the computer's die.
        user_die (int|None): Index of the user's die.
        computer_roll (RollState|None): The computer's roll.
        user_roll (RollState|None): The user's roll.
        winner (str|None): 'user', 'computer' or 'tie'.
        rounds (list[ProtocolRound]): Every protocol round played, in order.
    """
    dice: Tuple[Die, ...]
    status: str = "NOT_STARTED"
    computer_first: Optional[bool] = None
    computer_die: Optional[int] = None
    user_die: Optional[int] = None
    computer_roll: Optional[RollState] = None
    user_roll: Optional[RollState] = None
    winner: Optional[str] = None
    rounds: List[ProtocolRound] = field(default_factory=list)
