"""
engine.py
Implements the GameEngine class, which sequences a game of non-transitive dice over the fair random protocol and emits events.
Related modules:
- config.py: GameConfig is used to configure the engine.
- state.py: GameState and RollState hold all game data.
- protocol.py: Every random number the user could be cheated on comes from a fair protocol round.
- probability.py: The win-probability matrix shown on help requests.
"""

import logging
from typing import Callable, Dict, List, Sequence

from .config import GameConfig
from .commitment import Committer, CommitmentMismatch
from .dice import Die, DiceValidationError, validate_dice_set
from .probability import compute_matrix
from .protocol import FairRandomProtocol, ProtocolRound, RoundAborted, collect_integer
from .sampler import UniformSampler
from .state import GameState, RollState

logger = logging.getLogger(__name__)

COMPUTER = "computer"
USER = "user"
TIE = "tie"


class GameStateError(Exception):
    """
    Raised when the engine is driven out of order (e.g. play() called twice).
    """
    pass


class GameEngine:
    """
    State machine for one game. Decides the first mover, lets both sides pick a die, rolls both dice through
    fair protocol rounds and declares the winner. Every step is emitted as an event dict to subscribed listeners.
    """
    def __init__(self, dice: Sequence[Die], oracle, config: GameConfig = None,
                 sampler: UniformSampler = None, committer: Committer = None):
        """
        Initialize a new game engine.
        Args:
            dice: The dice set, in display order.
            oracle: InputOracle for the user's side.
            config (GameConfig): Game configuration.
            sampler (UniformSampler): Overrides the default secure sampler.
            committer (Committer): Overrides the default committer.
        """
        self.config = config or GameConfig()
        self.dice = validate_dice_set(dice, self.config.min_dice)
        for i, d in enumerate(self.dice):
            if len(d) != self.config.faces_per_die:
                raise DiceValidationError(f"dice {i + 1} must have {self.config.faces_per_die} faces, got {len(d)}")
        self.oracle = oracle
        self.sampler = sampler or UniformSampler(min_bytes=self.config.min_sample_bytes)
        self.committer = committer or Committer(key_bytes=self.config.key_bytes, hash_name=self.config.hash_name)
        self.protocol = FairRandomProtocol(self.sampler, self.committer, emit=self._emit)
        self.matrix = compute_matrix(self.dice)
        self.state = GameState(dice=self.dice)
        self._events: List[Dict] = []
        self._listeners: List[Callable[[Dict], None]] = []

    def subscribe(self, listener: Callable[[Dict], None]) -> None:
        """
        Register a callable that receives every event as it is emitted.
        """
        self._listeners.append(listener)

    def _emit(self, event: Dict):
        self._events.append(event)
        for listener in self._listeners:
            listener(event)

    def pop_events(self):
        """
        Return and clear all emitted events since last call.
        Returns:
            list[dict]: List of event dicts.
        """
        ev = list(self._events)
        self._events.clear()
        return ev

    def get_events(self):
        """
        Return all events emitted so far (does not clear).
        """
        return list(self._events)

    def show_help(self) -> None:
        self._emit({"type": "HelpRequested", "dice": self.dice, "matrix": self.matrix})

    def fair_number(self, low: int, high: int, prompt: str) -> int:
        """
        Run one protocol round and check its commitment.
        Returns:
            int: The round result in [0, high - low].
        Raises:
            RoundAborted: If the user aborts.
            CommitmentMismatch: If the commitment does not open and strict verification is on.
        """
        rnd = self.protocol.generate(low, high, self.oracle, prompt, on_help=self.show_help)
        self.state.rounds.append(rnd)
        self._check(rnd)
        return rnd.result

    def _check(self, rnd: ProtocolRound) -> None:
        ok = self.protocol.verify(rnd)
        self._emit({"type": "CommitmentChecked", "round_id": rnd.round_id, "ok": ok})
        if not ok:
            logger.warning("round %d failed commitment verification", rnd.round_id)
            if self.config.strict_verification:
                raise CommitmentMismatch(f"round {rnd.round_id}: revealed value does not match the announced HMAC")

    def decide_first_move(self) -> bool:
        """
        The user guesses the computer's bit; a combined result of 1 means the computer moves first.
        """
        self.state.status = "FIRST_MOVE"
        self._emit({"type": "FirstMoveStarted"})
        computer_first = self.fair_number(0, 1, "Try to guess my selection") == 1
        self.state.computer_first = computer_first
        self._emit({"type": "FirstMoveDecided", "first": COMPUTER if computer_first else USER})
        return computer_first

    def _computer_pick(self, exclude=None) -> int:
        available = [i for i in range(len(self.dice)) if i != exclude]
        idx = self.sampler.choice(available)
        self.state.computer_die = idx
        self._emit({"type": "DieChosen", "player": COMPUTER, "die_index": idx, "die": str(self.dice[idx])})
        return idx

    def _user_pick(self, exclude=None) -> int:
        labels = {i: str(d) for i, d in enumerate(self.dice) if i != exclude}
        idx = collect_integer(self.oracle, 0, len(self.dice) - 1, "Choose your dice:", labels=labels,
                              on_help=self.show_help)
        self.state.user_die = idx
        self._emit({"type": "DieChosen", "player": USER, "die_index": idx, "die": str(self.dice[idx])})
        return idx

    def select_dice(self) -> None:
        """
        The first mover picks a die, the other side picks from the remaining ones.
        """
        if self.state.computer_first is None:
            raise GameStateError("first move has not been decided")
        self.state.status = "SELECTING"
        if self.state.computer_first:
            comp = self._computer_pick()
            self._user_pick(exclude=comp)
        else:
            user = self._user_pick()
            self._computer_pick(exclude=user)

    def roll(self, player: str) -> RollState:
        """
        Roll the given player's die; the face index is a fair protocol result.
        Args:
            player (str): 'computer' or 'user'.
        Returns:
            RollState: The roll.
        """
        die_index = self.state.computer_die if player == COMPUTER else self.state.user_die
        if die_index is None:
            raise GameStateError(f"{player} has not chosen a die")
        self.state.status = "ROLLING"
        self._emit({"type": "RollStarted", "player": player})
        die = self.dice[die_index]
        face_index = self.fair_number(0, len(die) - 1, "Add your number")
        roll = RollState(die_index=die_index, face_index=face_index, value=die.face(face_index))
        if player == COMPUTER:
            self.state.computer_roll = roll
        else:
            self.state.user_roll = roll
        self._emit({"type": "Rolled", "player": player, "die_index": die_index,
                    "face_index": face_index, "value": roll.value})
        return roll

    def _finish(self) -> str:
        user = self.state.user_roll.value
        comp = self.state.computer_roll.value
        if user > comp:
            winner = USER
        elif comp > user:
            winner = COMPUTER
        else:
            winner = TIE
        self.state.winner = winner
        self.state.status = "ENDED"
        self._emit({"type": "GameEnded", "winner": winner, "user_value": user, "computer_value": comp})
        return winner

    def play(self) -> GameState:
        """
        Play one full game. An abort from the user ends the game with status ABORTED instead of raising.
        Returns:
            GameState: Final state.
        """
        if self.state.status != "NOT_STARTED":
            raise GameStateError("game has already been played")
        self._emit({"type": "GameStarted", "dice": [str(d) for d in self.dice]})
        try:
            self.decide_first_move()
            self.select_dice()
            self.roll(COMPUTER)
            self.roll(USER)
        except RoundAborted:
            self.state.status = "ABORTED"
            self._emit({"type": "GameAborted"})
            return self.state
        self._finish()
        return self.state

    def is_terminal(self) -> bool:
        return self.state.status in ("ENDED", "ABORTED")
