"""
protocol.py
Implements the fair random protocol: the computer commits to a secret number, the counterpart adds a number of their own,
then the computer reveals its number and key so the counterpart can check the commitment.
Related modules:
- sampler.py: Picks the computer's number.
- commitment.py: Commits to it.
- actions.py: Oracle inputs consumed while collecting the counterpart's number.
- engine.py: Runs one protocol round per fair random number the game needs.
"""

import itertools
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from .actions import AbortInput, HelpInput, NumericInput
from .commitment import Commitment, Committer
from .sampler import InvalidRange, UniformSampler

logger = logging.getLogger(__name__)

# Round status values
COMMITTED = "COMMITTED"
COUNTERPART_FIXED = "COUNTERPART_FIXED"
REVEALED = "REVEALED"
RESOLVED = "RESOLVED"
ABORTED = "ABORTED"


class ProtocolError(Exception):
    """
    Raised when a round step is attempted out of order (e.g. reveal before the counterpart's number is fixed).
    """
    pass


class OutOfRangeResponse(ValueError):
    """
    Raised when the counterpart's number is outside the allowed choices. Handled by re-asking.
    """
    pass


class RoundAborted(Exception):
    """
    Raised when the counterpart aborts while a number is being collected.
    """
    pass


@dataclass
class ProtocolRound:
    """
    State of a single fair random generation.
    Fields:
        round_id (int): Sequence number of the round within its protocol instance.
        low (int): Inclusive lower bound of the range.
        high (int): Inclusive upper bound of the range.
        commitment (Commitment): The computer's commitment.
        counterpart_value (int|None): The counterpart's number once fixed.
        result (int|None): Combined result in [0, modulus - 1] once resolved.
        status (str): COMMITTED | COUNTERPART_FIXED | REVEALED | RESOLVED | ABORTED.
    """
    round_id: int
    low: int
    high: int
    commitment: Commitment
    counterpart_value: Optional[int] = None
    result: Optional[int] = None
    status: str = COMMITTED

    @property
    def modulus(self) -> int:
        return self.high - self.low + 1

    @property
    def digest_hex(self) -> str:
        return self.commitment.digest_hex

    def fix_counterpart(self, value: int) -> None:
        """
        Fix the counterpart's number. Only allowed once, before the reveal.
        Raises:
            ProtocolError: If the round is past the collect step.
            OutOfRangeResponse: If value is outside [low, high].
        """
        if self.status != COMMITTED:
            raise ProtocolError(f"cannot accept a counterpart value in state {self.status}")
        if not self.low <= value <= self.high:
            raise OutOfRangeResponse(f"{value} is not in {self.low}..{self.high}")
        self.counterpart_value = value
        self.status = COUNTERPART_FIXED

    def reveal(self) -> Commitment:
        """
        Disclose the commitment contents.
        Raises:
            ProtocolError: Unless the counterpart's number is fixed and the round was not aborted.
        """
        if self.status != COUNTERPART_FIXED:
            raise ProtocolError(f"cannot reveal in state {self.status}")
        self.status = REVEALED
        return self.commitment

    def combine(self) -> int:
        """
        (computer + counterpart) mod modulus.
        Raises:
            ProtocolError: If the commitment has not been revealed yet.
        """
        if self.status != REVEALED:
            raise ProtocolError(f"cannot combine in state {self.status}")
        self.result = (self.commitment.value + self.counterpart_value) % self.modulus
        self.status = RESOLVED
        return self.result

    def abort(self) -> None:
        if self.status not in (COMMITTED, COUNTERPART_FIXED):
            raise ProtocolError(f"cannot abort in state {self.status}")
        self.status = ABORTED


def _in_choices(low: int, high: int, labels: Optional[Dict[int, str]]) -> Callable[[int], None]:
    def accept(value: int) -> None:
        if labels is not None:
            if value not in labels:
                raise OutOfRangeResponse(f"{value} is not one of the offered choices")
        elif not low <= value <= high:
            raise OutOfRangeResponse(f"{value} is not in {low}..{high}")
    return accept


def collect_integer(oracle, low: int, high: int, prompt: str = "", labels: Optional[Dict[int, str]] = None,
                    on_help: Optional[Callable[[], None]] = None,
                    accept: Optional[Callable[[int], None]] = None) -> int:
    """
    Ask the oracle until it yields an acceptable number.
    Help requests call on_help and ask again; invalid or out-of-range answers are reported and asked again.
    Args:
        oracle: InputOracle adapter.
        low (int): Inclusive lower bound.
        high (int): Inclusive upper bound.
        prompt (str): Text shown to the counterpart.
        labels (dict|None): Allowed choices with their display text. Defaults to every number in range.
        on_help: Called on a help request.
        accept: Called with each numeric answer; raises OutOfRangeResponse to reject it.
    Returns:
        int: The accepted number.
    Raises:
        RoundAborted: If the oracle returns an abort request.
    """
    accept = accept or _in_choices(low, high, labels)
    while True:
        answer = oracle.request_integer(low, high, prompt, labels)
        if isinstance(answer, AbortInput):
            raise RoundAborted("aborted by the counterpart")
        if isinstance(answer, HelpInput):
            if on_help is not None:
                on_help()
            continue
        if not isinstance(answer, NumericInput):
            oracle.notify_invalid("Invalid selection. Please try again.")
            continue
        try:
            accept(answer.value)
        except OutOfRangeResponse as e:
            logger.warning("rejected counterpart answer: %s", e)
            oracle.notify_invalid("Invalid selection. Please try again.")
            continue
        return answer.value


class FairRandomProtocol:
    """
    Runs commit -> collect -> reveal -> combine rounds. A new commitment (and key) is made for every round.
    Every disclosure is passed to `emit` as an event dict, in disclosure order.
    """
    def __init__(self, sampler: UniformSampler = None, committer: Committer = None,
                 emit: Callable[[Dict], None] = None):
        """
        Args:
            sampler (UniformSampler): Source of the computer's numbers.
            committer (Committer): Builds commitments.
            emit: Receives event dicts. Events are dropped if None.
        """
        self.sampler = sampler or UniformSampler()
        self.committer = committer or Committer()
        self._emit = emit or (lambda event: None)
        self._round_ids = itertools.count(1)

    def commit(self, low: int, high: int) -> ProtocolRound:
        """
        Start a round: pick the computer's number and announce its HMAC.
        Raises:
            InvalidRange: If high < low.
        """
        if high < low:
            raise InvalidRange(f"invalid range {low}..{high}")
        value = self.sampler.sample(low, high)
        rnd = ProtocolRound(round_id=next(self._round_ids), low=low, high=high,
                            commitment=self.committer.commit(value))
        logger.debug("round %d committed on %d..%d", rnd.round_id, low, high)
        self._emit({"type": "Committed", "round_id": rnd.round_id, "low": low, "high": high,
                    "modulus": rnd.modulus, "digest": rnd.digest_hex})
        return rnd

    def generate(self, low: int, high: int, oracle, prompt: str = "Add your number",
                 on_help: Optional[Callable[[], None]] = None) -> ProtocolRound:
        """
        Run one full round.
        Args:
            low (int): Inclusive lower bound.
            high (int): Inclusive upper bound.
            oracle: InputOracle supplying the counterpart's number.
            prompt (str): Prompt text for the counterpart.
            on_help: Called when the counterpart asks for help.
        Returns:
            ProtocolRound: The resolved round; its result is in [0, high - low].
        Raises:
            RoundAborted: If the counterpart aborts. The round is not revealed.
        """
        rnd = self.commit(low, high)
        try:
            collect_integer(oracle, low, high, f"{prompt} modulo {rnd.modulus}.",
                            on_help=on_help, accept=rnd.fix_counterpart)
        except RoundAborted:
            rnd.abort()
            logger.debug("round %d aborted before reveal", rnd.round_id)
            self._emit({"type": "RoundAborted", "round_id": rnd.round_id, "low": low, "high": high})
            raise
        self._emit({"type": "CounterpartFixed", "round_id": rnd.round_id,
                    "counterpart_value": rnd.counterpart_value})

        opened = rnd.reveal()
        self._emit({"type": "Revealed", "round_id": rnd.round_id, "key": opened.key_hex,
                    "computer_value": opened.value})

        result = rnd.combine()
        logger.debug("round %d resolved", rnd.round_id)
        self._emit({"type": "Resolved", "round_id": rnd.round_id, "computer_value": opened.value,
                    "counterpart_value": rnd.counterpart_value, "modulus": rnd.modulus, "result": result})
        return rnd

    def verify(self, rnd: ProtocolRound) -> bool:
        """
        Recompute the HMAC of a revealed round, as the counterpart would.
        Raises:
            ProtocolError: If the round has not been revealed.
        """
        if rnd.status not in (REVEALED, RESOLVED):
            raise ProtocolError(f"cannot verify a round in state {rnd.status}")
        c = rnd.commitment
        return self.committer.verify(c.key, c.value, c.digest)
