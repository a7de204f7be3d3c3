from abc import ABC, abstractmethod
from typing import Dict, Optional, Union

from ..core.actions import NumericInput, OracleInput, decode_selection


def to_input(answer: Union[str, int, OracleInput, None]) -> Optional[OracleInput]:
    """
    Normalize a raw answer (typed text, a plain int or an OracleInput) into an OracleInput.
    Returns None for text that is not a recognised selection.
    """
    if isinstance(answer, OracleInput) or answer is None:
        return answer
    if isinstance(answer, int) and not isinstance(answer, bool):
        return NumericInput(answer)
    return decode_selection(str(answer))


class InputOracle(ABC):
    """
    Abstract base class for the user's side of the game.
    Oracles must implement request_integer(), which returns the user's answer as an OracleInput.
    How the answer is obtained (blocking console read, callback, script) is up to the adapter.
    """

    @abstractmethod
    def request_integer(self, low: int, high: int, prompt: str = "",
                        labels: Optional[Dict[int, str]] = None) -> Optional[OracleInput]:
        """
        Ask for a number in [low, high].
        Args:
            low (int): Inclusive lower bound.
            high (int): Inclusive upper bound.
            prompt (str): Prompt text.
            labels (dict|None): Allowed choices and their display text; every number in range if None.
        Returns:
            OracleInput or None: NumericInput, AbortInput, HelpInput, or None for unrecognised input.
        """
        raise NotImplementedError

    def notify_invalid(self, message: str) -> None:
        """
        Called when the previous answer was rejected. Default: ignore.
        """
        pass

    def options(self, low: int, high: int, labels: Optional[Dict[int, str]] = None) -> Dict[int, str]:
        """
        The choices to offer, in display order.
        """
        if labels is not None:
            return dict(labels)
        return {i: str(i) for i in range(low, high + 1)}
