from typing import Dict, Iterable, List, Optional, Tuple

from .base import InputOracle, to_input
from ..core.actions import AbortInput, OracleInput
from . import register_oracle


@register_oracle("scripted")
class ScriptedOracle(InputOracle):
    """
    Replays a fixed sequence of answers (typed text, ints or OracleInput objects).
    Once the script runs out every further request is answered with an abort.
    Requests and rejection messages are kept for inspection.
    """
    selectable = False

    def __init__(self, answers: Iterable = ()):
        self._answers = iter(list(answers))
        self.requests: List[Tuple[int, int, str, Optional[Dict[int, str]]]] = []
        self.rejections: List[str] = []

    def request_integer(self, low: int, high: int, prompt: str = "",
                        labels: Optional[Dict[int, str]] = None) -> Optional[OracleInput]:
        self.requests.append((low, high, prompt, labels))
        try:
            return to_input(next(self._answers))
        except StopIteration:
            return AbortInput()

    def notify_invalid(self, message: str) -> None:
        self.rejections.append(message)
