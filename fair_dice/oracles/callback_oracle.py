from typing import Callable, Dict, Optional

from .base import InputOracle, to_input
from ..core.actions import OracleInput
from . import register_oracle


@register_oracle("callback")
class CallbackOracle(InputOracle):
    """
    Adapts any callable(low, high, prompt, labels) returning text, an int or an OracleInput.
    Lets event-driven front ends plug in without subclassing.
    """
    selectable = False

    def __init__(self, ask: Callable, on_invalid: Optional[Callable[[str], None]] = None):
        self.ask = ask
        self.on_invalid = on_invalid

    def request_integer(self, low: int, high: int, prompt: str = "",
                        labels: Optional[Dict[int, str]] = None) -> Optional[OracleInput]:
        return to_input(self.ask(low, high, prompt, labels))

    def notify_invalid(self, message: str) -> None:
        if self.on_invalid is not None:
            self.on_invalid(message)
