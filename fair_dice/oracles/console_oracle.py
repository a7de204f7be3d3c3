from typing import Callable, Dict, Optional

from .base import InputOracle
from ..core.actions import AbortInput, OracleInput, decode_selection
from . import register_oracle


@register_oracle("console")
class ConsoleOracle(InputOracle):
    """
    Blocking terminal adapter: lists the choices, reads one line and decodes it.
    'X' exits, '?' asks for help. A closed input stream counts as an abort.
    """
    def __init__(self, input_fn: Callable[[str], str] = input, output_fn: Callable[[str], None] = print):
        self.input_fn = input_fn
        self.output_fn = output_fn

    def request_integer(self, low: int, high: int, prompt: str = "",
                        labels: Optional[Dict[int, str]] = None) -> Optional[OracleInput]:
        if prompt:
            self.output_fn(prompt)
        for value, text in self.options(low, high, labels).items():
            self.output_fn(f"{value} - {text}")
        self.output_fn("X - exit\n? - help")
        try:
            line = self.input_fn("Your selection: ")
        except EOFError:
            return AbortInput()
        return decode_selection(line)

    def notify_invalid(self, message: str) -> None:
        self.output_fn(message)
