import random
from typing import Dict, Optional

from .base import InputOracle
from ..core.actions import NumericInput, OracleInput
from . import register_oracle


@register_oracle("random")
class RandomOracle(InputOracle):
    """
    Automated user that answers every request with a uniformly random valid choice.
    Used for unattended games and simulations; it never asks for help or aborts.
    """
    def __init__(self, rng=None, seed: Optional[int] = None):
        """
        Args:
            rng: Optional random.Random instance.
            seed (int|None): Seed used when no rng is given.
        """
        self.rng = rng or random.Random(seed)

    def request_integer(self, low: int, high: int, prompt: str = "",
                        labels: Optional[Dict[int, str]] = None) -> Optional[OracleInput]:
        choices = list(self.options(low, high, labels))
        return NumericInput(self.rng.choice(choices))
