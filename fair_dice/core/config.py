"""
config.py
Defines the GameConfig dataclass, which centralizes the numeric constraints and protocol options for a fair dice game.
Related modules:
- engine.py: Uses GameConfig to build the sampler, committer and protocol.
- dice.py: Uses GameConfig for die and dice-set validation.
"""

from dataclasses import dataclass
from typing import Optional

@dataclass(frozen=True)
class GameConfig:
    """
    Centralizes all rule options and protocol constants for a fair dice game.
    Fields:
        faces_per_die (int): Number of faces every die must have.
        min_dice (int): Minimum number of dice in a game.
        key_bytes (int): Size of the commitment key in bytes (32 -> 256 bits).
        hash_name (str): hashlib algorithm used for the HMAC commitment.
        min_sample_bytes (int): Smallest raw draw used by the uniform sampler.
        strict_verification (bool): If True, a commitment mismatch raises instead of only being reported.
        rng_seed (int|None): Seed for the automated 'random' oracle. Never used for protocol entropy.
    """
    faces_per_die: int = 6
    min_dice: int = 3
    key_bytes: int = 32
    hash_name: str = "sha3_256"
    min_sample_bytes: int = 4
    strict_verification: bool = True
    rng_seed: Optional[int] = None
