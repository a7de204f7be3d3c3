"""
sampler.py
Unbiased uniform integer sampling from a cryptographically secure byte source.
Related modules:
- commitment.py: Shares draw_bytes to obtain commitment keys.
- protocol.py: Samples the computer's committed value.
- engine.py: Samples the computer's die choice.
"""

import logging
import secrets
from typing import Callable, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class InvalidRange(ValueError):
    """
    Raised when sample() is called with high < low.
    """
    pass


class EntropyFailure(RuntimeError):
    """
    Raised when the secure random source cannot produce the requested bytes. Not retried.
    """
    pass


def draw_bytes(random_bytes: Callable[[int], bytes], n: int) -> bytes:
    """
    Draw exactly n bytes from the given source.
    Args:
        random_bytes: Callable returning n random bytes (e.g. secrets.token_bytes).
        n (int): Number of bytes.
    Returns:
        bytes: The drawn bytes.
    Raises:
        EntropyFailure: If the source errors or returns a short read.
    """
    try:
        data = random_bytes(n)
    except (OSError, NotImplementedError) as e:
        raise EntropyFailure(f"secure random source failed: {e}") from e
    if len(data) != n:
        raise EntropyFailure(f"secure random source returned {len(data)} bytes, expected {n}")
    return data


def byte_width(span: int, min_bytes: int = 4) -> int:
    """
    Number of raw bytes drawn per attempt for a range of `span` values.
    At least min_bytes, and enough to cover span - 1.
    """
    needed = ((span - 1).bit_length() + 7) // 8
    return max(min_bytes, needed)


class UniformSampler:
    """
    Produces integers uniformly distributed over an inclusive range.
    Raw draws that fall in the incomplete last block of the byte space are rejected,
    so the result carries no modulo bias.
    """
    def __init__(self, random_bytes: Callable[[int], bytes] = None, min_bytes: int = 4):
        """
        Args:
            random_bytes: Entropy source, defaults to secrets.token_bytes.
            min_bytes (int): Smallest raw draw width in bytes.
        """
        self.random_bytes = random_bytes or secrets.token_bytes
        self.min_bytes = min_bytes

    def sample(self, low: int, high: int) -> int:
        """
        Return an integer in [low, high], every value equally likely.
        Args:
            low (int): Inclusive lower bound.
            high (int): Inclusive upper bound.
        Returns:
            int: The sampled value.
        Raises:
            InvalidRange: If high < low.
            EntropyFailure: If the entropy source fails.
        """
        if high < low:
            raise InvalidRange(f"invalid range {low}..{high}")
        span = high - low + 1
        if span == 1:
            return low
        width = byte_width(span, self.min_bytes)
        limit = (256 ** width // span) * span
        while True:
            v = int.from_bytes(draw_bytes(self.random_bytes, width), "big")
            if v < limit:
                return low + v % span
            logger.debug("rejected raw draw above limit for span %d", span)

    def choice(self, seq: Sequence[T]) -> T:
        """
        Pick a uniformly random element of a non-empty sequence.
        """
        if not seq:
            raise InvalidRange("cannot choose from an empty sequence")
        return seq[self.sample(0, len(seq) - 1)]
