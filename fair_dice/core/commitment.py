"""
commitment.py
Builds and verifies HMAC commitments over integers for the fair random protocol.
A commitment binds the computer to a value before the counterpart answers, and hides the value until the key is revealed.
Related modules:
- sampler.py: draw_bytes supplies fresh keys from the secure random source.
- protocol.py: Commits to the computer's value at the start of each round.
"""

import hashlib
import hmac
import logging
import re
import secrets
from dataclasses import dataclass, field
from typing import Callable, Union

from .sampler import draw_bytes

logger = logging.getLogger(__name__)


class CommitmentMismatch(Exception):
    """
    Raised when a revealed (key, value) pair does not reproduce the announced digest.
    """
    pass


_DECIMAL = re.compile(rb"0|-?[1-9][0-9]*")


def encode_value(value: int) -> bytes:
    """
    Encode an integer as the message bytes that get hashed: its decimal ASCII form.
    Raises:
        TypeError: If value is not an int (bool included).
    """
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"committed values must be int, got {type(value).__name__}")
    return str(value).encode("ascii")


def decode_value(data: bytes) -> int:
    """
    Inverse of encode_value. Only the exact form encode_value produces is accepted.
    Raises:
        ValueError: If data is not a canonical decimal integer (no padding, no leading zeros).
    """
    if not _DECIMAL.fullmatch(data):
        raise ValueError(f"not an encoded value: {data!r}")
    return int(data)


def _as_bytes(value: Union[bytes, str]) -> bytes:
    # hex strings are accepted in either case, as a human would copy them
    if isinstance(value, str):
        return bytes.fromhex(value)
    return bytes(value)


@dataclass(frozen=True)
class Commitment:
    """
    A commitment to a single integer.
    Fields:
        key (bytes): Single-use random HMAC key.
        value (int): The committed value.
        digest (bytes): HMAC(key, encode_value(value)).
    """
    key: bytes = field(repr=False)
    value: int = field(repr=False)
    digest: bytes

    @property
    def digest_hex(self) -> str:
        return self.digest.hex().upper()

    @property
    def key_hex(self) -> str:
        return self.key.hex().upper()


class Committer:
    """
    Creates commitments with a fresh key per call and verifies revealed commitments.
    """
    def __init__(self, random_bytes: Callable[[int], bytes] = None, key_bytes: int = 32, hash_name: str = "sha3_256"):
        """
        Args:
            random_bytes: Entropy source for keys, defaults to secrets.token_bytes.
            key_bytes (int): Key length in bytes.
            hash_name (str): hashlib algorithm name for the HMAC.
        """
        self.random_bytes = random_bytes or secrets.token_bytes
        self.key_bytes = key_bytes
        # fail early on an unknown algorithm rather than at the first commit
        hashlib.new(hash_name)
        self.hash_name = hash_name

    def digest(self, key: bytes, value: int) -> bytes:
        return hmac.new(key, encode_value(value), self.hash_name).digest()

    def commit(self, value: int) -> Commitment:
        """
        Commit to value under a newly generated key.
        Args:
            value (int): The secret value.
        Returns:
            Commitment: key, value and digest.
        Raises:
            EntropyFailure: If no key can be drawn.
        """
        key = draw_bytes(self.random_bytes, self.key_bytes)
        return Commitment(key=key, value=value, digest=self.digest(key, value))

    def verify(self, key: Union[bytes, str], value: int, digest: Union[bytes, str]) -> bool:
        """
        Check that (key, value) reproduces digest. Keys and digests may be bytes or hex strings.
        Returns:
            bool: True if the commitment opens correctly.
        """
        if not isinstance(value, int) or isinstance(value, bool):
            return False
        try:
            key_b = _as_bytes(key)
            digest_b = _as_bytes(digest)
        except ValueError:
            return False
        return hmac.compare_digest(self.digest(key_b, value), digest_b)

    def ensure_valid(self, key: Union[bytes, str], value: int, digest: Union[bytes, str]) -> None:
        """
        Like verify(), but raises on failure.
        Raises:
            CommitmentMismatch: If the commitment does not open.
        """
        if not self.verify(key, value, digest):
            logger.warning("commitment mismatch for revealed value %s", value)
            raise CommitmentMismatch(f"revealed value {value} does not match the announced HMAC")
