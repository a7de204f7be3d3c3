"""
actions.py
Defines the closed set of inputs an input oracle can return: a number, an abort request or a help request.
Raw text is decoded into these once, at the oracle boundary.
Related modules:
- protocol.py: Consumes OracleInput values while collecting the counterpart's number.
- oracles/: Adapters produce OracleInput values.
"""

from dataclasses import dataclass
from typing import Optional


class OracleInput:
    """
    Base class for all oracle inputs. Subclassed by NumericInput, AbortInput and HelpInput.
    """
    pass


@dataclass(frozen=True)
class NumericInput(OracleInput):
    """
    The counterpart chose a number.
    Args:
        value (int): The chosen number (not yet range-checked).
    """
    value: int


@dataclass(frozen=True)
class AbortInput(OracleInput):
    """
    The counterpart asked to leave the game.
    """
    pass


@dataclass(frozen=True)
class HelpInput(OracleInput):
    """
    The counterpart asked to see the probability table. Out-of-band from the numeric answer.
    """
    pass


def decode_selection(text: str) -> Optional[OracleInput]:
    """
    Decode a typed selection.
    Args:
        text (str): Raw user text.
    Returns:
        OracleInput or None: None if the text is not a recognised selection.
    """
    s = text.strip()
    if s.lower() == "x":
        return AbortInput()
    if s == "?":
        return HelpInput()
    try:
        return NumericInput(int(s))
    except ValueError:
        return None
