"""
probability.py
Pairwise win probabilities between dice. The dice may be non-transitive, so every ordered pair is computed independently.
Related modules:
- dice.py: Die model.
- engine.py: Builds the matrix once per game and publishes it on help requests.
"""

from dataclasses import dataclass
from fractions import Fraction
from typing import List, Optional, Sequence, Tuple

from .dice import Die


def win_probability(a: Die, b: Die) -> Fraction:
    """
    Probability that a random face of `a` is strictly greater than a random face of `b`.
    """
    wins = sum(1 for x in a.faces for y in b.faces if x > y)
    return Fraction(wins, len(a.faces) * len(b.faces))


def tie_fraction(a: Die, b: Die) -> Fraction:
    """
    Probability that both dice show the same value.
    win_probability(a, b) + win_probability(b, a) + tie_fraction(a, b) == 1.
    """
    ties = sum(1 for x in a.faces for y in b.faces if x == y)
    return Fraction(ties, len(a.faces) * len(b.faces))


@dataclass(frozen=True)
class ProbabilityMatrix:
    """
    Read-only N x N table over dice indices.
    Fields:
        dice (tuple[Die]): The dice, in index order.
        cells (tuple[tuple[Fraction|None]]): cells[i][j] = P(die i beats die j); None on the diagonal.
    """
    dice: Tuple[Die, ...]
    cells: Tuple[Tuple[Optional[Fraction], ...], ...]

    def __len__(self) -> int:
        return len(self.dice)

    def get(self, i: int, j: int) -> Optional[Fraction]:
        return self.cells[i][j]

    def beats(self, i: int, j: int) -> bool:
        """True if die i wins against die j more often than not."""
        p = self.cells[i][j]
        return p is not None and p > Fraction(1, 2)

    def as_floats(self) -> List[List[Optional[float]]]:
        return [[None if p is None else float(p) for p in row] for row in self.cells]


def compute_matrix(dice: Sequence[Die]) -> ProbabilityMatrix:
    """
    Compute P(i beats j) for every ordered pair i != j.
    Args:
        dice: Dice in index order.
    Returns:
        ProbabilityMatrix: The matrix, diagonal left as None.
    """
    dice = tuple(dice)
    cells = tuple(
        tuple(None if i == j else win_probability(d1, d2) for j, d2 in enumerate(dice))
        for i, d1 in enumerate(dice)
    )
    return ProbabilityMatrix(dice=dice, cells=cells)
