"""
dice.py
Defines the Die model and the validation/parsing of dice sets given on the command line.
Related modules:
- probability.py: Compares dice face by face.
- engine.py: Selects dice and reads the rolled face.
"""

from dataclasses import dataclass
from typing import Iterable, List, Tuple

FACES_PER_DIE = 6
USAGE_EXAMPLE = "fair-dice 2,2,4,4,9,9 1,1,6,6,8,8 3,3,5,5,7,7"


class DiceValidationError(ValueError):
    """
    Raised when dice arguments are malformed (wrong face count, non-integers, too few dice).
    """
    pass


@dataclass(frozen=True)
class Die:
    """
    An immutable die with integer faces.
    Args:
        faces (tuple[int]): Face values in index order. Duplicates and negatives are allowed.
    """
    faces: Tuple[int, ...]

    def __post_init__(self):
        faces = tuple(self.faces)
        if len(faces) != FACES_PER_DIE:
            raise DiceValidationError(f"a die must have exactly {FACES_PER_DIE} faces, got {len(faces)}")
        if not all(isinstance(f, int) and not isinstance(f, bool) for f in faces):
            raise DiceValidationError("all dice faces must be integers")
        object.__setattr__(self, "faces", faces)

    def face(self, index: int) -> int:
        return self.faces[index]

    def __len__(self) -> int:
        return len(self.faces)

    def __str__(self) -> str:
        return ",".join(str(f) for f in self.faces)


def validate_dice_set(dice: Iterable[Die], min_dice: int = 3) -> Tuple[Die, ...]:
    """
    Check the dice-set invariant and freeze its order.
    Args:
        dice: Dice in display order.
        min_dice (int): Minimum number of dice.
    Returns:
        tuple[Die]: The validated dice.
    Raises:
        DiceValidationError: If fewer than min_dice dice are given.
    """
    dice = tuple(dice)
    if len(dice) < min_dice:
        raise DiceValidationError(f"at least {min_dice} dice are required, got {len(dice)}")
    return dice


def parse_die(arg: str, index: int) -> Die:
    """
    Parse one comma-separated die argument.
    Args:
        arg (str): e.g. '2,2,4,4,9,9'.
        index (int): Position of the argument, used in error messages (0-based).
    Returns:
        Die: The parsed die.
    """
    faces: List[int] = []
    for part in arg.split(","):
        part = part.strip()
        try:
            faces.append(int(part))
        except ValueError:
            raise DiceValidationError(f"invalid number in dice {index + 1}: {part!r}") from None
    if len(faces) != FACES_PER_DIE:
        raise DiceValidationError(f"dice {index + 1} must have {FACES_PER_DIE} faces, got {len(faces)}")
    return Die(tuple(faces))


def parse_dice(args: List[str], min_dice: int = 3) -> Tuple[Die, ...]:
    """
    Parse every die argument and validate the resulting set.
    Args:
        args (list[str]): Command-line dice arguments.
        min_dice (int): Minimum number of dice.
    Returns:
        tuple[Die]: The dice set.
    Raises:
        DiceValidationError: On any malformed input.
    """
    if len(args) < min_dice:
        raise DiceValidationError(f"at least {min_dice} dice are required, got {len(args)}")
    return validate_dice_set((parse_die(a, i) for i, a in enumerate(args)), min_dice)
