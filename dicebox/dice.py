"""One-call dice rolling for callers that start from a notation string.

Supports the full notation accepted by dicebox.parser.
Examples: 2d6, d20, 3d10+2, 4d6kh3, 2d20kl1-1, 5d10>8.
"""

from __future__ import annotations

from dicebox.models import RollResult
from dicebox.parser import DiceError, parse
from dicebox.roller import RandomSource, roll

__all__ = ["DiceError", "roll_notation"]


def roll_notation(notation: str, *, rng: RandomSource | None = None) -> RollResult:
    """Parse notation and roll it.

    Args:
        notation: Dice notation string, e.g. "2d6+3".
        rng: Optional random source, for reproducible rolls.

    Returns:
        The RollResult for the parsed expression.

    Raises:
        DiceError: If the notation is invalid.
    """
    return roll(parse(notation), rng=rng)
