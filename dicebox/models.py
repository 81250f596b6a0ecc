"""Value objects shared by the notation parser and the dice roller.

Everything here is immutable and compared by value: parsing the same notation
twice yields equal expressions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

Extreme = Literal["h", "l"]


@dataclass(frozen=True)
class KeepDrop:
    """Keep or drop the ``count`` highest (``h``) or lowest (``l``) dice."""

    type: Extreme
    count: int


@dataclass(frozen=True)
class DiceGroup:
    """One ``NdM`` term with its optional modifiers.

    Attributes:
        count: Number of dice; negative when the group is subtracted.
        size: Faces per die.
        keep: Keep only the highest/lowest dice.
        drop: Drop the highest/lowest dice.
        reroll: Face values that trigger a single reroll.
        explode: Roll again and add whenever a die shows its maximum.
        success: Count dice at or above this threshold instead of summing.
    """

    count: int
    size: int
    keep: KeepDrop | None = None
    drop: KeepDrop | None = None
    reroll: tuple[int, ...] | None = None
    explode: bool = False
    success: int | None = None

    @property
    def notation(self) -> str:
        """Canonical notation for this group, e.g. ``-4d6kh3`` or ``5d10>8``."""
        text = f"{self.count}d{self.size}"
        if self.keep is not None:
            text += f"k{self.keep.type}{self.keep.count}"
        if self.drop is not None:
            text += f"d{self.drop.type}{self.drop.count}"
        if self.reroll:
            text += "r" + ",".join(str(v) for v in self.reroll)
        if self.explode:
            text += "!"
        if self.success is not None:
            text += f">{self.success}"
        return text


@dataclass(frozen=True)
class DiceExpression:
    """A parsed, validated roll: dice groups in textual order plus a flat modifier."""

    dice: tuple[DiceGroup, ...]
    modifier: int = 0


@dataclass(frozen=True)
class DieRoll:
    """Outcome of a single die.

    Attributes:
        value: Final value after explosion and reroll.
        faces: Every face rolled for this die, the explosion chain included.
        rerolled_from: The value that was replaced by a reroll, if any.
        dropped: True when keep/drop discarded this die.
    """

    value: int
    faces: tuple[int, ...]
    rerolled_from: int | None = None
    dropped: bool = False

    @property
    def exploded(self) -> bool:
        return len(self.faces) > 1


@dataclass(frozen=True)
class GroupRoll:
    """Outcome of one dice group and its signed contribution to the total."""

    group: DiceGroup
    dice: tuple[DieRoll, ...]
    contribution: int

    @property
    def kept(self) -> tuple[DieRoll, ...]:
        return tuple(die for die in self.dice if not die.dropped)


@dataclass(frozen=True)
class RollResult:
    """Final total plus a human-readable breakdown of every group."""

    total: int
    breakdown: str
    groups: tuple[GroupRoll, ...] = ()
