"""Dice roller: evaluates a parsed DiceExpression into a RollResult.

Per group the order is fixed: roll, explode, reroll, keep/drop, then either
count successes or sum the kept dice, and finally apply the group's sign.
"""

from __future__ import annotations

import logging
import random
from dataclasses import replace
from typing import Protocol

from dicebox.config import Settings
from dicebox.config import settings as default_settings
from dicebox.models import DiceExpression, DiceGroup, DieRoll, GroupRoll, RollResult

logger = logging.getLogger(__name__)


class RandomSource(Protocol):
    """Anything that yields uniform integers in an inclusive range (random.Random does)."""

    def randint(self, a: int, b: int) -> int: ...


class ExplosionLimitError(RuntimeError):
    """Raised when an exploding die keeps landing on its maximum past the safety cap."""


_system_random = random.SystemRandom()


def _explode(size: int, source: RandomSource, limit: int) -> list[int]:
    """Roll the extra faces of an exploding die whose first face was its maximum."""
    chain: list[int] = []
    face = size
    while face == size:
        if len(chain) >= limit:
            raise ExplosionLimitError(f"Exploding d{size} chained more than {limit} extra rolls")
        face = source.randint(1, size)
        chain.append(face)
    return chain


def _dropped_positions(values: list[int], group: DiceGroup) -> set[int]:
    """Positions discarded by keep/drop. Ties keep their roll order."""
    rule = group.keep or group.drop
    if rule is None:
        return set()
    order = sorted(range(len(values)), key=lambda i: values[i], reverse=rule.type == "h")
    if group.keep is not None:
        return set(order[rule.count :])
    return set(order[: rule.count])


def _roll_group(group: DiceGroup, source: RandomSource, limit: int) -> GroupRoll:
    dice: list[DieRoll] = []
    for _ in range(abs(group.count)):
        faces = [source.randint(1, group.size)]
        if group.explode and faces[0] == group.size:
            faces.extend(_explode(group.size, source, limit))
        die = DieRoll(value=sum(faces), faces=tuple(faces))
        if group.reroll and die.value in group.reroll:
            die = replace(die, value=source.randint(1, group.size), rerolled_from=die.value)
        dice.append(die)

    dropped = _dropped_positions([die.value for die in dice], group)
    dice = [replace(die, dropped=True) if i in dropped else die for i, die in enumerate(dice)]

    kept = [die.value for die in dice if not die.dropped]
    if group.success is not None:
        contribution = sum(1 for value in kept if value >= group.success)
    else:
        contribution = sum(kept)
    if group.count < 0:
        contribution = -contribution

    return GroupRoll(group=group, dice=tuple(dice), contribution=contribution)


# ---------------------------------------------------------------------------
# Breakdown formatting
# ---------------------------------------------------------------------------


def _describe_die(die: DieRoll, success: int | None) -> str:
    notes = []
    if die.exploded:
        notes.append("exploded " + "+".join(str(face) for face in die.faces))
    if die.rerolled_from is not None:
        notes.append(f"rerolled {die.rerolled_from}")
    if die.dropped:
        notes.append("dropped")
    elif success is not None and die.value >= success:
        notes.append("success")
    if not notes:
        return str(die.value)
    return f"{die.value} ({', '.join(notes)})"


def _describe_group(result: GroupRoll) -> str:
    success = result.group.success
    dice = ", ".join(_describe_die(die, success) for die in result.dice)
    outcome = str(result.contribution)
    if success is not None:
        outcome += " success" if abs(result.contribution) == 1 else " successes"
    return f"{result.group.notation} [{dice}] = {outcome}"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def roll(
    expression: DiceExpression,
    *,
    rng: RandomSource | None = None,
    settings: Settings | None = None,
) -> RollResult:
    """Roll every group in the expression and add the flat modifier.

    Args:
        expression: A DiceExpression produced by the parser.
        rng: Source of die faces; defaults to the system entropy source.
        settings: Supplies the explosion cap; defaults to the global settings.

    Returns:
        RollResult with the total, a breakdown string, and per-group outcomes.

    Raises:
        ExplosionLimitError: If an exploding die chains past the safety cap.
    """
    source = rng if rng is not None else _system_random
    limit = (settings if settings is not None else default_settings).explosion_limit

    groups = tuple(_roll_group(group, source, limit) for group in expression.dice)
    total = sum(result.contribution for result in groups) + expression.modifier

    fragments = [_describe_group(result) for result in groups]
    if expression.modifier:
        fragments.append(f"modifier {expression.modifier:+d}")

    logger.debug("Rolled %d dice group(s): total %d", len(groups), total)
    return RollResult(total=total, breakdown="; ".join(fragments), groups=groups)
