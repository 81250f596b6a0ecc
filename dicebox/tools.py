"""Text-in/text-out dice operations for tool-calling clients.

Two operations are offered: ``dice_roll`` (roll notation, optionally labelled
and with a breakdown) and ``dice_validate`` (check notation without rolling).
Transport concerns (HTTP, routing by tool name) belong to the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field

from dicebox.dice import roll_notation
from dicebox.models import DiceGroup
from dicebox.parser import DiceError, parse
from dicebox.roller import RandomSource

logger = logging.getLogger(__name__)

_EXTREME_LABELS = {"h": "highest", "l": "lowest"}


class DiceRollInput(BaseModel):
    notation: str = Field(description='Dice notation like "3d6+2", "4d6kh3", "2d20kl1", etc.')
    label: str | None = Field(
        default=None, description='Optional label for the roll (e.g., "Damage roll")'
    )
    verbose: bool = Field(default=False, description="Show detailed breakdown of the roll")


class DiceValidateInput(BaseModel):
    notation: str = Field(description='Dice notation to validate (e.g., "3d6+2")')


def tool_definitions() -> list[dict[str, Any]]:
    """Return name, description and JSON input schema for each dice tool."""
    return [
        {
            "name": "dice_roll",
            "description": 'Roll dice using standard notation (e.g., "3d6+2", "2d20kh1")',
            "input_schema": DiceRollInput.model_json_schema(),
        },
        {
            "name": "dice_validate",
            "description": "Validate dice notation without rolling",
            "input_schema": DiceValidateInput.model_json_schema(),
        },
    ]


def dice_roll(
    payload: Mapping[str, Any] | DiceRollInput, *, rng: RandomSource | None = None
) -> str:
    """Roll the requested notation and describe the outcome.

    Raises:
        pydantic.ValidationError: If the payload does not match DiceRollInput.
        DiceError: If the notation is invalid.
    """
    params = DiceRollInput.model_validate(payload)
    result = roll_notation(params.notation, rng=rng)

    text = f"You rolled {params.notation}"
    if params.label:
        text += f" for {params.label}"
    text += f":\n🎲 Total: {result.total}"
    if params.verbose:
        text += f"\n📊 Breakdown: {result.breakdown}"
    return text


def _describe_group(group: DiceGroup) -> str:
    sign = "-" if group.count < 0 else ""
    text = f"• {sign}{abs(group.count)}d{group.size}"
    if group.keep is not None:
        text += f" (keep {_EXTREME_LABELS[group.keep.type]} {group.keep.count})"
    if group.drop is not None:
        text += f" (drop {_EXTREME_LABELS[group.drop.type]} {group.drop.count})"
    if group.reroll:
        text += f" (reroll {', '.join(str(v) for v in group.reroll)})"
    if group.explode:
        text += " (exploding dice)"
    if group.success is not None:
        text += f" (success on {group.success}+)"
    return text


def dice_validate(payload: Mapping[str, Any] | DiceValidateInput) -> str:
    """Report whether notation is valid, with a per-group summary when it is."""
    params = DiceValidateInput.model_validate(payload)
    try:
        expression = parse(params.notation)
    except DiceError as exc:
        logger.debug("Validation failed for %r", params.notation)
        return f"❌ Invalid dice notation: {params.notation}\n\nError: {exc}"

    lines = [f"✅ Valid dice notation: {params.notation}", "", "Breakdown:"]
    lines.extend(_describe_group(group) for group in expression.dice)
    if expression.modifier != 0:
        lines.append(f"• Modifier: {expression.modifier:+d}")
    return "\n".join(lines)
