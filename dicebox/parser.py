"""Dice notation parser.

Grammar, per ``+``/``-`` separated term::

    term      = dice | constant
    dice      = [count] "d" (size | "%") [keep] [drop] [reroll] ["!"] [success]
    keep      = "k" ("h" | "l") number
    drop      = "d" ("h" | "l") number
    reroll    = "r" number ("," number)*
    success   = ">" number
    constant  = number

Examples: 3d6+2, 1d20+2d6-1, 4d6kh3, 2d20kl1, 4d6dl1, 4d6r1,2, 3d6!, 5d10>8, 1d%.

Parsing never rolls anything; validation failures raise DiceError with a
message naming the offending value.
"""

from __future__ import annotations

import logging
from typing import NamedTuple

from dicebox.config import Settings
from dicebox.config import settings as default_settings
from dicebox.models import DiceExpression, DiceGroup, KeepDrop

logger = logging.getLogger(__name__)

_DIGITS = "0123456789"
# Longer digit runs are not numbers in this grammar.
_MAX_DIGITS = 100
_PERCENTILE_SIZE = 100

FORMAT_HELP = (
    "Invalid dice notation. Use formats like: "
    "3d6, 1d20+5, 4d6kh3, 2d20kl1, 4d6dl1, 4d6r1, 3d6!, 5d10>8"
)


class DiceError(ValueError):
    """Raised when a dice notation is invalid."""


class _Term(NamedTuple):
    sign: int
    body: str


class _Cursor:
    """Left-to-right reader over a single term body."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def accept(self, token: str) -> bool:
        if self.text.startswith(token, self.pos):
            self.pos += len(token)
            return True
        return False

    def accept_any(self, chars: str) -> str | None:
        if not self.at_end() and self.text[self.pos] in chars:
            char = self.text[self.pos]
            self.pos += 1
            return char
        return None

    def number(self) -> int | None:
        start = self.pos
        while not self.at_end() and self.text[self.pos] in _DIGITS:
            self.pos += 1
        if self.pos == start or self.pos - start > _MAX_DIGITS:
            self.pos = start
            return None
        return int(self.text[start : self.pos])


# ---------------------------------------------------------------------------
# Tokenizing
# ---------------------------------------------------------------------------


def _split_terms(text: str) -> list[_Term]:
    """Split on every + and -; a leading sign belongs to the first term."""
    terms: list[_Term] = []
    sign = 1
    start = 0
    for i, char in enumerate(text):
        if char in "+-":
            if i > 0:
                terms.append(_Term(sign, text[start:i]))
            sign = -1 if char == "-" else 1
            start = i + 1
    terms.append(_Term(sign, text[start:]))
    return terms


def _match_extreme(cursor: _Cursor, prefix: str) -> KeepDrop | None:
    """Match ``<prefix>(h|l)<n>``; on a partial match the cursor is rewound."""
    start = cursor.pos
    if cursor.accept(prefix):
        extreme = cursor.accept_any("hl")
        if extreme is not None:
            count = cursor.number()
            if count is not None:
                return KeepDrop(type=extreme, count=count)
    cursor.pos = start
    return None


def _match_reroll(cursor: _Cursor) -> tuple[int, ...] | None:
    start = cursor.pos
    if cursor.accept("r"):
        values: list[int] = []
        while True:
            value = cursor.number()
            if value is None:
                break
            values.append(value)
            if not cursor.accept(","):
                return tuple(values)
    cursor.pos = start
    return None


def _match_success(cursor: _Cursor) -> int | None:
    start = cursor.pos
    if cursor.accept(">"):
        threshold = cursor.number()
        if threshold is not None:
            return threshold
    cursor.pos = start
    return None


def _match_dice_group(term: _Term) -> DiceGroup | None:
    """Return the DiceGroup for a term, or None if it is not dice notation."""
    cursor = _Cursor(term.body.lower())
    count = cursor.number()
    if count is None:
        count = 1
    if not cursor.accept("d"):
        return None
    if cursor.accept("%"):
        size = _PERCENTILE_SIZE
    else:
        size = cursor.number()
        if size is None:
            return None

    keep = _match_extreme(cursor, "k")
    drop = _match_extreme(cursor, "d")
    reroll = _match_reroll(cursor)
    explode = cursor.accept("!")
    success = _match_success(cursor)
    if not cursor.at_end():
        return None

    return DiceGroup(
        count=term.sign * count,
        size=size,
        keep=keep,
        drop=drop,
        reroll=reroll,
        explode=explode,
        success=success,
    )


def _match_constant(term: _Term) -> int | None:
    cursor = _Cursor(term.body)
    value = cursor.number()
    if value is None or not cursor.at_end():
        return None
    return term.sign * value


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def _validate_group(group: DiceGroup, term: _Term, limits: Settings) -> None:
    """Check one group's bounds, raising on the first violation.

    The order of checks is fixed: callers rely on which message wins when a
    group breaks several rules at once.
    """
    dice = abs(group.count)
    size = group.size

    if dice <= 0:
        raise DiceError(f"Invalid dice count: {dice}. Must be positive.")
    if size <= 0:
        raise DiceError(f"Invalid die size: {size}. Must be positive.")
    if dice > limits.max_dice_count:
        raise DiceError(f"Too many dice: {dice}. Maximum is {limits.max_dice_count}.")
    if size > limits.max_die_size:
        raise DiceError(f"Die size too large: {size}. Maximum is {limits.max_die_size}.")
    if dice * size > limits.max_dice_product:
        raise DiceError(
            f"Dice combination too large: {dice}d{size}. Risk of excessive computation."
        )

    if group.keep is not None and group.drop is not None:
        raise DiceError(f'Cannot combine keep and drop in one dice group: "{term.body}".')
    for verb, rule in (("keep", group.keep), ("drop", group.drop)):
        if rule is None:
            continue
        if rule.count <= 0:
            raise DiceError(f"Invalid {verb} count: {rule.count}. Must be positive.")
        if rule.count >= dice:
            raise DiceError(f"Cannot {verb} {rule.count} dice from only {dice} dice.")

    for value in group.reroll or ():
        if not 1 <= value <= size:
            raise DiceError(f"Invalid reroll value: {value}. Must be between 1 and {size}.")
    if group.success is not None and not 1 <= group.success <= size:
        raise DiceError(
            f"Invalid success threshold: {group.success}. Must be between 1 and {size}."
        )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def _parse(notation: str, limits: Settings) -> DiceExpression:
    text = "".join(notation.split())
    if not text:
        raise DiceError("Dice notation cannot be empty.")

    groups: list[tuple[DiceGroup, _Term]] = []
    modifier = 0
    invalid: list[_Term] = []
    for term in _split_terms(text):
        group = _match_dice_group(term)
        if group is not None:
            groups.append((group, term))
            continue
        constant = _match_constant(term)
        if constant is not None:
            modifier += constant
            continue
        invalid.append(term)

    if not groups:
        raise DiceError(FORMAT_HELP)
    if invalid:
        raise DiceError(
            f'Invalid notation part: "{invalid[0].body}". '
            "Use dice notation like 2d6 or a plain number."
        )

    for group, term in groups:
        _validate_group(group, term, limits)

    return DiceExpression(dice=tuple(group for group, _ in groups), modifier=modifier)


def parse(notation: str, *, settings: Settings | None = None) -> DiceExpression:
    """Parse dice notation into a validated DiceExpression.

    Args:
        notation: Dice notation string, e.g. "4d6kh3+2".
        settings: Bounds to validate against; defaults to the global settings.

    Returns:
        The parsed expression. Constant terms are summed into ``modifier``.

    Raises:
        DiceError: If the notation is malformed or out of bounds.
    """
    try:
        return _parse(notation, settings if settings is not None else default_settings)
    except DiceError as exc:
        logger.debug("Rejected dice notation %r: %s", notation, exc)
        raise
