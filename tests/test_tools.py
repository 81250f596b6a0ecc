"""Tests for the text-in/text-out dice tool operations."""

import pytest
from pydantic import ValidationError

from dicebox.parser import DiceError
from dicebox.tools import DiceRollInput, dice_roll, dice_validate, tool_definitions


class TestToolDefinitions:
    def test_names(self) -> None:
        assert [tool["name"] for tool in tool_definitions()] == ["dice_roll", "dice_validate"]

    def test_roll_schema(self) -> None:
        schema = tool_definitions()[0]["input_schema"]
        assert set(schema["properties"]) == {"notation", "label", "verbose"}
        assert schema["required"] == ["notation"]

    def test_validate_schema(self) -> None:
        schema = tool_definitions()[1]["input_schema"]
        assert schema["required"] == ["notation"]


class TestDiceRoll:
    def test_plain(self, scripted_rng) -> None:
        text = dice_roll({"notation": "3d6+2"}, rng=scripted_rng(4, 2, 6))
        assert text == "You rolled 3d6+2:\n🎲 Total: 14"

    def test_label_and_verbose(self, scripted_rng) -> None:
        text = dice_roll(
            {"notation": "4d6kh3", "label": "Strength", "verbose": True},
            rng=scripted_rng(3, 6, 1, 5),
        )
        assert text == (
            "You rolled 4d6kh3 for Strength:\n"
            "🎲 Total: 14\n"
            "📊 Breakdown: 4d6kh3 [3, 6, 1 (dropped), 5] = 14"
        )

    def test_accepts_model(self, scripted_rng) -> None:
        text = dice_roll(DiceRollInput(notation="1d20"), rng=scripted_rng(20))
        assert text.endswith("Total: 20")

    def test_missing_notation(self) -> None:
        with pytest.raises(ValidationError):
            dice_roll({"label": "Damage"})

    def test_invalid_notation_propagates(self) -> None:
        with pytest.raises(DiceError, match="Too many dice"):
            dice_roll({"notation": "1001d6"})


class TestDiceValidate:
    def test_valid_simple(self) -> None:
        assert dice_validate({"notation": "3d6+2"}) == (
            "✅ Valid dice notation: 3d6+2\n\nBreakdown:\n• 3d6\n• Modifier: +2"
        )

    def test_valid_with_modifiers(self) -> None:
        text = dice_validate({"notation": "4d6kh3+2d20dl1-1d8r1,2!+6d10>8-3"})
        assert text.splitlines()[3:] == [
            "• 4d6 (keep highest 3)",
            "• 2d20 (drop lowest 1)",
            "• -1d8 (reroll 1, 2) (exploding dice)",
            "• 6d10 (success on 8+)",
            "• Modifier: -3",
        ]

    def test_no_modifier_line_when_zero(self) -> None:
        assert "Modifier" not in dice_validate({"notation": "2d20kl1"})

    def test_invalid(self) -> None:
        assert dice_validate({"notation": "4d6kh4"}) == (
            "❌ Invalid dice notation: 4d6kh4\n\nError: Cannot keep 4 dice from only 4 dice."
        )

    def test_invalid_empty(self) -> None:
        assert dice_validate({"notation": ""}).endswith("Error: Dice notation cannot be empty.")

    def test_invalid_overlong_number(self) -> None:
        text = dice_validate({"notation": "1d6+" + "9" * 5000})
        assert text.startswith("❌ Invalid dice notation: 1d6+999")
        assert "Error: Invalid notation part:" in text
