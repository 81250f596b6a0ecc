"""Shared test fixtures for the dicebox test suite.

scripted_rng
    A random source that returns a fixed sequence of faces, so roller tests
    can assert exact totals and breakdowns. It fails loudly if a test asks
    for more faces than it scripted, or for a face outside the die's range.

Parser tests need no fixtures: parsing is pure.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

import pytest


class ScriptedRandom:
    """Deterministic stand-in for random.Random.randint."""

    def __init__(self, faces: Iterable[int]) -> None:
        self._faces = list(faces)
        self.calls: list[tuple[int, int]] = []

    def randint(self, a: int, b: int) -> int:
        self.calls.append((a, b))
        if not self._faces:
            raise AssertionError(f"Scripted random source exhausted on randint({a}, {b})")
        face = self._faces.pop(0)
        if not a <= face <= b:
            raise AssertionError(f"Scripted face {face} outside randint({a}, {b})")
        return face

    @property
    def remaining(self) -> int:
        return len(self._faces)


class ConstantRandom:
    """Always returns the top of the requested range."""

    def randint(self, a: int, b: int) -> int:
        return b


@pytest.fixture
def scripted_rng() -> Callable[..., ScriptedRandom]:
    """Factory: scripted_rng(4, 2, 6) yields those faces in order."""

    def _make(*faces: int) -> ScriptedRandom:
        return ScriptedRandom(faces)

    return _make


@pytest.fixture
def max_rng() -> ConstantRandom:
    return ConstantRandom()
