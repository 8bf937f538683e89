"""Shared fixtures for the Knight Ascent test suite."""

import pytest

from src.game_manager.game_initializer import GameInitializer
from src.simulation_engine.models import GameConfig


class ScriptedRandom:
    """Stand-in for ``random.Random`` that replays scripted draws.

    ``random()`` pops from *randoms* and ``randint()`` from *ints*. Once
    *randoms* is exhausted, ``random()`` returns *fallback*, or fails the
    test when no fallback was given.
    """

    def __init__(self, randoms=(), ints=(), fallback=None):
        self._randoms = list(randoms)
        self._ints = list(ints)
        self.fallback = fallback
        self.calls = []

    def random(self):
        self.calls.append("random")
        if self._randoms:
            return self._randoms.pop(0)
        if self.fallback is None:
            raise AssertionError("random() called more times than scripted")
        return self.fallback

    def randint(self, a, b):
        self.calls.append(("randint", a, b))
        if not self._ints:
            raise AssertionError(f"randint({a}, {b}) called more times than scripted")
        value = self._ints.pop(0)
        assert a <= value <= b, f"scripted {value} outside [{a}, {b}]"
        return value

    def choice(self, seq):
        return seq[int(self.random() * len(seq))]


# ------------------------------------------------------------------
# Configurations – cheap, no I/O
# ------------------------------------------------------------------

@pytest.fixture
def scripted_rng():
    """Factory for :class:`ScriptedRandom` instances."""
    return ScriptedRandom


@pytest.fixture(scope="module")
def config_50():
    return GameConfig.from_preset("50")


@pytest.fixture(scope="module")
def config_100():
    return GameConfig.from_preset("100")


# ------------------------------------------------------------------
# Contexts – built once per module, table cache disabled
# ------------------------------------------------------------------

@pytest.fixture(scope="module")
def context_50():
    return GameInitializer(use_table_cache=False).create_context("50")


@pytest.fixture(scope="module")
def context_100():
    return GameInitializer(use_table_cache=False).create_context("100")
