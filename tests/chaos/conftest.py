"""
Chaos testing configuration and shared fixtures.

Provides common fixtures for corruption and failure injection tests.
"""

import random

import pytest


class FixedRandom(random.Random):
    """Random whose randint always returns a chosen value (clamped to range)."""

    def __init__(self, value: int):
        super().__init__(0)
        self.value = value
        self.calls: list[tuple[int, int]] = []

    def randint(self, a: int, b: int) -> int:
        self.calls.append((a, b))
        return max(a, min(b, self.value))


@pytest.fixture
def fixed_random():
    """Factory for FixedRandom instances."""
    return FixedRandom
