"""
Random number module for the simulator.

Provides the seedable dice roller owned by each simulation context. Every
random decision of a run goes through one instance, so two runs started
with the same seed roll exactly the same dice.
"""

import random
from logging import debug


class DiceRng:
    """Seedable dice roller with support for forced results in tests."""

    def __init__(self, seed: int | None = None) -> None:
        """
        Initializes the roller.

        Args:
            seed (int | None): Seed of the underlying generator. When None a
                random seed is drawn, and the run is not reproducible.

        """
        if seed is None:
            seed = random.SystemRandom().randrange(2**32)
        self._seed = seed
        self._random = random.Random(seed)
        self._forced: list[tuple[int, int]] = []

    @property
    def seed(self) -> int:
        return self._seed

    def force_roll(self, sides: int, value: int) -> None:
        """
        Queues a forced result for the next roll of a die with the given sides.

        Args:
            sides (int): The die size the override applies to.
            value (int): The value that roll will return.

        """
        if sides <= 0:
            raise ValueError("sides must be positive")
        if not 1 <= value <= sides:
            raise ValueError(f"forced value {value} is not a face of a d{sides}")
        self._forced.append((sides, value))

    def clear_forced(self) -> None:
        """Drops every pending forced roll."""
        self._forced.clear()

    def roll(self, sides: int) -> int:
        """
        Rolls a single die.

        Args:
            sides (int): Number of faces of the die.

        Returns:
            int: The rolled value, between 1 and sides.

        """
        if sides <= 0:
            return 0
        for index, (forced_sides, value) in enumerate(self._forced):
            if forced_sides == sides:
                del self._forced[index]
                debug(f"Forced d{sides} roll: {value}")
                return value
        return self._random.randint(1, sides)

    def roll_d20(self) -> int:
        return self.roll(20)

    def roll_d20_with(self, advantage: bool, disadvantage: bool) -> tuple[int, list[int]]:
        """
        Rolls a d20 honouring advantage and disadvantage.

        Both sources cancel each other out and a single die is rolled.

        Args:
            advantage (bool): Whether the roll has advantage.
            disadvantage (bool): Whether the roll has disadvantage.

        Returns:
            tuple[int, list[int]]: The kept value and every die rolled.

        """
        if advantage == disadvantage:
            value = self.roll_d20()
            return value, [value]
        first, second = self.roll_d20(), self.roll_d20()
        kept = max(first, second) if advantage else min(first, second)
        return kept, [first, second]

    def random(self) -> float:
        """Returns a float in [0, 1) from the seeded generator."""
        return self._random.random()
