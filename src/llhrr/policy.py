"""Epsilon-soft left/right movement policy.

MOVEMENT POLICY:
    - Compare the values of the two neighbors only; the current state's value
      plays no part.
    - Move toward the strictly higher-valued neighbor; ties move left.
    - With probability epsilon, discard that choice and move left or right
      uniformly at random.
    - The agent always moves.
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from llhrr.types import InvalidConfigError, Move, WorldState
from llhrr.value import ValueFunction
from llhrr.world import resolve_move

logger = logging.getLogger(__name__)


class EpsilonSoftPolicy:
    """Greedy neighbor comparison with epsilon-soft exploration.

    Attributes:
        epsilon: Probability of an exploratory move, in [0, 1].
    """

    def __init__(self, epsilon: float, rng: Optional[np.random.Generator] = None) -> None:
        """Initialize the policy.

        Args:
            epsilon: Exploration rate.
            rng: Generator for the exploration and random-move draws.

        Raises:
            InvalidConfigError: If epsilon is outside [0, 1].
        """
        if not 0.0 <= epsilon <= 1.0:
            raise InvalidConfigError(f"epsilon must be in [0, 1], got {epsilon}")
        self.epsilon = float(epsilon)
        self._rng = rng if rng is not None else np.random.default_rng()
        self._explorations = 0

    def greedy(self, left: WorldState, right: WorldState, value_fn: ValueFunction) -> Move:
        """Move toward the higher-valued neighbor, left on ties."""
        movement = Move.LEFT
        if value_fn.value(left) < value_fn.value(right):
            movement = Move.RIGHT
        return movement

    def choose(
            self,
            left: WorldState,
            current: WorldState,
            right: WorldState,
            value_fn: ValueFunction,
    ) -> Move:
        """Choose the next movement from current.

        Args:
            left: Left neighbor of current.
            current: State the agent is in. Not consulted.
            right: Right neighbor of current.
            value_fn: Value estimates used for the greedy comparison.

        Returns:
            The movement to perform.
        """
        movement = self.greedy(left, right, value_fn)

        # Exploration draw happens on every call, even when epsilon is 0
        if self._rng.random() < self.epsilon:
            movement = self.random_movement()
            self._explorations += 1
            logger.debug(f"Exploratory move {movement.value} from {current.location}")

        return movement

    def random_movement(self) -> Move:
        """Left or right with equal probability."""
        if self._rng.integers(2) == 0:
            return Move.LEFT
        return Move.RIGHT

    @staticmethod
    def resolve(movement: Move, location: int, world_size: int) -> int:
        """Next location on the circular space after movement."""
        return resolve_move(movement, location, world_size)

    @property
    def exploration_count(self) -> int:
        """Exploratory moves taken so far."""
        return self._explorations

    def __repr__(self) -> str:
        return f"EpsilonSoftPolicy(epsilon={self.epsilon})"
