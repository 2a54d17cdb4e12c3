"""Circular 1-D world of HRR-encoded locations.

Builds the world the agent walks over: one WorldState per location, each
carrying its own random encoding, and a single rewarded goal chosen once per
run. No dependencies on the learner.
"""

from __future__ import annotations

import logging
from typing import Iterator, Optional, Tuple

import numpy as np

from llhrr.types import InvalidConfigError, Move, WorldState
from llhrr.vectors import VectorSpace

logger = logging.getLogger(__name__)

GOAL_REWARD = 1.0


def left_of(location: int, world_size: int) -> int:
    """Index of the left neighbor on a circular space of world_size locations."""
    if location == 0:
        return world_size - 1
    return location - 1


def right_of(location: int, world_size: int) -> int:
    """Index of the right neighbor on a circular space of world_size locations."""
    if location == world_size - 1:
        return 0
    return location + 1


def resolve_move(movement: Move, location: int, world_size: int) -> int:
    """Location reached from location by movement."""
    if movement is Move.RIGHT:
        return right_of(location, world_size)
    return left_of(location, world_size)


class World:
    """Ordered, logically circular collection of WorldStates.

    The successor of the last location is the first. Exactly one state holds
    a nonzero reward (the goal), and it stays the goal for the whole run.

    Attributes:
        states: WorldStates ordered by location.
        goal_location: Index of the rewarded state.
    """

    def __init__(self, states: list[WorldState], goal_location: int) -> None:
        """Initialize World.

        Args:
            states: One WorldState per location, ordered by location.
            goal_location: Index of the goal; its reward is set to GOAL_REWARD.

        Raises:
            InvalidConfigError: If states is empty or goal_location is out of range.
        """
        if not states:
            raise InvalidConfigError("world must contain at least one location")
        if not 0 <= goal_location < len(states):
            raise InvalidConfigError(
                f"goal location {goal_location} outside [0, {len(states)})"
            )
        self.states = states
        self.goal_location = int(goal_location)
        self.states[self.goal_location].reward = GOAL_REWARD

    @property
    def size(self) -> int:
        return len(self.states)

    @property
    def goal(self) -> WorldState:
        return self.states[self.goal_location]

    def left_of(self, location: int) -> int:
        return left_of(location, self.size)

    def right_of(self, location: int) -> int:
        return right_of(location, self.size)

    def move(self, location: int, movement: Move) -> int:
        return resolve_move(movement, location, self.size)

    def neighbors(self, location: int) -> Tuple[WorldState, WorldState, WorldState]:
        """Left neighbor, current and right neighbor states of a location."""
        return (
            self.states[self.left_of(location)],
            self.states[location],
            self.states[self.right_of(location)],
        )

    def __len__(self) -> int:
        return len(self.states)

    def __getitem__(self, location: int) -> WorldState:
        return self.states[location]

    def __iter__(self) -> Iterator[WorldState]:
        return iter(self.states)

    def __repr__(self) -> str:
        return f"World(size={self.size}, goal={self.goal_location})"


def build_world(
        world_size: int,
        vector_space: VectorSpace,
        rng: Optional[np.random.Generator] = None,
        goal_location: Optional[int] = None,
) -> World:
    """Create a world with one fresh encoding per location and a random goal.

    Encodings are drawn in location order before the goal is chosen.

    Args:
        world_size: Number of locations.
        vector_space: Engine providing the encodings.
        rng: Generator for the goal draw. A fresh unseeded generator if None.
        goal_location: Fixed goal instead of a random one.

    Returns:
        World with every reward 0 except the goal's.

    Raises:
        InvalidConfigError: If world_size is not positive or goal_location is
            out of range.
    """
    if world_size < 1:
        raise InvalidConfigError(f"world size must be positive, got {world_size}")

    states = [
        WorldState(reward=0.0, encoding=vector_space.generate(), location=i)
        for i in range(world_size)
    ]

    if goal_location is None:
        rng = rng if rng is not None else np.random.default_rng()
        goal_location = int(rng.integers(world_size))

    world = World(states, goal_location)
    logger.debug(f"Built {world} with {vector_space.dim}-D encodings")
    return world
