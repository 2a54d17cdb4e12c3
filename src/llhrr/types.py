"""Core types for the llhrr package.

These types define the world states the learner walks over, the records it
emits while learning, and the errors raised at the package boundaries.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

import numpy as np


class DimensionMismatchError(ValueError):
    """Two vectors that must share the engine dimensionality do not."""


class InvalidConfigError(ValueError):
    """A run parameter is out of range or a config file is malformed."""


class Move(Enum):
    """A single step of the agent on the circular world."""

    LEFT = "left"
    RIGHT = "right"


@dataclass(eq=False)
class WorldState:
    """One location of the circular world.

    Attributes:
        reward: Reward received at this location. Zero everywhere except the
            goal, where it is set once when the goal is chosen.
        encoding: Read-only HRR vector representing this location.
        location: Index of this location in the world.

    Example:
        >>> state = WorldState(
        ...     reward=0.0,
        ...     encoding=space.generate(),
        ...     location=3,
        ... )
    """

    reward: float
    encoding: np.ndarray
    location: int

    def __post_init__(self):
        """Validate and freeze the encoding."""
        encoding = np.array(self.encoding, dtype=np.float64)
        if encoding.ndim != 1:
            raise ValueError(f"encoding must be 1-D, got shape {encoding.shape}")
        encoding.flags.writeable = False
        object.__setattr__(self, "encoding", encoding)
        object.__setattr__(self, "location", int(self.location))
        self.reward = float(self.reward)

    def __setattr__(self, name: str, value: Any) -> None:
        if name in ("encoding", "location") and name in self.__dict__:
            raise AttributeError(f"WorldState.{name} cannot be changed after creation")
        super().__setattr__(name, value)

    @property
    def is_goal(self) -> bool:
        return self.reward != 0.0


@dataclass
class StepRecord:
    """Diagnostics for a single learning step.

    Attributes:
        run_index: Episode this step belongs to.
        step: Step index within the episode (0 for the start location).
        goal_location: Location of the rewarded state.
        location: Location the TD update was applied to.
        td_error: TD error used for the weight update.
        movement: Move chosen from this location. None at the goal.
        next_location: Location reached by the move. None at the goal.
        trace_norm: L2 norm of the eligibility trace after its update.
    """

    run_index: int
    step: int
    goal_location: int
    location: int
    td_error: float
    movement: Optional[Move] = None
    next_location: Optional[int] = None
    trace_norm: float = 0.0

    @property
    def terminal(self) -> bool:
        return self.movement is None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "run_index": self.run_index,
            "step": self.step,
            "goal_location": self.goal_location,
            "location": self.location,
            "td_error": self.td_error,
            "movement": self.movement.value if self.movement else None,
            "next_location": self.next_location,
            "trace_norm": self.trace_norm,
        }


@dataclass
class EpisodeResult:
    """Outcome of one episode.

    Attributes:
        run_index: Index of the episode within the run.
        start_location: Where the agent was placed.
        steps: Number of moves taken.
        reached_goal: False when the step cap ended the episode.
        final_td_error: TD error of the last update applied.
    """

    run_index: int
    start_location: int
    steps: int
    reached_goal: bool
    final_td_error: float = 0.0


@dataclass
class EpisodeStatistics:
    """Step counts accumulated over the episodes of a run."""

    episodes: int = 0
    goals_reached: int = 0
    total_steps: int = 0
    min_steps: Optional[int] = None
    max_steps: int = 0
    history: list = field(default_factory=list)

    def record(self, result: EpisodeResult) -> None:
        self.episodes += 1
        self.total_steps += result.steps
        if result.reached_goal:
            self.goals_reached += 1
        if self.min_steps is None or result.steps < self.min_steps:
            self.min_steps = result.steps
        self.max_steps = max(self.max_steps, result.steps)
        self.history.append(result.steps)

    @property
    def average_steps(self) -> float:
        if self.episodes == 0:
            return 0.0
        return self.total_steps / self.episodes

    def to_dict(self) -> Dict[str, Any]:
        return {
            "episodes": self.episodes,
            "goals_reached": self.goals_reached,
            "average_steps": self.average_steps,
            "min_steps": self.min_steps,
            "max_steps": self.max_steps,
        }
