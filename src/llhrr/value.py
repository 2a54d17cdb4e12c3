"""Linear value function over HRR encodings."""

from __future__ import annotations

from typing import List, Optional, Tuple

import numpy as np

from llhrr.types import WorldState
from llhrr.vectors import VectorSpace


class ValueFunction:
    """Dot-product readout of state encodings against a learned weight vector.

    The weights start at zero and persist across episodes: they are the model
    learned by a run.

    Attributes:
        space: VectorSpace the encodings and weights live in.
    """

    def __init__(self, space: VectorSpace) -> None:
        self.space = space
        self._weights = np.zeros(space.dim)

    @property
    def weights(self) -> np.ndarray:
        """Copy of the current weight vector."""
        return self._weights.copy()

    def value(self, state: WorldState) -> float:
        """Estimated value of state under the current weights."""
        return self.space.dot(state.encoding, self._weights)

    def values(self, states: List[WorldState]) -> List[Tuple[int, float]]:
        """(location, value) for each state, in the order given."""
        return [(s.location, self.value(s)) for s in states]

    def td_error(
            self,
            state: WorldState,
            next_state: Optional[WorldState],
            discount: float,
    ) -> float:
        """TD error of a transition out of state.

        Args:
            state: State the update applies to.
            next_state: Successor state, or None for a terminal transition.
            discount: Discount factor for the successor's value.

        Returns:
            reward(s) + discount * V(s') - V(s), or reward(s) - V(s) when
            there is no successor.
        """
        target = state.reward
        if next_state is not None:
            target += discount * self.value(next_state)
        return target - self.value(state)

    def update(self, direction: np.ndarray, td_error: float, alpha: float) -> None:
        """Semi-gradient step: weights += alpha * td_error * direction."""
        direction = self.space.check(direction, "direction")
        self._weights += alpha * td_error * direction

    def reset(self) -> None:
        """Zero the weights."""
        self._weights.fill(0.0)

    def __repr__(self) -> str:
        return (
            f"ValueFunction(dim={self.space.dim}, "
            f"weight_norm={np.linalg.norm(self._weights):.4f})"
        )
