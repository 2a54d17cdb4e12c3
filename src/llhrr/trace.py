"""Eligibility trace for TD(lambda) learning.

Accumulates the encodings of the states visited during an episode. No
dependencies on the learner.
"""

from __future__ import annotations

import numpy as np

from llhrr.types import DimensionMismatchError

TRACE_NORMALIZATION = 1.0 / np.sqrt(2.0)


class EligibilityTrace:
    """Decaying accumulator of visited-state encodings.

    Every update mixes the current encoding with the decayed previous trace
    and scales the sum by 1/sqrt(2), so the magnitude stays bounded no matter
    how long the episode runs.

    Attributes:
        dim: Length of the trace vector.
    """

    def __init__(self, dim: int) -> None:
        """Initialize a zero trace.

        Args:
            dim: Dimensionality of the encodings the trace accumulates.
        """
        self.dim = int(dim)
        self._trace = np.zeros(self.dim)
        self._updates = 0

    def reset(self) -> None:
        """Zero every component. Called at the start of every episode."""
        self._trace.fill(0.0)
        self._updates = 0

    def update(self, encoding: np.ndarray, lambda_: float) -> np.ndarray:
        """Fold the encoding of the state being visited into the trace.

        Applies e = (encoding + lambda_ * e) / sqrt(2), including on the
        first visit of an episode.

        Args:
            encoding: Encoding of the current state.
            lambda_: Trace decay.

        Returns:
            Read-only view of the updated trace.

        Raises:
            DimensionMismatchError: If encoding does not have shape (dim,).
        """
        encoding = np.asarray(encoding, dtype=np.float64)
        if encoding.shape != (self.dim,):
            raise DimensionMismatchError(
                f"encoding must have shape ({self.dim},), got {encoding.shape}"
            )
        self._trace *= lambda_
        self._trace += encoding
        self._trace *= TRACE_NORMALIZATION
        self._updates += 1
        return self.values

    @property
    def values(self) -> np.ndarray:
        """Read-only view of the trace vector."""
        view = self._trace.view()
        view.flags.writeable = False
        return view

    @property
    def norm(self) -> float:
        return float(np.linalg.norm(self._trace))

    @property
    def update_count(self) -> int:
        """Updates applied since the last reset."""
        return self._updates

    def __len__(self) -> int:
        return self.dim

    def __repr__(self) -> str:
        return f"EligibilityTrace(dim={self.dim}, updates={self._updates}, norm={self.norm:.4f})"
