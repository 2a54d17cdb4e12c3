# Copyright 2025 Thousand Brains Project
#
# Use of this source code is governed by the MIT
# license that can be found in the LICENSE file or at
# https://opensource.org/licenses/MIT.

"""Holographic Reduced Representation (HRR) vector engine.

This module generates the fixed-length random vectors used as distributed
encodings of world locations, and computes the readouts the learner needs
from them. Vectors are drawn with i.i.d. zero-mean components of variance
1/N, so that:
- the expected squared norm of every vector is 1
- two independently drawn vectors are approximately orthogonal, with a dot
  product of order 1/sqrt(N)

Besides the dot-product readout, the engine carries the usual HRR algebra
(binding by circular convolution, unbinding by circular correlation, and
superposition) for composing encodings.

Example:
    >>> space = VectorSpace(VectorSpaceConfig(dim=1024), rng=np.random.default_rng(0))
    >>> a = space.generate()
    >>> b = space.generate()
    >>> space.dot(a, b)  # close to 0
    >>> c = space.bind(a, b)
    >>> space.similarity(space.unbind(c, a), b)  # well above chance
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Union

import numpy as np

from llhrr.types import DimensionMismatchError, InvalidConfigError

logger = logging.getLogger(__name__)

DISTRIBUTIONS = ("normal", "uniform")


@dataclass(frozen=True)
class VectorSpaceConfig:
    """Configuration for the HRR vector engine.

    Attributes:
        dim: Dimensionality N of every vector. Fixed for the lifetime of the
            engine.
        distribution: "normal" draws components from N(0, 1/N); "uniform"
            draws from U(-sqrt(3/N), sqrt(3/N)), which has the same variance.
        normalize: Whether to rescale generated vectors to exactly unit norm.
    """

    dim: int = 1024
    distribution: str = "normal"
    normalize: bool = False

    def __post_init__(self):
        if int(self.dim) < 1:
            raise InvalidConfigError(f"vector dimension must be positive, got {self.dim}")
        if self.distribution not in DISTRIBUTIONS:
            raise InvalidConfigError(
                f"distribution must be one of {DISTRIBUTIONS}, got {self.distribution!r}"
            )


class VectorSpace:
    """Generator and algebra for HRR vectors of one fixed dimensionality.

    The dimensionality is a constructor-only parameter: every encoding created
    by an engine stays valid for as long as the engine exists.

    Attributes:
        config: VectorSpaceConfig with the engine parameters.
    """

    def __init__(
            self,
            config: Union[VectorSpaceConfig, int, None] = None,
            rng: Optional[np.random.Generator] = None,
    ) -> None:
        """Initialize the engine.

        Args:
            config: Configuration, or a bare dimensionality. Uses defaults if None.
            rng: Generator used for every draw. A fresh unseeded generator is
                created if None.
        """
        if config is None:
            config = VectorSpaceConfig()
        elif not isinstance(config, VectorSpaceConfig):
            config = VectorSpaceConfig(dim=int(config))
        self.config = config
        self._dim = int(config.dim)
        self._rng = rng if rng is not None else np.random.default_rng()
        self._generated = 0

        logger.debug(
            f"VectorSpace created: dim={self._dim}, "
            f"distribution={config.distribution}, normalize={config.normalize}"
        )

    @property
    def dim(self) -> int:
        """Dimensionality of every vector in this space."""
        return self._dim

    @property
    def generated_count(self) -> int:
        """Number of vectors drawn so far."""
        return self._generated

    # ==================== Generation ====================

    def generate(self) -> np.ndarray:
        """Draw a new random encoding.

        Returns:
            Read-only array of shape (dim,).
        """
        vector = self._draw(self._dim)
        if self.config.normalize:
            vector = self._unit(vector)
        vector.flags.writeable = False
        self._generated += 1
        return vector

    def generate_batch(self, n: int) -> np.ndarray:
        """Draw n encodings at once.

        Args:
            n: Number of vectors.

        Returns:
            Array of shape (n, dim), one encoding per row.
        """
        batch = self._draw(n * self._dim).reshape(n, self._dim)
        if self.config.normalize:
            norms = np.linalg.norm(batch, axis=1, keepdims=True)
            norms[norms < 1e-10] = 1.0
            batch = batch / norms
        self._generated += n
        return batch

    def _draw(self, size: int) -> np.ndarray:
        scale = 1.0 / np.sqrt(self._dim)
        if self.config.distribution == "uniform":
            bound = np.sqrt(3.0) * scale
            return self._rng.uniform(-bound, bound, size=size)
        return self._rng.normal(0.0, scale, size=size)

    # ==================== Readout ====================

    def check(self, vector: np.ndarray, name: str = "vector") -> np.ndarray:
        """Return vector as a float array, verifying it belongs to this space.

        Raises:
            DimensionMismatchError: If the shape is not (dim,).
        """
        arr = np.asarray(vector, dtype=np.float64)
        if arr.shape != (self._dim,):
            raise DimensionMismatchError(
                f"{name} must have shape ({self._dim},), got {arr.shape}"
            )
        return arr

    def dot(self, a: np.ndarray, b: np.ndarray) -> float:
        """Inner product of two vectors of this space.

        Raises:
            DimensionMismatchError: If either operand has the wrong length.
        """
        return float(np.dot(self.check(a, "a"), self.check(b, "b")))

    def similarity(self, a: np.ndarray, b: np.ndarray) -> float:
        """Cosine similarity in [-1, 1]; 0.0 if either vector is near zero."""
        a = self.check(a, "a")
        b = self.check(b, "b")
        norm_a = np.linalg.norm(a)
        norm_b = np.linalg.norm(b)
        if norm_a < 1e-10 or norm_b < 1e-10:
            return 0.0
        return float(np.dot(a, b) / (norm_a * norm_b))

    # ==================== HRR algebra ====================

    def bind(self, a: np.ndarray, b: np.ndarray) -> np.ndarray:
        """Bind two vectors by circular convolution."""
        a = self.check(a, "a")
        b = self.check(b, "b")
        return np.fft.irfft(np.fft.rfft(a) * np.fft.rfft(b), n=self._dim)

    def involution(self, a: np.ndarray) -> np.ndarray:
        """Approximate inverse of a: [a0, a[N-1], ..., a1]."""
        a = self.check(a, "a")
        return np.concatenate(([a[0]], a[:0:-1]))

    def unbind(self, bound: np.ndarray, key: np.ndarray) -> np.ndarray:
        """Recover a noisy copy of the vector bound to key.

        Circular correlation, i.e. binding with the involution of key.
        """
        return self.bind(bound, self.involution(key))

    def bundle(self, vectors: Sequence[np.ndarray], normalize: bool = False) -> np.ndarray:
        """Superpose vectors by summation.

        Raises:
            ValueError: If no vectors are given.
        """
        if len(vectors) == 0:
            raise ValueError("Must provide at least one vector to bundle")
        total = np.zeros(self._dim)
        for i, vector in enumerate(vectors):
            total += self.check(vector, f"vectors[{i}]")
        if normalize:
            total = self._unit(total)
        return total

    @staticmethod
    def _unit(vector: np.ndarray) -> np.ndarray:
        norm = np.linalg.norm(vector)
        if norm > 1e-10:
            vector = vector / norm
        return vector

    def __repr__(self) -> str:
        return (
            f"VectorSpace(dim={self._dim}, "
            f"distribution={self.config.distribution!r}, "
            f"generated={self._generated})"
        )
