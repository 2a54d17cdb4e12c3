"""Run configuration and config-file loading.

A config file holds one header line, which is skipped, followed by
whitespace-separated values in this order:

    worldSize vectorLength alpha lambda epsilon discount numberOfRuns

Trailing values may be left out; they keep their defaults.

Example:
    >>> config = load_config("settings.txt")
    >>> config = RunConfig(world_size=16, number_of_runs=50, seed=3)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Union

from llhrr.types import InvalidConfigError

logger = logging.getLogger(__name__)

# Order of the values in a config file, after the header line
FILE_FIELDS = (
    ("world_size", int),
    ("vector_length", int),
    ("alpha", float),
    ("lambda_", float),
    ("epsilon", float),
    ("discount", float),
    ("number_of_runs", int),
)


@dataclass(frozen=True)
class RunConfig:
    """Parameters of one learning run.

    Attributes:
        world_size: Number of locations in the circular world.
        vector_length: Dimensionality of the HRR encodings and weights.
        alpha: Learning rate.
        lambda_: Eligibility trace decay.
        epsilon: Exploration rate of the policy, in [0, 1].
        discount: Discount factor, in [0, 1].
        number_of_runs: Number of episodes to run.
        max_steps: Step cap per episode.
        seed: Seed for the run's random generator. None draws fresh entropy.
    """

    world_size: int = 64
    vector_length: int = 1024
    alpha: float = 0.1
    lambda_: float = 0.5
    epsilon: float = 0.05
    discount: float = 0.9
    number_of_runs: int = 100
    max_steps: int = 100
    seed: Optional[int] = None

    def __post_init__(self):
        if self.world_size < 1:
            raise InvalidConfigError(f"world_size must be positive, got {self.world_size}")
        if self.vector_length < 1:
            raise InvalidConfigError(
                f"vector_length must be positive, got {self.vector_length}"
            )
        if not 0.0 <= self.epsilon <= 1.0:
            raise InvalidConfigError(f"epsilon must be in [0, 1], got {self.epsilon}")
        if not 0.0 <= self.discount <= 1.0:
            raise InvalidConfigError(f"discount must be in [0, 1], got {self.discount}")
        if self.number_of_runs < 0:
            raise InvalidConfigError(
                f"number_of_runs must be non-negative, got {self.number_of_runs}"
            )
        if self.max_steps < 1:
            raise InvalidConfigError(f"max_steps must be positive, got {self.max_steps}")

    def with_overrides(self, **overrides: Any) -> RunConfig:
        """Copy with the given fields replaced; None values are ignored."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def parse_config(text: str, **defaults: Any) -> RunConfig:
    """Build a RunConfig from config-file text.

    Args:
        text: File contents, header line included.
        **defaults: Values for fields the text leaves out (e.g. seed).

    Returns:
        Validated RunConfig.

    Raises:
        InvalidConfigError: If there are too many values, a value does not
            parse, or the result fails validation.
    """
    lines = text.splitlines()
    tokens = " ".join(lines[1:]).split()

    if len(tokens) > len(FILE_FIELDS):
        raise InvalidConfigError(
            f"expected at most {len(FILE_FIELDS)} values, got {len(tokens)}"
        )

    values = dict(defaults)
    for (name, cast), token in zip(FILE_FIELDS, tokens):
        try:
            values[name] = cast(token)
        except ValueError as e:
            raise InvalidConfigError(f"invalid value {token!r} for {name}") from e

    if len(tokens) < len(FILE_FIELDS):
        missing = [name for name, _ in FILE_FIELDS[len(tokens):]]
        logger.info(f"Config leaves out {missing}; using defaults")

    return RunConfig(**values)


def load_config(path: Union[str, Path], **defaults: Any) -> RunConfig:
    """Read a RunConfig from a file.

    Raises:
        FileNotFoundError: If path does not exist.
        InvalidConfigError: If the contents are malformed or out of range.
    """
    path = Path(path)
    config = parse_config(path.read_text(), **defaults)
    logger.info(f"Loaded config from {path}: {config}")
    return config
