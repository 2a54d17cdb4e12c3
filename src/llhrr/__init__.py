# Copyright 2025 Thousand Brains Project
#
# Use of this source code is governed by the MIT
# license that can be found in the LICENSE file or at
# https://opensource.org/licenses/MIT.

"""llhrr - TD(lambda) value learning over HRR-encoded locations.

An agent walks a circular 1-D world of discrete locations looking for a single
rewarded goal, and learns a value for every location with TD(lambda).
Locations are not represented by their index but by random Holographic
Reduced Representation (HRR) vectors; the value of a location is the dot
product of its vector with a learned weight vector.

Key Concepts:
    Encoding: A fixed-length random vector standing for one location.
        Encodings of different locations are approximately orthogonal, so a
        single weight vector can hold a value for each of them.

    Eligibility trace: A decaying sum of the encodings visited in the current
        episode, reset at the start of every episode.

    Goal: The only location with nonzero reward. Chosen once per run and
        shared by every episode.

Components:
    VectorSpace: HRR engine. Generates encodings, computes dot products and
        similarities, binds and unbinds vectors.

    World: Circular sequence of WorldStates with left/right neighbors.

    EligibilityTrace: Per-episode trace memory.

    ValueFunction: Linear readout of encodings against the weights, TD errors
        and weight updates.

    EpsilonSoftPolicy: Greedy left/right choice over the neighbors' values
        with epsilon-soft exploration.

    Learner: Run context owning all of the above plus the random generator.
        Provides:
        - run_episode(): One episode from a start location to the goal
        - run_episodes(): A sequence of episodes on the same weights
        - report_values(): Value of every location

Example:
    >>> from llhrr import RunConfig, initialize, run_episodes, report_values
    >>> learner = initialize(RunConfig(world_size=32, seed=0))
    >>> run_episodes(learner, 100)
    >>> values = report_values(learner)
"""

from llhrr.config import RunConfig, load_config, parse_config
from llhrr.learner import Learner, initialize, report_values, run_episodes
from llhrr.policy import EpsilonSoftPolicy
from llhrr.trace import EligibilityTrace
from llhrr.types import (
    DimensionMismatchError,
    EpisodeResult,
    EpisodeStatistics,
    InvalidConfigError,
    Move,
    StepRecord,
    WorldState,
)
from llhrr.value import ValueFunction
from llhrr.vectors import VectorSpace, VectorSpaceConfig
from llhrr.world import World, build_world, left_of, right_of

__all__ = [
    # Configuration
    "RunConfig",
    "load_config",
    "parse_config",
    # Components
    "VectorSpace",
    "VectorSpaceConfig",
    "World",
    "build_world",
    "left_of",
    "right_of",
    "EligibilityTrace",
    "ValueFunction",
    "EpsilonSoftPolicy",
    # Learner
    "Learner",
    "initialize",
    "run_episodes",
    "report_values",
    # Types
    "Move",
    "WorldState",
    "StepRecord",
    "EpisodeResult",
    "EpisodeStatistics",
    "DimensionMismatchError",
    "InvalidConfigError",
]

__version__ = "0.1.0"
