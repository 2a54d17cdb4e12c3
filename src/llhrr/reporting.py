"""Results and final-report files for a learning run.

- ResultsLogWriter: step listener writing one line per learning step
- write_final_report: value of every location plus episode statistics
- save_weights: flat dump of the weight vector for inspection
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import IO, Iterable, Optional, Tuple, Union

import numpy as np

from llhrr.types import EpisodeStatistics, StepRecord

logger = logging.getLogger(__name__)


class ResultsLogWriter:
    """Step listener that appends each StepRecord to a text file.

    Usable as a context manager:

        >>> with ResultsLogWriter("results.log") as writer:
        ...     learner.add_listener(writer)
        ...     learner.run_episodes()
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        self._file: Optional[IO[str]] = None
        self.lines_written = 0

    def open(self) -> ResultsLogWriter:
        self._file = self.path.open("w")
        return self

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self) -> ResultsLogWriter:
        return self.open()

    def __exit__(self, *exc) -> None:
        self.close()

    def __call__(self, record: StepRecord) -> None:
        if self._file is None:
            raise RuntimeError(f"{self.path} is not open")
        self._file.write(format_step(record) + "\n")
        self.lines_written += 1


def format_step(record: StepRecord) -> str:
    """One results-log line for a step."""
    return (
        f"run={record.run_index} step={record.step} "
        f"goal={record.goal_location} location={record.location} "
        f"td_error={record.td_error:.6f}"
    )


def write_final_report(
        path: Union[str, Path],
        values: Iterable[Tuple[int, float]],
        statistics: Optional[EpisodeStatistics] = None,
        goal_location: Optional[int] = None,
) -> Path:
    """Write the value of every location, then the run statistics.

    Args:
        path: Output file.
        values: (location, value) pairs, as returned by report_values.
        statistics: Optional episode statistics to append.
        goal_location: Optional goal, marked in the listing.

    Returns:
        Path written.
    """
    path = Path(path)
    with path.open("w") as f:
        f.write("location\tvalue\n")
        for location, value in values:
            marker = "\t*" if location == goal_location else ""
            f.write(f"{location}\t{value:.6f}{marker}\n")

        if statistics is not None:
            f.write("\n")
            f.write(f"episodes\t{statistics.episodes}\n")
            f.write(f"goals_reached\t{statistics.goals_reached}\n")
            f.write(f"average_steps\t{statistics.average_steps:.2f}\n")
            f.write(f"min_steps\t{statistics.min_steps}\n")
            f.write(f"max_steps\t{statistics.max_steps}\n")

    logger.info(f"Wrote final report to {path}")
    return path


def save_weights(path: Union[str, Path], weights: np.ndarray) -> Path:
    """Write the weight vector as a flat column of N reals."""
    path = Path(path)
    np.savetxt(path, np.asarray(weights, dtype=np.float64).ravel())
    logger.info(f"Wrote {np.size(weights)} weights to {path}")
    return path
