"""Tests for report files and the command line entry point."""

from __future__ import annotations

import numpy as np
import pytest

from llhrr.cli import build_config, create_parser, main
from llhrr.reporting import (
    ResultsLogWriter,
    format_step,
    save_weights,
    write_final_report,
)
from llhrr.types import EpisodeResult, EpisodeStatistics, StepRecord


def make_record(step: int = 0, td_error: float = 0.5) -> StepRecord:
    return StepRecord(
        run_index=1,
        step=step,
        goal_location=3,
        location=7,
        td_error=td_error,
    )


# ==================== Results Log Tests ====================


class TestResultsLogWriter:
    def test_format_step(self):
        line = format_step(make_record(step=4, td_error=-0.125))
        assert line == "run=1 step=4 goal=3 location=7 td_error=-0.125000"

    def test_writes_one_line_per_record(self, tmp_path):
        path = tmp_path / "results.log"

        with ResultsLogWriter(path) as writer:
            writer(make_record(step=0))
            writer(make_record(step=1))

        lines = path.read_text().splitlines()
        assert len(lines) == 2
        assert writer.lines_written == 2
        assert lines[1].startswith("run=1 step=1")

    def test_closed_writer_raises(self, tmp_path):
        writer = ResultsLogWriter(tmp_path / "results.log")
        with pytest.raises(RuntimeError, match="not open"):
            writer(make_record())


# ==================== Final Report Tests ====================


class TestFinalReport:
    def test_values_and_statistics(self, tmp_path):
        stats = EpisodeStatistics()
        stats.record(EpisodeResult(run_index=0, start_location=0, steps=3, reached_goal=True))
        stats.record(EpisodeResult(run_index=1, start_location=1, steps=5, reached_goal=True))

        path = write_final_report(
            tmp_path / "final.log",
            [(0, 0.25), (1, 1.0), (2, -0.5)],
            statistics=stats,
            goal_location=1,
        )

        lines = path.read_text().splitlines()
        assert lines[0] == "location\tvalue"
        assert lines[1] == "0\t0.250000"
        assert lines[2] == "1\t1.000000\t*"
        assert lines[3] == "2\t-0.500000"
        assert "episodes\t2" in lines
        assert "average_steps\t4.00" in lines
        assert "min_steps\t3" in lines
        assert "max_steps\t5" in lines

    def test_values_only(self, tmp_path):
        path = write_final_report(tmp_path / "final.log", [(0, 0.0)])
        assert path.read_text() == "location\tvalue\n0\t0.000000\n"

    def test_save_weights_flat(self, tmp_path):
        weights = np.array([0.5, -1.25, 3.0, 0.0])

        path = save_weights(tmp_path / "weights.txt", weights)

        np.testing.assert_allclose(np.loadtxt(path), weights)
        assert len(path.read_text().splitlines()) == 4


# ==================== CLI Tests ====================


class TestCli:
    @pytest.fixture
    def config_file(self, tmp_path):
        path = tmp_path / "settings.txt"
        path.write_text("worldSize vectorLength alpha lambda epsilon discount runs\n8 64 0.3 0.5 0.1 0.9 6\n")
        return path

    def test_parser_defaults(self):
        args = create_parser().parse_args([])
        assert args.config is None
        assert args.results == "results.log"
        assert args.final == "final.log"
        assert args.weights is None

    def test_build_config_overrides_file(self, config_file):
        args = create_parser().parse_args([str(config_file), "--runs", "2", "--seed", "9"])

        config = build_config(args)

        assert config.world_size == 8
        assert config.number_of_runs == 2
        assert config.seed == 9

    def test_main_runs_and_writes_reports(self, tmp_path, config_file):
        results = tmp_path / "results.log"
        final = tmp_path / "final.log"
        weights = tmp_path / "weights.txt"

        code = main([
            str(config_file),
            "--seed", "1",
            "--results", str(results),
            "--final", str(final),
            "--weights", str(weights),
        ])

        assert code == 0
        assert results.read_text().count("\n") > 0
        final_lines = final.read_text().splitlines()
        assert final_lines[0] == "location\tvalue"
        assert len([line for line in final_lines[1:9] if line]) == 8
        assert "episodes\t6" in final_lines
        assert np.loadtxt(weights).shape == (64,)

    def test_main_same_seed_same_report(self, tmp_path, config_file):
        outputs = []
        for name in ("a", "b"):
            final = tmp_path / f"final_{name}.log"
            main([
                str(config_file),
                "--seed", "5",
                "--results", str(tmp_path / f"results_{name}.log"),
                "--final", str(final),
            ])
            outputs.append(final.read_text())

        assert outputs[0] == outputs[1]

    def test_main_invalid_config(self, tmp_path):
        path = tmp_path / "bad.txt"
        path.write_text("header\n0 64\n")

        code = main([str(path), "--results", str(tmp_path / "r.log"), "--final", str(tmp_path / "f.log")])

        assert code == 1
        assert not (tmp_path / "r.log").exists()

    def test_main_missing_config(self, tmp_path):
        code = main([str(tmp_path / "missing.txt")])
        assert code == 1
