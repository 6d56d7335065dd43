"""Tests for experimentation module."""

import numpy as np
import pandas as pd
import pytest

from mausim.core.errors import MissingCapacityError, MissingCoefficientError
from mausim.core.scenario import Scenario
from mausim.experiment.analysis import (
    ExperimentResult,
    combine_results,
    compute_ci,
    format_estimate,
    summarise_replications,
)
from mausim.experiment.runner import (
    multiple_replications,
    run_experiment,
    run_scenario_comparison,
)


@pytest.fixture
def short_scenario() -> Scenario:
    """Two-month horizon for quick replication tests."""
    return Scenario(units=(3,), measurement_days=60, duration=67, runs=5, random_seed=42)


class TestComputeCI:
    """Test confidence interval computation."""

    def test_ci_known_values(self):
        """CI computed correctly for known data."""
        values = [10.0, 12.0, 14.0, 16.0, 18.0]

        ci = compute_ci(values, z=1.96)

        sd = np.std(values, ddof=1)
        assert ci["mean"] == 14.0
        assert ci["std"] == pytest.approx(sd)
        assert ci["ci_half_width"] == pytest.approx(1.96 * sd / np.sqrt(5))
        assert ci["n"] == 5

    def test_lower_below_upper(self):
        """Lower bound is mean - d, upper bound is mean + d."""
        ci = compute_ci([10.0, 12.0, 14.0, 16.0, 18.0], z=1.96)

        assert ci["ci_lower"] == pytest.approx(ci["mean"] - ci["ci_half_width"])
        assert ci["ci_upper"] == pytest.approx(ci["mean"] + ci["ci_half_width"])
        assert ci["ci_lower"] < ci["mean"] < ci["ci_upper"]

    def test_t_interval_wider_than_z(self):
        """Without a fixed z, the t critical value is used."""
        values = [10.0, 12.0, 14.0, 16.0, 18.0]

        assert compute_ci(values)["ci_half_width"] > compute_ci(values, z=1.96)["ci_half_width"]

    def test_ci_single_value(self):
        """CI handles single value."""
        ci = compute_ci([5.0])

        assert ci["mean"] == 5.0
        assert ci["ci_half_width"] == 0.0
        assert ci["n"] == 1

    def test_ci_empty(self):
        """CI handles empty list."""
        ci = compute_ci([])

        assert ci["mean"] == 0.0
        assert ci["n"] == 0


class TestSummary:
    """Test result records."""

    def test_format_estimate(self):
        assert format_estimate(71.526, 70.981, 72.071) == "71.53 (70.98 - 72.07)"

    def test_summarise_replications(self):
        scenario = Scenario(name="baseline", units=(4, 1))
        values = [60.0, 62.0, 64.0, 66.0]

        result = summarise_replications(values, scenario)

        d = 1.96 * np.std(values, ddof=1) / np.sqrt(4)
        assert result.simulation == "baseline"
        assert result.model == "log_wkdy"
        assert result.units == (4, 1)
        assert result.mean == pytest.approx(63.0)
        assert result.ci_lower == pytest.approx(63.0 - d)
        assert result.ci_upper == pytest.approx(63.0 + d)
        assert dict(result.stats)["mean_occupancy"] == format_estimate(63.0, 63.0 - d, 63.0 + d)
        assert dict(result.stats)["sd"] == f"{np.std(values, ddof=1):.2f}"

    def test_to_dataframe(self):
        result = summarise_replications([1.0, 2.0, 3.0], Scenario(units=(4, 3, 2, 1)))

        frame = result.to_dataframe()

        assert list(frame.columns) == ["simulation", "model", "stat", "value", "MAU"]
        assert frame["stat"].tolist() == ["mean_occupancy", "sd"]
        assert (frame["MAU"] == "4, 3, 2, 1").all()

    def test_combine_results(self):
        a = summarise_replications([1.0, 2.0], Scenario(name="a"))
        b = summarise_replications([3.0, 4.0], Scenario(name="b"))

        frame = combine_results([a, b])

        assert len(frame) == 4
        assert frame["simulation"].tolist() == ["a", "a", "b", "b"]

    def test_combine_nothing(self):
        assert combine_results([]).empty


class TestMultipleReplications:
    """Test multiple replications runner."""

    def test_runs_correct_number(self, short_scenario, mau_store, capacity):
        """Runs specified number of replications."""
        results = multiple_replications(short_scenario, mau_store, capacity)

        assert len(results["annual_mean_occupancy"]) == 5
        assert len(results["mean_los"]) == 5

    def test_n_reps_override(self, short_scenario, mau_store, capacity):
        results = multiple_replications(short_scenario, mau_store, capacity, n_reps=2)

        assert len(results["annual_mean_occupancy"]) == 2

    def test_replications_vary(self, short_scenario, mau_store, capacity):
        results = multiple_replications(short_scenario, mau_store, capacity)

        assert len(set(results["annual_mean_occupancy"])) > 1

    def test_reproducibility(self, short_scenario, mau_store, capacity):
        """Same base seed produces same replication results."""
        results1 = multiple_replications(short_scenario, mau_store, capacity)
        results2 = multiple_replications(short_scenario, mau_store, capacity)

        assert results1["annual_mean_occupancy"] == results2["annual_mean_occupancy"]

    def test_parallel_matches_serial(self, short_scenario, mau_store, capacity):
        """Replication streams do not depend on where the replication runs."""
        serial = multiple_replications(short_scenario, mau_store, capacity, n_reps=4)
        parallel = multiple_replications(
            short_scenario, mau_store, capacity, n_reps=4, parallel=True, max_workers=2
        )

        assert serial["annual_mean_occupancy"] == parallel["annual_mean_occupancy"]

    def test_custom_metrics(self, short_scenario, mau_store, capacity):
        """Can collect custom metric list."""
        results = multiple_replications(
            short_scenario, mau_store, capacity,
            n_reps=2,
            metric_names=["annual_mean_occupancy", "turned_away"],
        )

        assert set(results) == {"annual_mean_occupancy", "turned_away"}

    def test_annual_mean_always_collected(self, short_scenario, mau_store, capacity):
        """Annual mean occupancy leads the results even when not requested."""
        results = multiple_replications(
            short_scenario, mau_store, capacity,
            n_reps=3,
            metric_names=["mean_los"],
        )

        assert list(results) == ["annual_mean_occupancy", "mean_los"]
        assert len(results["annual_mean_occupancy"]) == 3

    def test_annual_mean_not_duplicated(self, short_scenario, mau_store, capacity):
        results = multiple_replications(
            short_scenario, mau_store, capacity,
            n_reps=2,
            metric_names=["turned_away", "annual_mean_occupancy"],
        )

        assert list(results) == ["annual_mean_occupancy", "turned_away"]
        assert len(results["annual_mean_occupancy"]) == 2

    def test_run_experiment_with_other_metrics(self, short_scenario, mau_store, capacity):
        """Summary still works when only other metrics are requested."""
        result = run_experiment(
            short_scenario, mau_store, capacity, n_reps=3, metric_names=["mean_los"]
        )

        assert result.n_reps == 3

    def test_progress_callback(self, short_scenario, mau_store, capacity):
        """Progress callback is called correctly."""
        progress = []

        def callback(current, total):
            progress.append((current, total))

        multiple_replications(
            short_scenario, mau_store, capacity, n_reps=3, progress_callback=callback
        )

        assert progress == [(1, 3), (2, 3), (3, 3)]

    def test_missing_coefficients_abort_before_running(self, short_scenario, store_factory, capacity):
        """Incomplete tables fail before any replication runs."""
        store = store_factory({3: 20.0}, {3: -1.0}, variant="log_month")
        progress = []

        with pytest.raises(MissingCoefficientError):
            multiple_replications(
                short_scenario, store, capacity,
                progress_callback=lambda c, t: progress.append(c),
            )

        assert progress == []

    def test_missing_capacity(self, short_scenario, mau_store):
        from mausim.core.tables import CapacityTable

        with pytest.raises(MissingCapacityError):
            multiple_replications(short_scenario, mau_store, CapacityTable.from_dict({1: 14}))


class TestExperiments:
    """Test end-to-end experiment helpers."""

    def test_run_experiment(self, short_scenario, mau_store, capacity):
        result = run_experiment(short_scenario, mau_store, capacity, n_reps=3)

        assert isinstance(result, ExperimentResult)
        assert result.n_reps == 3
        assert result.ci_lower <= result.mean <= result.ci_upper

    def test_scenario_comparison(self, store_factory, capacity):
        store = store_factory(
            {3: 20.0, 4: 5.0, 1: 3.0},
            {3: -1.1, 4: -1.0, 1: -0.8},
        )
        scenarios = {
            "baseline": Scenario(name="baseline", units=(4,), measurement_days=30, duration=37),
            "merged": Scenario(
                name="merged", units=(4, 1), bed_adjustment=-5,
                measurement_days=30, duration=37,
            ),
        }

        results = run_scenario_comparison(scenarios, store, capacity, n_reps=3)

        assert set(results) == {"baseline", "merged"}
        assert results["merged"].units == (4, 1)
        frame = combine_results(results.values())
        assert isinstance(frame, pd.DataFrame)
        assert set(frame["MAU"]) == {"4", "4, 1"}
