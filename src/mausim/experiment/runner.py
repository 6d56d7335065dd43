"""Monte-Carlo replication runners."""

import logging
from concurrent.futures import ProcessPoolExecutor
from typing import Any, Callable, Dict, Iterable, List, Optional

from mausim.core.context import SimulationContext
from mausim.core.scenario import Scenario
from mausim.core.tables import CapacityTable, CoefficientStore
from mausim.experiment.analysis import ExperimentResult, summarise_replications
from mausim.model.processes import run_simulation


logger = logging.getLogger(__name__)


DEFAULT_METRICS = [
    "annual_mean_occupancy",
    "peak_occupancy",
    "mean_los",
    "n_los",
    "total_discharges",
    "total_model_arrivals",
    "total_arrivals",
    "turned_away",
]


def validate_inputs(
    scenario: Scenario,
    coefficients: CoefficientStore,
    capacity: CapacityTable,
) -> None:
    """Fail before the first replication if the tables cannot serve the scenario.

    Raises:
        MissingCoefficientError: If a required coefficient is absent.
        MissingCapacityError: If a unit has no capacity entry.
    """
    coefficients.validate(
        scenario.units,
        scenario.discharge_model,
        include_discharge_month=scenario.include_discharge_month,
    )
    capacity.total_beds(scenario.units)


def _run_replication(
    scenario: Scenario,
    coefficients: CoefficientStore,
    capacity: CapacityTable,
    rep: int,
) -> Dict[str, Any]:
    """Run one replication on its own RNG streams (picklable for worker processes)."""
    context = SimulationContext.create(coefficients, capacity, scenario.random_seed, rep)
    results = run_simulation(scenario, context)
    # Daily series stay in the worker; only scalars travel back
    results.pop("state")
    return results


def multiple_replications(
    scenario: Scenario,
    coefficients: CoefficientStore,
    capacity: CapacityTable,
    n_reps: Optional[int] = None,
    metric_names: Optional[List[str]] = None,
    progress_callback: Optional[Callable[[int, int], None]] = None,
    parallel: bool = False,
    max_workers: Optional[int] = None,
) -> Dict[str, List[float]]:
    """Run independent replications and collect specified metrics.

    Replication ``rep`` draws from streams seeded by
    ``(scenario.random_seed, rep)``, so results are identical whether the
    replications run serially or across worker processes.

    Args:
        scenario: Scenario configuration.
        coefficients: Shared coefficient store.
        capacity: Shared capacity table.
        n_reps: Number of replications; defaults to ``scenario.runs``.
        metric_names: Metrics to collect. If None, collects DEFAULT_METRICS.
            annual_mean_occupancy is always collected, as the first key.
        progress_callback: Optional callback(current_rep, total_reps) for
            progress reporting.
        parallel: Run replications in a process pool.
        max_workers: Pool size when ``parallel`` is True.

    Returns:
        Dictionary mapping metric names to lists of values in replication
        order.

    Raises:
        MissingCoefficientError: If the coefficient tables are incomplete.
        MissingCapacityError: If a unit has no capacity entry.
    """
    if n_reps is None:
        n_reps = scenario.runs
    if n_reps < 1:
        raise ValueError(f"n_reps must be at least 1, got {n_reps}")
    if metric_names is None:
        metric_names = list(DEFAULT_METRICS)
    # The summary always needs the annual mean, so it leads every result
    metric_names = ["annual_mean_occupancy"] + [
        m for m in metric_names if m != "annual_mean_occupancy"
    ]

    validate_inputs(scenario, coefficients, capacity)

    logger.info(
        "Running %d replications of '%s' for units %s",
        n_reps, scenario.name, scenario.label,
    )

    results: Dict[str, List[float]] = {name: [] for name in metric_names}

    def collect(rep: int, run_results: Dict[str, Any]) -> None:
        for name in metric_names:
            if name in run_results:
                results[name].append(run_results[name])
        logger.info(
            "Replication %d/%d: annual mean occupancy %.2f",
            rep + 1, n_reps, run_results["annual_mean_occupancy"],
        )
        if progress_callback is not None:
            progress_callback(rep + 1, n_reps)

    reps = range(n_reps)
    if parallel:
        with ProcessPoolExecutor(max_workers=max_workers) as executor:
            outcomes: Iterable[Dict[str, Any]] = executor.map(
                _run_replication,
                [scenario] * n_reps,
                [coefficients] * n_reps,
                [capacity] * n_reps,
                reps,
            )
            for rep, run_results in zip(reps, outcomes):
                collect(rep, run_results)
    else:
        for rep in reps:
            collect(rep, _run_replication(scenario, coefficients, capacity, rep))

    return results


def run_experiment(
    scenario: Scenario,
    coefficients: CoefficientStore,
    capacity: CapacityTable,
    **kwargs: Any,
) -> ExperimentResult:
    """Replicate a scenario and summarise its annual mean occupancy.

    Keyword arguments are passed on to :func:`multiple_replications`.
    """
    results = multiple_replications(scenario, coefficients, capacity, **kwargs)
    return summarise_replications(results["annual_mean_occupancy"], scenario)


def run_scenario_comparison(
    scenarios: Dict[str, Scenario],
    coefficients: CoefficientStore,
    capacity: CapacityTable,
    **kwargs: Any,
) -> Dict[str, ExperimentResult]:
    """Run several scenarios, e.g. a single MAU against merged MAUs.

    Args:
        scenarios: Dictionary mapping scenario names to Scenario objects.
        coefficients: Shared coefficient store.
        capacity: Shared capacity table.
        **kwargs: Passed on to :func:`multiple_replications`.

    Returns:
        Dictionary mapping scenario names to their ExperimentResult.
    """
    all_results = {}

    for name, scenario in scenarios.items():
        all_results[name] = run_experiment(scenario, coefficients, capacity, **kwargs)

    return all_results
