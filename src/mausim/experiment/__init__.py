"""Experimentation layer: replication runner, CI analysis."""

from mausim.experiment.runner import (
    multiple_replications,
    run_experiment,
    run_scenario_comparison,
)
from mausim.experiment.analysis import (
    ExperimentResult,
    compute_ci,
    summarise_replications,
    combine_results,
)

__all__ = [
    "multiple_replications",
    "run_experiment",
    "run_scenario_comparison",
    "ExperimentResult",
    "compute_ci",
    "summarise_replications",
    "combine_results",
]
